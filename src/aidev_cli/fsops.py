"""Idempotent, backup-safe file operations.

Every generated artifact goes through :func:`write_file_safe`, so a second run
never clobbers a file the user has customized. Overwrites only happen when a
caller asks for them, and callers back the target up first with
:func:`create_backup`.
"""

import os
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .ui import Reporter

BACKUP_PREFIX = ".ai-dev-backup-"
GITIGNORE_MARKER = ".mcp/context.xml"
GITIGNORE_SECTION = f"""# AI Development System - Generated Artifacts
{GITIGNORE_MARKER}
.mcp/context_incremental.txt
.mcp/post-commit.log
{BACKUP_PREFIX}*/

# Environment (secrets)
.env
"""


@dataclass(frozen=True)
class WriteResult:
    wrote: bool
    skipped: bool


def ensure_dir(path: Path | str | None) -> None:
    if not path:
        return
    path = Path(path)
    if path == Path(".") or path == Path(path.anchor):
        return
    path.mkdir(parents=True, exist_ok=True)


def safe_read(path: Path) -> str:
    """Return the text of ``path``, or an empty string if it cannot be read."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return ""


def write_file_safe(path: Path, content: str, reporter: Reporter, *, overwrite: bool = False) -> WriteResult:
    if path.exists() and not overwrite:
        reporter.skip(reporter.display(path))
        return WriteResult(wrote=False, skipped=True)
    ensure_dir(path.parent)
    # newline="" keeps LF line endings in hooks and shell scripts on Windows
    with path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(content)
    reporter.success(reporter.display(path))
    return WriteResult(wrote=True, skipped=False)


def set_executable(path: Path) -> None:
    """Best-effort chmod 755 (no-op on Windows)."""
    if os.name == "nt":
        return
    try:
        os.chmod(path, 0o755)
    except OSError:
        pass


def timestamp_id(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    iso = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


def _backup_destination(backup_dir: Path, path: Path, root: Path) -> Path:
    try:
        return backup_dir / path.relative_to(root)
    except ValueError:
        # Outside the project (e.g. the Claude Desktop config): keep the full
        # path, minus its anchor, so it cannot escape the backup directory.
        return backup_dir / path.relative_to(path.anchor)


def create_backup(paths: list[Path], root: Path, reporter: Reporter) -> Path | None:
    """Copy each existing path into a fresh timestamped backup directory.

    Returns the backup directory, or None when none of ``paths`` existed.
    A path that fails to copy is reported and skipped.
    """
    backup_dir = root / f"{BACKUP_PREFIX}{timestamp_id()}"
    preexisting = backup_dir.exists()
    copied = False

    for path in paths:
        path = path if path.is_absolute() else root / path
        if not path.exists():
            continue
        dest = _backup_destination(backup_dir, path, root)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            if path.is_dir():
                shutil.copytree(path, dest, dirs_exist_ok=True)
            else:
                shutil.copy2(path, dest)
            copied = True
        except OSError as e:
            reporter.warn(f"Backup failed for: {reporter.display(path)} ({e})")

    if not copied:
        if backup_dir.exists() and not preexisting:
            shutil.rmtree(backup_dir, ignore_errors=True)
        return None

    reporter.console.print(f"[green]🛟 Backup created:[/green] {reporter.display(backup_dir)}")
    return backup_dir


def ensure_gitignore(root: Path, reporter: Reporter) -> bool:
    """Append the generated-artifacts section to .gitignore once."""
    gitignore = root / ".gitignore"
    content = safe_read(gitignore)

    if GITIGNORE_MARKER in content:
        reporter.success(".gitignore already configured")
        return False

    new_content = content.rstrip() + "\n\n" + GITIGNORE_SECTION if content.strip() else GITIGNORE_SECTION
    with gitignore.open("w", encoding="utf-8", newline="") as fh:
        fh.write(new_content)
    reporter.success("Updated .gitignore")
    return True
