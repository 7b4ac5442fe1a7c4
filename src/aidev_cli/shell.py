"""Subprocess helpers: git, command lookup and the Repomix snapshot."""

import shutil
import subprocess
from pathlib import Path
from typing import Optional

import typer

from .fsops import ensure_dir
from .ui import Reporter

SNAPSHOT_PATH = Path(".mcp") / "context.xml"


def run_command(cmd: list[str], reporter: Reporter, *, cwd: Path | None = None, check_return: bool = True, capture: bool = False) -> Optional[str]:
    """Run a command and optionally capture its output.

    With ``check_return`` a failing command is reported and re-raised; without
    it, failures return None.
    """
    try:
        if capture:
            result = subprocess.run(cmd, cwd=cwd, check=check_return, capture_output=True, text=True)
            return result.stdout.strip()
        else:
            subprocess.run(cmd, cwd=cwd, check=check_return)
            return None
    except subprocess.CalledProcessError as e:
        if check_return:
            reporter.console.print(f"[red]Error running command:[/red] {' '.join(cmd)}")
            reporter.console.print(f"[red]Exit code:[/red] {e.returncode}")
            if hasattr(e, 'stderr') and e.stderr:
                reporter.console.print(f"[red]Error output:[/red] {e.stderr}")
            raise
        return None
    except FileNotFoundError:
        if check_return:
            raise
        return None


def has_command(tool: str) -> bool:
    """Check if a tool is on PATH."""
    return shutil.which(tool) is not None


def ensure_git_repo(project_path: Path, reporter: Reporter) -> None:
    """Run ``git init`` when the project has no .git yet."""
    if (project_path / ".git").exists():
        return
    if not has_command("git"):
        reporter.error(
            "No .git directory found and [cyan]git[/cyan] is not on PATH.\n"
            "Install Git (https://git-scm.com/downloads) or run [cyan]git init[/cyan] yourself, then re-run.",
            title="Git Not Found",
        )
        raise typer.Exit(1)
    reporter.console.print("[yellow]🧩 No .git detected. Running: git init[/yellow]")
    run_command(["git", "init"], reporter, cwd=project_path)


def warn_dirty_working_tree(project_path: Path, reporter: Reporter) -> bool:
    status = run_command(["git", "status", "--porcelain"], reporter, cwd=project_path, check_return=False, capture=True)
    if status:
        reporter.warn("Working tree is DIRTY (uncommitted changes detected).")
        reporter.info("   Recommendation: commit/stash before running bootstrap on an existing project.")
        return True
    return False


def resolve_hooks_dir(project_path: Path) -> Path:
    """Locate the hooks directory, following worktree ``.git`` files."""
    git_path = project_path / ".git"
    if git_path.is_file():
        try:
            result = subprocess.run(
                ["git", "rev-parse", "--git-path", "hooks"],
                cwd=project_path,
                check=True,
                capture_output=True,
                text=True,
            )
            hooks = Path(result.stdout.strip())
            return hooks if hooks.is_absolute() else project_path / hooks
        except (subprocess.CalledProcessError, FileNotFoundError):
            pass
    return git_path / "hooks"


def generate_snapshot(project_path: Path, reporter: Reporter, *, quiet: bool = False) -> bool:
    """Run ``npx -y repomix`` in the project and report whether the snapshot exists.

    quiet: capture the tool's output instead of streaming it (health check).
    A non-zero exit always counts as failure, even if an older snapshot exists.
    """
    ensure_dir(project_path / ".mcp")
    npx = shutil.which("npx")
    if npx is None:
        if not quiet:
            reporter.warn("npx not found. Skipping initial snapshot generation.")
        return False
    try:
        if not quiet:
            reporter.console.print("[cyan]🧠 Generating initial snapshot via Repomix → .mcp/context.xml[/cyan]")
        run_command([npx, "-y", "repomix"], reporter, cwd=project_path, check_return=True, capture=quiet)
    except (subprocess.CalledProcessError, OSError):
        if not quiet:
            reporter.warn("Repomix snapshot generation failed. You can run later: npx -y repomix")
        return False
    ok = (project_path / SNAPSHOT_PATH).exists()
    if ok and not quiet:
        reporter.success(".mcp/context.xml generated")
    return ok
