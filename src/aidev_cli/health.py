"""Health check: tools on PATH, generated artifacts present, snapshot works."""

from dataclasses import dataclass
from pathlib import Path

from . import scaffold
from .fsops import GITIGNORE_MARKER, safe_read
from .shell import SNAPSHOT_PATH, generate_snapshot, has_command, resolve_hooks_dir
from .ui import Reporter, StepTracker

REQUIRED_TOOLS = [
    ("git", "Install Git and ensure it is on PATH."),
    ("node", "Install Node.js (LTS recommended)."),
    ("npx", "Install Node.js (npx comes with npm)."),
]

EXPECTED_FILES = [
    scaffold.ARCHITECTURE_PATH,
    scaffold.CONVENTIONS_PATH,
    scaffold.ADR_TEMPLATE_PATH,
    scaffold.CURSOR_RULES_PATH,
    scaffold.REPOMIX_CONFIG_PATH,
]

EXPECTED_SCRIPTS = [
    "scripts/commit-checkpoint.sh",
    "scripts/commit-main.sh",
    "scripts/generate-context.sh",
    "scripts/create-adr.sh",
    scaffold.WORKFLOW_PATH,
]


@dataclass(frozen=True)
class HealthCheckEntry:
    label: str
    passed: bool
    hint: str


def _restore_hint(rel: str) -> str:
    return f"Run: aidev init (recreates {rel})"


def collect_health_checks(project_path: Path, reporter: Reporter) -> list[HealthCheckEntry]:
    """Run every check independently, in display order."""
    checks: list[HealthCheckEntry] = []

    for tool, hint in REQUIRED_TOOLS:
        checks.append(HealthCheckEntry(tool, has_command(tool), hint))

    for rel in EXPECTED_FILES:
        checks.append(HealthCheckEntry(rel, (project_path / rel).exists(), _restore_hint(rel)))

    hooks_dir = resolve_hooks_dir(project_path)
    for hook in (scaffold.COMMIT_MSG_HOOK, scaffold.POST_COMMIT_HOOK):
        rel = f".git/hooks/{hook}"
        checks.append(HealthCheckEntry(rel, (hooks_dir / hook).exists(), _restore_hint(rel)))

    for rel in EXPECTED_SCRIPTS:
        checks.append(HealthCheckEntry(rel, (project_path / rel).exists(), _restore_hint(rel)))

    gitignore_ok = GITIGNORE_MARKER in safe_read(project_path / ".gitignore")
    checks.append(HealthCheckEntry(
        ".gitignore (excludes .mcp/)",
        gitignore_ok,
        "Run: aidev init (will update .gitignore)",
    ))

    snapshot_ok = has_command("npx") and generate_snapshot(project_path, reporter, quiet=True)
    checks.append(HealthCheckEntry(
        f"{SNAPSHOT_PATH.as_posix()} (repomix snapshot)",
        snapshot_ok,
        "Run: npx -y repomix (repomix.config.json must exist)",
    ))
    return checks


def run_health_check(project_path: Path, reporter: Reporter) -> tuple[int, int]:
    """Print the checklist and summary; return (passed, total)."""
    reporter.section("🩺 Health check (bootstrap + sync invariants)")
    checks = collect_health_checks(project_path, reporter)

    tracker = StepTracker("Checks")
    for i, entry in enumerate(checks):
        key = f"check-{i}"
        tracker.add(key, entry.label)
        if entry.passed:
            tracker.complete(key)
        else:
            tracker.error(key, entry.hint)
    reporter.console.print(tracker.render())

    passed = sum(1 for c in checks if c.passed)
    total = len(checks)
    pct = round(passed / total * 100)
    color = "green" if passed == total else "yellow"
    reporter.console.print(f"\n[{color}]Result: {passed}/{total} checks passed ({pct}%).[/{color}]")
    if passed < total:
        reporter.console.print("[cyan]Fix the red items above, then re-run: aidev check[/cyan]")
    else:
        reporter.console.print("[cyan]System looks ready. You can switch tools and rely on repo snapshots + commit history.[/cyan]")
    return passed, total
