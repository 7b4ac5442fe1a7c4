#!/usr/bin/env python3
"""
AI Dev CLI - Bootstrap a repository for commit-driven, AI-assisted development

Usage:
    aidev init [--force] [--setup-mcp]
    aidev check

Or run from a checkout:
    uv tool install --from . aidev-cli
    aidev init
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from typer.core import TyperGroup

from .fsops import ensure_gitignore
from .health import run_health_check
from .mcp import setup_mcp_for_claude_desktop
from .probe import ProjectKind, classify_project
from .scaffold import (
    create_cursor_rules,
    create_directories,
    create_docs,
    create_git_hooks,
    create_github_action,
    create_mcp_snippets,
    create_repomix_config,
    create_scripts,
)
from .shell import ensure_git_repo, generate_snapshot, warn_dirty_working_tree
from .ui import Reporter, StepTracker, show_banner

console = Console()


@dataclass(frozen=True)
class InitOptions:
    project_path: Path
    force: bool = False
    setup_mcp: bool = False
    keep_mcp_servers: bool = False
    claude_config: Optional[Path] = None
    skip_snapshot: bool = False


class BannerGroup(TyperGroup):
    """Custom group that shows banner before help and turns unknown tokens into usage + exit 1."""

    def format_help(self, ctx, formatter):
        show_banner(console)
        super().format_help(ctx, formatter)

    def _usage_exit(self, ctx: typer.Context, message: str):
        console.print(f"[red]Error:[/red] {message}\n")
        console.print(ctx.get_help())
        ctx.exit(1)

    def parse_args(self, ctx, args):
        # Leading options must belong to the group itself (only -h/--help)
        known = {opt for param in self.get_params(ctx) for opt in (*param.opts, *param.secondary_opts)}
        for arg in args:
            if arg == "--" or not arg.startswith("-"):
                break
            if arg.split("=", 1)[0] not in known:
                self._usage_exit(ctx, f"No such option: {arg}")
        return super().parse_args(ctx, args)

    def resolve_command(self, ctx, args):
        if args and self.get_command(ctx, args[0]) is None:
            self._usage_exit(ctx, f"No such command {args[0]!r}.")
        return super().resolve_command(ctx, args)


app = typer.Typer(
    name="aidev",
    help="Bootstrap docs, git hooks, CI and snapshot tooling for AI-assisted development",
    add_completion=False,
    invoke_without_command=True,
    cls=BannerGroup,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def callback(ctx: typer.Context):
    """Run `init` when no subcommand is provided."""
    if ctx.invoked_subcommand is None:
        run_init(InitOptions(project_path=Path.cwd()))


def _summarize(results) -> str:
    wrote = sum(1 for r in results if r.wrote)
    skipped = sum(1 for r in results if r.skipped)
    return f"{wrote} written, {skipped} skipped"


def run_init(options: InitOptions, reporter: Reporter | None = None) -> ProjectKind:
    """Materialize every managed artifact into ``options.project_path``."""
    project_path = options.project_path.resolve()
    reporter = reporter or Reporter(console=console)
    reporter.root = project_path

    show_banner(reporter.console)
    reporter.console.print(Panel(
        "\n".join([
            "[cyan]AI Dev Project Setup[/cyan]",
            "",
            f"{'Project':<15} [green]{project_path.name}[/green]",
            f"{'Target Path':<15} [dim]{project_path}[/dim]",
            f"{'Force':<15} [yellow]{'yes (hooks/scripts backed up, then replaced)' if options.force else 'no'}[/yellow]",
        ]),
        border_style="cyan",
        padding=(1, 2),
    ))

    ensure_git_repo(project_path, reporter)
    warn_dirty_working_tree(project_path, reporter)

    kind = classify_project(project_path)
    if kind is ProjectKind.EXISTING:
        reporter.console.print("[yellow]📦 Detected: Existing project (no architecture docs) → DEGRADED MODE templates[/yellow]")
    else:
        reporter.console.print("[green]✨ Detected: New project → creating full structure[/green]")

    tracker = StepTracker("Initialize AI Dev Project")
    tracker.add("classify", "Project classification")
    tracker.complete("classify", kind.value)

    reporter.section("📁 Creating directories")
    create_directories(project_path, reporter)
    tracker.add("dirs", "Directories")
    tracker.complete("dirs")

    reporter.section("🙈 Ensuring .gitignore")
    updated = ensure_gitignore(project_path, reporter)
    tracker.add("gitignore", ".gitignore section")
    tracker.complete("gitignore", "appended" if updated else "already present")

    steps = [
        ("docs", "📚 Creating docs (ARCHITECTURE / CONVENTIONS / ADR template)", "Docs",
         lambda: create_docs(project_path, kind, reporter)),
        ("rules", "🧩 Creating Cursor rules (.cursorrules)", "Cursor rules",
         lambda: create_cursor_rules(project_path, reporter)),
        ("repomix", "🧰 Creating Repomix config (repomix.config.json)", "Repomix config",
         lambda: create_repomix_config(project_path, reporter)),
        ("snippets", "🔌 Creating MCP config snippets (.mcp/*.example.json)", "MCP snippets",
         lambda: create_mcp_snippets(project_path, reporter)),
        ("hooks", "🔒 Creating Git hooks (commit policy + post-commit snapshot)", "Git hooks",
         lambda: create_git_hooks(project_path, reporter, overwrite=options.force)),
        ("scripts", "🧪 Creating helper scripts (commit + ADR + incremental context)", "Helper scripts",
         lambda: create_scripts(project_path, reporter, overwrite=options.force)),
        ("ci", "🛡 Creating CI safety net (GitHub Actions)", "CI workflow",
         lambda: create_github_action(project_path, reporter)),
    ]
    for key, heading, label, step in steps:
        reporter.section(heading)
        tracker.add(key, label)
        tracker.complete(key, _summarize(step()))

    tracker.add("mcp", "Claude Desktop MCP config")
    if options.setup_mcp:
        reporter.section("🔌 Setting up MCP in Claude Desktop config (--setup-mcp)")
        config_path = setup_mcp_for_claude_desktop(
            project_path,
            reporter,
            config_path=options.claude_config,
            overwrite_existing_servers=not options.keep_mcp_servers,
        )
        tracker.complete("mcp", str(config_path))
    else:
        reporter.info("\nℹ️  MCP setup skipped. Use --setup-mcp to auto-merge into Claude Desktop config.")
        reporter.info("   Or manually copy from: .mcp/claude_desktop_config.example.json")
        tracker.skip("mcp", "use --setup-mcp")

    tracker.add("snapshot", "Initial snapshot")
    if options.skip_snapshot:
        tracker.skip("snapshot", "--skip-snapshot")
    else:
        reporter.section("⚙️  Generating initial snapshot")
        if generate_snapshot(project_path, reporter):
            tracker.complete("snapshot", ".mcp/context.xml")
        else:
            tracker.error("snapshot", "run later: npx -y repomix")

    reporter.console.print()
    reporter.console.print(tracker.render())
    reporter.console.print("\n[bold green]✅ Bootstrap complete.[/bold green]")

    if kind is ProjectKind.EXISTING:
        arch_hint = "fill the \\[TODO] sections (degraded mode)"
    else:
        arch_hint = "describe your system"
    steps_lines = [
        f"1. Open [cyan]docs/ARCHITECTURE.md[/cyan] and {arch_hint}",
        "2. Commit with [cyan]scripts/commit-checkpoint(.sh/.bat)[/cyan] and [cyan]scripts/commit-main(.sh/.bat)[/cyan]",
        "3. Switch between tools: they can read repo state + commit history + [cyan].mcp/context.xml[/cyan]",
        "4. Run the health check anytime: [cyan]aidev check[/cyan]",
    ]
    reporter.console.print()
    reporter.console.print(Panel("\n".join(steps_lines), title="Next Steps", border_style="cyan", padding=(1, 2)))
    return kind


@app.command()
def init(
    project_dir: Optional[Path] = typer.Option(None, "--dir", envvar="AIDEV_PROJECT_DIR", help="Project directory to bootstrap (defaults to the current directory)"),
    force: bool = typer.Option(False, "--force", help="Overwrite existing git hooks and helper scripts (a backup is created first)"),
    setup_mcp: bool = typer.Option(False, "--setup-mcp", help="Merge the repomix and serena MCP servers into the Claude Desktop config (creates a backup)"),
    keep_mcp_servers: bool = typer.Option(False, "--keep-mcp-servers", help="With --setup-mcp, keep MCP servers you already defined under the same name"),
    claude_config: Optional[Path] = typer.Option(None, "--claude-config", envvar="AIDEV_CLAUDE_CONFIG", help="Path to claude_desktop_config.json (defaults to the platform location)"),
    skip_snapshot: bool = typer.Option(False, "--skip-snapshot", envvar="AIDEV_SKIP_SNAPSHOT", help="Do not run Repomix after scaffolding"),
):
    """
    Scaffold docs, hooks, scripts and CI into the project.

    Re-running is safe: existing files are skipped. With --force, git hooks
    and helper scripts are backed up to .ai-dev-backup-<timestamp>/ and then
    regenerated; docs and configs are never overwritten.

    Examples:
        aidev init
        aidev init --force
        aidev init --setup-mcp
        aidev init --setup-mcp --keep-mcp-servers
    """
    run_init(InitOptions(
        project_path=project_dir or Path.cwd(),
        force=force,
        setup_mcp=setup_mcp,
        keep_mcp_servers=keep_mcp_servers,
        claude_config=claude_config,
        skip_snapshot=skip_snapshot,
    ))


@app.command()
def check(
    project_dir: Optional[Path] = typer.Option(None, "--dir", envvar="AIDEV_PROJECT_DIR", help="Project directory to check (defaults to the current directory)"),
    strict: bool = typer.Option(False, "--strict", help="Exit with status 1 when any check fails"),
):
    """Check required tools, generated files and snapshot generation."""
    show_banner(console)
    project_path = (project_dir or Path.cwd()).resolve()
    passed, total = run_health_check(project_path, Reporter(console=console, root=project_path))
    if strict and passed < total:
        raise typer.Exit(1)


@app.command("help")
def help_command(ctx: typer.Context):
    """Show this message and exit."""
    console.print(ctx.parent.get_help())


def main():
    app()


if __name__ == "__main__":
    main()
