"""Console output: banner, prefixed status lines and the step tree."""

from dataclasses import dataclass, field
from pathlib import Path

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.tree import Tree

BANNER = """
 █████╗ ██╗    ██████╗ ███████╗██╗   ██╗
██╔══██╗██║    ██╔══██╗██╔════╝██║   ██║
███████║██║    ██║  ██║█████╗  ██║   ██║
██╔══██║██║    ██║  ██║██╔══╝  ╚██╗ ██╔╝
██║  ██║██║    ██████╔╝███████╗ ╚████╔╝
╚═╝  ╚═╝╚═╝    ╚═════╝ ╚══════╝  ╚═══╝
"""

TAGLINE = "AI Dev Bootstrap - repo snapshots, commit policy, multi-tool handoff"


@dataclass
class Reporter:
    """Prefixed, colored status lines on a single rich console.

    Passed explicitly to every component that reports progress, so tests can
    capture output with ``Reporter(Console(file=io.StringIO()))``.
    """
    console: Console = field(default_factory=Console)
    root: Path | None = None

    def display(self, path: Path | str) -> str:
        path = Path(path)
        if self.root is not None:
            try:
                return path.relative_to(self.root).as_posix()
            except ValueError:
                pass
        return str(path)

    def section(self, message: str):
        self.console.print(f"\n[cyan]{message}[/cyan]")

    def success(self, message: str):
        self.console.print(f"  [green]✓[/green] {message}")

    def skip(self, message: str):
        self.console.print(f"  [yellow]↪ Skipped (exists):[/yellow] {message}")

    def warn(self, message: str):
        self.console.print(f"  [yellow]⚠  {message}[/yellow]")

    def info(self, message: str):
        self.console.print(f"[dim]{message}[/dim]")

    def error(self, message: str, title: str = "Error"):
        self.console.print()
        self.console.print(Panel(message, title=f"[red]{title}[/red]", border_style="red", padding=(1, 2)))


class StepTracker:
    """Track and render named steps as a tree, one status circle per step."""
    def __init__(self, title: str):
        self.title = title
        self.steps = []  # list of dicts: {key, label, status, detail}

    def add(self, key: str, label: str):
        if key not in [s["key"] for s in self.steps]:
            self.steps.append({"key": key, "label": label, "status": "pending", "detail": ""})

    def complete(self, key: str, detail: str = ""):
        self._update(key, status="done", detail=detail)

    def error(self, key: str, detail: str = ""):
        self._update(key, status="error", detail=detail)

    def skip(self, key: str, detail: str = ""):
        self._update(key, status="skipped", detail=detail)

    def _update(self, key: str, status: str, detail: str):
        for s in self.steps:
            if s["key"] == key:
                s["status"] = status
                if detail:
                    s["detail"] = detail
                return
        self.steps.append({"key": key, "label": key, "status": status, "detail": detail})

    def render(self):
        tree = Tree(f"[cyan]{self.title}[/cyan]", guide_style="grey50")
        for step in self.steps:
            label = step["label"]
            detail_text = step["detail"].strip() if step["detail"] else ""

            status = step["status"]
            if status == "done":
                symbol = "[green]●[/green]"
            elif status == "pending":
                symbol = "[green dim]○[/green dim]"
            elif status == "error":
                symbol = "[red]●[/red]"
            elif status == "skipped":
                symbol = "[yellow]○[/yellow]"
            else:
                symbol = " "

            if status == "pending":
                line = f"{symbol} [bright_black]{label}[/bright_black]"
                tree.add(line)
            elif status == "error" and detail_text:
                # Failing steps carry their remediation hint as a child node
                branch = tree.add(f"{symbol} [white]{label}[/white]")
                branch.add(f"[bright_black]↪ {detail_text}[/bright_black]")
            elif detail_text:
                tree.add(f"{symbol} [white]{label}[/white] [bright_black]({detail_text})[/bright_black]")
            else:
                tree.add(f"{symbol} [white]{label}[/white]")
        return tree


def show_banner(console: Console):
    """Display the ASCII art banner."""
    banner_lines = BANNER.strip().split('\n')
    colors = ["bright_blue", "blue", "cyan", "bright_cyan", "white", "bright_white"]

    styled_banner = Text()
    for i, line in enumerate(banner_lines):
        color = colors[i % len(colors)]
        styled_banner.append(line + "\n", style=color)

    console.print(Align.center(styled_banner))
    console.print(Align.center(Text(TAGLINE, style="italic bright_yellow")))
    console.print()
