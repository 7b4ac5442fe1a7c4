"""Project classification and best-effort module / tech stack detection."""

import json
import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .fsops import safe_read

CODE_DIRS = ("src", "lib", "app", "backend", "packages", "services")
MODULE_DIRS = ("src", "app", "lib", "backend", "packages", "services")
ARCHITECTURE_DOC = Path("docs") / "ARCHITECTURE.md"

# Dependency names that refine a manifest signal, in report order
NODE_FRAMEWORKS = {
    "typescript": "TypeScript",
    "react": "React",
    "next": "Next.js",
    "express": "Express",
    "@nestjs/core": "NestJS",
    "prisma": "Prisma",
}
PYTHON_FRAMEWORKS = {
    "fastapi": "FastAPI",
    "django": "Django",
    "flask": "Flask",
}
SIMPLE_MARKERS = [
    (("requirements.txt",), "Python (requirements.txt)"),
    (("go.mod",), "Go (go.mod)"),
    (("Cargo.toml",), "Rust (Cargo.toml)"),
    (("pom.xml", "build.gradle"), "Java (Maven/Gradle)"),
    (("Gemfile",), "Ruby (Gemfile)"),
    (("composer.json",), "PHP (composer.json)"),
]
DOCKER_MARKERS = ("Dockerfile", "docker-compose.yml", "compose.yaml")


class ProjectKind(str, Enum):
    NEW = "new"
    EXISTING = "existing"


@dataclass(frozen=True)
class Detection:
    """Outcome of a best-effort probe.

    ``complete`` is False when the probe itself failed, which is different
    from a probe that ran and found nothing.
    """
    signals: tuple[str, ...]
    complete: bool = True

    def render(self, empty: str, failed: str) -> str:
        lines = [f"- {s}" for s in self.signals]
        if not self.complete:
            lines.append(f"- {failed}")
        elif not lines:
            lines.append(f"- {empty}")
        return "\n".join(lines)


def classify_project(project_path: Path) -> ProjectKind:
    has_git = (project_path / ".git").exists()
    has_code = any((project_path / d).exists() for d in CODE_DIRS)
    has_docs = (project_path / "docs").exists()
    has_arch = (project_path / ARCHITECTURE_DOC).exists()

    if has_git and (has_code or has_docs) and not has_arch:
        return ProjectKind.EXISTING
    return ProjectKind.NEW


def detect_modules(project_path: Path) -> Detection:
    found: list[str] = []
    try:
        for base in MODULE_DIRS:
            base_path = project_path / base
            if not base_path.is_dir():
                continue
            for item in sorted(base_path.iterdir()):
                if item.is_dir():
                    found.append(f"{base}/{item.name}/")
    except OSError:
        return Detection(tuple(found), complete=False)
    return Detection(tuple(found))


def _node_signals(project_path: Path) -> list[str]:
    signals = ["Node.js (package.json)"]
    try:
        pkg = json.loads(safe_read(project_path / "package.json"))
        deps = {**(pkg.get("dependencies") or {}), **(pkg.get("devDependencies") or {})}
    except (ValueError, AttributeError, TypeError):
        signals.append("Node.js (unable to parse dependencies)")
        return signals
    signals.extend(label for name, label in NODE_FRAMEWORKS.items() if name in deps)
    return signals


def _requirement_name(spec: str) -> str:
    name = spec.strip()
    for sep in ("[", "<", ">", "=", "!", "~", ";", " "):
        name = name.split(sep, 1)[0]
    return name.lower()


def _python_signals(project_path: Path) -> list[str]:
    signals = ["Python (pyproject.toml)"]
    try:
        data = tomllib.loads(safe_read(project_path / "pyproject.toml"))
        deps = data.get("project", {}).get("dependencies", []) or []
        names = {_requirement_name(d) for d in deps if isinstance(d, str)}
    except (tomllib.TOMLDecodeError, AttributeError, TypeError):
        return signals
    signals.extend(label for name, label in PYTHON_FRAMEWORKS.items() if name in names)
    return signals


def _has_dotnet(project_path: Path) -> bool:
    if (project_path / "global.json").exists():
        return True
    try:
        return any(p.is_file() for p in project_path.glob("*.csproj"))
    except OSError:
        return False


def detect_tech_stack(project_path: Path) -> Detection:
    """Detect technology stack from marker files in the project root."""
    detected: list[str] = []
    try:
        if (project_path / "package.json").exists():
            detected.extend(_node_signals(project_path))
        if (project_path / "pyproject.toml").exists():
            detected.extend(_python_signals(project_path))
        for markers, label in SIMPLE_MARKERS:
            if any((project_path / m).exists() for m in markers):
                detected.append(label)
        if _has_dotnet(project_path):
            detected.append(".NET")
        if any((project_path / m).exists() for m in DOCKER_MARKERS):
            detected.append("Docker")
    except Exception:
        return Detection(tuple(detected), complete=False)
    return Detection(tuple(detected))
