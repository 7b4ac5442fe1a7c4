from __future__ import annotations

from pathlib import Path

import pytest

import aidev_cli.health as health
from aidev_cli import InitOptions, run_init


@pytest.fixture
def all_tools(monkeypatch):
    """Pretend git/node/npx exist and Repomix writes the snapshot."""
    monkeypatch.setattr(health, "has_command", lambda tool: True)

    def fake_snapshot(project_path: Path, reporter, *, quiet: bool = False) -> bool:
        out = project_path / ".mcp" / "context.xml"
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text("<repo/>")
        return True

    monkeypatch.setattr(health, "generate_snapshot", fake_snapshot)


def test_fresh_init_passes_every_check(project: Path, reporter, all_tools) -> None:
    run_init(InitOptions(project_path=project, skip_snapshot=True), reporter)

    checks = health.collect_health_checks(project, reporter)

    assert all(c.passed for c in checks), [c.label for c in checks if not c.passed]
    assert health.run_health_check(project, reporter) == (len(checks), len(checks))
    assert "(100%)" in reporter.console.file.getvalue()


def test_missing_file_surfaces_only_its_hint(project: Path, reporter, all_tools) -> None:
    run_init(InitOptions(project_path=project, skip_snapshot=True), reporter)
    (project / "docs" / "CONVENTIONS.md").unlink()

    checks = health.collect_health_checks(project, reporter)
    failed = [c for c in checks if not c.passed]

    assert [c.label for c in failed] == ["docs/CONVENTIONS.md"]
    assert failed[0].hint == "Run: aidev init (recreates docs/CONVENTIONS.md)"

    reporter.console.file.truncate(0)
    reporter.console.file.seek(0)
    passed, total = health.run_health_check(project, reporter)

    assert passed == total - 1
    out = reporter.console.file.getvalue()
    assert "recreates docs/CONVENTIONS.md" in out
    assert "recreates docs/ARCHITECTURE.md" not in out


def test_checks_are_independent_on_empty_directory(tmp_path: Path, reporter, monkeypatch) -> None:
    monkeypatch.setattr(health, "has_command", lambda tool: tool == "git")

    def exploding_snapshot(*args, **kwargs):
        raise AssertionError("snapshot must not run without npx")

    monkeypatch.setattr(health, "generate_snapshot", exploding_snapshot)

    checks = health.collect_health_checks(tmp_path, reporter)

    assert checks[0].label == "git" and checks[0].passed
    assert not any(c.passed for c in checks[1:])
    assert checks[-1].hint.startswith("Run: npx -y repomix")
