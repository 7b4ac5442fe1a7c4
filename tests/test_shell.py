from __future__ import annotations

import os
import subprocess
from pathlib import Path

import pytest
import typer

import aidev_cli.shell as shell


def test_resolve_hooks_dir_for_plain_checkout(project: Path) -> None:
    assert shell.resolve_hooks_dir(project) == project / ".git" / "hooks"


def test_resolve_hooks_dir_follows_worktree_git_file(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / ".git").write_text("gitdir: /repos/main/.git/worktrees/wt\n")
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="/repos/main/.git/hooks\n", stderr="")

    monkeypatch.setattr(shell.subprocess, "run", fake_run)

    assert shell.resolve_hooks_dir(tmp_path) == Path("/repos/main/.git/hooks")
    assert calls == [["git", "rev-parse", "--git-path", "hooks"]]


def test_ensure_git_repo_without_git_exits(tmp_path: Path, reporter, monkeypatch) -> None:
    monkeypatch.setattr(shell.shutil, "which", lambda tool: None)

    with pytest.raises(typer.Exit):
        shell.ensure_git_repo(tmp_path, reporter)
    assert "Git Not Found" in reporter.console.file.getvalue()


def test_ensure_git_repo_is_noop_for_existing_repo(project: Path, reporter, monkeypatch) -> None:
    def fail(*args, **kwargs):
        raise AssertionError("git must not run")

    monkeypatch.setattr(shell.subprocess, "run", fail)
    shell.ensure_git_repo(project, reporter)


def test_run_command_reraises_when_checked(tmp_path: Path, reporter, monkeypatch) -> None:
    def failing(cmd, **kwargs):
        raise subprocess.CalledProcessError(128, cmd, stderr="fatal: boom")

    monkeypatch.setattr(shell.subprocess, "run", failing)

    with pytest.raises(subprocess.CalledProcessError):
        shell.run_command(["git", "init"], reporter, cwd=tmp_path)
    assert shell.run_command(["git", "init"], reporter, cwd=tmp_path, check_return=False) is None
    assert "fatal: boom" in reporter.console.file.getvalue()


def test_warn_dirty_working_tree(tmp_path: Path, reporter, monkeypatch) -> None:
    monkeypatch.setattr(
        shell.subprocess,
        "run",
        lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 0, stdout=" M src/app.py\n", stderr=""),
    )
    assert shell.warn_dirty_working_tree(tmp_path, reporter) is True
    assert "DIRTY" in reporter.console.file.getvalue()


def test_generate_snapshot_without_npx(tmp_path: Path, reporter, monkeypatch) -> None:
    monkeypatch.setattr(shell.shutil, "which", lambda tool: None)

    assert shell.generate_snapshot(tmp_path, reporter) is False
    assert (tmp_path / ".mcp").is_dir()
    assert "npx not found" in reporter.console.file.getvalue()


def test_generate_snapshot_tolerates_tool_failure(tmp_path: Path, reporter, monkeypatch) -> None:
    monkeypatch.setattr(shell.shutil, "which", lambda tool: "/usr/bin/npx")

    def failing(cmd, check=False, **kwargs):
        if check:
            raise subprocess.CalledProcessError(1, cmd)
        return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="")

    monkeypatch.setattr(shell.subprocess, "run", failing)

    assert shell.generate_snapshot(tmp_path, reporter) is False
    assert shell.generate_snapshot(tmp_path, reporter, quiet=True) is False
    assert "Repomix snapshot generation failed" in reporter.console.file.getvalue()


def test_generate_snapshot_success(tmp_path: Path, reporter, monkeypatch) -> None:
    monkeypatch.setattr(shell.shutil, "which", lambda tool: "/usr/bin/npx")

    def fake_repomix(cmd, cwd=None, **kwargs):
        (Path(cwd) / ".mcp" / "context.xml").write_text("<repo/>")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr(shell.subprocess, "run", fake_repomix)

    assert shell.generate_snapshot(tmp_path, reporter) is True


@pytest.mark.skipif(os.name == "nt", reason="POSIX shell script on PATH")
def test_generate_snapshot_failing_tool_ignores_stale_snapshot(tmp_path: Path, reporter, monkeypatch) -> None:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    npx = bin_dir / "npx"
    npx.write_text("#!/bin/sh\necho 'repomix: boom' >&2\nexit 1\n")
    npx.chmod(0o755)
    monkeypatch.setenv("PATH", str(bin_dir))

    project = tmp_path / "proj"
    (project / ".mcp").mkdir(parents=True)
    (project / ".mcp" / "context.xml").write_text("<stale/>")

    assert shell.generate_snapshot(project, reporter, quiet=True) is False
    assert shell.generate_snapshot(project, reporter) is False
