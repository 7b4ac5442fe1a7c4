from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from aidev_cli.ui import Reporter


@pytest.fixture
def reporter(tmp_path: Path) -> Reporter:
    return Reporter(console=Console(file=io.StringIO(), width=200), root=tmp_path)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A directory that already looks like a git checkout, so init never shells out to git init."""
    (tmp_path / ".git" / "hooks").mkdir(parents=True)
    return tmp_path
