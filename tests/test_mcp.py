from __future__ import annotations

import json
from pathlib import Path

from aidev_cli.fsops import BACKUP_PREFIX
from aidev_cli.mcp import deep_merge, resolve_claude_config_path, setup_mcp_for_claude_desktop


def test_deep_merge_merges_nested_objects() -> None:
    assert deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3, "z": 4}}) == {"a": {"x": 1, "y": 3, "z": 4}}


def test_deep_merge_replaces_lists_and_scalars() -> None:
    merged = deep_merge({"args": [1, 2, 3], "a": {"b": 1}, "keep": True}, {"args": [9], "a": "flat"})
    assert merged == {"args": [9], "a": "flat", "keep": True}


def test_deep_merge_object_over_scalar_replaces() -> None:
    assert deep_merge({"a": 5}, {"a": {"b": 1}}) == {"a": {"b": 1}}


def test_deep_merge_does_not_mutate_inputs() -> None:
    existing = {"a": {"x": 1}, "list": [1]}
    patch = {"a": {"y": 2}, "list": [2]}

    merged = deep_merge(existing, patch)
    merged["a"]["x"] = 100
    merged["list"].append(3)

    assert existing == {"a": {"x": 1}, "list": [1]}
    assert patch == {"a": {"y": 2}, "list": [2]}


def test_resolve_config_path_linux_honors_xdg(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert resolve_claude_config_path("linux") == tmp_path / "Claude" / "claude_desktop_config.json"


def test_resolve_config_path_windows_uses_appdata(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("APPDATA", str(tmp_path))
    assert resolve_claude_config_path("win32") == tmp_path / "Claude" / "claude_desktop_config.json"


def test_resolve_config_path_macos() -> None:
    path = resolve_claude_config_path("darwin")
    assert path.parts[-4:] == ("Library", "Application Support", "Claude", "claude_desktop_config.json")


def test_setup_mcp_creates_config(tmp_path: Path, reporter) -> None:
    config = tmp_path / "home" / "Claude" / "claude_desktop_config.json"

    setup_mcp_for_claude_desktop(tmp_path, reporter, config_path=config)

    data = json.loads(config.read_text())
    assert set(data["mcpServers"]) == {"repomix", "serena"}
    assert data["mcpServers"]["repomix"]["args"] == ["-y", "repomix", "--mcp"]
    assert not list(tmp_path.glob(f"{BACKUP_PREFIX}*"))


def test_setup_mcp_preserves_unknown_keys_and_backs_up(tmp_path: Path, reporter) -> None:
    config = tmp_path / "claude_desktop_config.json"
    original = {
        "theme": "dark",
        "mcpServers": {
            "github": {"command": "gh-mcp"},
            "repomix": {"command": "custom-repomix", "args": ["--old"]},
        },
    }
    config.write_text(json.dumps(original))

    setup_mcp_for_claude_desktop(tmp_path, reporter, config_path=config)

    data = json.loads(config.read_text())
    assert data["theme"] == "dark"
    assert data["mcpServers"]["github"] == {"command": "gh-mcp"}
    assert data["mcpServers"]["repomix"] == {"command": "npx", "args": ["-y", "repomix", "--mcp"]}

    backups = list(tmp_path.glob(f"{BACKUP_PREFIX}*/**/claude_desktop_config.json"))
    assert len(backups) == 1
    assert json.loads(backups[0].read_text()) == original


def test_setup_mcp_keeps_existing_servers_when_asked(tmp_path: Path, reporter) -> None:
    config = tmp_path / "claude_desktop_config.json"
    config.write_text(json.dumps({"mcpServers": {"repomix": {"command": "custom-repomix"}}}))

    setup_mcp_for_claude_desktop(tmp_path, reporter, config_path=config, overwrite_existing_servers=False)

    servers = json.loads(config.read_text())["mcpServers"]
    assert servers["repomix"] == {"command": "custom-repomix"}
    assert servers["serena"]["command"] == "uvx"


def test_setup_mcp_recovers_from_malformed_json(tmp_path: Path, reporter) -> None:
    config = tmp_path / "claude_desktop_config.json"
    config.write_text("{ broken")

    setup_mcp_for_claude_desktop(tmp_path, reporter, config_path=config)

    assert set(json.loads(config.read_text())["mcpServers"]) == {"repomix", "serena"}
    backups = list(tmp_path.glob(f"{BACKUP_PREFIX}*/**/claude_desktop_config.json"))
    assert [b.read_text() for b in backups] == ["{ broken"]
    assert "Invalid JSON" in reporter.console.file.getvalue()
