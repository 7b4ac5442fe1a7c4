"""Merge the MCP server entries into the Claude Desktop config."""

import copy
import json
import os
import sys
from pathlib import Path
from typing import Any

from platformdirs.macos import MacOS
from platformdirs.unix import Unix

from .fsops import create_backup, ensure_dir, safe_read, write_file_safe
from .templates import mcp_servers
from .ui import Reporter

CLAUDE_APP_NAME = "Claude"
CLAUDE_CONFIG_FILENAME = "claude_desktop_config.json"


def resolve_claude_config_path(system: str | None = None) -> Path:
    """Return the Claude Desktop config path for an OS family (``sys.platform`` style).

    Best-effort; installs may differ. Does not touch the filesystem.
    """
    system = system or sys.platform
    if system == "win32":
        appdata = os.getenv("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return Path(appdata) / CLAUDE_APP_NAME / CLAUDE_CONFIG_FILENAME
    if system == "darwin":
        return MacOS(CLAUDE_APP_NAME).user_config_path / CLAUDE_CONFIG_FILENAME
    return Unix(CLAUDE_APP_NAME).user_config_path / CLAUDE_CONFIG_FILENAME


def deep_merge(existing: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``patch`` into a copy of ``existing``.

    Nested dicts are merged key by key; any other patch value (lists included)
    replaces the existing one wholesale. Neither input is mutated.
    """
    out = copy.deepcopy(existing) if isinstance(existing, dict) else {}
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = copy.deepcopy(value)
    return out


def _load_config(config_path: Path, reporter: Reporter) -> dict[str, Any]:
    raw = safe_read(config_path)
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        reporter.warn(f"Invalid JSON in {config_path}; starting from an empty config (original is backed up)")
        return {}
    if not isinstance(data, dict):
        reporter.warn(f"{config_path} is not a JSON object; starting from an empty config (original is backed up)")
        return {}
    return data


def setup_mcp_for_claude_desktop(
    project_path: Path,
    reporter: Reporter,
    *,
    config_path: Path | None = None,
    overwrite_existing_servers: bool = True,
) -> Path:
    """Add the repomix and serena MCP servers to the Claude Desktop config.

    With ``overwrite_existing_servers=False`` any server the user already
    defines under the same name is left as is. The previous file, if any, is
    backed up into the project before it is rewritten.
    """
    config_path = config_path or resolve_claude_config_path()
    ensure_dir(config_path.parent)

    existing = _load_config(config_path, reporter)

    servers = mcp_servers()
    current = existing.get("mcpServers")
    if not overwrite_existing_servers and isinstance(current, dict):
        for name in list(servers):
            if current.get(name):
                reporter.info(f"   Keeping existing MCP server: {name}")
                del servers[name]
    patch = {"mcpServers": servers}

    if config_path.exists():
        create_backup([config_path], project_path, reporter)

    merged = deep_merge(existing, patch)
    write_file_safe(config_path, json.dumps(merged, indent=2, ensure_ascii=False) + "\n", reporter, overwrite=True)

    reporter.console.print(f"[green]🔌 Claude Desktop MCP config updated:[/green] {config_path}")
    reporter.console.print("[cyan]   Restart Claude Desktop to apply changes.[/cyan]")
    return config_path
