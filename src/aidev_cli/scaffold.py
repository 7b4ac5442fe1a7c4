"""Write the managed artifacts into a project.

Docs, rules, configs and CI are always write-if-absent. Hooks and helper
scripts are regenerable: with ``overwrite=True`` the existing copies are backed
up first, then replaced.
"""

import json
from pathlib import Path

from . import templates
from .fsops import WriteResult, create_backup, ensure_dir, set_executable, write_file_safe
from .probe import ProjectKind, detect_modules, detect_tech_stack
from .shell import resolve_hooks_dir
from .ui import Reporter

DIRECTORIES = ["docs/adr", ".mcp", "scripts", ".serena", ".github/workflows"]

ARCHITECTURE_PATH = "docs/ARCHITECTURE.md"
CONVENTIONS_PATH = "docs/CONVENTIONS.md"
ADR_TEMPLATE_PATH = "docs/adr/ADR_TEMPLATE.md"
CURSOR_RULES_PATH = ".cursorrules"
REPOMIX_CONFIG_PATH = "repomix.config.json"
CLAUDE_SNIPPET_PATH = ".mcp/claude_desktop_config.example.json"
CURSOR_SNIPPET_PATH = ".mcp/cursor_mcp_config.example.json"
WORKFLOW_PATH = ".github/workflows/commit-policy.yml"
COMMIT_MSG_HOOK = "commit-msg"
POST_COMMIT_HOOK = "post-commit"


def _dump_json(data: dict) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def create_directories(project_path: Path, reporter: Reporter) -> None:
    for d in DIRECTORIES:
        ensure_dir(project_path / d)
        reporter.success(f"{d}/")


def create_docs(project_path: Path, kind: ProjectKind, reporter: Reporter) -> list[WriteResult]:
    modules = stack = None
    if kind is ProjectKind.EXISTING:
        modules = detect_modules(project_path)
        stack = detect_tech_stack(project_path)
    architecture = templates.architecture_doc(kind, modules, stack)
    return [
        write_file_safe(project_path / ARCHITECTURE_PATH, architecture, reporter),
        write_file_safe(project_path / CONVENTIONS_PATH, templates.CONVENTIONS_DOC, reporter),
        write_file_safe(project_path / ADR_TEMPLATE_PATH, templates.ADR_TEMPLATE, reporter),
    ]


def create_cursor_rules(project_path: Path, reporter: Reporter) -> list[WriteResult]:
    return [write_file_safe(project_path / CURSOR_RULES_PATH, templates.CURSOR_RULES, reporter)]


def create_repomix_config(project_path: Path, reporter: Reporter) -> list[WriteResult]:
    return [write_file_safe(project_path / REPOMIX_CONFIG_PATH, _dump_json(templates.repomix_config()), reporter)]


def create_mcp_snippets(project_path: Path, reporter: Reporter) -> list[WriteResult]:
    # Examples only; real client config locations vary by OS.
    snippet = _dump_json({"mcpServers": templates.mcp_servers()})
    return [
        write_file_safe(project_path / CLAUDE_SNIPPET_PATH, snippet, reporter),
        write_file_safe(project_path / CURSOR_SNIPPET_PATH, snippet, reporter),
    ]


def create_github_action(project_path: Path, reporter: Reporter) -> list[WriteResult]:
    return [write_file_safe(project_path / WORKFLOW_PATH, templates.COMMIT_POLICY_WORKFLOW, reporter)]


def create_git_hooks(project_path: Path, reporter: Reporter, *, overwrite: bool = False) -> list[WriteResult]:
    hooks_dir = resolve_hooks_dir(project_path)
    ensure_dir(hooks_dir)
    hooks = {
        hooks_dir / COMMIT_MSG_HOOK: templates.commit_msg_hook(),
        hooks_dir / POST_COMMIT_HOOK: templates.POST_COMMIT_HOOK,
    }
    if overwrite:
        create_backup(list(hooks), project_path, reporter)

    results = []
    for path, content in hooks.items():
        results.append(write_file_safe(path, content, reporter, overwrite=overwrite))
        set_executable(path)
    return results


def create_scripts(project_path: Path, reporter: Reporter, *, overwrite: bool = False) -> list[WriteResult]:
    if overwrite:
        create_backup([project_path / rel for rel in templates.HELPER_SCRIPTS], project_path, reporter)

    results = []
    for rel, (content, executable) in templates.HELPER_SCRIPTS.items():
        path = project_path / rel
        results.append(write_file_safe(path, content, reporter, overwrite=overwrite))
        if executable:
            set_executable(path)
    return results
