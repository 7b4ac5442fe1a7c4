from __future__ import annotations

import pytest

from aidev_cli.policy import COMMIT_TYPES, is_valid_commit_subject
from aidev_cli.templates import COMMIT_POLICY_WORKFLOW, commit_msg_hook


@pytest.mark.parametrize(
    "subject",
    [
        "feat(auth): add token check",
        "fix(api): handle empty token",
        "chore: bump deps",
        "checkpoint(ui): spacing",
        "checkpoint: wip on parser",
        "Merge branch 'x'",
        "Revert \"feat(auth): add token check\"",
        "docs(adr): add ADR-001 storage\n\nLonger body text",
    ],
)
def test_accepted_subjects(subject: str) -> None:
    assert is_valid_commit_subject(subject)


@pytest.mark.parametrize(
    "subject",
    [
        "wip",
        "",
        "Feat(auth): x",
        "feat(Auth): uppercase scope",
        "feat(auth):missing space",
        "feat(auth): ",
        "feature(auth): unknown type",
        "merge branch 'x'",
    ],
)
def test_rejected_subjects(subject: str) -> None:
    assert not is_valid_commit_subject(subject)


def test_hook_and_workflow_share_the_type_list() -> None:
    hook = commit_msg_hook()
    alternation = "|".join(COMMIT_TYPES)
    assert f"^({alternation})" in hook
    assert f"^({alternation})" in COMMIT_POLICY_WORKFLOW
    assert hook.startswith("#!/bin/sh\n")
    assert "tr -d '\\r'" in hook
    for commit_type in COMMIT_TYPES:
        assert f"  - {commit_type}(scope): description" in hook
