"""Commit subject policy shared by the commit-msg hook and the CI workflow."""

import re

COMMIT_TYPES = ("feat", "fix", "refactor", "docs", "test", "chore")

# POSIX ERE fragments, embedded verbatim in the hook and workflow templates
ALWAYS_ALLOWED_ERE = r"^(Merge |Revert )"
MAIN_COMMIT_ERE = r"^(" + "|".join(COMMIT_TYPES) + r")(\([a-z0-9_-]+\))?: .+"
CHECKPOINT_COMMIT_ERE = r"^checkpoint(\([a-z0-9_-]+\))?: .+"

_PATTERNS = [re.compile(p) for p in (ALWAYS_ALLOWED_ERE, MAIN_COMMIT_ERE, CHECKPOINT_COMMIT_ERE)]


def is_valid_commit_subject(subject: str) -> bool:
    """Return True if ``subject`` satisfies the main/checkpoint commit policy.

    Only the first line of a message is considered, as the hook does.
    """
    first_line = subject.splitlines()[0] if subject else ""
    first_line = first_line.rstrip("\r")
    return any(p.search(first_line) for p in _PATTERNS)
