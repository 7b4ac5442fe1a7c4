"""Static content for every generated artifact.

Only the architecture document varies with the project classification; the
rest is fixed text. Commit-policy regexes are spliced in from ``policy`` so
the hook, the CI workflow and the Python validator agree.
"""

from typing import Any

from .policy import ALWAYS_ALLOWED_ERE, CHECKPOINT_COMMIT_ERE, COMMIT_TYPES, MAIN_COMMIT_ERE
from .probe import Detection, ProjectKind

DEGRADED_MARKER = "DEGRADED MODE TEMPLATE"
SERENA_SOURCE = "git+https://github.com/oraios/serena.git"

_TYPES_PIPE = "|".join(COMMIT_TYPES)


def _policy(text: str) -> str:
    return (
        text.replace("@ALWAYS_RE@", ALWAYS_ALLOWED_ERE)
        .replace("@MAIN_RE@", MAIN_COMMIT_ERE)
        .replace("@CHECKPOINT_RE@", CHECKPOINT_COMMIT_ERE)
    )


# --- docs --------------------------------------------------------------------

_DEGRADED_BLOCK = f"""> ⚠️ **{DEGRADED_MARKER}**
>
> **For AI (Claude Code/Cursor):**
> - This file is INCOMPLETE. Treat recommendations as SUGGESTIONS only.
> - Before making architectural changes, request human review.
> - Prioritize incremental changes over redesigns.
> - If something is unclear, ASK. State assumptions explicitly.
>
> **For Developers:**
> - Review and complete all sections marked with [TODO]
> - Document your current architecture truthfully
> - Update this file as you refine the system
> - Remove this warning when complete
>
> **To exit degraded mode:** Complete all [TODO] sections below.
>
---

"""


def architecture_doc(kind: ProjectKind, modules: Detection | None = None, stack: Detection | None = None) -> str:
    degraded = kind is ProjectKind.EXISTING

    if degraded:
        purpose = "[TODO: Describe what this system does and why it exists]"
        module_text = modules.render("No common module directories found", "Unable to detect modules") if modules else "- Unable to detect modules"
        stack_text = stack.render("No tech stack markers found", "Unable to detect tech stack") if stack else "- Unable to detect tech stack"
        modules_section = f"[TODO: List your main modules/components]\n\nDetected modules (verify):\n{module_text}"
        stack_section = f"[TODO: Verify and document]\n\nDetected (best-effort):\n{stack_text}"
    else:
        purpose = "Describe what this system does and why it exists."
        modules_section = "[List your main modules/components]"
        stack_section = "[Document your tech stack]"

    banner = _DEGRADED_BLOCK if degraded else ""

    return f"""# ARCHITECTURE

{banner}## Purpose
{purpose}

## System Invariants (Non-Negotiable)
- LLMs are executors, not sources of truth
- Repo (Git) is the source of truth
- Architecture docs > code
- Decisions are written (ADR), not implied
- Context is rebuilt from the repository snapshot, not from chat history

## Modules
{modules_section}

## Tech Stack
{stack_section}

## Context Strategy (Onion Model)
Layer 0 - Always included:
- docs/ARCHITECTURE.md
- docs/CONVENTIONS.md
- latest ADRs (docs/adr)

Layer 1 - Incremental delta:
- git diff against base branch (default: main)
- changed files content

Layer 2 - Dynamic expansion (on demand):
- callers / references / dependencies
- retrieved via Serena (optional)

## Operating Rules
- Use **meaningful commits** as checkpoints of intent (even if small)
- After each commit: regenerate snapshot (.mcp/context.xml)
- Use ADRs for architectural decisions that change boundaries, invariants, or contracts
"""


CONVENTIONS_DOC = f"""# CONVENTIONS

## Commit Message Policy

All commits MUST follow one of two templates.

### Main commits (feature work)
`type(scope): short description`

Where `type` ∈ `{_TYPES_PIPE}`

Examples:
- feat(auth): add oauth skeleton
- fix(api): handle empty token
- refactor(core): split router

### Checkpoint commits (micro checkpoints)
`checkpoint(scope): short description`

Examples:
- checkpoint(ui): adjust spacing
- checkpoint(docs): update wording

Merge and revert commits (`Merge ...`, `Revert ...`) are always accepted.

Enforcement:
- Local git hook: .git/hooks/commit-msg
- CI safety net: .github/workflows/commit-policy.yml

## Degraded Mode

If docs/ARCHITECTURE.md contains "{DEGRADED_MARKER}":
- AI must treat architecture as incomplete
- AI must ask clarifying questions
- AI must avoid large refactors without explicit approval

## Snapshot / Context

- Full snapshot: .mcp/context.xml (generated by Repomix)
- Incremental snapshot: .mcp/context_incremental.txt (generated by scripts/generate-context.sh)

## ADR

Use ADRs for:
- changing module boundaries
- introducing new core dependencies
- changing APIs/contracts
- changing invariants or data flows
"""

ADR_TEMPLATE = """# ADR-XXX: <Title>

**Status:** Draft | Accepted | Rejected
**Date:** YYYY-MM-DD
**Deciders:** <names>

## Context
<What problem are we solving?>

## Decision
<What did we decide?>

## Rationale
<Why this decision?>

## Consequences
<Good and bad effects>

## Alternatives Considered
<Other options>

## References
- Links / docs / PRs
"""

CURSOR_RULES = f"""# Cursor AI Rules

You operate inside a deterministic AI-assisted development system.

## Absolute rules
- Repo (Git) is the source of truth.
- Do NOT rely on chat history as source of truth.
- Follow docs/ARCHITECTURE.md and docs/CONVENTIONS.md.
- Write small, incremental changes; prefer patch-sized PRs.
- For architectural changes: create/update an ADR and request approval.

## Commit policy
- Suggest commit messages that match CONVENTIONS.md.
- Prefer **checkpoint** commits for micro-steps during implementation.
- Prefer **main** commits when completing a meaningful slice.

## Working in Degraded Mode
If you see in docs/ARCHITECTURE.md:
"⚠️ {DEGRADED_MARKER}"

**This means:**
- Documentation is incomplete
- Your recommendations are SUGGESTIONS only
- Request approval before architectural changes

**DO:**
- Ask clarifying questions
- Explain assumptions explicitly
- Suggest small changes first

**DON'T:**
- Assume architectural decisions
- Make large refactors
- Change module boundaries

## Safety
- Do not modify docs/ARCHITECTURE.md, docs/CONVENTIONS.md, or ADRs unless explicitly instructed.
- Avoid deleting files unless explicitly requested.
"""


# --- JSON configs ------------------------------------------------------------

def repomix_config() -> dict[str, Any]:
    return {
        "output": {
            "filePath": ".mcp/context.xml",
            "style": "xml",
            "headerText": (
                "# AI Development System Context (Onion Model)\n"
                "Layer 0 (Always): docs/ARCHITECTURE.md, docs/CONVENTIONS.md, latest ADRs\n"
                "Layer 1 (Delta): git diffs and changed files (use scripts/generate-context.sh for incremental)\n"
                "Layer 2 (Expansion): on demand via Serena tools\n"
                "\n"
                "This snapshot represents current project reality from the repository.\n"
            ),
        },
        "include": [
            "docs/**",
            "src/**",
            "app/**",
            "lib/**",
            "backend/**",
            "packages/**",
            "services/**",
            "README.md",
            "Dockerfile",
            "docker-compose.yml",
            "compose.yaml",
        ],
        "ignore": {
            "useDefaultPatterns": True,
            "customPatterns": [
                "node_modules/**",
                ".git/**",
                ".ai-dev-backup-*/**",
                ".serena/cache/**",
                ".serena/tmp/**",
                ".serena/logs/**",
                ".mcp/context.xml",
                ".mcp/context_incremental.txt",
                "**/*.log",
                "**/*.tmp",
                "**/.DS_Store",
            ],
        },
        "git": {
            "includeDiffs": True,
            "includeLogs": True,
            "logsCount": 30,
        },
    }


def mcp_servers() -> dict[str, Any]:
    """The two MCP server entries, keyed by server name."""
    return {
        "repomix": {
            "command": "npx",
            "args": ["-y", "repomix", "--mcp"],
        },
        "serena": {
            "command": "uvx",
            "args": ["--from", SERENA_SOURCE, "serena", "start-mcp-server"],
        },
    }


# --- CI ----------------------------------------------------------------------

COMMIT_POLICY_WORKFLOW = _policy("""name: Commit Policy

on:
  pull_request:
  push:
    branches: [ main, master ]

jobs:
  commit-policy:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
        with:
          fetch-depth: 0

      - name: Validate commit messages
        shell: bash
        run: |
          set -e
          BASE="${{ github.event.pull_request.base.sha }}"
          HEAD="${{ github.sha }}"

          # For push events where BASE is empty, validate the last 50 commits.
          if [ -z "$BASE" ]; then
            RANGE="HEAD~50..HEAD"
          else
            RANGE="$BASE..$HEAD"
          fi

          ALWAYS_RE='@ALWAYS_RE@'
          MAIN_RE='@MAIN_RE@'
          CHECKPOINT_RE='@CHECKPOINT_RE@'

          echo "Validating commit subjects in range: $RANGE"
          BAD=0

          while IFS= read -r subject; do
            if [[ "$subject" =~ $ALWAYS_RE ]]; then
              continue
            fi
            if [[ "$subject" =~ $MAIN_RE ]]; then
              continue
            fi
            if [[ "$subject" =~ $CHECKPOINT_RE ]]; then
              continue
            fi
            echo "❌ Invalid commit subject: $subject"
            BAD=1
          done < <(git log --format=%s "$RANGE")

          if [ "$BAD" -eq 1 ]; then
            echo "Commit policy failed."
            exit 1
          fi

          echo "✅ Commit policy passed."
""")


# --- git hooks ---------------------------------------------------------------

def commit_msg_hook() -> str:
    allowed = "\n".join(f'echo "  - {t}(scope): description"' for t in COMMIT_TYPES + ("checkpoint",))
    return _policy("""#!/bin/sh
# Commit Message Policy (main + checkpoint)
MSG_FILE="$1"
SUBJECT="$(head -n 1 "$MSG_FILE" | tr -d '\\r')"

# Allow merge/revert commits
echo "$SUBJECT" | grep -Eq '@ALWAYS_RE@' && exit 0

# Main commits
echo "$SUBJECT" | grep -Eq '@MAIN_RE@' && exit 0

# Checkpoint commits
echo "$SUBJECT" | grep -Eq '@CHECKPOINT_RE@' && exit 0

echo ""
echo "❌ Invalid commit message:"
echo "   $SUBJECT"
echo ""
echo "Allowed formats:"
@ALLOWED@
echo ""
exit 1
""").replace("@ALLOWED@", allowed)


POST_COMMIT_HOOK = """#!/bin/sh
# Post-commit hook: regenerate deterministic snapshot for handoff (Cursor <-> Claude)
# Non-fatal: commit already happened; we log errors.

LOG_DIR=".mcp"
LOG_FILE="$LOG_DIR/post-commit.log"
mkdir -p "$LOG_DIR"

echo "---- $(date) ----" >> "$LOG_FILE"

if command -v npx >/dev/null 2>&1; then
  # Repomix reads repomix.config.json and writes .mcp/context.xml
  npx -y repomix >> "$LOG_FILE" 2>&1 || echo "[WARN] repomix failed" >> "$LOG_FILE"
else
  echo "[WARN] npx not found; cannot run repomix" >> "$LOG_FILE"
fi

# Serena indexing is heavy and stays manual: scripts/serena-index.sh
exit 0
"""


# --- helper scripts ----------------------------------------------------------

COMMIT_CHECKPOINT_SH = """#!/bin/sh
# Quick checkpoint commit (enforced by commit-msg hook)
# Usage: scripts/commit-checkpoint.sh <scope> <message...>

set -e
SCOPE="$1"
shift || true
MSG="$*"

if [ -z "$SCOPE" ] || [ -z "$MSG" ]; then
  echo "Usage: scripts/commit-checkpoint.sh <scope> <message...>"
  exit 1
fi

git add -A
git commit -m "checkpoint($SCOPE): $MSG"
"""

COMMIT_MAIN_SH = f"""#!/bin/sh
# Main commit
# Usage: scripts/commit-main.sh <type> <scope> <message...>
# type: {_TYPES_PIPE}

set -e
TYPE="$1"
SCOPE="$2"
shift 2 || true
MSG="$*"

if [ -z "$TYPE" ] || [ -z "$SCOPE" ] || [ -z "$MSG" ]; then
  echo "Usage: scripts/commit-main.sh <type> <scope> <message...>"
  exit 1
fi

git add -A
git commit -m "$TYPE($SCOPE): $MSG"
"""

GENERATE_CONTEXT_SH = """#!/bin/sh
# Incremental context generator (Onion Model)
# Usage: scripts/generate-context.sh [base_branch] [output_file]

set -e
BASE_BRANCH="${1:-main}"
OUT="${2:-.mcp/context_incremental.txt}"

mkdir -p .mcp
echo "# AI Development System Context (Incremental / Onion Model)" > "$OUT"
echo "" >> "$OUT"

# Layer 0 - Laws
for f in docs/ARCHITECTURE.md docs/CONVENTIONS.md; do
  if [ -f "$f" ]; then
    echo "=== $f ===" >> "$OUT"
    cat "$f" >> "$OUT"
    echo "" >> "$OUT"
  fi
done

# Latest ADRs (up to 5)
ls -1t docs/adr/ADR-*.md 2>/dev/null | head -n 5 | while read -r adr; do
  echo "--- $adr ---" >> "$OUT"
  cat "$adr" >> "$OUT"
  echo "" >> "$OUT"
done

# Layer 1 - Delta
echo "=== git diff $BASE_BRANCH...HEAD ===" >> "$OUT"
git diff "$BASE_BRANCH...HEAD" >> "$OUT" || true
echo "" >> "$OUT"

# Changed files content
CHANGED=$(git diff --name-only "$BASE_BRANCH...HEAD" || true)
for file in $CHANGED; do
  if [ -f "$file" ]; then
    echo "=== $file ===" >> "$OUT"
    cat "$file" >> "$OUT"
    echo "" >> "$OUT"
  fi
done

echo "✅ Wrote incremental context: $OUT"
"""

CREATE_ADR_SH = r"""#!/bin/sh
# Create ADR from template with auto-increment ID
# Usage: scripts/create-adr.sh <slug>
set -e

SLUG="$1"
if [ -z "$SLUG" ]; then
  echo "Usage: scripts/create-adr.sh <slug>"
  exit 1
fi

mkdir -p docs/adr

LAST=$(ls -1 docs/adr/ADR-[0-9][0-9][0-9]-*.md 2>/dev/null | sed -E 's/.*ADR-([0-9]+)-.*/\1/' | sort -n | tail -1)
if [ -z "$LAST" ]; then
  NEXT=1
else
  NEXT=$(( $(echo "$LAST" | sed 's/^0*//') + 1 ))
fi

ID=$(printf "%03d" "$NEXT")
FILE="docs/adr/ADR-$ID-$SLUG.md"

cat > "$FILE" <<'EOF'
@ADR_TEMPLATE@EOF

# Replace placeholders
DATE=$(date +%Y-%m-%d)
sed -i.bak -e "s/ADR-XXX/ADR-$ID/g" -e "s/YYYY-MM-DD/$DATE/g" "$FILE" 2>/dev/null || true
rm -f "$FILE.bak" 2>/dev/null || true

echo "✅ Created $FILE"
echo "Next:"
echo "  1) Fill sections"
echo "  2) Commit: git commit -m \"docs(adr): add ADR-$ID $SLUG\""
""".replace("@ADR_TEMPLATE@", ADR_TEMPLATE)

SERENA_INDEX_SH = f"""#!/bin/sh
# Optional: index the project for Serena (can be heavy)
# Requires uv/uvx or python environment; see Serena docs.
# Usage: scripts/serena-index.sh

set -e
echo "Starting Serena MCP server / indexing is environment-specific."
echo "Suggested (uvx) command:"
echo "  uvx --from {SERENA_SOURCE} serena project index"
echo ""
echo "If you already have Serena installed as a CLI, run:"
echo "  serena project index"
"""

COMMIT_CHECKPOINT_BAT = r"""@echo off
setlocal enabledelayedexpansion
set SCOPE=%1
if "%SCOPE%"=="" goto usage
shift
set "MSG="
set "FIRST=1"

:buildmsg
if "%~1"=="" goto checkmsg
if "!FIRST!"=="1" (set "MSG=%~1" & set "FIRST=0") else (set "MSG=!MSG! %~1")
shift
goto buildmsg

:checkmsg
if "%MSG%"=="" goto usage

git add -A
git commit -m "checkpoint(%SCOPE%): %MSG%"
exit /b 0

:usage
echo Usage: scripts\commit-checkpoint.bat ^<scope^> ^<message...^>
exit /b 1
"""

COMMIT_MAIN_BAT = r"""@echo off
setlocal enabledelayedexpansion
set TYPE=%1
set SCOPE=%2
if "%TYPE%"=="" goto usage
if "%SCOPE%"=="" goto usage
shift
shift
set "MSG="
set "FIRST=1"

:buildmsg
if "%~1"=="" goto checkmsg
if "!FIRST!"=="1" (set "MSG=%~1" & set "FIRST=0") else (set "MSG=!MSG! %~1")
shift
goto buildmsg

:checkmsg
if "%MSG%"=="" goto usage

git add -A
git commit -m "%TYPE%(%SCOPE%): %MSG%"
exit /b 0

:usage
echo Usage: scripts\commit-main.bat ^<type^> ^<scope^> ^<message...^>
echo type: @TYPES@
exit /b 1
""".replace("@TYPES@", "^|".join(COMMIT_TYPES))

GENERATE_CONTEXT_BAT = r"""@echo off
setlocal enabledelayedexpansion
set BASE_BRANCH=%1
if "%BASE_BRANCH%"=="" set BASE_BRANCH=main
set OUT=%2
if "%OUT%"=="" set OUT=.mcp\context_incremental.txt

if not exist .mcp mkdir .mcp

echo # AI Development System Context (Incremental / Onion Model)> "%OUT%"
echo.>> "%OUT%"

for %%F in (docs\ARCHITECTURE.md docs\CONVENTIONS.md) do (
  if exist %%F (
    echo === %%F ===>> "%OUT%"
    type %%F>> "%OUT%"
    echo.>> "%OUT%"
  )
)

for /f "delims=" %%A in ('dir /b /o-d docs\adr\ADR-*.md 2^>nul') do (
  echo --- docs\adr\%%A --->> "%OUT%"
  type docs\adr\%%A>> "%OUT%"
  echo.>> "%OUT%"
  goto afteradr
)
:afteradr

echo === git diff %BASE_BRANCH%...HEAD ===>> "%OUT%"
git diff %BASE_BRANCH%...HEAD>> "%OUT%" 2>nul
echo.>> "%OUT%"

for /f "delims=" %%F in ('git diff --name-only %BASE_BRANCH%...HEAD 2^>nul') do (
  if exist %%F (
    echo === %%F ===>> "%OUT%"
    type %%F>> "%OUT%"
    echo.>> "%OUT%"
  )
)

echo Wrote incremental context: %OUT%
"""

# relative path -> (content, executable)
HELPER_SCRIPTS = {
    "scripts/commit-checkpoint.sh": (COMMIT_CHECKPOINT_SH, True),
    "scripts/commit-main.sh": (COMMIT_MAIN_SH, True),
    "scripts/generate-context.sh": (GENERATE_CONTEXT_SH, True),
    "scripts/create-adr.sh": (CREATE_ADR_SH, True),
    "scripts/serena-index.sh": (SERENA_INDEX_SH, True),
    "scripts/commit-checkpoint.bat": (COMMIT_CHECKPOINT_BAT, False),
    "scripts/commit-main.bat": (COMMIT_MAIN_BAT, False),
    "scripts/generate-context.bat": (GENERATE_CONTEXT_BAT, False),
}
