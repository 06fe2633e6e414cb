"""``!devflow`` chat command parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass

from shared.schemas.tasks import DevflowIntent

COMMAND_PREFIX = "!devflow"
INVALID_FORMAT = "Invalid devflow command format"

_COMMAND_RE = re.compile(
    r"^!devflow\s+(fix-bug|fix|feature|explain|review-pr|deploy)\s+(.+)$",
    re.IGNORECASE | re.DOTALL,
)
_BRANCH_RE = re.compile(r"^[a-zA-Z0-9\-_]+$")


@dataclass(frozen=True)
class DevflowCommand:
    is_devflow: bool
    description: str
    raw_text: str
    intent: DevflowIntent | None = None
    repo: str | None = None
    branch: str | None = None


def parse_devflow_command(text: str) -> DevflowCommand:
    """Parse ``!devflow <intent> [owner/repo [branch]] <description>``.

    >>> cmd = parse_devflow_command("!devflow fix owner/repo main Fix the bug")
    >>> cmd.intent, cmd.repo, cmd.branch, cmd.description
    ('fix-bug', 'owner/repo', 'main', 'Fix the bug')
    """
    trimmed = text.strip()
    if not trimmed.lower().startswith(COMMAND_PREFIX):
        return DevflowCommand(is_devflow=False, description="", raw_text=text)

    match = _COMMAND_RE.match(trimmed)
    if not match:
        return DevflowCommand(is_devflow=True, description=INVALID_FORMAT, raw_text=text)

    intent_str, remainder = match.groups()
    intent = intent_str.lower()
    if intent == "fix":
        intent = "fix-bug"

    parts = remainder.split()
    repo = branch = None
    if parts and "/" in parts[0]:
        repo = parts.pop(0)
        if parts and _BRANCH_RE.match(parts[0]):
            branch = parts.pop(0)

    return DevflowCommand(
        is_devflow=True,
        intent=intent,
        description=" ".join(parts) or remainder.strip(),
        repo=repo,
        branch=branch,
        raw_text=text,
    )


def devflow_help_text() -> str:
    return (
        "🤖 *Devflow AI DevOps Agent*\n"
        "\n"
        "Use these commands to automate development tasks:\n"
        "\n"
        "*Fix Bugs*\n"
        "`!devflow fix owner/repo Fix the auth bug`\n"
        "\n"
        "*Implement Features*\n"
        "`!devflow feature owner/repo Add CSV export`\n"
        "\n"
        "*Explain Code*\n"
        "`!devflow explain owner/repo Explain authentication flow`\n"
        "\n"
        "*Review PRs*\n"
        "`!devflow review-pr owner/repo Provide feedback on PR #123`\n"
        "\n"
        "*Optional: Specify branch*\n"
        "`!devflow fix owner/repo develop Fix the bug`\n"
        "\n"
        "⏳ The agent will clone the repo, understand your request, and take action!\n"
        "📊 You'll receive real-time progress updates as the task executes.\n"
        "✅ When complete, you'll get a link to the created PR or result."
    )
