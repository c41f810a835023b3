"""Rewrite Claude Code vocabulary in definition bodies for OpenCode."""

from __future__ import annotations

import re

# A bare tool name is only rewritten when the surrounding text shows it is
# being used as a tool (followed by "tool", "to <verb>", or a call paren), so
# prose such as "complete the Task" is left alone.
TOOL_MAPPINGS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\bTask\s+tool\b", re.IGNORECASE), "delegate_task tool"),
    (re.compile(r"\bTask\s+([\w-]+)\s*:"), r"delegate_task \1:"),
    (re.compile(r"\bTask\s+([\w-]+)\s*\("), r"delegate_task \1("),
    (re.compile(r"\bTask\s*\("), "delegate_task("),
    (re.compile(r"\bTask\b(?=\s+to\s+\w)"), "delegate_task"),
    (re.compile(r"\bTodoWrite\b"), "todowrite"),
    (re.compile(r"\bAskUserQuestion\b"), "question"),
    (re.compile(r"\bWebSearch\b"), "google_search"),
    (re.compile(r"\bRead\b(?=\s+tool|\s+to\s+|\()"), "read"),
    (re.compile(r"\bWrite\b(?=\s+tool|\s+to\s+|\()"), "write"),
    (re.compile(r"\bEdit\b(?=\s+tool|\s+to\s+|\()"), "edit"),
    (re.compile(r"\bBash\b(?=\s+tool|\s+to\s+|\()"), "bash"),
    (re.compile(r"\bGrep\b(?=\s+tool|\s+to\s+|\()"), "grep"),
    (re.compile(r"\bGlob\b(?=\s+tool|\s+to\s+|\()"), "glob"),
    (re.compile(r"\bWebFetch\b"), "webfetch"),
    (re.compile(r"\bSkill\b(?=\s+tool|\s*\()"), "skill"),
]

PATH_REPLACEMENTS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\.claude/skills/"), ".opencode/skills/"),
    (re.compile(r"\.claude/commands/"), ".opencode/commands/"),
    (re.compile(r"\.claude/agents/"), ".opencode/agents/"),
    (re.compile(r"~/\.claude/"), "~/.config/opencode/"),
    (re.compile(r"CLAUDE\.md"), "AGENTS.md"),
    (re.compile(r"/compound-engineering:"), "/systematic:"),
    (re.compile(r"compound-engineering:"), "systematic:"),
]

CODE_SPAN = re.compile(r"```.*?```|`[^`\n]+`", re.DOTALL)
PLACEHOLDER = "\x00CODE{}\x00"


def transform_body(body: str) -> str:
    """Apply tool and path rewrites outside fenced and inline code."""
    spans: list[str] = []

    def stash(match: re.Match[str]) -> str:
        spans.append(match.group(0))
        return PLACEHOLDER.format(len(spans) - 1)

    result = CODE_SPAN.sub(stash, body)
    for pattern, replacement in TOOL_MAPPINGS:
        result = pattern.sub(replacement, result)
    for pattern, replacement in PATH_REPLACEMENTS:
        result = pattern.sub(replacement, result)
    for i, span in enumerate(spans):
        result = result.replace(PLACEHOLDER.format(i), span, 1)
    return result
