"""Tests for converter/body.py."""

from __future__ import annotations

import pytest

from systematic.converter.body import transform_body


@pytest.mark.unit
class TestToolNames:
    def test_task_tool_reference(self):
        assert transform_body("Use the Task tool to spawn") == "Use the delegate_task tool to spawn"

    def test_task_with_agent_name(self):
        assert transform_body('Task repo-analyst: "look"') == 'delegate_task repo-analyst: "look"'
        assert transform_body("Task repo-analyst(args)") == "delegate_task repo-analyst(args)"

    def test_task_call(self):
        assert transform_body("Task(prompt)") == "delegate_task(prompt)"

    def test_task_to_verb(self):
        assert transform_body("use Task to spawn agents") == "use delegate_task to spawn agents"

    def test_task_as_noun_untouched(self):
        assert transform_body("Complete the Task.") == "Complete the Task."

    def test_renamed_tools(self):
        text = "Call TodoWrite, AskUserQuestion, WebSearch and WebFetch."
        assert transform_body(text) == "Call todowrite, question, google_search and webfetch."

    def test_case_normalisation_in_tool_context(self):
        assert transform_body("Use the Read tool") == "Use the read tool"
        assert transform_body("Bash(ls)") == "bash(ls)"
        assert transform_body("Use Grep to search") == "Use grep to search"

    def test_prose_words_untouched(self):
        assert transform_body("Read the docs and Edit carefully.") == "Read the docs and Edit carefully."

    def test_skill_only_in_tool_context(self):
        assert transform_body('Skill("brainstorming")') == 'skill("brainstorming")'
        assert transform_body("This Skill is useful") == "This Skill is useful"


@pytest.mark.unit
class TestPaths:
    def test_config_directories(self):
        text = "See .claude/skills/x and .claude/commands/y and .claude/agents/z"
        assert transform_body(text) == (
            "See .opencode/skills/x and .opencode/commands/y and .opencode/agents/z"
        )

    def test_home_directory(self):
        assert transform_body("~/.claude/settings.json") == "~/.config/opencode/settings.json"

    def test_claude_md(self):
        assert transform_body("Read CLAUDE.md first") == "Read AGENTS.md first"

    def test_command_namespace(self):
        text = "Run /compound-engineering:plan then compound-engineering:work"
        assert transform_body(text) == "Run /systematic:plan then systematic:work"


@pytest.mark.unit
class TestCodeProtection:
    def test_fenced_code_untouched(self):
        text = "Use the Task tool\n```\nTask(x) in CLAUDE.md\n```\n"
        assert transform_body(text) == "Use the delegate_task tool\n```\nTask(x) in CLAUDE.md\n```\n"

    def test_inline_code_untouched(self):
        assert transform_body("Edit `CLAUDE.md` not CLAUDE.md") == "Edit `CLAUDE.md` not AGENTS.md"


@pytest.mark.unit
def test_transform_is_idempotent():
    text = (
        "Use the Task tool. Task helper: go. WebSearch it. See .claude/skills/a, "
        "~/.claude/x, CLAUDE.md and /compound-engineering:plan. `Task(keep)`"
    )
    once = transform_body(text)
    assert transform_body(once) == once
