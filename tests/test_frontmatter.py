"""Tests for converter/frontmatter.py."""

from __future__ import annotations

import pytest

from systematic.converter.frontmatter import (
    build_document,
    format_frontmatter,
    parse_frontmatter,
    strip_frontmatter,
)


@pytest.mark.unit
class TestParseFrontmatter:
    def test_parses_simple_key_values(self):
        result = parse_frontmatter("---\nname: test\ndescription: A test\n---\nBody here")
        assert result.frontmatter == {"name": "test", "description": "A test"}
        assert result.body == "Body here"
        assert result.had_frontmatter is True
        assert result.parse_error is False

    def test_parses_hyphenated_keys_and_scalars(self):
        content = "---\nargument-hint: <file>\nsubtask: true\nsteps: 5\ntop_p: 0.9\n---\n"
        result = parse_frontmatter(content)
        assert result.frontmatter == {
            "argument-hint": "<file>",
            "subtask": True,
            "steps": 5,
            "top_p": 0.9,
        }

    def test_parses_nested_maps_and_lists(self):
        content = "---\ntools:\n  - Read\n  - Bash\npermission:\n  bash:\n    git: allow\n---\nx"
        result = parse_frontmatter(content)
        assert result.frontmatter["tools"] == ["Read", "Bash"]
        assert result.frontmatter["permission"] == {"bash": {"git": "allow"}}

    def test_preserves_body_exactly(self):
        body = "# Title\n\n  indented\n\ntrailing\n\n"
        result = parse_frontmatter(f"---\nname: x\n---\n{body}")
        assert result.body == body

    def test_windows_line_endings(self):
        unix = parse_frontmatter("---\nname: test\nmode: primary\n---\nBody")
        windows = parse_frontmatter("---\r\nname: test\r\nmode: primary\r\n---\r\nBody")
        assert windows.frontmatter == unix.frontmatter
        assert windows.had_frontmatter is True
        assert windows.body == "Body"

    def test_delimiter_with_trailing_whitespace(self):
        result = parse_frontmatter("---  \nname: x\n---\t\nBody")
        assert result.frontmatter == {"name": "x"}
        assert result.body == "Body"

    def test_no_delimiters(self):
        result = parse_frontmatter("Just some text")
        assert result.had_frontmatter is False
        assert result.frontmatter == {}
        assert result.body == "Just some text"

    def test_delimiter_not_at_start(self):
        content = "intro\n---\nname: x\n---\n"
        result = parse_frontmatter(content)
        assert result.had_frontmatter is False
        assert result.body == content

    def test_only_opening_delimiter(self):
        content = "---\nname: x\nno closing"
        result = parse_frontmatter(content)
        assert result.had_frontmatter is False
        assert result.body == content

    def test_empty_block(self):
        result = parse_frontmatter("---\n---\nBody")
        assert result.had_frontmatter is True
        assert result.parse_error is False
        assert result.frontmatter == {}
        assert result.body == "Body"

    def test_empty_content(self):
        result = parse_frontmatter("")
        assert result.had_frontmatter is False
        assert result.body == ""

    def test_malformed_yaml_keeps_body(self):
        result = parse_frontmatter("---\nname: [unterminated\n  bad: : indent\n---\nStill here")
        assert result.had_frontmatter is True
        assert result.parse_error is True
        assert result.frontmatter == {}
        assert result.body == "Still here"

    def test_non_mapping_yaml_is_parse_error(self):
        result = parse_frontmatter("---\n- just\n- a list\n---\nBody")
        assert result.parse_error is True
        assert result.frontmatter == {}
        assert result.body == "Body"

    def test_closing_delimiter_at_end_of_file(self):
        result = parse_frontmatter("---\nname: x\n---")
        assert result.frontmatter == {"name": "x"}
        assert result.body == ""


@pytest.mark.unit
class TestFormatFrontmatter:
    def test_formats_key_values_in_order(self):
        assert format_frontmatter({"name": "test", "mode": "primary", "steps": 3}) == (
            "---\nname: test\nmode: primary\nsteps: 3\n---"
        )

    def test_empty_map(self):
        assert format_frontmatter({}) == "---\n---"

    def test_nested_values_round_trip(self):
        data = {"tools": {"read": True, "bash": False}, "permission": {"edit": "ask"}}
        doc = build_document(data, "Body")
        assert parse_frontmatter(doc).frontmatter == data

    def test_strings_that_look_like_other_types_round_trip(self):
        data = {"description": "true", "version": "1.0", "note": "a: b"}
        assert parse_frontmatter(build_document(data, "")).frontmatter == data


@pytest.mark.unit
class TestStripFrontmatter:
    def test_removes_frontmatter(self):
        assert strip_frontmatter("---\nname: x\n---\n\n# Body\n") == "# Body"

    def test_no_frontmatter_unchanged(self):
        assert strip_frontmatter("# Body") == "# Body"


@pytest.mark.unit
class TestCoreSchemaScalars:
    def test_yaml11_only_scalars_stay_strings(self):
        content = "---\ncolor: on\nuser-invocable: no\nlabel: 1:30\nsince: 2026-02-15\nflag: Yes\n---\n"
        assert parse_frontmatter(content).frontmatter == {
            "color": "on",
            "user-invocable": "no",
            "label": "1:30",
            "since": "2026-02-15",
            "flag": "Yes",
        }

    def test_core_scalars_resolve(self):
        content = "---\na: true\nb: False\nc: 010\nd: 0x1f\ne: 0o17\nf: 1.5e3\ng: null\nh: ~\ni: -7\n---\n"
        assert parse_frontmatter(content).frontmatter == {
            "a": True,
            "b": False,
            "c": 10,
            "d": 31,
            "e": 15,
            "f": 1500.0,
            "g": None,
            "h": None,
            "i": -7,
        }

    @pytest.mark.parametrize("value", ["on", "no", "1:30", "2026-02-15", "0o17", "010", "1e3", "null"])
    def test_ambiguous_strings_round_trip(self, value):
        data = {"label": value}
        assert parse_frontmatter(build_document(data, "")).frontmatter == data
