"""Parse and format the `---`-delimited YAML frontmatter of markdown definitions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

import yaml

DELIMITER = "---"

# YAML 1.2 core-schema scalars. PyYAML's SafeLoader resolves YAML 1.1 types,
# which turns `on`/`no` into booleans, `1:30` into 90 and dates into
# datetime objects; pass-through fields must keep their written values.
_CORE_BOOL = re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$")
_CORE_INT = re.compile(r"^(?:[-+]?[0-9]+|0o[0-7]+|0x[0-9a-fA-F]+)$")
_CORE_FLOAT = re.compile(
    r"^(?:[-+]?(?:\.[0-9]+|[0-9]+(?:\.[0-9]*)?)(?:[eE][-+]?[0-9]+)?"
    r"|[-+]?\.(?:inf|Inf|INF)|\.(?:nan|NaN|NAN))$"
)
_LEGACY_TAGS = frozenset(
    {
        "tag:yaml.org,2002:bool",
        "tag:yaml.org,2002:int",
        "tag:yaml.org,2002:float",
        "tag:yaml.org,2002:timestamp",
        "tag:yaml.org,2002:value",
    }
)


def _add_core_resolvers(cls: type) -> None:
    cls.add_implicit_resolver("tag:yaml.org,2002:bool", _CORE_BOOL, list("tTfF"))
    cls.add_implicit_resolver("tag:yaml.org,2002:int", _CORE_INT, list("-+0123456789"))
    cls.add_implicit_resolver("tag:yaml.org,2002:float", _CORE_FLOAT, list("-+0123456789."))


class FrontmatterLoader(yaml.SafeLoader):
    """SafeLoader restricted to YAML 1.2 core-schema implicit types."""

    def construct_core_int(self, node: yaml.ScalarNode) -> int:
        value = str(self.construct_scalar(node))
        if value.startswith(("0o", "0x")):
            return int(value, 0)
        # decimal even with leading zeros; SafeConstructor would read "010" as octal
        return int(value, 10)


FrontmatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _LEGACY_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_add_core_resolvers(FrontmatterLoader)
FrontmatterLoader.add_constructor("tag:yaml.org,2002:int", FrontmatterLoader.construct_core_int)


class FrontmatterDumper(yaml.SafeDumper):
    """Quotes any string that either YAML 1.1 or 1.2 readers would take for another type."""


_add_core_resolvers(FrontmatterDumper)


@dataclass(frozen=True)
class ParsedDocument:
    frontmatter: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    had_frontmatter: bool = False
    parse_error: bool = False


def _is_delimiter(line: str) -> bool:
    return line.rstrip() == DELIMITER


def parse_frontmatter(content: str) -> ParsedDocument:
    """Split content into frontmatter data and body.

    The block is only recognised when the very first line is a delimiter and a
    matching closing delimiter follows. Malformed YAML never loses the body:
    the result carries ``parse_error=True`` and an empty mapping instead.
    """
    lines = content.splitlines(keepends=True)
    if not lines or not _is_delimiter(lines[0]):
        return ParsedDocument(body=content)

    closing = None
    for i in range(1, len(lines)):
        if _is_delimiter(lines[i]):
            closing = i
            break
    if closing is None:
        return ParsedDocument(body=content)

    raw = "".join(lines[1:closing])
    body = "".join(lines[closing + 1 :])

    try:
        data = yaml.load(raw, Loader=FrontmatterLoader)
    except yaml.YAMLError:
        return ParsedDocument(body=body, had_frontmatter=True, parse_error=True)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        return ParsedDocument(body=body, had_frontmatter=True, parse_error=True)

    return ParsedDocument(frontmatter=data, body=body, had_frontmatter=True)


def format_frontmatter(data: dict[str, Any]) -> str:
    """Serialize data into a delimited block, keeping insertion order."""
    if not data:
        return f"{DELIMITER}\n{DELIMITER}"
    dumped = yaml.dump(
        data,
        Dumper=FrontmatterDumper,
        sort_keys=False,
        width=1000,
        default_flow_style=False,
        allow_unicode=True,
    )
    return f"{DELIMITER}\n{dumped}{DELIMITER}"


def build_document(data: dict[str, Any], body: str) -> str:
    return f"{format_frontmatter(data)}\n{body}"


def strip_frontmatter(content: str) -> str:
    parsed = parse_frontmatter(content)
    return parsed.body.strip() if parsed.had_frontmatter else content.strip()
