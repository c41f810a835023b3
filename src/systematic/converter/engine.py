"""Convert Claude Code skill/agent/command definitions into OpenCode format."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Literal

from systematic.converter.body import transform_body
from systematic.converter.frontmatter import build_document, parse_frontmatter
from systematic.converter.mapping import (
    DEFAULT_AGENT_MODE,
    agent_rules,
    command_rules,
    run_rules,
    skill_rules,
)

logger = logging.getLogger(__name__)

# Bump whenever mapping or body rules change output; cached conversions and
# the sync manifest's recorded version are compared against it.
CONVERTER_VERSION = 3


class DocumentKind(StrEnum):
    SKILL = "skill"
    AGENT = "agent"
    COMMAND = "command"


@dataclass(frozen=True)
class ConvertOptions:
    agent_mode: Literal["primary", "subagent"] | None = None
    skip_body_transform: bool = False
    source: Literal["bundled", "external"] | None = None


def convert_frontmatter(
    data: dict[str, Any],
    kind: DocumentKind | str,
    options: ConvertOptions | None = None,
) -> dict[str, Any]:
    options = options or ConvertOptions()
    kind = DocumentKind(kind)
    if kind is DocumentKind.AGENT:
        rules = agent_rules(options.agent_mode or DEFAULT_AGENT_MODE)
    elif kind is DocumentKind.SKILL:
        rules = skill_rules()
    else:
        rules = command_rules()
    return run_rules(data, rules)


def convert_content(
    content: str,
    kind: DocumentKind | str,
    options: ConvertOptions | None = None,
) -> str:
    """Convert one definition document. Running it on its own output is a no-op."""
    options = options or ConvertOptions()
    kind = DocumentKind(kind)
    if content == "":
        return ""

    parsed = parse_frontmatter(content)
    if not parsed.had_frontmatter or parsed.parse_error:
        if parsed.parse_error:
            logger.warning(f"Malformed frontmatter in {kind} definition; keeping it verbatim")
        return content if options.skip_body_transform else transform_body(content)

    body = parsed.body if options.skip_body_transform else transform_body(parsed.body)
    return build_document(convert_frontmatter(parsed.frontmatter, kind, options), body)
