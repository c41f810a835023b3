"""Frontmatter field mapping rules and per-kind pipelines.

Every rule takes a frontmatter mapping and returns a new one, touching only
the keys it knows about. Anything else passes through unchanged. Each rule is
guarded so that running a pipeline on its own output is a no-op.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from systematic.converter.validation import (
    check_agent_mode,
    check_permission,
    check_step_count,
    check_string_list,
    check_tools_map,
    is_explicit_number,
)

Frontmatter = dict[str, Any]
Rule = Callable[[Frontmatter], Frontmatter]

DEFAULT_AGENT_MODE = "subagent"
DEFAULT_MODEL_VENDOR = "anthropic"
DEFAULT_TEMPERATURE = 0.3

# (prefix pattern, vendor); first match wins
MODEL_VENDORS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^claude"), "anthropic"),
    (re.compile(r"^(gpt|o1|o3)"), "openai"),
    (re.compile(r"^gemini"), "google"),
]

# (keyword pattern, temperature); first match wins
TEMPERATURE_HINTS: list[tuple[re.Pattern[str], float]] = [
    (re.compile(r"review|audit|security|sentinel|oracle|lint|verification|guardian"), 0.1),
    (re.compile(r"plan|planning|architecture|strategist|analysis|research"), 0.2),
    (re.compile(r"doc|readme|changelog|editor|writer"), 0.3),
    (re.compile(r"brainstorm|creative|ideate|design|concept"), 0.6),
]

TOOL_RENAMES: dict[str, str] = {
    "task": "delegate_task",
    "todowrite": "todowrite",
    "askuserquestion": "question",
    "websearch": "google_search",
    "webfetch": "webfetch",
    "skill": "skill",
}

PERMISSION_MODES: dict[str, dict[str, str]] = {
    "full": {"edit": "allow", "bash": "allow", "webfetch": "allow"},
    "bypassPermissions": {"edit": "allow", "bash": "allow", "webfetch": "allow"},
    "default": {"edit": "ask", "bash": "ask", "webfetch": "ask"},
    "plan": {"edit": "deny", "bash": "deny", "webfetch": "ask"},
}

HIDDEN_FLAG_KEYS = ("disable-model-invocation", "disableModelInvocation")
LEGACY_STEP_KEYS = ("maxTurns", "maxSteps")


def normalize_model(model: str) -> str:
    """Prefix a bare model id with its provider; already-qualified ids pass through."""
    if "/" in model:
        return model
    for pattern, vendor in MODEL_VENDORS:
        if pattern.match(model):
            return f"{vendor}/{model}"
    return f"{DEFAULT_MODEL_VENDOR}/{model}"


def canonical_tool_name(name: str) -> str:
    lowered = name.strip().lower()
    return TOOL_RENAMES.get(lowered, lowered)


def infer_temperature(name: str, description: str) -> float:
    sample = f"{name} {description}".lower()
    for pattern, temperature in TEMPERATURE_HINTS:
        if pattern.search(sample):
            return temperature
    return DEFAULT_TEMPERATURE


# Shared rules


def normalize_model_field(data: Frontmatter) -> Frontmatter:
    result = dict(data)
    model = result.get("model")
    if model == "inherit":
        del result["model"]
    elif isinstance(model, str):
        result["model"] = normalize_model(model)
    return result


# Skill rules


def map_context_fork(data: Frontmatter) -> Frontmatter:
    """`context: fork` additionally marks the skill as a subtask."""
    result = dict(data)
    if result.get("context") == "fork":
        result["subtask"] = True
    return result


# Agent rules


def apply_mode(default: str = DEFAULT_AGENT_MODE) -> Rule:
    fallback = default if check_agent_mode(default).ok else DEFAULT_AGENT_MODE

    def rule(data: Frontmatter) -> Frontmatter:
        result = dict(data)
        if not check_agent_mode(result.get("mode")).ok:
            result["mode"] = fallback
        return result

    return rule


def preserve_name(data: Frontmatter) -> Frontmatter:
    """Keep `name` as-is and derive a description from it when none is given."""
    result = dict(data)
    name = result.get("name")
    description = result.get("description")
    if isinstance(name, str) and name and not (isinstance(description, str) and description):
        result["description"] = f"{name} agent"
    return result


def apply_temperature(data: Frontmatter) -> Frontmatter:
    result = dict(data)
    if is_explicit_number(result.get("temperature")):
        return result
    name = result.get("name")
    description = result.get("description")
    result["temperature"] = infer_temperature(
        name if isinstance(name, str) else "",
        description if isinstance(description, str) else "",
    )
    return result


def map_tools(data: Frontmatter) -> Frontmatter:
    """Convert a tool list into a `{canonical_name: true}` map."""
    result = dict(data)
    if "tools" not in result or check_tools_map(result["tools"]).ok:
        return result
    names = check_string_list(result["tools"])
    if not names.ok:
        return result
    if not names.value:
        del result["tools"]
        return result
    result["tools"] = {canonical_tool_name(name): True for name in names.value}
    return result


def merge_disallowed_tools(data: Frontmatter) -> Frontmatter:
    """Fold `disallowedTools` into the tools map as `false` entries, then drop it."""
    result = dict(data)
    if "disallowedTools" not in result:
        return result
    disallowed = check_string_list(result.pop("disallowedTools"))
    if not disallowed.ok or not disallowed.value:
        return result

    tools = result.get("tools")
    if tools is None:
        merged: dict[str, bool] = {}
    elif check_tools_map(tools).ok:
        merged = dict(tools)
    else:
        # hand-edited map with non-boolean values stays untouched
        return result

    for name in disallowed.value:
        merged[canonical_tool_name(name)] = False
    result["tools"] = merged
    return result


def migrate_steps(data: Frontmatter) -> Frontmatter:
    result = dict(data)
    steps = check_step_count(result.get("steps"))
    if steps.ok:
        result["steps"] = steps.value
        for key in LEGACY_STEP_KEYS:
            result.pop(key, None)
        return result

    candidates = [check_step_count(result.get(key)) for key in LEGACY_STEP_KEYS]
    counts = [c.value for c in candidates if c.ok]
    if not counts:
        return result
    result["steps"] = min(counts)
    for key in LEGACY_STEP_KEYS:
        result.pop(key, None)
    return result


def map_permission(data: Frontmatter) -> Frontmatter:
    """Keep a valid `permission` map, otherwise expand `permissionMode`."""
    result = dict(data)
    mode = result.pop("permissionMode", None)
    if "permission" in result:
        if check_permission(result["permission"]).ok:
            return result
        del result["permission"]
    if isinstance(mode, str):
        result["permission"] = dict(PERMISSION_MODES.get(mode, PERMISSION_MODES["default"]))
    return result


def map_hidden_flag(data: Frontmatter) -> Frontmatter:
    result = dict(data)
    values = [result[key] for key in HIDDEN_FLAG_KEYS if isinstance(result.get(key), bool)]
    if not values:
        return result
    # once either key carries a boolean, both spellings are consumed
    for key in HIDDEN_FLAG_KEYS:
        result.pop(key, None)
    if any(values):
        result["hidden"] = True
    return result


# Pipelines


def skill_rules() -> list[Rule]:
    return [normalize_model_field, map_context_fork]


def command_rules() -> list[Rule]:
    return [normalize_model_field]


def agent_rules(default_mode: str = DEFAULT_AGENT_MODE) -> list[Rule]:
    return [
        normalize_model_field,
        apply_mode(default_mode),
        preserve_name,
        apply_temperature,
        map_tools,
        merge_disallowed_tools,
        migrate_steps,
        map_permission,
        map_hidden_flag,
    ]


def run_rules(data: Frontmatter, rules: list[Rule]) -> Frontmatter:
    result = dict(data)
    for rule in rules:
        result = rule(result)
    return result
