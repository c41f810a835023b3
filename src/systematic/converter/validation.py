"""Validators for agent frontmatter values.

Each check returns a ``Validated`` result so mapping rules can branch on
``ok`` and use the normalised ``value`` without re-inspecting raw input.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")

AGENT_MODES = frozenset({"primary", "subagent", "all"})
PERMISSION_SETTINGS = frozenset({"allow", "ask", "deny"})
PERMISSION_KEYS = frozenset({"edit", "bash", "webfetch", "doom_loop", "external_directory"})


@dataclass(frozen=True)
class Validated(Generic[T]):
    ok: bool
    value: T | None = None


INVALID: Validated[Any] = Validated(ok=False)


def valid(value: T) -> Validated[T]:
    return Validated(ok=True, value=value)


def check_agent_mode(value: object) -> Validated[str]:
    if isinstance(value, str) and value in AGENT_MODES:
        return valid(value)
    return INVALID


def check_permission_setting(value: object) -> Validated[str]:
    if isinstance(value, str) and value in PERMISSION_SETTINGS:
        return valid(value)
    return INVALID


def _check_bash_permission(value: object) -> Validated[str | dict[str, str]]:
    setting = check_permission_setting(value)
    if setting.ok:
        return setting
    if isinstance(value, dict):
        commands: dict[str, str] = {}
        for command, raw in value.items():
            if not isinstance(command, str) or not check_permission_setting(raw).ok:
                return INVALID
            commands[command] = raw
        return valid(commands)
    return INVALID


def check_permission(value: object) -> Validated[dict[str, Any]]:
    """Accept a non-empty permission map whose keys and settings are all recognised."""
    if not isinstance(value, dict) or not value:
        return INVALID
    for key, setting in value.items():
        if key not in PERMISSION_KEYS:
            return INVALID
        check = _check_bash_permission(setting) if key == "bash" else check_permission_setting(setting)
        if not check.ok:
            return INVALID
    return valid(value)


def check_tools_map(value: object) -> Validated[dict[str, bool]]:
    if isinstance(value, dict) and all(isinstance(v, bool) for v in value.values()):
        return valid(value)
    return INVALID


def check_string_list(value: object) -> Validated[list[str]]:
    """Accept a list of strings or a comma-separated string of names."""
    if isinstance(value, str):
        return valid([part.strip() for part in value.split(",") if part.strip()])
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return valid(list(value))
    return INVALID


def check_step_count(value: object) -> Validated[int]:
    """Accept positive finite integers; integral floats are narrowed to int."""
    if isinstance(value, bool):
        return INVALID
    if isinstance(value, int):
        return valid(value) if value > 0 else INVALID
    if isinstance(value, float) and math.isfinite(value) and value.is_integer() and value > 0:
        return valid(int(value))
    return INVALID


def is_explicit_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
