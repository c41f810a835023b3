"""Configuration for conversion and upstream sync checks."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from systematic.sync.fetch import RetryPolicy
from systematic.sync.upstream import DEFAULT_UPSTREAM_PREFIX

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "systematic.json"


def _safe_int(value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class SystematicConfig:
    manifest_path: str = "sync-manifest.json"
    upstream_source: str = "cep"
    upstream_prefix: str = DEFAULT_UPSTREAM_PREFIX
    default_agent_mode: str = "subagent"
    max_retries: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 10.0
    max_concurrent_fetches: int = 8
    github_token: str | None = None

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=max(1, self.max_retries),
            base_delay=self.retry_base_delay,
            max_delay=self.retry_max_delay,
        )


@dataclass(frozen=True)
class ConfigPaths:
    user_config: Path
    project_config: Path


def get_config_paths(project_dir: Path | None = None, home: Path | None = None) -> ConfigPaths:
    project_dir = project_dir or Path.cwd()
    home = home or Path.home()
    return ConfigPaths(
        user_config=home / ".config" / "opencode" / CONFIG_FILENAME,
        project_config=project_dir / ".opencode" / CONFIG_FILENAME,
    )


def _apply(config: SystematicConfig, data: dict[str, object]) -> None:
    for key in ("manifest_path", "upstream_source", "upstream_prefix", "github_token"):
        if isinstance(data.get(key), str):
            setattr(config, key, data[key])
    if data.get("default_agent_mode") in ("primary", "subagent"):
        config.default_agent_mode = data["default_agent_mode"]  # type: ignore[assignment]
    for key in ("max_retries", "max_concurrent_fetches"):
        value = data.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            setattr(config, key, value)
    for key in ("retry_base_delay", "retry_max_delay"):
        value = data.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            setattr(config, key, float(value))


def _load_file(config: SystematicConfig, path: Path) -> None:
    if not path.exists():
        return
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (ValueError, OSError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")
        return
    if isinstance(data, dict):
        _apply(config, data)
    else:
        logger.warning(f"Ignoring config at {path}: expected a JSON object")


def load_config(project_dir: Path | None = None, home: Path | None = None) -> SystematicConfig:
    """Defaults, then user config, then project config, then environment."""
    config = SystematicConfig()
    paths = get_config_paths(project_dir, home)
    _load_file(config, paths.user_config)
    _load_file(config, paths.project_config)

    if manifest := os.environ.get("SYSTEMATIC_MANIFEST"):
        config.manifest_path = manifest
    if source := os.environ.get("SYSTEMATIC_UPSTREAM_SOURCE"):
        config.upstream_source = source
    if (mode := os.environ.get("SYSTEMATIC_AGENT_MODE")) in ("primary", "subagent"):
        config.default_agent_mode = mode  # type: ignore[assignment]
    if retries := os.environ.get("SYSTEMATIC_MAX_RETRIES"):
        config.max_retries = _safe_int(retries, config.max_retries)
    if token := os.environ.get("GITHUB_TOKEN"):
        config.github_token = token
    return config
