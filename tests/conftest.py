"""Shared fixtures for systematic tests."""

import hashlib

import pytest

AGENT_KEY = "agents/review/security-sentinel"
AGENT_PATH = "plugins/compound-engineering/agents/review/security-sentinel.md"
SKILL_KEY = "skills/agent-native-architecture"
SKILL_DIR = "plugins/compound-engineering/skills/agent-native-architecture"


def sha256(content: str) -> str:
    return hashlib.sha256(content.encode()).hexdigest()


def make_definition(**overrides) -> dict:
    """Build a minimal valid manifest definition entry."""
    entry = {
        "source": "cep",
        "upstream_path": AGENT_PATH,
        "upstream_commit": "abc123",
        "synced_at": "2026-02-15T00:00:00Z",
        "notes": "test",
    }
    entry.update(overrides)
    return entry


def make_manifest_data(definitions: dict | None = None, converter_version: int | None = 2) -> dict:
    """Build raw manifest JSON data with a single `cep` source."""
    data: dict = {
        "sources": {
            "cep": {
                "repo": "EveryInc/compound-engineering-plugin",
                "branch": "main",
                "url": "https://github.com/EveryInc/compound-engineering-plugin",
            }
        },
        "definitions": definitions
        if definitions is not None
        else {AGENT_KEY: make_definition(upstream_content_hash=sha256("agent"))},
    }
    if converter_version is not None:
        data["converter_version"] = converter_version
    return data


@pytest.fixture
def manifest_data() -> dict:
    return make_manifest_data()
