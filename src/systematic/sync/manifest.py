"""Read, validate and write sync-manifest.json, the provenance record of vendored definitions."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from systematic.sync.models import WILDCARD_FIELD, ManifestDefinition, SyncManifest

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "sync-manifest.json"


def validate_manifest(value: object) -> bool:
    """Structural check only; `definition.source` is not required to exist in `sources`."""
    try:
        SyncManifest.model_validate(value)
    except ValidationError:
        return False
    return True


def read_manifest(path: Path | str) -> SyncManifest | None:
    """Return the manifest, or None if it is missing, not JSON, or structurally invalid."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError:
        return None
    except UnicodeDecodeError as e:
        logger.warning(f"{path.name}: not valid UTF-8 at {path}: {e}")
        return None

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"{path.name}: invalid JSON at {path}: {e}")
        return None

    try:
        return SyncManifest.model_validate(data)
    except ValidationError as e:
        logger.warning(f"{path.name}: schema validation failed at {path}: {e.error_count()} error(s)")
        return None


def _atomic_write(path: Path, content: str) -> None:
    fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            _ = f.write(content)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def dump_manifest(manifest: SyncManifest) -> str:
    """Deterministic JSON text: sorted keys, two-space indent, trailing newline."""
    data = manifest.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def write_manifest(path: Path | str, manifest: SyncManifest) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    _atomic_write(path, dump_manifest(manifest))


def find_stale_entries(manifest: SyncManifest, existing_keys: list[str]) -> list[str]:
    """Definition keys whose local files no longer exist. Reporting only."""
    existing = set(existing_keys)
    return [key for key in manifest.definitions if key not in existing]


def collect_local_keys(root: Path | str) -> list[str]:
    """Definition keys present on disk under root: agents/, commands/ and skills/."""
    root = Path(root)
    keys: set[str] = set()
    for category in ("agents", "commands"):
        category_dir = root / category
        if not category_dir.is_dir():
            continue
        for md_file in category_dir.rglob("*.md"):
            keys.add(md_file.relative_to(root).with_suffix("").as_posix())
    skills_dir = root / "skills"
    if skills_dir.is_dir():
        for skill_file in skills_dir.glob("*/SKILL.md"):
            keys.add(f"skills/{skill_file.parent.name}")
    return sorted(keys)


def list_definitions_by_source(manifest: SyncManifest, source: str) -> list[str]:
    return sorted(key for key, entry in manifest.definitions.items() if entry.source == source)


def get_upstream_hashes(manifest: SyncManifest, source: str) -> dict[str, str]:
    return {
        key: manifest.definitions[key].upstream_content_hash or ""
        for key in list_definitions_by_source(manifest, source)
    }


def has_wildcard_override(definition: ManifestDefinition) -> bool:
    return any(o.field == WILDCARD_FIELD for o in definition.manual_overrides or [])
