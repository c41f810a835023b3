"""Compare upstream definitions against the sync manifest.

Pure functions over already-fetched data: path-to-key mapping, the set of
content paths a check needs, content hashing and the resulting summary.
Network access lives in ``systematic.sync.fetch``.
"""

from __future__ import annotations

import hashlib

from systematic.sync.manifest import has_wildcard_override
from systematic.sync.models import CheckSummary, ManifestDefinition, SyncManifest

DEFAULT_UPSTREAM_PREFIX = "plugins/compound-engineering/"
DEFINITION_CATEGORIES = ("agents", "commands")
SKILL_ENTRY_FILE = "SKILL.md"

EXIT_OK = 0
EXIT_CHANGES = 1
EXIT_ERROR = 2


def hash_content(content: str) -> str:
    return hashlib.sha256(content.encode()).hexdigest()


def join_upstream_path(base: str, file: str) -> str:
    return f"{base.rstrip('/')}/{file}"


def _strip_md(name: str) -> str | None:
    return name[: -len(".md")] if name.endswith(".md") and len(name) > 3 else None


def to_definition_key(path: str, prefix: str = DEFAULT_UPSTREAM_PREFIX) -> str | None:
    """Map an upstream repo path to a manifest key such as `agents/review/x`.

    Nested skill resources (anything below `skills/<name>/` other than its
    SKILL.md) map to None; they are reached through the owning definition's
    `files` list.
    """
    if not path.startswith(prefix):
        return None
    rest = path[len(prefix) :]
    parts = rest.split("/")
    category = parts[0]

    if category in DEFINITION_CATEGORIES and len(parts) >= 2:
        stem = _strip_md(rest)
        return stem if stem and not stem.endswith("/") else None

    if category == "skills":
        if len(parts) == 2:
            stem = _strip_md(parts[1])
            return f"skills/{stem}" if stem else None
        if len(parts) == 3 and parts[2] == SKILL_ENTRY_FILE:
            return f"skills/{parts[1]}"

    return None


def get_required_upstream_content_paths(
    manifest: SyncManifest,
    upstream_definition_keys: list[str],
) -> list[str]:
    """Content paths to fetch for tracked definitions, in manifest-declared order."""
    paths: dict[str, None] = {}
    upstream = set(upstream_definition_keys)
    for key, entry in manifest.definitions.items():
        if key not in upstream:
            continue
        if entry.files:
            for file in entry.files:
                paths[join_upstream_path(entry.upstream_path, file)] = None
        else:
            paths[entry.upstream_path] = None
    return list(paths)


def _missing_content_error(path: str) -> str:
    return (
        "Missing upstream content (may be a transient fetch failure "
        f"or the file was removed upstream): {path}"
    )


def compute_entry_hash(
    entry: ManifestDefinition,
    upstream_contents: dict[str, str],
    errors: list[str],
) -> str | None:
    """Hash one definition's upstream content; None (and an error) if any part is missing.

    Multi-file definitions hash the concatenation of their files in the order
    the manifest lists them.
    """
    if not entry.files:
        content = upstream_contents.get(entry.upstream_path)
        if content is None:
            errors.append(_missing_content_error(entry.upstream_path))
            return None
        return hash_content(content)

    parts: list[str] = []
    missing = False
    for file in entry.files:
        path = join_upstream_path(entry.upstream_path, file)
        content = upstream_contents.get(path)
        if content is None:
            errors.append(_missing_content_error(path))
            missing = True
            continue
        parts.append(content)
    if missing:
        return None
    return hash_content("".join(parts))


def collect_new_upstream_files(
    tree_paths: list[str],
    new_keys: list[str],
    prefix: str = DEFAULT_UPSTREAM_PREFIX,
) -> dict[str, list[str]]:
    """Files belonging to each newly-appeared definition, relative to its directory."""
    tree = set(tree_paths)
    result: dict[str, list[str]] = {}
    for key in new_keys:
        if key.startswith("skills/"):
            skill_dir = f"{prefix}{key}/"
            files = sorted(p[len(skill_dir) :] for p in tree_paths if p.startswith(skill_dir))
            if files:
                result[key] = files
                continue
        file_path = f"{prefix}{key}.md"
        if file_path in tree:
            result[key] = [f"{key.rsplit('/', 1)[-1]}.md"]
    return result


def compute_check_summary(
    manifest: SyncManifest,
    upstream_definition_keys: list[str],
    upstream_contents: dict[str, str],
    converter_version: int,
    tree_paths: list[str] | None = None,
    prefix: str = DEFAULT_UPSTREAM_PREFIX,
) -> CheckSummary:
    summary = CheckSummary()
    upstream = set(upstream_definition_keys)

    summary.new_upstream = [k for k in upstream_definition_keys if k not in manifest.definitions]

    for key, entry in manifest.definitions.items():
        if key not in upstream:
            summary.deletions.append(key)
            continue
        if has_wildcard_override(entry):
            summary.skipped.append(key)
            continue
        current = compute_entry_hash(entry, upstream_contents, summary.errors)
        if current is None:
            continue
        if current != (entry.upstream_content_hash or ""):
            summary.hash_changes.append(key)

    if tree_paths:
        summary.new_upstream_files = collect_new_upstream_files(tree_paths, summary.new_upstream, prefix)

    summary.converter_version_changed = (
        manifest.converter_version is not None and manifest.converter_version != converter_version
    )
    return summary


def has_changes(summary: CheckSummary) -> bool:
    return bool(
        summary.hash_changes
        or summary.new_upstream
        or summary.deletions
        or summary.converter_version_changed
    )


def get_exit_code(summary: CheckSummary, had_fetch_error: bool) -> int:
    """0 nothing to do, 1 sync needed, 2 needs investigation."""
    if had_fetch_error or summary.errors:
        return EXIT_ERROR
    return EXIT_CHANGES if has_changes(summary) else EXIT_OK
