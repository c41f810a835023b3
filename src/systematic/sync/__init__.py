"""Sync: provenance manifest and upstream change detection."""

from systematic.sync.manifest import (
    find_stale_entries,
    read_manifest,
    validate_manifest,
    write_manifest,
)
from systematic.sync.models import (
    CheckSummary,
    FetchResult,
    ManifestDefinition,
    ManifestSource,
    ManualOverride,
    SyncManifest,
)
from systematic.sync.upstream import (
    compute_check_summary,
    get_exit_code,
    get_required_upstream_content_paths,
    has_changes,
    to_definition_key,
)

__all__ = [
    "CheckSummary",
    "FetchResult",
    "ManifestDefinition",
    "ManifestSource",
    "ManualOverride",
    "SyncManifest",
    "compute_check_summary",
    "find_stale_entries",
    "get_exit_code",
    "get_required_upstream_content_paths",
    "has_changes",
    "read_manifest",
    "to_definition_key",
    "validate_manifest",
    "write_manifest",
]
