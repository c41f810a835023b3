"""Pydantic models for the sync manifest and upstream check results."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

WILDCARD_FIELD = "*"


class ManifestSource(BaseModel):
    repo: StrictStr
    branch: StrictStr
    url: StrictStr


class ManualOverride(BaseModel):
    # field == "*" marks the whole definition as locally owned
    field: StrictStr
    reason: StrictStr
    overridden_at: StrictStr
    original: StrictStr | None = None


class ManifestDefinition(BaseModel):
    model_config = ConfigDict(extra="allow")

    source: StrictStr
    upstream_path: StrictStr
    upstream_commit: StrictStr
    synced_at: StrictStr
    notes: StrictStr
    files: list[StrictStr] | None = None
    upstream_content_hash: StrictStr | None = None
    manual_overrides: list[ManualOverride] | None = None


class SyncManifest(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    schema_ref: StrictStr | None = Field(default=None, alias="$schema")
    converter_version: StrictInt | None = None
    sources: dict[str, ManifestSource]
    definitions: dict[str, ManifestDefinition]


class CheckSummary(BaseModel):
    hash_changes: list[str] = Field(default_factory=list)
    new_upstream: list[str] = Field(default_factory=list)
    new_upstream_files: dict[str, list[str]] = Field(default_factory=dict)
    deletions: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    converter_version_changed: bool = False


class FetchResult(BaseModel):
    definition_keys: list[str] = Field(default_factory=list)
    contents: dict[str, str] = Field(default_factory=dict)
    tree_paths: list[str] = Field(default_factory=list)
    had_error: bool = False
