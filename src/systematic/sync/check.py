"""Upstream pre-check: decide whether vendored definitions need a sync."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from systematic.config import SystematicConfig
from systematic.converter.engine import CONVERTER_VERSION
from systematic.sync.fetch import FetchFn, create_fetch, fetch_upstream_data
from systematic.sync.manifest import list_definitions_by_source, read_manifest
from systematic.sync.models import CheckSummary
from systematic.sync.upstream import (
    EXIT_ERROR,
    EXIT_OK,
    compute_check_summary,
    get_exit_code,
    get_required_upstream_content_paths,
)

logger = logging.getLogger(__name__)


async def run_upstream_check(
    config: SystematicConfig,
    *,
    project_dir: Path | None = None,
    fetch_fn: FetchFn | None = None,
    converter_version: int = CONVERTER_VERSION,
) -> tuple[CheckSummary, int]:
    """Fetch upstream state for the configured source and summarise differences.

    Returns the summary and the process exit code (0 no changes, 1 changes,
    2 errors).
    """
    manifest_path = Path(config.manifest_path)
    if project_dir is not None and not manifest_path.is_absolute():
        manifest_path = project_dir / manifest_path

    manifest = read_manifest(manifest_path)
    if manifest is None:
        # without a manifest there is no upstream to compare against
        logger.info(f"No usable manifest at {manifest_path}; nothing tracked yet")
        return CheckSummary(), EXIT_OK

    source = manifest.sources.get(config.upstream_source)
    if source is None:
        summary = CheckSummary(errors=[f"Unknown upstream source: {config.upstream_source}"])
        return summary, EXIT_ERROR

    # only definitions vendored from this source are compared against its repo
    owned = set(list_definitions_by_source(manifest, config.upstream_source))
    scoped = manifest.model_copy(
        update={"definitions": {k: d for k, d in manifest.definitions.items() if k in owned}}
    )
    required = get_required_upstream_content_paths(scoped, list(scoped.definitions))

    if fetch_fn is not None:
        result = await fetch_upstream_data(
            source.repo,
            source.branch,
            required,
            fetch_fn,
            policy=config.retry_policy(),
            prefix=config.upstream_prefix,
            max_concurrency=config.max_concurrent_fetches,
        )
    else:
        async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
            result = await fetch_upstream_data(
                source.repo,
                source.branch,
                required,
                create_fetch(client, config.github_token),
                policy=config.retry_policy(),
                prefix=config.upstream_prefix,
                max_concurrency=config.max_concurrent_fetches,
            )

    # keys tracked under another source are neither new nor changed here
    upstream_keys = [k for k in result.definition_keys if k in owned or k not in manifest.definitions]
    summary = compute_check_summary(
        scoped,
        upstream_keys,
        result.contents,
        converter_version,
        tree_paths=result.tree_paths,
        prefix=config.upstream_prefix,
    )
    return summary, get_exit_code(summary, result.had_error)
