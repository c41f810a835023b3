"""Fetch the upstream tree and definition contents from the GitHub REST API."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import httpx

from systematic.sync.models import FetchResult
from systematic.sync.upstream import DEFAULT_UPSTREAM_PREFIX, to_definition_key

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
DEFAULT_MAX_CONCURRENCY = 8

FetchFn = Callable[[str], Awaitable[httpx.Response]]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    retry_statuses: frozenset[int] = field(default_factory=lambda: frozenset({403, 429}))

    def should_retry(self, response: httpx.Response) -> bool:
        return response.status_code in self.retry_statuses

    def delay(self, attempt: int, response: httpx.Response | None = None) -> float:
        """Honour Retry-After when present, else exponential backoff; both capped."""
        if response is not None:
            retry_after = response.headers.get("retry-after")
            if retry_after is not None:
                try:
                    return min(float(int(retry_after)), self.max_delay)
                except ValueError:
                    pass
        return min(self.base_delay * 2 ** (attempt - 1), self.max_delay)


@dataclass
class RetryOutcome:
    response: httpx.Response | None
    had_error: bool


async def fetch_with_retry(
    url: str,
    fetch_fn: FetchFn,
    policy: RetryPolicy | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> RetryOutcome:
    """Call fetch_fn, retrying retryable statuses and transport errors up to max_attempts."""
    policy = policy or RetryPolicy()
    response: httpx.Response | None = None
    for attempt in range(1, policy.max_attempts + 1):
        try:
            response = await fetch_fn(url)
        except httpx.TransportError as e:
            logger.debug(f"Transport error fetching {url} (attempt {attempt}): {e}")
            response = None
            if attempt == policy.max_attempts:
                logger.warning(f"Giving up on {url} after {attempt} attempts: {e}")
                return RetryOutcome(response=None, had_error=True)
            await sleep(policy.delay(attempt))
            continue

        if response.is_success:
            return RetryOutcome(response=response, had_error=False)
        if not policy.should_retry(response):
            return RetryOutcome(response=response, had_error=True)
        if attempt == policy.max_attempts:
            logger.warning(
                f"Giving up on {url} after {attempt} attempts (HTTP {response.status_code})"
            )
            return RetryOutcome(response=response, had_error=True)
        logger.debug(f"HTTP {response.status_code} from {url}, retrying (attempt {attempt})")
        await sleep(policy.delay(attempt, response))

    return RetryOutcome(response=response, had_error=True)


def tree_url(repo: str, branch: str) -> str:
    return f"{GITHUB_API}/repos/{repo}/git/trees/{branch}?recursive=1"


def content_url(repo: str, branch: str, path: str) -> str:
    return f"{GITHUB_API}/repos/{repo}/contents/{path}?ref={branch}"


def parse_tree_paths(payload: object) -> list[str]:
    """Blob paths from a git trees API payload; anything malformed yields []."""
    if not isinstance(payload, dict):
        return []
    tree = payload.get("tree")
    if not isinstance(tree, list):
        return []
    return [
        item["path"]
        for item in tree
        if isinstance(item, dict) and item.get("type") == "blob" and isinstance(item.get("path"), str)
    ]


def decode_content(payload: object) -> str | None:
    if not isinstance(payload, dict) or not isinstance(payload.get("content"), str):
        return None
    try:
        return base64.b64decode(payload["content"]).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None


async def _fetch_content(
    repo: str,
    branch: str,
    path: str,
    fetch_fn: FetchFn,
    policy: RetryPolicy,
    sleep: SleepFn,
) -> tuple[str, str | None, bool]:
    """Returns (path, decoded content or None, had_error). A 404 is not an error."""
    outcome = await fetch_with_retry(content_url(repo, branch, path), fetch_fn, policy, sleep)
    response = outcome.response
    if outcome.had_error or response is None:
        is_missing = response is not None and response.status_code == 404
        return path, None, not is_missing

    try:
        payload = response.json()
    except ValueError:
        logger.warning(f"Non-JSON content response for {path}")
        return path, None, True
    content = decode_content(payload)
    if content is None:
        logger.warning(f"Undecodable content payload for {path}")
        return path, None, True
    return path, content, False


async def fetch_upstream_data(
    repo: str,
    branch: str,
    paths: list[str],
    fetch_fn: FetchFn,
    policy: RetryPolicy | None = None,
    prefix: str = DEFAULT_UPSTREAM_PREFIX,
    sleep: SleepFn = asyncio.sleep,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> FetchResult:
    """List the remote tree once, then fetch the requested contents.

    At most max_concurrency content requests are in flight at a time.
    """
    policy = policy or RetryPolicy()
    limit = asyncio.Semaphore(max(1, max_concurrency))

    tree = await fetch_with_retry(tree_url(repo, branch), fetch_fn, policy, sleep)
    if tree.had_error or tree.response is None:
        return FetchResult(had_error=True)
    try:
        tree_paths = parse_tree_paths(tree.response.json())
    except ValueError:
        logger.warning(f"Non-JSON tree response for {repo}@{branch}")
        return FetchResult(had_error=True)

    keys = {key for key in (to_definition_key(p, prefix) for p in tree_paths) if key is not None}

    async def bounded(path: str) -> tuple[str, str | None, bool]:
        async with limit:
            return await _fetch_content(repo, branch, path, fetch_fn, policy, sleep)

    results = await asyncio.gather(*(bounded(path) for path in paths))
    contents = {path: content for path, content, _ in results if content is not None}
    had_error = any(error for _, _, error in results)

    return FetchResult(
        definition_keys=sorted(keys),
        contents=contents,
        tree_paths=tree_paths,
        had_error=had_error,
    )


def create_fetch(client: httpx.AsyncClient, token: str | None = None) -> FetchFn:
    """Build a fetch function over client, authenticating when a token is given."""
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"

    async def fetch(url: str) -> httpx.Response:
        return await client.get(url, headers=headers)

    return fetch
