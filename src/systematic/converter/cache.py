"""In-memory cache of file conversions keyed on path, options and mtime."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from systematic.converter.engine import (
    CONVERTER_VERSION,
    ConvertOptions,
    DocumentKind,
    convert_content,
)

logger = logging.getLogger(__name__)

CacheKey = tuple[int, str, str, str | None, str | None, bool]


@dataclass
class _CacheEntry:
    mtime_ns: int
    converted: str


class ConverterCache:
    """Process-lifetime cache; not safe for concurrent writers."""

    def __init__(self, converter_version: int = CONVERTER_VERSION) -> None:
        self._converter_version = converter_version
        self._entries: dict[CacheKey, _CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def _key(self, path: Path, kind: DocumentKind, options: ConvertOptions) -> CacheKey:
        return (
            self._converter_version,
            str(path),
            str(kind),
            options.source,
            options.agent_mode,
            options.skip_body_transform,
        )

    def get_or_convert(
        self,
        path: Path | str,
        kind: DocumentKind | str,
        options: ConvertOptions | None = None,
    ) -> str:
        """Return the converted file, recomputing only when its mtime changed.

        Raises FileNotFoundError if the file does not exist.
        """
        path = Path(path)
        kind = DocumentKind(kind)
        options = options or ConvertOptions()

        mtime_ns = path.stat().st_mtime_ns
        key = self._key(path, kind, options)
        cached = self._entries.get(key)
        if cached is not None and cached.mtime_ns == mtime_ns:
            logger.debug(f"Converter cache hit for {path}")
            return cached.converted

        converted = convert_content(path.read_text(encoding="utf-8"), kind, options)
        self._entries[key] = _CacheEntry(mtime_ns=mtime_ns, converted=converted)
        return converted


_default_cache = ConverterCache()


def convert_file_with_cache(
    path: Path | str,
    kind: DocumentKind | str,
    options: ConvertOptions | None = None,
    cache: ConverterCache | None = None,
) -> str:
    # an empty cache is falsy, so compare against None explicitly
    target = cache if cache is not None else _default_cache
    return target.get_or_convert(path, kind, options)


def clear_converter_cache() -> None:
    _default_cache.clear()
