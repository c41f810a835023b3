"""Converter: frontmatter parsing, field mapping and cached file conversion."""

from systematic.converter.cache import (
    ConverterCache,
    clear_converter_cache,
    convert_file_with_cache,
)
from systematic.converter.engine import (
    CONVERTER_VERSION,
    ConvertOptions,
    DocumentKind,
    convert_content,
    convert_frontmatter,
)
from systematic.converter.frontmatter import (
    ParsedDocument,
    format_frontmatter,
    parse_frontmatter,
    strip_frontmatter,
)

__all__ = [
    "CONVERTER_VERSION",
    "ConvertOptions",
    "ConverterCache",
    "DocumentKind",
    "ParsedDocument",
    "clear_converter_cache",
    "convert_content",
    "convert_file_with_cache",
    "convert_frontmatter",
    "format_frontmatter",
    "parse_frontmatter",
    "strip_frontmatter",
]
