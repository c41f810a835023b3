"""systematic: convert Claude Code definitions to OpenCode and track their upstream provenance."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("systematic")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
