"""CLI entry point for systematic."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import cast

from systematic import __version__
from systematic.config import get_config_paths, load_config
from systematic.converter.cache import convert_file_with_cache
from systematic.converter.engine import ConvertOptions, DocumentKind


def _cmd_convert(args: argparse.Namespace) -> None:
    path = cast(Path, args.file)
    config = load_config()
    mode = cast(str | None, args.mode) or config.default_agent_mode
    options = ConvertOptions(
        agent_mode=mode,  # type: ignore[arg-type]
        skip_body_transform=cast(bool, args.skip_body),
    )
    try:
        converted = convert_file_with_cache(path.resolve(), cast(str, args.kind), options)
    except FileNotFoundError:
        print(f"Error: file not found: {path}", file=sys.stderr)
        sys.exit(1)
    print(converted)


def _cmd_check_upstream(args: argparse.Namespace) -> None:
    from systematic.sync.check import run_upstream_check

    config = load_config()
    if args.manifest:
        config.manifest_path = cast(str, args.manifest)
    if args.source:
        config.upstream_source = cast(str, args.source)

    try:
        summary, exit_code = asyncio.run(run_upstream_check(config))
    except Exception as e:
        print(f"check-upstream failed: {e}", file=sys.stderr)
        sys.exit(2)
    print(summary.model_dump_json(indent=2))
    sys.exit(exit_code)


def _cmd_manifest(args: argparse.Namespace) -> None:
    from systematic.sync.manifest import (
        collect_local_keys,
        find_stale_entries,
        read_manifest,
        validate_manifest,
    )

    config = load_config()
    path = Path(cast(str | None, getattr(args, "manifest", None)) or config.manifest_path)
    action = cast(str | None, args.manifest_action)

    if action == "validate":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            print(f"Invalid: {path}: {e}", file=sys.stderr)
            sys.exit(1)
        if not validate_manifest(data):
            print(f"Invalid: {path} failed schema validation", file=sys.stderr)
            sys.exit(1)
        print(f"Valid: {path}")
    elif action == "stale":
        manifest = read_manifest(path)
        if manifest is None:
            print(f"Error: no usable manifest at {path}", file=sys.stderr)
            sys.exit(1)
        root = cast(Path | None, getattr(args, "root", None)) or path.parent
        for key in find_stale_entries(manifest, collect_local_keys(root)):
            print(key)
    else:
        print("Error: expected 'validate' or 'stale'", file=sys.stderr)
        sys.exit(1)


def _cmd_config(args: argparse.Namespace) -> None:
    paths = get_config_paths()
    if args.config_action == "path":
        print("Config file paths:")
        print(f"  User:    {paths.user_config}")
        print(f"  Project: {paths.project_config}")
        return

    config = load_config()
    shown = {k: v for k, v in vars(config).items() if k != "github_token"}
    shown["github_token"] = "set" if config.github_token else None
    print(json.dumps(shown, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="systematic",
        description="Convert Claude Code definitions to OpenCode and check upstream drift",
    )
    _ = parser.add_argument(
        "-V", "--version", action="version", version=f"systematic {__version__}"
    )
    _ = parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # convert subcommand
    convert_p = subparsers.add_parser("convert", help="Convert a definition file to stdout")
    _ = convert_p.add_argument("kind", choices=[k.value for k in DocumentKind])
    _ = convert_p.add_argument("file", type=Path, help="Path to the markdown definition")
    _ = convert_p.add_argument(
        "--mode", choices=["primary", "subagent"], default=None, help="Default agent mode"
    )
    _ = convert_p.add_argument(
        "--skip-body",
        action="store_true",
        dest="skip_body",
        help="Leave the body untouched",
    )

    # check-upstream subcommand
    check_p = subparsers.add_parser(
        "check-upstream", help="Compare the sync manifest against upstream (exit 0/1/2)"
    )
    _ = check_p.add_argument("--manifest", default=None, help="Path to sync-manifest.json")
    _ = check_p.add_argument("--source", default=None, help="Manifest source key to check")

    # manifest subcommand
    manifest_p = subparsers.add_parser("manifest", help="Sync manifest operations")
    manifest_sub = manifest_p.add_subparsers(dest="manifest_action")
    validate_p = manifest_sub.add_parser("validate", help="Validate manifest structure")
    _ = validate_p.add_argument("--manifest", default=None)
    stale_p = manifest_sub.add_parser("stale", help="List entries with no local definition")
    _ = stale_p.add_argument("--manifest", default=None)
    _ = stale_p.add_argument(
        "--root", type=Path, default=None, help="Repo root holding agents/, commands/, skills/"
    )

    # config subcommand
    config_p = subparsers.add_parser("config", help="Configuration management")
    _ = config_p.add_argument("config_action", choices=["show", "path"], nargs="?", default="show")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    dispatch = {
        "convert": _cmd_convert,
        "check-upstream": _cmd_check_upstream,
        "manifest": _cmd_manifest,
        "config": _cmd_config,
    }
    command = cast(str | None, args.command)
    handler = dispatch.get(command) if command is not None else None
    if handler:
        handler(args)
    else:
        parser.print_help()
        sys.exit(1)
