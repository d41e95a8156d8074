#!/usr/bin/env python3
"""
cascadefs: Look up files in a cascading filesystem

Common usage:
  cascadefs --root app --root modules/auth --root system find views user/profile --ext html
  cascadefs find config database --all
  cascadefs list i18n --sort
  cascadefs roots

Search roots are listed highest priority first. Without --root, roots come from
`.cascadefs.toml`, `cascadefs.toml` or `[tool.cascadefs]` in `pyproject.toml`,
searched upward from the current directory.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import cast

from cascadefs.config import find_config_file, load_config, merge_cli_with_config
from cascadefs.errors import (
    CascadeIOError,
    InvalidConfigurationError,
    InvalidPathError,
)
from cascadefs.file_resolver import (
    DEFAULT_EXTENSIONS,
    DEFAULT_MERGE_CATEGORIES,
    CascadeResolver,
    ResolverConfig,
)

logger = logging.getLogger(__name__)


@dataclass
class Options:
    """Command-line options for the cascadefs tool."""

    command: str | None
    category: str | None
    path: str | None
    all: bool
    sort: bool
    version: bool
    verbose: int
    # Extensions passed on the command line; `list` filters by these only
    ext_filter: list[str] | None
    # Settings that may also come from a settings file
    roots: list[str] | None
    ignore: list[str] | None
    extend_ignore: list[str] | None
    merge_categories: list[str] | None
    extensions: list[str] | None
    caching: bool | None
    respect_ignore_files: bool | None
    log_level: str | None


# Options fields that a settings file may supply when not given on the command line.
_SETTING_FIELDS = (
    "roots",
    "ignore",
    "extend_ignore",
    "merge_categories",
    "extensions",
    "caching",
    "respect_ignore_files",
)


def _build_parser() -> argparse.ArgumentParser:
    # Use the module's docstring as the description
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        prog="cascadefs",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    # Setting flags default to None so we can tell which were explicitly passed.
    parser.add_argument(
        "-r",
        "--root",
        action="append",
        dest="roots",
        default=None,
        metavar="DIR",
        help="Search root, highest priority first. Can be repeated",
    )
    parser.add_argument(
        "--ignore",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Replace all default ignore patterns. Can be repeated",
    )
    parser.add_argument(
        "--extend-ignore",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Add to default ignore patterns (e.g., '*.bak'). Can be repeated",
    )
    parser.add_argument(
        "--merge-category",
        action="append",
        dest="merge_categories",
        default=None,
        metavar="NAME",
        help=f"Category whose files merge across roots (default: {', '.join(DEFAULT_MERGE_CATEGORIES)})."
        " Can be repeated",
    )
    parser.add_argument(
        "-e",
        "--ext",
        action="append",
        dest="extensions",
        default=None,
        metavar="EXT",
        help=f"Extension to try or filter by (default for find: {', '.join(DEFAULT_EXTENSIONS)})."
        " Can be repeated",
    )
    parser.add_argument(
        "--no-cache",
        action="store_const",
        const=False,
        dest="caching",
        default=None,
        help="Disable the lookup cache",
    )
    parser.add_argument(
        "--no-ignore-files",
        action="store_const",
        const=False,
        dest="respect_ignore_files",
        default=None,
        help="Disable per-root .cascadeignore files",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log more detail (-v for info, -vv for debug)",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    find = subparsers.add_parser("find", help="Resolve a resource to a file")
    find.add_argument("category", help="Category directory (views, config, i18n, ...)")
    find.add_argument("path", help="Resource path inside the category")
    find.add_argument(
        "-a",
        "--all",
        action="store_true",
        help="Print every match, lowest priority first",
    )

    list_cmd = subparsers.add_parser("list", help="List all files in a category")
    list_cmd.add_argument("category", help="Category directory (views, config, i18n, ...)")
    list_cmd.add_argument("--sort", action="store_true", help="Sort by relative path")

    subparsers.add_parser("roots", help="Print the search roots in priority order")
    return parser


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns a tuple of (options, explicit_flags) where `explicit_flags` tracks
    which settings the user explicitly passed (for settings file precedence).
    """
    opts = _build_parser().parse_args(args)

    explicit_flags = {name for name in _SETTING_FIELDS if getattr(opts, name) is not None}

    return (
        Options(
            command=opts.command,
            category=getattr(opts, "category", None),
            path=getattr(opts, "path", None),
            all=getattr(opts, "all", False),
            sort=getattr(opts, "sort", False),
            version=opts.version,
            verbose=opts.verbose,
            ext_filter=opts.extensions,
            roots=opts.roots,
            ignore=opts.ignore,
            extend_ignore=opts.extend_ignore,
            merge_categories=opts.merge_categories,
            extensions=opts.extensions,
            caching=opts.caching,
            respect_ignore_files=opts.respect_ignore_files,
            log_level=None,
        ),
        explicit_flags,
    )


def _configure_logging(options: Options) -> None:
    if options.verbose >= 2:
        level = logging.DEBUG
    elif options.verbose == 1:
        level = logging.INFO
    elif options.log_level:
        level = logging.getLevelName(options.log_level.upper())
        if not isinstance(level, int):
            raise InvalidConfigurationError(f"Unknown log level: {options.log_level}")
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _resolver_config(options: Options) -> ResolverConfig:
    config = ResolverConfig(roots=list(options.roots or []))
    if options.ignore is not None:
        config.ignore = options.ignore
    if options.extend_ignore is not None:
        config.extend_ignore = options.extend_ignore
    if options.merge_categories is not None:
        config.merge_categories = options.merge_categories
    if options.extensions is not None:
        config.extensions = options.extensions
    if options.caching is not None:
        config.caching = options.caching
    if options.respect_ignore_files is not None:
        config.respect_ignore_files = options.respect_ignore_files
    return config


def _run(options: Options, resolver: CascadeResolver) -> int:
    if options.command == "roots":
        for index, root in enumerate(resolver.roots):
            print(f"{index}\t{root}")
        return 0

    # argparse requires `category` for list and find, and `path` for find.
    category = cast(str, options.category)

    if options.command == "list":
        files = resolver.list_files(category, options.ext_filter, sort=options.sort)
        for key, path in files.items():
            print(f"{key}\t{path}")
        return 0

    path = cast(str, options.path)

    if options.all:
        matches = resolver.resolve_all(category, path)
        if not matches:
            print(f"Error: Not found: {category}/{path}", file=sys.stderr)
            return 1
        for match in matches:
            print(match.path)
        return 0

    match = resolver.resolve_one(category, path)
    if match is None:
        print(f"Error: Not found: {category}/{path}", file=sys.stderr)
        return 1
    print(match.path)
    return 0


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the cascadefs CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, 1 for not found or bad input, 2 for
        configuration and I/O errors)
    """
    options, explicit_flags = _parse_args(args)

    # Display version information if requested
    if options.version:
        try:
            version = importlib.metadata.version("cascadefs")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    if options.command is None:
        print(
            "Error: No command specified. Use find, list or roots (--help for more options).",
            file=sys.stderr,
        )
        return 1

    try:
        # Load and merge settings file values
        config_path = find_config_file(Path.cwd())
        if config_path:
            merge_cli_with_config(options, load_config(config_path), explicit_flags)

        _configure_logging(options)
        if config_path:
            logger.info("Using settings from %s", config_path)

        resolver = CascadeResolver(_resolver_config(options))
        return _run(options, resolver)
    except InvalidPathError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (InvalidConfigurationError, CascadeIOError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
