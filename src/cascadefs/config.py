"""
Settings files for the cascadefs command.

The nearest `.cascadefs.toml`, `cascadefs.toml` or `pyproject.toml` with a
`[tool.cascadefs]` table, looking upward from the working directory, supplies
defaults for any setting not passed as a command-line flag.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

from cascadefs.errors import InvalidConfigurationError

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]


@dataclass
class CascadeSettings:
    """Values read from a settings file. `None` means the file leaves it unset."""

    # Search roots, highest priority first
    roots: list[str] | None = None
    # Lookup
    merge_categories: list[str] | None = None
    extensions: list[str] | None = None
    caching: bool | None = None
    # Enumeration
    ignore: list[str] | None = None
    extend_ignore: list[str] | None = None
    respect_ignore_files: bool | None = None
    # Diagnostics
    log_level: str | None = None


_PYPROJECT = "pyproject.toml"

# Checked in this order in each directory, nearest directory first.
_CONFIG_FILENAMES = (".cascadefs.toml", "cascadefs.toml", _PYPROJECT)

# TOML keys are kebab-case; the section a key sits in does not matter.
_FIELD_FOR_KEY: dict[str, str] = {
    f.name.replace("_", "-"): f.name for f in fields(CascadeSettings)
}

_LIST_FIELDS = {"roots", "merge_categories", "extensions", "ignore", "extend_ignore"}
_BOOL_FIELDS = {"caching", "respect_ignore_files"}
_STR_FIELDS = {"log_level"}


def find_config_file(start_dir: Path) -> Path | None:
    """
    Nearest settings file at or above `start_dir`, or `None`. Within one
    directory `.cascadefs.toml` wins over `cascadefs.toml`, which wins over a
    `pyproject.toml` carrying a `[tool.cascadefs]` table.
    """
    current = start_dir.resolve()
    for directory in (current, *current.parents):
        for filename in _CONFIG_FILENAMES:
            candidate = directory / filename
            if not candidate.is_file():
                continue
            if filename != _PYPROJECT or _read_tool_section(candidate) is not None:
                return candidate
    return None


def _read_tool_section(pyproject: Path) -> dict[str, Any] | None:
    """The `[tool.cascadefs]` table of a pyproject file, if it parses and has one."""
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError):
        return None
    section = data.get("tool", {}).get("cascadefs")
    return cast(dict[str, Any], section) if isinstance(section, dict) else None


def load_config(config_path: Path) -> CascadeSettings:
    """
    Read settings from `config_path`. For `pyproject.toml` only the
    `[tool.cascadefs]` table is used. Relative roots are taken relative to the
    directory holding the file.
    """
    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidConfigurationError(f"Cannot read settings file {config_path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise InvalidConfigurationError(f"Invalid settings file {config_path}: {e}") from e

    if config_path.name == _PYPROJECT:
        data = data.get("tool", {}).get("cascadefs", {})

    settings = _parse_config_data(data)
    if settings.roots is not None:
        base = config_path.resolve().parent
        settings.roots = [str(base / Path(root).expanduser()) for root in settings.roots]
    return settings


def _items(data: dict[str, Any]) -> list[tuple[str, Any]]:
    """Top-level keys plus the keys of every sub-table, e.g. `[lookup]`."""
    items: list[tuple[str, Any]] = []
    for key, value in data.items():
        if isinstance(value, dict):
            items.extend(cast(dict[str, Any], value).items())
        else:
            items.append((key, value))
    return items


def _check_type(key: str, name: str, value: Any) -> None:
    if name in _LIST_FIELDS:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise InvalidConfigurationError(f"Setting {key!r} must be a list of strings")
    elif name in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise InvalidConfigurationError(f"Setting {key!r} must be true or false")
    elif name in _STR_FIELDS and not isinstance(value, str):
        raise InvalidConfigurationError(f"Setting {key!r} must be a string")


def _parse_config_data(data: dict[str, Any]) -> CascadeSettings:
    """Build settings from a TOML document, flat or split into sections."""
    values: dict[str, Any] = {}
    for key, value in _items(data):
        name = _FIELD_FOR_KEY.get(key.replace("_", "-"))
        if name is None:
            continue  # unknown keys are tolerated
        _check_type(key, name, value)
        values[name] = value
    return CascadeSettings(**values)


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: CascadeSettings | None,
    explicit_flags: set[str],
) -> _T:
    """
    Copy every value set in `config` onto `cli_opts`, except for the settings
    named in `explicit_flags`, which were given on the command line and win.
    """
    if config is None:
        return cli_opts
    for name, value in vars(config).items():
        if value is not None and name not in explicit_flags and hasattr(cli_opts, name):
            setattr(cli_opts, name, value)
    return cli_opts
