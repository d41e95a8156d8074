"""
Declarative config tables merged across the cascade.

Each root may carry `config/<group>.toml`. All copies of a group are loaded lowest
priority first and deep-merged, so the application overrides modules and
modules override the system defaults key by key.
"""

from __future__ import annotations

import copy
import logging
import sys
from pathlib import Path
from typing import Any

from cascadefs.errors import TableLoadError
from cascadefs.file_resolver import CascadeResolver
from cascadefs.modules import CONFIG_DIR

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

logger = logging.getLogger(__name__)


def load_table(path: Path) -> dict[str, Any]:
    """Parse one TOML table file."""
    try:
        return tomllib.loads(Path(path).read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise TableLoadError(f"Cannot parse table {path}: {e}", Path(path)) from e


def deep_merge(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two tables. Nested tables merge recursively; anything else
    (scalars, arrays) in `update` replaces the value in `base`.
    """
    result = base.copy()
    for key, value in update.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class ConfigRepository:
    """Loads and caches merged config groups from a resolver."""

    def __init__(self, resolver: CascadeResolver, category: str = CONFIG_DIR) -> None:
        self._resolver = resolver
        self._category = category
        self._groups: dict[str, dict[str, Any]] = {}

    def load(self, group: str) -> dict[str, Any]:
        """
        Merged table for `group`, as a copy the caller may modify. A group that
        no root defines is an empty table.
        """
        return copy.deepcopy(self._group(group))

    def _group(self, group: str) -> dict[str, Any]:
        if group not in self._groups:
            merged: dict[str, Any] = {}
            for match in self._resolver.resolve_merged(self._category, group, ["toml"]):
                logger.debug("Merging config %s from %s", group, match.path)
                merged = deep_merge(merged, load_table(match.path))
            self._groups[group] = merged
        return self._groups[group]

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key whose first segment is the group, e.g.
        `database.default.host` reads `host` from `[default]` in `database.toml`.
        """
        group, _, rest = key.partition(".")
        value: Any = self._group(group)
        for part in rest.split(".") if rest else ():
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return copy.deepcopy(value)
