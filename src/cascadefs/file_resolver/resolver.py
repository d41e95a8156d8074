"""
CascadeResolver: main entry point for cascading filesystem lookups.

Search roots are overlaid in priority order (application, modules, system), so a
file in a higher root overrides the file with the same relative path in a lower
one. Mergeable categories (config, i18n) instead return every match, lowest
priority first, for a left-to-right merge.
"""

from __future__ import annotations

import logging
import os
import stat
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from cascadefs.errors import CascadeIOError, InvalidConfigurationError
from cascadefs.file_resolver.ignore import IgnoreRules, load_root_ignore
from cascadefs.file_resolver.types import (
    FileMatch,
    ResolverConfig,
    ResourceQuery,
    normalize_extension,
    normalize_resource_path,
)

logger = logging.getLogger(__name__)

_ONE = "one"
_ALL = "all"

# Distinguishes "not cached" from a cached miss (`None`).
_MISSING = object()

_CacheValue = FileMatch | tuple[FileMatch, ...] | None


def _absolute(root: str | Path) -> Path:
    return Path(os.path.abspath(os.path.expanduser(os.fspath(root))))


def _extension(name: str) -> str:
    return normalize_extension(PurePosixPath(name).suffix)


@dataclass
class _Walk:
    """State shared by one `list_files` walk over a single root."""

    category: str
    root_index: int
    ignore: IgnoreRules
    allowed: frozenset[str] | None
    found: dict[str, Path]


class CascadeResolver:
    """
    Resolves logical resource paths against an ordered list of search roots,
    highest priority first.

    Lookups are cached per resolver for its whole lifetime (misses included), so
    the filesystem is assumed not to change once caching is enabled. The cache
    is safe to share between threads; the directory walks themselves are not
    serialized.
    """

    def __init__(self, config: ResolverConfig) -> None:
        if not config.roots:
            raise InvalidConfigurationError("At least one search root is required")
        self._config: ResolverConfig = config
        self._roots: tuple[Path, ...] = tuple(_absolute(root) for root in config.roots)
        self._extensions: tuple[str, ...] = config.effective_extensions
        self._merge_categories: frozenset[str] = frozenset(
            category.replace("\\", "/").strip("/") for category in config.merge_categories
        )
        self._ignore: IgnoreRules = IgnoreRules(config.effective_ignore)
        # Ignore rules per root index, including that root's `.cascadeignore`.
        self._root_ignore_cache: dict[int, IgnoreRules] = {}
        self._cache: dict[tuple[ResourceQuery, str], _CacheValue] = {}
        self._lock = threading.Lock()

        for index, root in enumerate(self._roots):
            info = self._stat(root, index)
            if info is not None and not stat.S_ISDIR(info.st_mode):
                logger.warning("Search root #%d is not a directory: %s", index, root)

    @property
    def roots(self) -> tuple[Path, ...]:
        """Absolute search roots, highest priority first."""
        return self._roots

    @property
    def merge_categories(self) -> frozenset[str]:
        return self._merge_categories

    def is_merge_category(self, category: str) -> bool:
        return category.replace("\\", "/").strip("/") in self._merge_categories

    def resolve_one(
        self, category: str, path: str, extensions: Sequence[str] | None = None
    ) -> FileMatch | None:
        """
        Return the match from the highest-priority root that has the resource,
        or `None` if no root has it.
        """
        query = self._query(category, path, extensions)
        key = (query, _ONE)
        cached = self._cache_get(key)
        if cached is not _MISSING:
            return cached  # pyright: ignore[reportReturnType]

        found: FileMatch | None = None
        for index, root in enumerate(self._roots):
            found = self._find_in_root(query, index, root)
            if found is not None:
                break

        logger.debug("Resolved %s -> %s", query, found)
        return self._cache_put(key, found)  # pyright: ignore[reportReturnType]

    def resolve_all(
        self, category: str, path: str, extensions: Sequence[str] | None = None
    ) -> list[FileMatch]:
        """
        Return one match per root that has the resource, lowest priority first,
        so that merging the files left to right lets higher roots win.
        """
        query = self._query(category, path, extensions)
        key = (query, _ALL)
        cached = self._cache_get(key)
        if cached is not _MISSING:
            return list(cached)  # pyright: ignore[reportArgumentType]

        found: list[FileMatch] = []
        for index in reversed(range(len(self._roots))):
            match = self._find_in_root(query, index, self._roots[index])
            if match is not None:
                found.append(match)

        logger.debug("Resolved all %s -> %d file(s)", query, len(found))
        return list(self._cache_put(key, tuple(found)))  # pyright: ignore[reportArgumentType]

    def resolve_merged(
        self, category: str, path: str, extensions: Sequence[str] | None = None
    ) -> list[FileMatch]:
        """Like `resolve_all`, for categories registered as merge categories only."""
        if not self.is_merge_category(category):
            raise InvalidConfigurationError(
                f"Category {category!r} is not a merge category"
                f" (registered: {', '.join(sorted(self._merge_categories)) or 'none'})"
            )
        return self.resolve_all(category, path, extensions)

    def list_files(
        self,
        category: str,
        extensions: Sequence[str] | None = None,
        sort: bool = False,
    ) -> dict[str, Path]:
        """
        Recursively list every file under `category` across all roots, keyed by
        its path relative to the category directory. A file present in several
        roots maps to the highest-priority copy.

        `extensions=None` lists files of any extension.
        """
        category = normalize_resource_path(category, "category")
        allowed = (
            None if extensions is None else frozenset(normalize_extension(e) for e in extensions)
        )
        found: dict[str, Path] = {}

        for index, root in enumerate(self._roots):
            base = root.joinpath(*category.split("/"))
            if not self._is_dir(base, index):
                logger.debug("Root #%d has no %s directory: %s", index, category, root)
                continue
            walk = _Walk(category, index, self._rules_for_root(index, root), allowed, found)
            self._collect(walk, base, "", frozenset({os.path.realpath(base)}))

        if sort:
            return dict(sorted(found.items()))
        return found

    def _collect(
        self, walk: _Walk, directory: Path, prefix: str, ancestors: frozenset[str]
    ) -> None:
        """
        Depth-first walk of one directory, adding unseen keys to `walk.found`.
        `ancestors` holds the real paths of the directories above this one: a
        symlink back up the tree is skipped, sibling aliases are still listed.
        """
        for entry in self._scan_dir(directory, walk.root_index):
            is_dir = entry.is_dir()
            key = prefix + entry.name
            # Patterns may name the entry, its path in the category, or its path in the root.
            if walk.ignore.matches(entry.name, is_dir, (key, f"{walk.category}/{key}")):
                continue
            if is_dir:
                real = os.path.realpath(entry.path)
                if real in ancestors:
                    continue
                self._collect(walk, Path(entry.path), key + "/", ancestors | {real})
            elif entry.is_file():
                if walk.allowed is not None and _extension(entry.name) not in walk.allowed:
                    continue
                if key not in walk.found:
                    walk.found[key] = Path(entry.path)

    def _query(
        self, category: str, path: str, extensions: Sequence[str] | None
    ) -> ResourceQuery:
        if extensions is None:
            exts = self._extensions
        else:
            exts = tuple(dict.fromkeys(normalize_extension(e) for e in extensions if e.strip()))
        return ResourceQuery.build(category, path, exts)

    def _find_in_root(
        self, query: ResourceQuery, index: int, root: Path
    ) -> FileMatch | None:
        """First candidate of `query` that is a regular file in `root`."""
        for relative in query.candidates():
            candidate = root.joinpath(*relative.split("/"))
            if self._is_file(candidate, index):
                return FileMatch(path=candidate, root=root, root_index=index)
        return None

    def _rules_for_root(self, index: int, root: Path) -> IgnoreRules:
        if not self._config.respect_ignore_files:
            return self._ignore
        if index not in self._root_ignore_cache:
            try:
                extra = load_root_ignore(root)
            except OSError as e:
                raise CascadeIOError("Cannot read ignore file", root, index) from e
            self._root_ignore_cache[index] = self._ignore.extended(extra)
        return self._root_ignore_cache[index]

    def _cache_get(self, key: tuple[ResourceQuery, str]) -> object:
        if not self._config.caching:
            return _MISSING
        with self._lock:
            value = self._cache.get(key, _MISSING)
        if value is not _MISSING:
            logger.debug("Cache hit for %s (%s)", key[0], key[1])
        return value

    def _cache_put(self, key: tuple[ResourceQuery, str], value: _CacheValue) -> _CacheValue:
        """Store `value` unless another lookup stored one first; return the stored value."""
        if not self._config.caching:
            return value
        with self._lock:
            return self._cache.setdefault(key, value)

    # Filesystem primitives. Every filesystem access of a lookup goes through these.

    def _stat(self, path: Path, root_index: int) -> os.stat_result | None:
        """`os.stat` of `path`, or `None` when it (or a parent) does not exist."""
        try:
            return os.stat(path)
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as e:
            raise CascadeIOError("Cannot access path", path, root_index) from e

    def _is_file(self, path: Path, root_index: int) -> bool:
        info = self._stat(path, root_index)
        return info is not None and stat.S_ISREG(info.st_mode)

    def _is_dir(self, path: Path, root_index: int) -> bool:
        info = self._stat(path, root_index)
        return info is not None and stat.S_ISDIR(info.st_mode)

    def _scan_dir(self, directory: Path, root_index: int) -> list[os.DirEntry[str]]:
        try:
            with os.scandir(directory) as entries:
                return list(entries)
        except FileNotFoundError:
            logger.debug("Directory vanished during listing: %s", directory)
            return []
        except OSError as e:
            raise CascadeIOError("Cannot read directory", directory, root_index) from e
