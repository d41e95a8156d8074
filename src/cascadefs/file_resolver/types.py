"""Configuration and value types for cascade resolution."""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from cascadefs.errors import InvalidPathError
from cascadefs.file_resolver.defaults import (
    DEFAULT_EXTENSIONS,
    DEFAULT_IGNORE,
    DEFAULT_MERGE_CATEGORIES,
)


def normalize_extension(ext: str) -> str:
    """Lowercase an extension and drop any leading dot (`.TOML` -> `toml`)."""
    return ext.strip().lstrip(".").lower()


def normalize_resource_path(value: str, what: str = "path") -> str:
    """
    Turn backslashes into `/` and strip leading/trailing separators. Raises
    `InvalidPathError` for empty values and `.`/`..`/empty components, which
    would let a lookup leave its category directory.
    """
    value = value.replace("\\", "/").strip("/")
    if not value or any(part in ("", ".", "..") for part in value.split("/")):
        raise InvalidPathError(f"Invalid resource {what}: {value!r}")
    return value


@dataclass
class ResolverConfig:
    """
    Configuration for a `CascadeResolver`.

    `roots` are ordered highest priority first (application, modules, system).
    `ignore=None` means use `DEFAULT_IGNORE`; providing a list replaces it entirely.
    `extensions` are the defaults applied to resource paths that have none.
    """

    roots: list[str | Path] = field(default_factory=list)
    ignore: list[str] | None = None
    extend_ignore: list[str] = field(default_factory=list)
    merge_categories: list[str] = field(default_factory=lambda: list(DEFAULT_MERGE_CATEGORIES))
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    caching: bool = True
    respect_ignore_files: bool = True

    @property
    def effective_ignore(self) -> list[str]:
        """Combined ignore patterns: defaults (or `ignore`) + `extend_ignore`."""
        base = self.ignore if self.ignore is not None else list(DEFAULT_IGNORE)
        return base + self.extend_ignore

    @property
    def effective_extensions(self) -> tuple[str, ...]:
        """Normalized default extensions, duplicates removed, order kept."""
        return tuple(dict.fromkeys(normalize_extension(e) for e in self.extensions if e.strip()))


@dataclass(frozen=True)
class ResourceQuery:
    """
    A logical resource: a category directory (`views`, `config`, `i18n`...), a
    path inside it, and the extensions to try when the path has none.
    """

    category: str
    path: str
    extensions: tuple[str, ...] = ()

    @classmethod
    def build(cls, category: str, path: str, extensions: tuple[str, ...]) -> ResourceQuery:
        """Normalize separators and reject paths that climb out of the category."""
        return cls(
            normalize_resource_path(category, "category"),
            normalize_resource_path(path),
            extensions,
        )

    @property
    def has_extension(self) -> bool:
        return bool(PurePosixPath(self.path).suffix)

    def candidates(self) -> Iterator[str]:
        """Relative file names to try in each root, in preference order."""
        base = f"{self.category}/{self.path}"
        if self.has_extension or not self.extensions:
            yield base
            return
        for ext in self.extensions:
            yield f"{base}.{ext}"

    def __str__(self) -> str:
        return f"{self.category}/{self.path}"


@dataclass(frozen=True)
class FileMatch:
    """A resolved file and the search root it was found in."""

    path: Path
    root: Path
    root_index: int

    def __fspath__(self) -> str:
        return os.fspath(self.path)

    def __str__(self) -> str:
        return str(self.path)
