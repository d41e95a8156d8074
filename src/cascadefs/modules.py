"""
Modules and the search-root order they produce.

An application is the highest-priority root, followed by its enabled modules in
the order they were listed, followed by the system root.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from cascadefs.errors import ModuleDefinitionError

SOURCE_DIR = "src"
TEST_DIR = "tests"
VIEW_DIR = "views"
CONFIG_DIR = "config"
I18N_DIR = "i18n"
MEDIA_DIR = "media"

STANDARD_DIRS: tuple[str, ...] = (SOURCE_DIR, TEST_DIR, VIEW_DIR, CONFIG_DIR, I18N_DIR, MEDIA_DIR)

_ID_RE = re.compile(r"^[A-Za-z0-9]+$")
_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+$")


@dataclass(frozen=True)
class Module:
    """A module directory contributing resources to the cascade."""

    id: str
    name: str
    path: Path
    version: str = "1.0.0"

    def __post_init__(self) -> None:
        if not _ID_RE.match(self.id):
            raise ModuleDefinitionError(f"Module id must be alphanumeric: {self.id!r}")
        if not _VERSION_RE.match(self.version):
            raise ModuleDefinitionError(
                f"Module {self.id!r} version must look like 1.2.3: {self.version!r}"
            )
        object.__setattr__(self, "path", Path(self.path))

    def directory(self, category: str) -> Path:
        """Path of one of the module's category directories (may not exist)."""
        return self.path / category


def build_search_roots(
    application: str | Path,
    modules: Iterable[Module | str | Path] = (),
    system: str | Path | None = None,
) -> list[Path]:
    """
    Root list in priority order: application, modules, then system. Paths that
    point at the same directory keep only their first (highest) position.
    """
    candidates: list[Path] = [Path(application)]
    for module in modules:
        candidates.append(module.path if isinstance(module, Module) else Path(module))
    if system is not None:
        candidates.append(Path(system))

    roots: list[Path] = []
    seen: set[str] = set()
    for path in candidates:
        key = os.path.normcase(os.path.abspath(os.path.expanduser(path)))
        if key not in seen:
            seen.add(key)
            roots.append(path)
    return roots
