"""Exception types raised by cascadefs."""

from __future__ import annotations

from pathlib import Path


class CascadeError(Exception):
    """Base class for all cascadefs errors."""


class InvalidConfigurationError(CascadeError, ValueError):
    """
    The resolver or one of its consumers was set up incorrectly: an empty root
    list, a merge requested for a category that is not a merge category, or a
    malformed settings file.
    """


class InvalidPathError(CascadeError, ValueError):
    """A resource path that would escape its category directory."""


class CascadeIOError(CascadeError, OSError):
    """
    A file or directory inside a search root exists but could not be accessed
    (for example, permission denied). Missing paths never raise this.
    """

    def __init__(self, message: str, path: Path, root_index: int) -> None:
        super().__init__(message)
        self.path: Path = path
        self.root_index: int = root_index

    def __str__(self) -> str:
        return f"{self.args[0]} (path: {self.path}, root #{self.root_index})"


class TableLoadError(CascadeError):
    """A config or translation table could not be parsed."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(message)
        self.path: Path = path


class ModuleDefinitionError(InvalidConfigurationError):
    """A module declared with an invalid id or version."""
