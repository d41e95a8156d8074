"""
cascadefs: cascading filesystem lookups for modular applications.
"""

from cascadefs.errors import (
    CascadeError,
    CascadeIOError,
    InvalidConfigurationError,
    InvalidPathError,
    ModuleDefinitionError,
    TableLoadError,
)
from cascadefs.file_resolver import CascadeResolver, FileMatch, ResolverConfig
from cascadefs.i18n import Translator
from cascadefs.modules import Module, build_search_roots
from cascadefs.tables import ConfigRepository

__all__ = [
    "CascadeError",
    "CascadeIOError",
    "CascadeResolver",
    "ConfigRepository",
    "FileMatch",
    "InvalidConfigurationError",
    "InvalidPathError",
    "Module",
    "ModuleDefinitionError",
    "ResolverConfig",
    "TableLoadError",
    "Translator",
    "build_search_roots",
]
