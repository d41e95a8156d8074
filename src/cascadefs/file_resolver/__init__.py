"""
Cascading filesystem resolution: ranked search roots overlaid so that higher
roots override same-named resources in lower ones.

No imports from `cascadefs` outside this package except `cascadefs.errors`.

Usage::

    from cascadefs.file_resolver import CascadeResolver, ResolverConfig

    config = ResolverConfig(
        roots=["app", "modules/auth", "system"],
        extend_ignore=["*.bak"],
    )
    resolver = CascadeResolver(config)
    view = resolver.resolve_one("views", "user/profile", ["html"])
    db_tables = resolver.resolve_merged("config", "database")
"""

from cascadefs.file_resolver.defaults import (
    DEFAULT_EXTENSIONS,
    DEFAULT_IGNORE,
    DEFAULT_MERGE_CATEGORIES,
)
from cascadefs.file_resolver.resolver import CascadeResolver
from cascadefs.file_resolver.types import FileMatch, ResolverConfig, ResourceQuery

__all__ = [
    "DEFAULT_EXTENSIONS",
    "DEFAULT_IGNORE",
    "DEFAULT_MERGE_CATEGORIES",
    "CascadeResolver",
    "FileMatch",
    "ResolverConfig",
    "ResourceQuery",
]
