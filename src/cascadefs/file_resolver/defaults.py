"""
Default ignore patterns, merge categories and extensions for cascade lookups.

Ignore patterns use gitignore syntax. Directory-only patterns end with `/`.
"""

from __future__ import annotations

# Version control artifacts and OS/editor metadata. Plain names match both files
# and directories; matching directories are pruned, not entered.
DEFAULT_IGNORE: list[str] = [
    # Version control
    ".svn",
    ".git",
    ".hg",
    ".gitignore",
    ".gitkeep",
    # OS metadata
    ".DS_Store",
    "Thumbs.db",
    # IDE/Editor
    ".idea/",
    ".vscode/",
    "nbproject/",
]

# Categories whose matches from every root are combined rather than overridden.
DEFAULT_MERGE_CATEGORIES: list[str] = ["config", "i18n"]

# Tried in order when a resource path has no extension of its own.
DEFAULT_EXTENSIONS: list[str] = ["toml"]

# Per-root file holding extra ignore patterns for that root.
ROOT_IGNORE_FILENAME = ".cascadeignore"
