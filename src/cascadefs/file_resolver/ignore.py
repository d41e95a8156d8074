"""Ignore rules for directory enumeration, using pathspec."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import pathspec

from cascadefs.file_resolver.defaults import ROOT_IGNORE_FILENAME


def _clean_lines(lines: Iterable[str]) -> list[str]:
    return [line for line in lines if line.strip() and not line.strip().startswith("#")]


class IgnoreRules:
    """
    Gitignore-style ignore matching. Plain patterns (`.git`) match files and
    directories; patterns with a trailing slash (`.idea/`) match directories only;
    patterns containing a slash (`legacy/old.php`) match against relative paths.
    """

    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns: list[str] = _clean_lines(patterns)
        self._spec: pathspec.PathSpec = pathspec.GitIgnoreSpec.from_lines(self.patterns)

    def matches(self, name: str, is_dir: bool = False, paths: Iterable[str] = ()) -> bool:
        """
        Check an entry by its bare `name` and by each relative path in `paths`
        (e.g. relative to the category directory and to the search root).
        """
        suffix = "/" if is_dir else ""
        return any(self._spec.match_file(p + suffix) for p in (name, *paths))

    def extended(self, patterns: Iterable[str]) -> IgnoreRules:
        """Return new rules with `patterns` appended to these."""
        extra = _clean_lines(patterns)
        if not extra:
            return self
        return IgnoreRules(self.patterns + extra)


def load_root_ignore(root: Path) -> list[str]:
    """
    Read `.cascadeignore` at the top of a search root and return its patterns,
    or an empty list if the file doesn't exist.
    """
    ignore_file = root / ROOT_IGNORE_FILENAME
    if not ignore_file.is_file():
        return []
    return _clean_lines(ignore_file.read_text(encoding="utf-8").splitlines())
