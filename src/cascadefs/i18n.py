"""
Translation tables looked up through the cascade.

A language such as `en-us` is loaded from `i18n/en.toml` and then
`i18n/en/us.toml`, each merged across every root lowest priority first. Tables
are flat TOML mappings from source text to translated text.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from cascadefs.errors import InvalidConfigurationError
from cascadefs.file_resolver import CascadeResolver
from cascadefs.modules import I18N_DIR
from cascadefs.tables import load_table

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")


def normalize_language(language: str) -> str:
    """`en_US`, `en US` and `EN-us` all become `en-us`."""
    return language.strip().replace(" ", "-").replace("_", "-").lower()


def interpolate(message: str, context: Mapping[str, Any] | None = None) -> str:
    """Replace `{name}` placeholders in `message` with values from `context`."""
    if not context:
        return message

    def replace(match: re.Match[str]) -> str:
        key = match.group(1)
        return str(context[key]) if key in context else match.group(0)

    # Single pass: substituted values are never expanded again.
    return _PLACEHOLDER_RE.sub(replace, message)


class Translator:
    """
    Message lookup for the current language. Text in the source language is
    returned as is; other languages go through their merged translation table.
    """

    def __init__(
        self,
        resolver: CascadeResolver,
        source_language: str = "en-us",
        languages: Mapping[str, str] | None = None,
    ) -> None:
        self._resolver = resolver
        self.source_language: str = normalize_language(source_language)
        self._language: str = self.source_language
        self._languages: dict[str, str] = {self.source_language: self.source_language}
        self._tables: dict[str, dict[str, str]] = {}
        if languages is not None:
            self.set_languages(languages)

    @property
    def language(self) -> str:
        return self._language

    def set_language(self, language: str) -> None:
        self._language = normalize_language(language)

    @property
    def languages(self) -> dict[str, str]:
        """Available languages as code -> display name."""
        return dict(self._languages)

    def set_languages(self, languages: Mapping[str, str]) -> None:
        """
        Replace the available languages. The source language must be among them;
        if the current language is not, the first listed language becomes current.
        """
        normalized = {normalize_language(code): name for code, name in languages.items()}
        if self.source_language not in normalized:
            raise InvalidConfigurationError(
                f"Language list does not contain source language {self.source_language}"
            )
        self._languages = normalized
        if self._language not in normalized:
            self._language = next(iter(normalized))

    def load(self, language: str) -> dict[str, str]:
        """Merged translation table for `language`, as a copy the caller may modify."""
        return dict(self._table(normalize_language(language)))

    def _table(self, language: str) -> dict[str, str]:
        if language in self._tables:
            return self._tables[language]

        parts = language.split("-")
        paths = [parts[0]]
        if len(parts) > 1:
            paths.append("/".join(parts))

        table: dict[str, str] = {}
        for path in paths:
            for match in self._resolver.resolve_merged(I18N_DIR, path, ["toml"]):
                logger.debug("Loading translations for %s from %s", language, match.path)
                table.update({str(k): str(v) for k, v in load_table(match.path).items()})
        self._tables[language] = table
        return table

    def get_text(
        self,
        text: str,
        values: Mapping[str, Any] | None = None,
        language: str | None = None,
    ) -> str:
        """
        Translate `text` into `language` (default: the current language), falling
        back to `text` itself, then fill in `values`.
        """
        target = normalize_language(language) if language else self._language
        if target != self.source_language:
            text = self._table(target).get(text, text)
        return interpolate(text, values)
