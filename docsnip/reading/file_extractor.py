"""Extract snippets from a single text source."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path
from typing import Callable, Iterable, List, Mapping, Sequence

from ..models import PathContext, RawSnippet, Snippet, SnippetError
from .markers import MarkerCapture, MarkerFault, MarkerScanner, build_content, find_invalid_characters
from .suffixes import DEFAULT_RULES, SuffixError, SuffixRule, resolve_suffixes

_WHITESPACE = re.compile(r"\s+")

PackageTranslator = Callable[[str], str]


class PackageTranslationError(ValueError):
    """Raised by translators that cannot map an alias to a package."""


class AliasTranslator:
    """Maps on-disk package aliases to canonical package names.

    Lookups are case-insensitive. Unknown aliases pass through unchanged unless
    ``strict`` is set, in which case they fail translation.
    """

    def __init__(self, aliases: Mapping[str, str] | None = None, *, strict: bool = False) -> None:
        self._aliases = {alias.lower(): name for alias, name in (aliases or {}).items()}
        self.strict = strict

    def __call__(self, alias: str) -> str:
        translated = self._aliases.get(alias.lower())
        if translated is not None:
            return translated
        if self.strict:
            raise PackageTranslationError(f"Unknown package alias '{alias}'")
        return alias


def content_hash(content: str) -> str:
    """Hash snippet content ignoring all whitespace differences."""
    return hashlib.sha256(_WHITESPACE.sub("", content).encode("utf-8")).hexdigest()


def language_for_path(path: str | Path) -> str:
    return Path(path).suffix.lstrip(".").lower()


class FileSnippetExtractor:
    """Turns marker captures from one file into :class:`Snippet` records."""

    def __init__(
        self,
        scanner: MarkerScanner | None = None,
        translate_package: PackageTranslator | None = None,
        *,
        newline: str = "\n",
        suffix_rules: Sequence[SuffixRule] = DEFAULT_RULES,
    ) -> None:
        self.scanner = scanner or MarkerScanner()
        self.translate_package = translate_package
        self.newline = newline
        self.suffix_rules = tuple(suffix_rules)

    def read_text(self, text: str, path: str, context: PathContext | None = None) -> List[RawSnippet]:
        return self.read(text.splitlines(), path, context)

    def read(
        self, lines: Iterable[str], path: str, context: PathContext | None = None
    ) -> List[RawSnippet]:
        context = context or PathContext()
        language = language_for_path(path)
        snippets: List[RawSnippet] = []
        for item in self.scanner.scan(lines):
            if isinstance(item, MarkerFault):
                snippets.append(SnippetError(key=item.key, path=path, error=item.error, line=item.line))
                continue
            snippets.append(self._build(item, path, language, context))
        return snippets

    def _build(
        self, capture: MarkerCapture, path: str, language: str, context: PathContext
    ) -> RawSnippet:
        try:
            resolved = resolve_suffixes(
                capture.suffixes, context.version, context.package, self.suffix_rules
            )
        except SuffixError as exc:
            return self._error(capture, path, str(exc))

        content = build_content(capture.lines, self.newline)
        invalid = find_invalid_characters(content)
        if invalid:
            joined = "', '".join(invalid)
            return self._error(
                capture,
                path,
                f"Snippet contains invalid characters ('{joined}'). This was probably caused "
                "by copying code from a word processor or mail client.",
            )

        package = resolved.package
        if package is not None:
            try:
                package = self.translate(package)
            except PackageTranslationError as exc:
                return self._error(capture, path, str(exc))

        return Snippet(
            key=capture.key,
            language=language,
            path=path,
            start_line=capture.start_line,
            end_line=capture.end_line,
            content=content,
            content_hash=content_hash(content),
            version=resolved.version,
            package=package,
            component=context.component,
        )

    def translate(self, alias: str) -> str:
        """Map a package alias through the configured translator."""
        if self.translate_package is None:
            return alias
        try:
            translated = self.translate_package(alias)
        except Exception as exc:
            raise PackageTranslationError(
                f"Failed to translate package '{alias}'. Error: {exc}."
            ) from exc
        if not isinstance(translated, str) or not translated.strip():
            raise PackageTranslationError(
                f"Package translation supplied an empty package for '{alias}'."
            )
        return translated

    @staticmethod
    def _error(capture: MarkerCapture, path: str, message: str) -> SnippetError:
        return SnippetError(key=capture.key, path=path, error=message, line=capture.start_line)


__all__ = [
    "AliasTranslator",
    "FileSnippetExtractor",
    "PackageTranslationError",
    "PackageTranslator",
    "content_hash",
    "language_for_path",
]
