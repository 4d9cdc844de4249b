"""Group raw snippets by key into ordered, conflict-checked version entries."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..logging import get_logger
from ..models import (
    GroupingConflict,
    PackageVersionUnit,
    RawSnippet,
    Snippet,
    SnippetError,
    SnippetGroup,
    SnippetSource,
    VersionRangeEntry,
)
from ..versioning import SemanticVersion, VersionRange
from .version_ranges import DuplicateVersionError, VersionSpan, build_version_ranges, pick_current

MIXED_LANGUAGE = "mixed_language"
DUPLICATE_VERSION = "duplicate_version"
OVERLAP = "overlap"


@dataclass
class GroupingResult:
    """Groups ready for injection plus everything that kept a key out of them."""

    groups: List[SnippetGroup] = field(default_factory=list)
    conflicts: List[GroupingConflict] = field(default_factory=list)
    errors: List[SnippetError] = field(default_factory=list)


def _range_order(version: VersionRange) -> tuple:
    return (
        version.minimum.sort_key() if version.minimum is not None else (),
        version.maximum.sort_key() if version.maximum is not None else (),
        version.include_minimum,
        version.include_maximum,
    )


def _minimum_order(version: VersionRange) -> tuple:
    # Unbounded minimums sort below every concrete version.
    if version.minimum is None:
        return (0, ())
    return (1, version.minimum.sort_key())


def _snippet_order(snippet: Snippet) -> tuple:
    return (
        snippet.key,
        snippet.language,
        snippet.package or "",
        _range_order(snippet.version),
        snippet.path,
        snippet.start_line,
    )


def _paths(snippets: Iterable[Snippet]) -> Tuple[str, ...]:
    return tuple(sorted({snippet.path for snippet in snippets}))


class SnippetGrouper:
    """Builds :class:`SnippetGroup` objects from raw snippets.

    ``units`` are the package versions discovered while walking directories.
    They widen the version list fed to the range builder so a version without
    a given snippet leaves a gap instead of stretching the neighbouring range,
    and the newest unit decides which range is current. A version declared
    twice within one component is kept so the builder can reject it. Unit
    order also decides how packages are ordered inside a group.
    """

    def __init__(self, units: Sequence[PackageVersionUnit] = ()) -> None:
        self._unit_versions: Dict[str, Set[SemanticVersion]] = defaultdict(set)
        self._duplicate_versions: Dict[str, List[SemanticVersion]] = defaultdict(list)
        self._package_names: Dict[str, str] = {}
        self._package_rank: Dict[str, int] = {}
        seen: Set[Tuple[Optional[str], str, SemanticVersion]] = set()
        for unit in units:
            package = unit.package.lower()
            identity = (unit.component, package, unit.version)
            if identity in seen:
                self._duplicate_versions[package].append(unit.version)
            seen.add(identity)
            self._unit_versions[package].add(unit.version)
            self._package_names.setdefault(package, unit.package)
            self._package_rank.setdefault(package, len(self._package_rank))
        self.logger = get_logger("grouping")

    def group(self, snippets: Iterable[RawSnippet]) -> GroupingResult:
        result = GroupingResult()
        successes: List[Snippet] = []
        for snippet in snippets:
            if isinstance(snippet, SnippetError):
                result.errors.append(snippet)
            else:
                successes.append(snippet)
        result.errors.sort(key=lambda error: (error.path, error.line, error.key or ""))

        by_key: Dict[str, List[Snippet]] = defaultdict(list)
        for snippet in sorted(successes, key=_snippet_order):
            by_key[snippet.key.lower()].append(snippet)

        for key in sorted(by_key):
            members = by_key[key]
            languages = sorted({snippet.language for snippet in members})
            if len(languages) > 1:
                result.conflicts.append(
                    GroupingConflict(
                        key=key,
                        kind=MIXED_LANGUAGE,
                        message=(
                            f"Snippet '{key}' is declared in multiple languages "
                            f"({', '.join(languages)}); a placeholder can only render one."
                        ),
                        paths=_paths(members),
                    )
                )
                continue

            entries: List[VersionRangeEntry] = []
            conflicts: List[GroupingConflict] = []
            # Package names match case-insensitively.
            by_package: Dict[Optional[str], List[Snippet]] = defaultdict(list)
            for snippet in members:
                by_package[snippet.package.lower() if snippet.package else None].append(snippet)
            for package_key in self._ordered_packages(by_package):
                package_entries, package_conflicts = self._package_entries(
                    key, package_key, by_package[package_key]
                )
                entries.extend(package_entries)
                conflicts.extend(package_conflicts)

            if conflicts:
                result.conflicts.extend(conflicts)
                continue
            result.groups.append(SnippetGroup(key=key, language=languages[0], entries=tuple(entries)))

        for conflict in result.conflicts:
            self.logger.warning("Snippet conflict (%s): %s", conflict.kind, conflict.message)
        return result

    def _ordered_packages(self, by_package: Dict[Optional[str], List[Snippet]]) -> List[Optional[str]]:
        unranked = len(self._package_rank)

        def _rank(package_key: Optional[str]) -> tuple:
            if package_key is None:
                return (-1, "")
            return (self._package_rank.get(package_key, unranked), package_key)

        return sorted(by_package, key=_rank)

    def _package_entries(
        self, key: str, package_key: Optional[str], snippets: List[Snippet]
    ) -> Tuple[List[VersionRangeEntry], List[GroupingConflict]]:
        conflicts: List[GroupingConflict] = []
        package = None
        if package_key is not None:
            package = self._package_names.get(package_key, snippets[0].package)
        owner = f"package '{package}'" if package else "no package"

        by_range: Dict[VersionRange, List[Snippet]] = defaultdict(list)
        for snippet in snippets:
            by_range[snippet.version].append(snippet)

        merged: List[Tuple[VersionRange, List[Snippet]]] = []
        for version, same in by_range.items():
            if len({snippet.content_hash for snippet in same}) > 1:
                conflicts.append(
                    GroupingConflict(
                        key=key,
                        kind=DUPLICATE_VERSION,
                        message=(
                            f"Snippet '{key}' ({owner}) has different content for version "
                            f"{version} in {', '.join(s.file_location for s in same)}."
                        ),
                        paths=_paths(same),
                    )
                )
                continue
            merged.append((version, same))

        spans: Dict[SemanticVersion, VersionSpan] = {}
        open_versions = {version.minimum for version, _ in merged if version.is_open_ended}
        if open_versions:
            known: Set[SemanticVersion] = set()
            duplicates: List[SemanticVersion] = []
            if package_key is not None:
                known = self._unit_versions.get(package_key, set())
                duplicates = self._duplicate_versions.get(package_key, [])
            try:
                built = build_version_ranges(sorted(open_versions | known) + duplicates, package)
            except DuplicateVersionError as exc:
                conflicts.append(
                    GroupingConflict(key=key, kind=DUPLICATE_VERSION, message=str(exc), paths=_paths(snippets))
                )
                return [], conflicts
            spans = {span.version: span for span in built}

        entries = [
            VersionRangeEntry(
                version=spans[version.minimum].range if version.is_open_ended else version,
                content=same[0].content,
                is_current=False,
                sources=tuple(
                    SnippetSource(path=s.path, start_line=s.start_line, end_line=s.end_line)
                    for s in same
                ),
                package=package,
            )
            for version, same in merged
        ]
        entries.sort(key=lambda entry: _minimum_order(entry.version), reverse=True)

        for higher, lower in zip(entries, entries[1:]):
            if higher.version.overlaps(lower.version):
                conflicts.append(
                    GroupingConflict(
                        key=key,
                        kind=OVERLAP,
                        message=(
                            f"Snippet '{key}' ({owner}) has overlapping versions "
                            f"{higher.version} and {lower.version}."
                        ),
                        paths=tuple(
                            sorted({source.path for source in higher.sources + lower.sources})
                        ),
                    )
                )

        return self._mark_current(entries, spans), conflicts

    @staticmethod
    def _mark_current(
        entries: List[VersionRangeEntry], spans: Dict[SemanticVersion, VersionSpan]
    ) -> List[VersionRangeEntry]:
        # Builder ranges know every discovered version, including ones without this snippet.
        if spans:
            current_ranges = {span.range for span in spans.values() if span.is_current}
            return [replace(entry, is_current=entry.version in current_ranges) for entry in entries]
        current = pick_current(
            entry.version.minimum for entry in entries if entry.version.minimum is not None
        )
        if current is None:
            return [replace(entry, is_current=index == 0) for index, entry in enumerate(entries)]
        return [replace(entry, is_current=entry.version.minimum == current) for entry in entries]


def group_snippets(
    snippets: Iterable[RawSnippet], units: Sequence[PackageVersionUnit] = ()
) -> GroupingResult:
    return SnippetGrouper(units).group(snippets)


__all__ = [
    "DUPLICATE_VERSION",
    "GroupingResult",
    "MIXED_LANGUAGE",
    "OVERLAP",
    "SnippetGrouper",
    "group_snippets",
]
