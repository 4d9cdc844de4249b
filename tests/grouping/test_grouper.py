"""Tests for snippet grouping."""

from __future__ import annotations

import random

from docsnip.grouping.grouper import (
    DUPLICATE_VERSION,
    MIXED_LANGUAGE,
    OVERLAP,
    SnippetGrouper,
    group_snippets,
)
from docsnip.models import PackageVersionUnit, Snippet, SnippetError
from docsnip.reading.file_extractor import content_hash
from docsnip.versioning import SemanticVersion, VersionRange


def _snippet(
    key: str,
    content: str,
    version: str = "*",
    package: str | None = None,
    *,
    path: str = "a.cs",
    language: str = "cs",
    line: int = 1,
) -> Snippet:
    return Snippet(
        key=key,
        language=language,
        path=path,
        start_line=line,
        end_line=line + 2,
        content=content,
        content_hash=content_hash(content),
        version=VersionRange.parse(version),
        package=package,
    )


def _unit(package: str, version: str) -> PackageVersionUnit:
    return PackageVersionUnit(
        component="Core",
        package=package,
        version=SemanticVersion.parse(version),
        path=f"Core/{package}_{version}",
    )


def test_open_ended_versions_become_contiguous_ranges() -> None:
    result = group_snippets(
        [
            _snippet("usage", "v4", "4.0", "pkg", path="pkg_4/a.cs"),
            _snippet("usage", "v5", "5.0", "pkg", path="pkg_5/a.cs"),
        ]
    )

    assert result.conflicts == []
    (group,) = result.groups
    assert group.key == "usage"
    assert group.language == "cs"
    assert [(str(entry.version), entry.content, entry.is_current) for entry in group.entries] == [
        ("[5.0.0, 6.0.0)", "v5", True),
        ("[4.0.0, 5.0.0)", "v4", False),
    ]


def test_unit_versions_leave_gaps_for_missing_snippets() -> None:
    units = [_unit("pkg", "6.0"), _unit("pkg", "5.0"), _unit("pkg", "4.0")]

    result = SnippetGrouper(units).group(
        [
            _snippet("usage", "v4", "4.0", "pkg", path="pkg_4/a.cs"),
            _snippet("usage", "v6", "6.0", "pkg", path="pkg_6/a.cs"),
        ]
    )

    entries = result.groups[0].entries
    assert [str(entry.version) for entry in entries] == ["[6.0.0, 7.0.0)", "[4.0.0, 5.0.0)"]


def test_errors_are_separated_and_sorted() -> None:
    errors = [
        SnippetError(key="b", path="z.cs", error="bad", line=3),
        SnippetError(key="a", path="a.cs", error="bad", line=9),
    ]

    result = group_snippets(errors + [_snippet("ok", "x")])

    assert [error.path for error in result.errors] == ["a.cs", "z.cs"]
    assert [group.key for group in result.groups] == ["ok"]


def test_identical_duplicates_merge_sources() -> None:
    result = group_snippets(
        [
            _snippet("usage", "same();", "2.0", path="one.cs"),
            _snippet("usage", "same( );", "2.0", path="two.cs", line=10),
        ]
    )

    assert result.conflicts == []
    (entry,) = result.groups[0].entries
    assert [source.path for source in entry.sources] == ["one.cs", "two.cs"]


def test_conflicting_duplicates_are_reported() -> None:
    result = group_snippets(
        [
            _snippet("usage", "first();", "2.0", path="one.cs"),
            _snippet("usage", "second();", "2.0", path="two.cs"),
            _snippet("other", "fine();"),
        ]
    )

    assert [group.key for group in result.groups] == ["other"]
    (conflict,) = result.conflicts
    assert conflict.key == "usage"
    assert conflict.kind == DUPLICATE_VERSION
    assert conflict.paths == ("one.cs", "two.cs")


def test_mixed_languages_are_reported() -> None:
    result = group_snippets(
        [
            _snippet("usage", "a", path="a.cs"),
            _snippet("usage", "b", path="b.py", language="py"),
        ]
    )

    assert result.groups == []
    assert result.conflicts[0].kind == MIXED_LANGUAGE
    assert "cs, py" in result.conflicts[0].message


def test_overlapping_explicit_ranges_are_reported() -> None:
    result = group_snippets(
        [
            _snippet("usage", "a", "[1.0, 3.0)", path="a.cs"),
            _snippet("usage", "b", "[2.0, 4.0)", path="b.cs"),
        ]
    )

    assert result.groups == []
    assert result.conflicts[0].kind == OVERLAP


def test_all_versions_snippet_is_current() -> None:
    result = group_snippets([_snippet("usage", "a")])

    (entry,) = result.groups[0].entries
    assert entry.version == VersionRange.ALL
    assert entry.is_current


def test_packages_follow_unit_order() -> None:
    units = [_unit("Zeta", "1.0"), _unit("Alpha", "1.0")]

    result = SnippetGrouper(units).group(
        [
            _snippet("usage", "alpha", "1.0", "Alpha", path="alpha.cs"),
            _snippet("usage", "zeta", "1.0", "Zeta", path="zeta.cs"),
            _snippet("usage", "shared", "*", None, path="shared.cs"),
        ]
    )

    entries = result.groups[0].entries
    assert [entry.package for entry in entries] == [None, "Zeta", "Alpha"]
    assert all(entry.is_current for entry in entries)


def test_grouping_is_stable_under_shuffling() -> None:
    snippets = [
        _snippet("usage", "v4", "4.0", "pkg", path="pkg_4/a.cs"),
        _snippet("usage", "v5", "5.0", "pkg", path="pkg_5/a.cs"),
        _snippet("usage", "other", "1.0", "other", path="other_1/a.cs"),
        _snippet("intro", "hello", path="intro.cs"),
        _snippet("dup", "same", "2.0", path="x.cs"),
        _snippet("dup", "same", "2.0", path="y.cs"),
        SnippetError(key="bad", path="bad.cs", error="Snippet was not closed", line=4),
    ]
    expected = group_snippets(snippets)

    rng = random.Random(1234)
    for _ in range(10):
        shuffled = list(snippets)
        rng.shuffle(shuffled)
        assert group_snippets(shuffled) == expected


def test_current_follows_newest_unit_without_a_snippet() -> None:
    units = [_unit("pkg", "6.0"), _unit("pkg", "5.0"), _unit("pkg", "4.0")]

    result = SnippetGrouper(units).group(
        [
            _snippet("usage", "v4", "4.0", "pkg", path="pkg_4/a.cs"),
            _snippet("usage", "v5", "5.0", "pkg", path="pkg_5/a.cs"),
        ]
    )

    assert result.conflicts == []
    entries = result.groups[0].entries
    assert [(str(entry.version), entry.is_current) for entry in entries] == [
        ("[5.0.0, 6.0.0)", False),
        ("[4.0.0, 5.0.0)", False),
    ]


def test_repeated_unit_version_is_a_conflict() -> None:
    units = [_unit("pkg", "1.0"), _unit("pkg", "1.0.0")]

    result = SnippetGrouper(units).group(
        [
            _snippet("usage", "same();", "1.0", "pkg", path="Core/pkg_1.0/a.cs"),
            _snippet("other", "fine();", "*", None, path="Core/Shared/b.cs"),
        ]
    )

    assert [group.key for group in result.groups] == ["other"]
    (conflict,) = result.conflicts
    assert conflict.key == "usage"
    assert conflict.kind == DUPLICATE_VERSION
    assert "1.0.0" in conflict.message


def test_same_version_in_other_components_is_not_a_conflict() -> None:
    units = [
        _unit("pkg", "1.0"),
        PackageVersionUnit(
            component="Extra",
            package="pkg",
            version=SemanticVersion.parse("1.0"),
            path="Extra/pkg_1.0",
        ),
    ]

    result = SnippetGrouper(units).group([_snippet("usage", "v1", "1.0", "pkg")])

    assert result.conflicts == []
    assert result.groups[0].entries[0].is_current


def test_package_names_match_case_insensitively() -> None:
    units = [_unit("Package1", "5.0"), _unit("Package1", "4.0")]

    result = SnippetGrouper(units).group(
        [
            _snippet("usage", "v5", "5.0", "Package1", path="Package1_5/a.cs"),
            _snippet("usage", "v4", "4.0", "package1", path="a_4_package1.cs"),
        ]
    )

    assert result.conflicts == []
    entries = result.groups[0].entries
    assert [(entry.package, str(entry.version), entry.is_current) for entry in entries] == [
        ("Package1", "[5.0.0, 6.0.0)", True),
        ("Package1", "[4.0.0, 5.0.0)", False),
    ]
