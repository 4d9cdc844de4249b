"""End-to-end tests for the extraction pipeline."""

from __future__ import annotations

from docsnip.config import load_config
from docsnip.extraction import ConfiguredPackageOrder, build_extractor, build_processor
from tests._fixtures.tree_builder import SnippetTreeBuilder


def test_extract_and_inject_versioned_tree(snippet_tree: SnippetTreeBuilder) -> None:
    snippet_tree.write(
        {
            "Core/Package1_4/Usage.cs": """
                // snippet: snippet1
                Snippet_v4
                // endsnippet
            """,
            "Core/Package1_5/Usage.cs": """
                // snippet: snippet1
                Snippet_v5
                // endsnippet
            """,
            "Core/Shared/Intro.cs": """
                // begin-snippet: intro
                Hello();
                // end-snippet
            """,
            "Core/Shared/Broken.cs": """
                // snippet: broken
                never closed
            """,
        }
    )

    result = snippet_tree.extract()

    assert [group.key for group in result.groups] == ["intro", "snippet1"]
    assert [error.key for error in result.errors] == ["broken"]
    assert result.conflicts == []
    versions = result.lookup("Snippet1")
    assert versions is not None
    assert [(entry.content, entry.is_current) for entry in versions.entries] == [
        ("Snippet_v5", True),
        ("Snippet_v4", False),
    ]

    processed = build_processor(load_config(snippet_tree.path()), result).apply_text(
        "<!-- import intro -->\n<!-- import snippet1 -->\n<!-- import nope -->\n"
    )
    assert processed.used_snippets == ["intro", "snippet1"]
    assert processed.missing_snippets == ["nope"]
    assert processed.output.startswith("```cs\nHello();\n```\n\nPackage1 [5.0.0, 6.0.0) (current)\n")


def test_build_extractor_honours_config(snippet_tree: SnippetTreeBuilder) -> None:
    snippet_tree.write(
        {
            ".docsnip.yml": """
                markers:
                  dialects: [tag]
                extract:
                  exclude_dirs: [drafts]
                packages:
                  aliases:
                    Pkg: Canonical.Package
            """,
            "Comp/Pkg_1/a.cs": """
                // begin-snippet: tagged
                tagged();
                // end-snippet
                // snippet: inline
                inline();
                // endsnippet
            """,
            "drafts/b.cs": """
                // begin-snippet: draft
                draft();
                // end-snippet
            """,
        }
    )
    config = load_config(snippet_tree.path())

    result = build_extractor(config).extract(snippet_tree.path())

    assert [group.key for group in result.groups] == ["tagged"]
    assert result.groups[0].entries[0].package == "Canonical.Package"
    assert [unit.package for unit in result.units] == ["Canonical.Package"]


def test_configured_package_order_is_case_insensitive() -> None:
    order = ConfiguredPackageOrder({"Gateway": ["B", "A"]})

    assert order("gateway") == ["B", "A"]
    assert order("Other") == []
    assert order(None) == []


def test_groups_by_key(snippet_tree: SnippetTreeBuilder) -> None:
    snippet_tree.write({"a.py": "# snippet: first\nx = 1\n# endsnippet\n"})

    result = snippet_tree.extract()

    assert list(result.groups_by_key()) == ["first"]
    assert result.groups[0].language == "py"


def test_same_version_spelled_twice_is_a_conflict(snippet_tree: SnippetTreeBuilder) -> None:
    snippet_tree.write(
        {
            "Core/Package1_1.0/a.cs": """
                // snippet: usage
                run();
                // endsnippet
            """,
            "Core/Package1_1.0.0/b.cs": """
                // snippet: usage
                run();
                // endsnippet
            """,
        }
    )

    result = snippet_tree.extract()

    assert [str(unit.version) for unit in result.units] == ["1.0.0", "1.0.0"]
    assert result.groups == []
    (conflict,) = result.conflicts
    assert conflict.key == "usage"
    assert conflict.kind == "duplicate_version"
    assert "Package1" in conflict.message
