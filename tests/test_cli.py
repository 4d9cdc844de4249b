"""CLI behaviour tests."""

from __future__ import annotations

import pytest

from docsnip.cli import _build_parser, main
from tests._fixtures.tree_builder import SnippetTreeBuilder

SNIPPETS = {
    "Core/Package1_1/a.cs": """
        // snippet: usage
        run();
        // endsnippet
    """,
}


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "extract", "docs"])
    assert args.verbose is True
    assert args.command == "extract"
    assert args.path == "docs"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["inject", "README.md", "--snippets", "src", "--verbose"])
    assert args.verbose is True
    assert args.command == "inject"
    assert args.snippets == "src"
    assert args.check is False


def test_cli_accepts_quiet_before_or_after_command() -> None:
    parser = _build_parser()

    before = parser.parse_args(["-q", "extract", "docs"])
    after = parser.parse_args(["extract", "docs", "--quiet"])
    neither = parser.parse_args(["extract", "docs"])

    assert before.quiet is True
    assert after.quiet is True
    assert neither.quiet is False


def test_quiet_run_limits_console_to_warnings(
    snippet_tree: SnippetTreeBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    snippet_tree.write(SNIPPETS)
    calls = []
    monkeypatch.setattr("docsnip.cli.configure_logging", lambda **kwargs: calls.append(kwargs))

    main(["extract", str(snippet_tree.path()), "-q"])

    assert calls == [{"verbose": False, "quiet": True}]


def test_inject_requires_snippets_directory() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["inject", "README.md"])


def test_extract_prints_groups(snippet_tree: SnippetTreeBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    snippet_tree.write(SNIPPETS)

    main(["extract", str(snippet_tree.path())])

    out = capsys.readouterr().out
    assert "usage [cs] Package1 [1.0.0, 2.0.0)" in out


def test_extract_strict_fails_on_errors(snippet_tree: SnippetTreeBuilder) -> None:
    snippet_tree.write({"bad.cs": "// snippet: open\nnever closed\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(["extract", str(snippet_tree.path()), "--strict"])

    assert excinfo.value.code == 1


def test_inject_writes_output_file(snippet_tree: SnippetTreeBuilder, tmp_path) -> None:
    snippet_tree.write(SNIPPETS)
    document = tmp_path / "README.md"
    document.write_text("# Usage\r\n<!-- import usage -->\r\n", encoding="utf-8")
    output = tmp_path / "out.md"

    main(["inject", str(document), "--snippets", str(snippet_tree.path()), "--output", str(output)])

    rendered = output.read_bytes().decode("utf-8")
    assert rendered == "# Usage\r\n```cs\nrun();\n```\n\n"
    assert document.read_text(encoding="utf-8").endswith("<!-- import usage -->\n")


def test_inject_check_fails_on_missing_keys(snippet_tree: SnippetTreeBuilder, tmp_path, capsys) -> None:
    snippet_tree.write(SNIPPETS)
    document = tmp_path / "README.md"
    document.write_text("<!-- import absent -->\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["inject", str(document), "--snippets", str(snippet_tree.path()), "--check"])

    captured = capsys.readouterr()
    assert excinfo.value.code == 1
    assert "absent" in captured.err
    assert captured.out == ""


def test_missing_snippet_directory_exits(tmp_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["extract", str(tmp_path / "absent")])

    assert excinfo.value.code == 1
