from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.tree_builder import SnippetTreeBuilder


@pytest.fixture
def snippet_tree(tmp_path: Path) -> SnippetTreeBuilder:
    """Provide a snippet tree builder rooted at the pytest tmp_path."""
    return SnippetTreeBuilder(tmp_path)
