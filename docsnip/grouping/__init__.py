"""Version range building and snippet grouping."""

from .grouper import GroupingResult, SnippetGrouper, group_snippets
from .version_ranges import DuplicateVersionError, build_version_ranges, pick_current

__all__ = [
    "DuplicateVersionError",
    "GroupingResult",
    "SnippetGrouper",
    "build_version_ranges",
    "group_snippets",
    "pick_current",
]
