"""Core data models shared across docsnip components."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .versioning import SemanticVersion, VersionRange


@dataclass(frozen=True)
class SnippetError:
    """A snippet (or whole file) that could not be read.

    ``key`` is ``None`` for file-level failures such as an unreadable source.
    """

    key: Optional[str]
    path: str
    error: str
    line: int

    @property
    def file_location(self) -> str:
        return f"{self.path}({self.line})"


@dataclass(frozen=True)
class Snippet:
    """A successfully captured snippet with its resolved metadata."""

    key: str
    language: str
    path: str
    start_line: int
    end_line: int
    content: str
    content_hash: str
    version: VersionRange
    package: Optional[str] = None
    component: Optional[str] = None

    @property
    def file_location(self) -> str:
        return f"{self.path}({self.start_line}-{self.end_line})"


RawSnippet = Union[Snippet, SnippetError]


@dataclass(frozen=True)
class PathContext:
    """Version, package and component active for a directory during a walk."""

    version: VersionRange = VersionRange.ALL
    package: Optional[str] = None
    component: Optional[str] = None


@dataclass(frozen=True)
class PackageVersionUnit:
    """One ``alias_version`` directory discovered by the walker."""

    component: Optional[str]
    package: str
    version: SemanticVersion
    path: str


@dataclass(frozen=True)
class SnippetSource:
    """Where a rendered snippet entry was read from."""

    path: str
    start_line: int
    end_line: int


@dataclass(frozen=True)
class VersionRangeEntry:
    """Content for one version range of one package within a snippet group."""

    version: VersionRange
    content: str
    is_current: bool
    sources: Tuple[SnippetSource, ...]
    package: Optional[str] = None


@dataclass(frozen=True)
class SnippetGroup:
    """All version entries for a key, ready for placeholder injection."""

    key: str
    language: str
    entries: Tuple[VersionRangeEntry, ...]


@dataclass(frozen=True)
class GroupingConflict:
    """An authoring error detected while grouping snippets."""

    key: str
    kind: str
    message: str
    paths: Tuple[str, ...] = ()


@dataclass
class ExtractionResult:
    """Groups, raw snippets and conflicts extracted from one root directory."""

    root: str
    groups: List[SnippetGroup]
    snippets: List[RawSnippet]
    conflicts: List[GroupingConflict] = field(default_factory=list)
    units: List[PackageVersionUnit] = field(default_factory=list)

    @property
    def errors(self) -> List[SnippetError]:
        return [snippet for snippet in self.snippets if isinstance(snippet, SnippetError)]

    def groups_by_key(self) -> Dict[str, SnippetGroup]:
        return {group.key: group for group in self.groups}

    def lookup(self, key: str) -> Optional[SnippetGroup]:
        normalised = key.lower()
        for group in self.groups:
            if group.key == normalised:
                return group
        return None


@dataclass
class ProcessResult:
    """Outcome of a placeholder injection run."""

    used_snippets: List[str] = field(default_factory=list)
    missing_snippets: List[str] = field(default_factory=list)
    output: str = ""
