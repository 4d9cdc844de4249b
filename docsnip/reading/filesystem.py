"""File enumeration and modification-time lookups for snippet directories."""

from __future__ import annotations

from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Protocol, Sequence, TextIO

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    ".vs",
    ".idea",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    "bin",
    "obj",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

DEFAULT_EXTENSIONS = (
    ".cs",
    ".vb",
    ".fs",
    ".py",
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".java",
    ".kt",
    ".go",
    ".rs",
    ".rb",
    ".php",
    ".c",
    ".h",
    ".cpp",
    ".hpp",
    ".swift",
    ".scala",
    ".sh",
    ".ps1",
    ".sql",
    ".xml",
    ".config",
    ".json",
    ".yaml",
    ".yml",
    ".html",
    ".css",
    ".txt",
)

DirectoryFilter = Callable[[Path], bool]
FileFilter = Callable[[Path], bool]


class SnippetFileSystem(Protocol):
    """Collaborator contract used by the directory walker and the cache."""

    def list_files(self, directory: Path) -> Sequence[Path]:
        ...

    def list_directories(self, directory: Path) -> Sequence[Path]:
        ...

    def walk_directories(self, root: Path) -> Iterator[Path]:
        ...

    def open_text(self, path: Path) -> TextIO:
        ...

    def max_mtime(self, directories: Iterable[Path]) -> int:
        ...


def build_directory_filter(exclude_dirs: Iterable[str] = ()) -> DirectoryFilter:
    excluded = {name.lower() for name in _EXCLUDED_DIRS}
    excluded.update(name.strip("/").lower() for name in exclude_dirs if name.strip("/"))

    def _include(path: Path) -> bool:
        return path.name.lower() not in excluded

    return _include


def build_file_filter(
    extensions: Optional[Iterable[str]] = None, exclude_patterns: Iterable[str] = ()
) -> FileFilter:
    allowed = {_normalise_extension(ext) for ext in (extensions or DEFAULT_EXTENSIONS)}
    patterns = [pattern for pattern in exclude_patterns if pattern]

    def _include(path: Path) -> bool:
        if path.name in _EXCLUDED_FILES:
            return False
        if path.suffix.lower() not in allowed:
            return False
        return not any(fnmatchcase(path.name, pattern) for pattern in patterns)

    return _include


def _normalise_extension(extension: str) -> str:
    extension = extension.strip().lower()
    return extension if extension.startswith(".") else f".{extension}"


class LocalFileSystem:
    """Filtered view of the local disk. Listings are sorted for stable walks."""

    def __init__(
        self,
        directory_filter: DirectoryFilter | None = None,
        file_filter: FileFilter | None = None,
    ) -> None:
        self.directory_filter = directory_filter or build_directory_filter()
        self.file_filter = file_filter or build_file_filter()

    def list_files(self, directory: Path) -> List[Path]:
        return sorted(
            child for child in directory.iterdir() if child.is_file() and self.file_filter(child)
        )

    def list_directories(self, directory: Path) -> List[Path]:
        return sorted(
            child for child in directory.iterdir() if child.is_dir() and self.directory_filter(child)
        )

    def walk_directories(self, root: Path) -> Iterator[Path]:
        for child in self.list_directories(root):
            yield child
            yield from self.walk_directories(child)

    def open_text(self, path: Path) -> TextIO:
        # utf-8-sig drops the BOM that Windows editors prepend to source files.
        return path.open("r", encoding="utf-8-sig", newline=None)

    def max_mtime(self, directories: Iterable[Path]) -> int:
        latest = 0
        for directory in directories:
            stat_result = directory.stat()
            mtime_ns = getattr(stat_result, "st_mtime_ns", int(stat_result.st_mtime * 1_000_000_000))
            latest = max(latest, mtime_ns)
        return latest


__all__ = [
    "DEFAULT_EXTENSIONS",
    "DirectoryFilter",
    "FileFilter",
    "LocalFileSystem",
    "SnippetFileSystem",
    "build_directory_filter",
    "build_file_filter",
]
