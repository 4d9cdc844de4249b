"""Walk a snippet directory tree and extract snippets from every file."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from ..logging import format_location, get_logger
from ..models import PackageVersionUnit, PathContext, RawSnippet, SnippetError
from .file_extractor import FileSnippetExtractor, PackageTranslationError
from .filesystem import LocalFileSystem, SnippetFileSystem
from .path_data import (
    ConfigurationError,
    ConventionPathDataExtractor,
    PathData,
    PathDataExtractor,
    inherit_all,
    resolve_path_data,
)

PackageOrder = Callable[[Optional[str]], Sequence[str]]


class ExtractionCancelled(RuntimeError):
    """Raised when a walk is cancelled before the next file is opened."""


class PackageOrderError(ConfigurationError):
    """Raised when a package ordering override fails for a component."""


@dataclass
class DirectoryReadResult:
    """Raw snippets and package-version units found under one root."""

    root: str
    snippets: List[RawSnippet] = field(default_factory=list)
    units: List[PackageVersionUnit] = field(default_factory=list)

    def package_order(self) -> List[str]:
        """Packages in unit order, each listed once."""
        seen: Dict[str, None] = {}
        for unit in self.units:
            seen.setdefault(unit.package, None)
        return list(seen)


class DirectorySnippetExtractor:
    """Recursively applies path metadata and extracts snippets per file.

    Directory metadata is threaded down the recursion as an immutable
    :class:`PathContext`; a broken path extractor or ordering override aborts
    the walk, while unreadable files and bad snippets become error records.
    """

    def __init__(
        self,
        file_system: SnippetFileSystem | None = None,
        file_extractor: FileSnippetExtractor | None = None,
        *,
        extract_directory: PathDataExtractor | None = None,
        extract_file: PathDataExtractor = inherit_all,
        package_order: PackageOrder | None = None,
    ) -> None:
        self.file_system = file_system or LocalFileSystem()
        self.file_extractor = file_extractor or FileSnippetExtractor()
        self.extract_directory = extract_directory
        self.extract_file = extract_file
        self.package_order = package_order
        self.logger = get_logger("reading.directory")

    def read(
        self,
        root: Path | str,
        context: PathContext | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> DirectoryReadResult:
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Snippet directory not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Snippet path is not a directory: {root}")

        extractor = self.extract_directory or ConventionPathDataExtractor(root_path)
        result = DirectoryReadResult(root=str(root_path))
        discovered: List[PackageVersionUnit] = []
        self._read_directory(
            root_path, root_path, context or PathContext(), extractor, result, discovered, cancel
        )
        result.units = self._order_units(discovered)
        self.logger.info(
            "Read %d snippets (%d errors) and %d package versions from %s",
            len(result.snippets),
            sum(1 for snippet in result.snippets if isinstance(snippet, SnippetError)),
            len(result.units),
            root_path,
        )
        return result

    def _read_directory(
        self,
        root: Path,
        directory: Path,
        parent: PathContext,
        extractor: PathDataExtractor,
        result: DirectoryReadResult,
        units: List[PackageVersionUnit],
        cancel: threading.Event | None,
    ) -> None:
        data = extractor(directory)
        context = resolve_path_data(parent, data, directory)
        if isinstance(data, PathData) and data.declares_unit:
            units.append(self._unit(root, directory, data, context))

        for path in self.file_system.list_files(directory):
            if cancel is not None and cancel.is_set():
                raise ExtractionCancelled(f"Snippet extraction cancelled before reading {path}")
            result.snippets.extend(self._read_file(root, path, context))

        for child in self.file_system.list_directories(directory):
            self._read_directory(root, child, context, extractor, result, units, cancel)

    def _read_file(self, root: Path, path: Path, parent: PathContext) -> List[RawSnippet]:
        relative = _relative(root, path)
        context = resolve_path_data(parent, self.extract_file(path.with_suffix("")), path)
        self.logger.debug("Reading snippets from %s", relative)
        try:
            with self.file_system.open_text(path) as handle:
                text = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.warning("Could not read %s: %s", relative, exc)
            return [SnippetError(key=None, path=relative, error=f"Failed to read file: {exc}", line=1)]

        snippets = self.file_extractor.read(text.splitlines(), relative, context)
        for snippet in snippets:
            if isinstance(snippet, SnippetError):
                self.logger.warning(
                    "Snippet '%s' at %s: %s",
                    snippet.key or "?",
                    format_location(snippet.path, snippet.line),
                    snippet.error,
                )
        return snippets

    def _unit(
        self, root: Path, directory: Path, data: PathData, context: PathContext
    ) -> PackageVersionUnit:
        alias = str(data.package)
        try:
            package = self.file_extractor.translate(alias)
        except PackageTranslationError as exc:
            self.logger.warning("Keeping alias '%s' for %s: %s", alias, directory.name, exc)
            package = alias
        version = context.version.minimum
        if version is None:
            raise ConfigurationError(f"Directory {directory} declares a package without a version")
        return PackageVersionUnit(
            component=context.component,
            package=package,
            version=version,
            path=_relative(root, directory),
        )

    def _order_units(self, units: Sequence[PackageVersionUnit]) -> List[PackageVersionUnit]:
        by_component: Dict[Optional[str], List[PackageVersionUnit]] = {}
        seen: Dict[tuple, PackageVersionUnit] = {}
        for unit in units:
            identity = (unit.component, unit.package.lower(), unit.version)
            if identity in seen:
                self.logger.warning(
                    "Package %s version %s is declared by both %s and %s",
                    unit.package,
                    unit.version,
                    seen[identity].path,
                    unit.path,
                )
            seen.setdefault(identity, unit)
            by_component.setdefault(unit.component, []).append(unit)

        ordered: List[PackageVersionUnit] = []
        for component in sorted(by_component, key=lambda name: (name is not None, name or "")):
            members = sorted(by_component[component], key=lambda unit: unit.package.lower())
            members.sort(key=lambda unit: unit.version, reverse=True)
            if self.package_order is not None:
                members = self._apply_package_order(self.package_order, component, members)
            ordered.extend(members)
        return ordered

    @staticmethod
    def _apply_package_order(
        package_order: PackageOrder,
        component: Optional[str],
        members: List[PackageVersionUnit],
    ) -> List[PackageVersionUnit]:
        packages = sorted({unit.package for unit in members})
        try:
            requested = list(package_order(component))
        except Exception as exc:
            raise PackageOrderError(
                f"Package ordering failed for component '{component}' "
                f"(packages: {', '.join(packages)}): {exc}"
            ) from exc
        if not all(isinstance(name, str) for name in requested):
            raise PackageOrderError(
                f"Package ordering for component '{component}' must return package names, "
                f"got {requested!r}"
            )
        rank = {name.lower(): index for index, name in enumerate(requested)}
        unranked = len(rank)
        # Stable sort keeps descending versions within each package.
        return sorted(
            members,
            key=lambda unit: (
                rank.get(unit.package.lower(), unranked),
                "" if unit.package.lower() in rank else unit.package.lower(),
            ),
        )


def _relative(root: Path, path: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


__all__ = [
    "DirectoryReadResult",
    "DirectorySnippetExtractor",
    "ExtractionCancelled",
    "PackageOrder",
    "PackageOrderError",
]
