"""Extraction pipeline: directory walk followed by grouping."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .config import DocSnipConfig
from .grouping.grouper import SnippetGrouper
from .logging import get_logger
from .models import ExtractionResult, SnippetGroup
from .postproc.injector import MarkdownProcessor
from .reading.directory_extractor import DirectorySnippetExtractor
from .reading.file_extractor import AliasTranslator, FileSnippetExtractor
from .reading.filesystem import LocalFileSystem, build_directory_filter, build_file_filter
from .reading.markers import DIALECTS, MarkerScanner


class ConfiguredPackageOrder:
    """Package ordering override backed by ``packages.order`` in config."""

    def __init__(self, order: Mapping[str, List[str]]) -> None:
        self._order = {component.lower(): list(names) for component, names in order.items()}

    def __call__(self, component: Optional[str]) -> List[str]:
        if component is None:
            return []
        return self._order.get(component.lower(), [])


class SnippetExtractor:
    """Runs the directory walker and the grouper for one root directory."""

    def __init__(self, directory_extractor: DirectorySnippetExtractor | None = None) -> None:
        self.directory_extractor = directory_extractor or DirectorySnippetExtractor()
        self.logger = get_logger("extraction")

    @property
    def file_system(self):
        return self.directory_extractor.file_system

    def extract(self, root: Path | str, *, cancel: threading.Event | None = None) -> ExtractionResult:
        read = self.directory_extractor.read(root, cancel=cancel)
        grouped = SnippetGrouper(read.units).group(read.snippets)
        self.logger.info(
            "Grouped %d snippet keys from %s (%d errors, %d conflicts)",
            len(grouped.groups),
            read.root,
            len(grouped.errors),
            len(grouped.conflicts),
        )
        return ExtractionResult(
            root=read.root,
            groups=grouped.groups,
            snippets=read.snippets,
            conflicts=grouped.conflicts,
            units=read.units,
        )


def build_file_system(config: DocSnipConfig) -> LocalFileSystem:
    return LocalFileSystem(
        directory_filter=build_directory_filter(config.extract.exclude_dirs),
        file_filter=build_file_filter(
            config.extract.extensions or None, config.extract.exclude_files
        ),
    )


def build_extractor(config: DocSnipConfig) -> SnippetExtractor:
    """Wire the extraction pipeline from configuration."""
    scanner = MarkerScanner([DIALECTS[name] for name in config.markers.dialects])
    translator = AliasTranslator(config.packages.aliases, strict=config.packages.strict_aliases)
    file_extractor = FileSnippetExtractor(
        scanner,
        translator,
        newline=config.markers.newline,
    )
    package_order = ConfiguredPackageOrder(config.packages.order) if config.packages.order else None
    directory_extractor = DirectorySnippetExtractor(
        build_file_system(config),
        file_extractor,
        package_order=package_order,
    )
    return SnippetExtractor(directory_extractor)


def build_processor(
    config: DocSnipConfig,
    snippets: Union[Iterable[SnippetGroup], Dict[str, SnippetGroup], ExtractionResult],
) -> MarkdownProcessor:
    groups = snippets.groups if isinstance(snippets, ExtractionResult) else snippets
    return MarkdownProcessor(
        groups,
        placeholder_open=config.placeholder.open,
        placeholder_close=config.placeholder.close,
        templates_dir=config.render.templates_dir,
    )


__all__ = [
    "ConfiguredPackageOrder",
    "SnippetExtractor",
    "build_extractor",
    "build_file_system",
    "build_processor",
]
