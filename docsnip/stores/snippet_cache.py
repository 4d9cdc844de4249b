"""In-memory cache of extraction results keyed by root directory."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from ..extraction import SnippetExtractor
from ..logging import get_logger
from ..models import ExtractionResult
from ..reading.filesystem import SnippetFileSystem


@dataclass(frozen=True)
class CacheEntry:
    root: Path
    mtime: int
    result: ExtractionResult


class CachedSnippetExtractor:
    """Memoizes :class:`SnippetExtractor` output per root directory.

    An entry stays valid while the newest modification time across the root
    and its walked subdirectories is unchanged. Rebuilds for one root hold
    that root's lock only, so other roots are served concurrently.
    """

    def __init__(
        self,
        extractor: SnippetExtractor | None = None,
        file_system: SnippetFileSystem | None = None,
    ) -> None:
        self._extractor = extractor or SnippetExtractor()
        self._file_system = file_system or self._extractor.file_system
        self._entries: Dict[Path, CacheEntry] = {}
        self._locks: Dict[Path, threading.Lock] = {}
        self._guard = threading.Lock()
        self.logger = get_logger("stores.snippet_cache")

    def get(self, root: Path | str, *, cancel: threading.Event | None = None) -> ExtractionResult:
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Snippet directory not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Snippet root is not a directory: {root_path}")

        with self._lock_for(root_path):
            mtime = self._aggregate_mtime(root_path)
            entry = self._entries.get(root_path)
            if entry is not None and entry.mtime == mtime:
                self.logger.debug("Cache hit for %s", root_path)
                return entry.result

            self.logger.debug("Cache miss for %s; extracting", root_path)
            result = self._extractor.extract(root_path, cancel=cancel)
            self._entries[root_path] = CacheEntry(root=root_path, mtime=mtime, result=result)
            return result

    def peek(self, root: Path | str) -> Optional[CacheEntry]:
        return self._entries.get(Path(root).expanduser().resolve())

    def invalidate(self, root: Path | str) -> None:
        root_path = Path(root).expanduser().resolve()
        with self._lock_for(root_path):
            self._entries.pop(root_path, None)

    def clear(self) -> None:
        with self._guard:
            self._entries.clear()

    def _lock_for(self, root: Path) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(root)
            if lock is None:
                lock = threading.Lock()
                self._locks[root] = lock
            return lock

    def _aggregate_mtime(self, root: Path) -> int:
        directories = [root]
        directories.extend(self._file_system.walk_directories(root))
        return self._file_system.max_mtime(directories)


__all__ = ["CacheEntry", "CachedSnippetExtractor"]
