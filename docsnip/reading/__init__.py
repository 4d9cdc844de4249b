"""Snippet readers: marker scanning, path metadata and directory walking."""

from .directory_extractor import DirectoryReadResult, DirectorySnippetExtractor, ExtractionCancelled
from .file_extractor import AliasTranslator, FileSnippetExtractor
from .filesystem import LocalFileSystem
from .markers import DEFAULT_DIALECTS, INLINE, TAG, MarkerDialect, MarkerScanner
from .path_data import INHERIT, ConventionPathDataExtractor, PathData

__all__ = [
    "AliasTranslator",
    "ConventionPathDataExtractor",
    "DEFAULT_DIALECTS",
    "DirectoryReadResult",
    "DirectorySnippetExtractor",
    "ExtractionCancelled",
    "FileSnippetExtractor",
    "INHERIT",
    "INLINE",
    "LocalFileSystem",
    "MarkerDialect",
    "MarkerScanner",
    "PathData",
    "TAG",
]
