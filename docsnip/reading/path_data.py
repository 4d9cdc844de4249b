"""Derive version/package/component metadata from directory and file names."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from ..config import ConfigurationError
from ..models import PathContext
from ..versioning import SemanticVersion, VersionRange


class PathDataError(ConfigurationError):
    """Raised when a path extractor returns contradictory metadata."""


class _Inherit:
    _instance: Optional["_Inherit"] = None

    def __new__(cls) -> "_Inherit":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "INHERIT"


INHERIT = _Inherit()


@dataclass(frozen=True)
class PathData:
    """Metadata declared by a single path.

    Each field is either :data:`INHERIT` (take the parent's value) or an
    explicit value. An explicit ``None`` is a configuration error.
    """

    version: Union[VersionRange, None, _Inherit] = INHERIT
    package: Union[str, None, _Inherit] = INHERIT
    component: Union[str, None, _Inherit] = INHERIT

    @property
    def declares_unit(self) -> bool:
        """True when the path pins both a package and a concrete minimum version."""
        return (
            isinstance(self.package, str)
            and isinstance(self.version, VersionRange)
            and self.version.minimum is not None
        )


PathDataExtractor = Callable[[Path], PathData]


def resolve_path_data(parent: PathContext, data: PathData, path: Path | str) -> PathContext:
    """Combine a path's declared metadata with the inherited context."""
    if not isinstance(data, PathData):
        raise PathDataError(f"Path extractor returned {type(data).__name__} for '{path}', expected PathData.")
    return PathContext(
        version=_pick(data.version, parent.version, "version", path),
        package=_pick(data.package, parent.package, "package", path),
        component=_pick(data.component, parent.component, "component", path),
    )


def _pick(value, inherited, field_name: str, path: Path | str):
    if value is INHERIT:
        return inherited
    if value is None:
        raise PathDataError(
            f"Path extractor declared an explicit {field_name} for '{path}' but supplied no value."
        )
    if isinstance(value, str) and not value.strip():
        raise PathDataError(f"Path extractor returned an empty {field_name} for '{path}'.")
    return value


_UNIT_PATTERN = re.compile(r"^(?P<alias>[A-Za-z][\w.-]*?)_(?P<version>[vV]?\d[\w.+-]*)$")
_ALL_PATTERN = re.compile(r"^(?P<alias>[A-Za-z][\w.-]*)_all$", re.IGNORECASE)


class ConventionPathDataExtractor:
    """Directory naming convention used by versioned documentation repositories.

    * ``<alias>_<version>`` declares a package-version unit.
    * ``<alias>_All`` declares a package that applies to every version.
    * ``Shared`` applies to every version of the inherited package.
    * A directory directly below ``root`` names a component.
    """

    def __init__(self, root: Path | None = None, shared_names: Iterable[str] = ("shared",)) -> None:
        self.root = root.resolve() if root is not None else None
        self.shared_names = {name.lower() for name in shared_names}

    def __call__(self, path: Path) -> PathData:
        name = path.name
        if name.lower() in self.shared_names:
            return PathData(version=VersionRange.ALL)

        match = _ALL_PATTERN.match(name)
        if match:
            return PathData(version=VersionRange.ALL, package=match.group("alias"))

        match = _UNIT_PATTERN.match(name)
        if match:
            version = SemanticVersion.try_parse(match.group("version"))
            if version is not None:
                return PathData(
                    version=VersionRange.at_least(version),
                    package=match.group("alias"),
                )

        if self.root is not None and path.parent == self.root:
            return PathData(component=name)
        return PathData()


def inherit_all(path: Path) -> PathData:
    """File extractor that lets every file take its directory's metadata."""
    return PathData()


__all__ = [
    "ConfigurationError",
    "ConventionPathDataExtractor",
    "INHERIT",
    "PathData",
    "PathDataError",
    "PathDataExtractor",
    "inherit_all",
    "resolve_path_data",
]
