"""Turn a package's discovered versions into contiguous half-open ranges."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from ..versioning import SemanticVersion, VersionRange


class DuplicateVersionError(ValueError):
    """Raised when one package lists the same version more than once."""

    def __init__(self, version: SemanticVersion, package: Optional[str] = None) -> None:
        owner = f" for package '{package}'" if package else ""
        super().__init__(f"Version {version} is declared more than once{owner}")
        self.version = version
        self.package = package


@dataclass(frozen=True)
class VersionSpan:
    """The range assigned to one discovered version."""

    version: SemanticVersion
    range: VersionRange
    is_current: bool


def pick_current(versions: Iterable[SemanticVersion]) -> Optional[SemanticVersion]:
    """Highest stable version, or the highest prerelease when nothing is stable."""
    candidates = list(versions)
    if not candidates:
        return None
    stable = [version for version in candidates if not version.is_prerelease]
    return max(stable) if stable else max(candidates)


def build_version_ranges(
    versions: Sequence[SemanticVersion], package: Optional[str] = None
) -> List[VersionSpan]:
    """Assign ``[version, next)`` ranges, highest version first.

    The highest version is bounded by the next major release; every other
    version is bounded by the version above it, so the ranges never overlap
    and leave no gaps above the lowest version.
    """
    ordered = sorted(versions, reverse=True)
    for higher, lower in zip(ordered, ordered[1:]):
        if higher == lower:
            raise DuplicateVersionError(higher, package)

    current = pick_current(ordered)
    spans: List[VersionSpan] = []
    upper: Optional[SemanticVersion] = None
    for version in ordered:
        maximum = upper if upper is not None else version.next_major()
        spans.append(
            VersionSpan(
                version=version,
                range=VersionRange.between(version, maximum),
                is_current=version == current,
            )
        )
        upper = version
    return spans


__all__ = ["DuplicateVersionError", "VersionSpan", "build_version_ranges", "pick_current"]
