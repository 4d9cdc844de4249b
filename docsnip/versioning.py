"""Semantic versions and version ranges used to label snippets."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import ClassVar, Optional, Tuple

_VERSION_PATTERN = re.compile(
    r"^[vV]?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


@total_ordering
@dataclass(frozen=True)
class SemanticVersion:
    """A ``major.minor.patch[-prerelease]`` version. Build metadata is dropped."""

    major: int
    minor: int = 0
    patch: int = 0
    prerelease: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "SemanticVersion":
        version = cls.try_parse(text)
        if version is None:
            raise ValueError(f"Invalid version: {text!r}")
        return version

    @classmethod
    def try_parse(cls, text: str) -> Optional["SemanticVersion"]:
        match = _VERSION_PATTERN.match(text.strip())
        if not match:
            return None
        prerelease = match.group("prerelease")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor") or 0),
            patch=int(match.group("patch") or 0),
            prerelease=tuple(prerelease.split(".")) if prerelease else (),
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def next_major(self) -> "SemanticVersion":
        return SemanticVersion(self.major + 1, 0, 0)

    def sort_key(self) -> tuple:
        if not self.prerelease:
            return (self.major, self.minor, self.patch, 1, ())
        identifiers = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part)
            for part in self.prerelease
        )
        return (self.major, self.minor, self.patch, 0, identifiers)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        core = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            return f"{core}-{'.'.join(self.prerelease)}"
        return core


@dataclass(frozen=True)
class VersionRange:
    """Interval of versions; ``None`` bounds are unbounded.

    The usual shape is half-open ``[minimum, maximum)``. A bare version such as
    ``5.0`` parses to the open-ended ``[5.0.0, )``, which the grouper later
    narrows into a bounded range.
    """

    minimum: Optional[SemanticVersion] = None
    maximum: Optional[SemanticVersion] = None
    include_minimum: bool = True
    include_maximum: bool = False

    ALL: ClassVar["VersionRange"]

    @classmethod
    def at_least(cls, version: SemanticVersion) -> "VersionRange":
        return cls(minimum=version)

    @classmethod
    def between(cls, minimum: SemanticVersion, maximum: SemanticVersion) -> "VersionRange":
        return cls(minimum=minimum, maximum=maximum)

    @classmethod
    def parse(cls, text: str) -> "VersionRange":
        parsed = cls.try_parse(text)
        if parsed is None:
            raise ValueError(f"Invalid version range: {text!r}")
        return parsed

    @classmethod
    def try_parse(cls, text: str) -> Optional["VersionRange"]:
        value = text.strip()
        if not value:
            return None
        if value == "*":
            return cls.ALL
        if value[0] in "[(":
            return _parse_interval(value)
        version = SemanticVersion.try_parse(value)
        if version is None:
            return None
        return cls.at_least(version)

    @property
    def is_all(self) -> bool:
        return self.minimum is None and self.maximum is None

    @property
    def is_open_ended(self) -> bool:
        return self.minimum is not None and self.maximum is None

    def contains(self, version: SemanticVersion) -> bool:
        if self.minimum is not None:
            if version < self.minimum:
                return False
            if version == self.minimum and not self.include_minimum:
                return False
        if self.maximum is not None:
            if version > self.maximum:
                return False
            if version == self.maximum and not self.include_maximum:
                return False
        return True

    def overlaps(self, other: "VersionRange") -> bool:
        lower, lower_inclusive = _greater_lower_bound(self, other)
        upper, upper_inclusive = _lesser_upper_bound(self, other)
        if lower is None or upper is None:
            return True
        if lower < upper:
            return True
        return lower == upper and lower_inclusive and upper_inclusive

    def __str__(self) -> str:
        if self.is_all:
            return "*"
        if (
            self.minimum is not None
            and self.minimum == self.maximum
            and self.include_minimum
            and self.include_maximum
        ):
            return f"[{self.minimum}]"
        opening = "[" if self.include_minimum and self.minimum is not None else "("
        closing = "]" if self.include_maximum and self.maximum is not None else ")"
        lower = str(self.minimum) if self.minimum is not None else ""
        upper = str(self.maximum) if self.maximum is not None else ""
        return f"{opening}{lower}, {upper}{closing}"


VersionRange.ALL = VersionRange()


def _parse_interval(value: str) -> Optional[VersionRange]:
    if len(value) < 3 or value[-1] not in "])":
        return None
    include_minimum = value[0] == "["
    include_maximum = value[-1] == "]"
    inner = value[1:-1]
    if "," not in inner:
        exact = SemanticVersion.try_parse(inner)
        if exact is None or not (include_minimum and include_maximum):
            return None
        return VersionRange(exact, exact, True, True)

    lower_text, upper_text = (part.strip() for part in inner.split(",", 1))
    if not lower_text and not upper_text:
        return None
    minimum = SemanticVersion.try_parse(lower_text) if lower_text else None
    maximum = SemanticVersion.try_parse(upper_text) if upper_text else None
    if (lower_text and minimum is None) or (upper_text and maximum is None):
        return None
    if minimum is not None and maximum is not None:
        if maximum < minimum:
            return None
        if minimum == maximum and not (include_minimum and include_maximum):
            return None
    return VersionRange(
        minimum=minimum,
        maximum=maximum,
        include_minimum=include_minimum and minimum is not None,
        include_maximum=include_maximum and maximum is not None,
    )


def _greater_lower_bound(
    first: VersionRange, second: VersionRange
) -> tuple[Optional[SemanticVersion], bool]:
    if first.minimum is None:
        return second.minimum, second.include_minimum
    if second.minimum is None:
        return first.minimum, first.include_minimum
    if first.minimum > second.minimum:
        return first.minimum, first.include_minimum
    if second.minimum > first.minimum:
        return second.minimum, second.include_minimum
    return first.minimum, first.include_minimum and second.include_minimum


def _lesser_upper_bound(
    first: VersionRange, second: VersionRange
) -> tuple[Optional[SemanticVersion], bool]:
    if first.maximum is None:
        return second.maximum, second.include_maximum
    if second.maximum is None:
        return first.maximum, first.include_maximum
    if first.maximum < second.maximum:
        return first.maximum, first.include_maximum
    if second.maximum < first.maximum:
        return second.maximum, second.include_maximum
    return first.maximum, first.include_maximum and second.include_maximum


__all__ = ["SemanticVersion", "VersionRange"]
