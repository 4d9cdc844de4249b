"""Resolve the optional version/package suffixes of a start marker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from ..versioning import VersionRange


class SuffixError(ValueError):
    """Raised when marker suffixes cannot be resolved to a version and package."""


@dataclass(frozen=True)
class SuffixResolution:
    version: VersionRange
    package: Optional[str]


@dataclass(frozen=True)
class SuffixRule:
    """One disambiguation step: ``resolve`` runs only when ``applies`` matches."""

    name: str
    applies: Callable[[Sequence[str]], bool]
    resolve: Callable[[Sequence[str], VersionRange, Optional[str]], SuffixResolution]


def starts_with_letter(token: str) -> bool:
    return bool(token) and token[0].isalpha()


def _is_version(token: str) -> bool:
    return VersionRange.try_parse(token) is not None


def _inherit_both(
    tokens: Sequence[str], parent_version: VersionRange, parent_package: Optional[str]
) -> SuffixResolution:
    return SuffixResolution(version=parent_version, package=parent_package)


def _single_version(
    tokens: Sequence[str], parent_version: VersionRange, parent_package: Optional[str]
) -> SuffixResolution:
    return SuffixResolution(version=VersionRange.parse(tokens[0]), package=parent_package)


def _single_package(
    tokens: Sequence[str], parent_version: VersionRange, parent_package: Optional[str]
) -> SuffixResolution:
    return SuffixResolution(version=parent_version, package=tokens[0])


def _version_and_package(
    tokens: Sequence[str], parent_version: VersionRange, parent_package: Optional[str]
) -> SuffixResolution:
    # Whichever token parses as a version wins that role, regardless of position.
    for index, token in enumerate(tokens):
        version = VersionRange.try_parse(token)
        if version is None:
            continue
        other = tokens[1 - index]
        if not starts_with_letter(other):
            raise SuffixError(
                f"Was able to parse '{token}' as a version. But '{other}' is not a "
                "package, it must start with a letter."
            )
        return SuffixResolution(version=version, package=other)
    raise SuffixError(
        f"Was not able to parse either '{tokens[0]}' or '{tokens[1]}' as a version."
    )


DEFAULT_RULES: Tuple[SuffixRule, ...] = (
    SuffixRule("inherit", lambda tokens: len(tokens) == 0, _inherit_both),
    SuffixRule(
        "version",
        lambda tokens: len(tokens) == 1 and _is_version(tokens[0]),
        _single_version,
    ),
    SuffixRule(
        "package",
        lambda tokens: len(tokens) == 1 and starts_with_letter(tokens[0]),
        _single_package,
    ),
    SuffixRule("version-and-package", lambda tokens: len(tokens) == 2, _version_and_package),
)


def resolve_suffixes(
    tokens: Sequence[str],
    parent_version: VersionRange,
    parent_package: Optional[str],
    rules: Sequence[SuffixRule] = DEFAULT_RULES,
) -> SuffixResolution:
    """Resolve marker suffixes against inherited defaults.

    Rules are evaluated in order and the first applicable one decides. When no
    rule applies a :class:`SuffixError` describes what was expected.
    """
    for rule in rules:
        if rule.applies(tokens):
            return rule.resolve(tokens, parent_version, parent_package)
    if len(tokens) == 1:
        raise SuffixError(
            f"Expected '{tokens[0]}' to be either parsable as a version or a package "
            "(starts with a letter)."
        )
    joined = "', '".join(tokens)
    raise SuffixError(f"Expected at most two suffixes (a version and a package), got '{joined}'.")


__all__ = [
    "DEFAULT_RULES",
    "SuffixError",
    "SuffixResolution",
    "SuffixRule",
    "resolve_suffixes",
    "starts_with_letter",
]
