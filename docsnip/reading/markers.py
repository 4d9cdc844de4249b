"""Line-oriented scanner for snippet start/end markers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

_WHITESPACE = re.compile(r"\s+")
_COMMENT_PREFIX = re.compile(r"^[^0-9A-Za-z]+")
_COMMENT_SUFFIX = re.compile(r"[^\w\])]+$")

# Typographic quotes and the replacement character only show up when code was
# pasted through a word processor or mail client.
INVALID_CHARACTERS: Tuple[str, ...] = ("“", "”", "‘", "’", "�")

MAX_SUFFIXES = 2


@dataclass(frozen=True)
class MarkerDialect:
    """Start/end tokens for one marker syntax."""

    name: str
    start_token: str
    end_token: str

    def match_start(self, normalised: str) -> Optional[str]:
        """Return the text after the start token, or ``None`` when not a start line."""
        token_length = len(self.start_token)
        if normalised[:token_length].lower() != self.start_token:
            return None
        return normalised[token_length:]

    def is_end(self, normalised: str) -> bool:
        return normalised.lower().startswith(self.end_token)


INLINE = MarkerDialect(name="inline", start_token="snippet:", end_token="endsnippet")
TAG = MarkerDialect(name="tag", start_token="begin-snippet:", end_token="end-snippet")

DIALECTS = {dialect.name: dialect for dialect in (INLINE, TAG)}
DEFAULT_DIALECTS: Tuple[MarkerDialect, ...] = (INLINE, TAG)


@dataclass(frozen=True)
class MarkerCapture:
    """Body lines found between a start and end marker."""

    key: str
    start_line: int
    end_line: int
    suffixes: Tuple[str, ...]
    lines: Tuple[str, ...]


@dataclass(frozen=True)
class MarkerFault:
    """A marker problem that becomes a per-snippet error record."""

    key: Optional[str]
    line: int
    error: str


ScanItem = Union[MarkerCapture, MarkerFault]


@dataclass
class _LoopState:
    key: str
    start_line: int
    suffixes: Tuple[str, ...]
    dialect: MarkerDialect
    lines: List[str] = field(default_factory=list)


class MarkerScanner:
    """Turns a stream of lines into marker captures in source order."""

    def __init__(self, dialects: Sequence[MarkerDialect] = DEFAULT_DIALECTS) -> None:
        if not dialects:
            raise ValueError("At least one marker dialect is required")
        self.dialects = tuple(dialects)

    def scan(self, lines: Iterable[str]) -> Iterator[ScanItem]:
        state: Optional[_LoopState] = None
        for number, raw_line in enumerate(lines, start=1):
            line = raw_line.rstrip("\r\n")
            normalised = normalise_marker_line(line)
            if state is not None:
                if not state.dialect.is_end(normalised):
                    state.lines.append(line)
                    continue
                yield MarkerCapture(
                    key=state.key,
                    start_line=state.start_line,
                    end_line=number,
                    suffixes=state.suffixes,
                    lines=tuple(state.lines),
                )
                state = None
                continue

            for dialect in self.dialects:
                remainder = dialect.match_start(normalised)
                if remainder is None:
                    continue
                opened = self._open(dialect, remainder, number)
                if isinstance(opened, MarkerFault):
                    yield opened
                else:
                    state = opened
                break

        if state is not None:
            yield MarkerFault(key=state.key, line=state.start_line, error="Snippet was not closed")

    @staticmethod
    def _open(dialect: MarkerDialect, remainder: str, number: int) -> Union[_LoopState, MarkerFault]:
        parts = _COMMENT_SUFFIX.sub("", remainder).split()
        if not parts:
            return MarkerFault(
                key=None,
                line=number,
                error=f"No key specified after '{dialect.start_token}'.",
            )
        key = parts[0].lower()
        suffixes = tuple(parts[1:])
        if len(suffixes) > MAX_SUFFIXES:
            return MarkerFault(
                key=key,
                line=number,
                error=(
                    f"Too many parts in snippet marker '{' '.join(parts)}'. Expected a key "
                    f"followed by at most {MAX_SUFFIXES} suffixes (version and/or package)."
                ),
            )
        return _LoopState(key=key, start_line=number, suffixes=suffixes, dialect=dialect)


def normalise_marker_line(line: str) -> str:
    """Trim, collapse whitespace and drop a leading comment prefix."""
    collapsed = _WHITESPACE.sub(" ", line.strip())
    return _COMMENT_PREFIX.sub("", collapsed)


def trim_blank_padding(lines: Sequence[str]) -> List[str]:
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return list(lines[start:end])


def dedent_lines(lines: Sequence[str]) -> List[str]:
    """Remove the smallest leading indentation shared by all non-blank lines."""
    indents = [len(line) - len(line.lstrip()) for line in lines if line.strip()]
    if not indents:
        return ["" for _ in lines]
    width = min(indents)
    return [line[width:] if line.strip() else "" for line in lines]


def build_content(lines: Sequence[str], newline: str = "\n") -> str:
    return newline.join(dedent_lines(trim_blank_padding(lines)))


def find_invalid_characters(content: str) -> List[str]:
    return [char for char in INVALID_CHARACTERS if char in content]


__all__ = [
    "DEFAULT_DIALECTS",
    "DIALECTS",
    "INLINE",
    "INVALID_CHARACTERS",
    "MarkerCapture",
    "MarkerDialect",
    "MarkerFault",
    "MarkerScanner",
    "TAG",
    "build_content",
    "dedent_lines",
    "find_invalid_characters",
    "normalise_marker_line",
    "trim_blank_padding",
]
