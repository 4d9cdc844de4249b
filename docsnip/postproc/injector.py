"""Inject grouped snippets into documents at ``import <key>`` placeholders."""

from __future__ import annotations

import io
import re
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, TextIO, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..logging import get_logger
from ..models import ProcessResult, SnippetGroup, VersionRangeEntry

_TEMPLATE_NAME = "snippet.md.j2"
_FENCES = ("```", "~~~")


def describe_entry(entry: VersionRangeEntry) -> str:
    """Header shown above each version of a multi-version snippet."""
    parts = [part for part in (entry.package, str(entry.version)) if part]
    header = " ".join(parts)
    if entry.is_current:
        header += " (current)"
    return header


class MarkdownProcessor:
    """Streams a document and expands snippet placeholders.

    A placeholder is a line holding only ``<open> import <key> <close>``, e.g.
    ``<!-- import usage -->``. Unknown keys are reported and the placeholder is
    left in place; every other line, including placeholders inside fenced code
    blocks, is copied verbatim.
    """

    def __init__(
        self,
        snippets: Union[Iterable[SnippetGroup], Mapping[str, SnippetGroup]],
        *,
        placeholder_open: str = "<!--",
        placeholder_close: str = "-->",
        templates_dir: Path | None = None,
    ) -> None:
        groups = snippets.values() if isinstance(snippets, Mapping) else snippets
        self._groups: Dict[str, SnippetGroup] = {group.key.lower(): group for group in groups}
        self._pattern = re.compile(
            rf"^\s*{re.escape(placeholder_open)}\s*import\s+(?P<key>\S+)\s*"
            rf"{re.escape(placeholder_close)}\s*$",
            re.IGNORECASE,
        )
        self._env = _create_env(templates_dir)
        self.logger = get_logger("postproc.injector")

    def match_placeholder(self, line: str) -> Optional[str]:
        """Return the lower-cased key when ``line`` is a placeholder."""
        match = self._pattern.match(line.rstrip("\r\n"))
        return match.group("key").lower() if match else None

    def apply(self, reader: Iterable[str], writer: TextIO) -> ProcessResult:
        used: Dict[str, None] = {}
        missing: Dict[str, None] = {}
        in_code = False

        for line in reader:
            stripped = line.strip()
            if stripped.startswith(_FENCES):
                in_code = not in_code
                writer.write(line)
                continue
            key = None if in_code else self.match_placeholder(line)
            if key is None:
                writer.write(line)
                continue

            group = self._groups.get(key)
            if group is None:
                missing.setdefault(key, None)
                writer.write(line)
                continue

            used.setdefault(key, None)
            writer.write(self.render_group(group))

        for key in missing:
            self.logger.warning("No snippet found for placeholder '%s'", key)
        return ProcessResult(used_snippets=list(used), missing_snippets=list(missing))

    def apply_text(self, text: str) -> ProcessResult:
        writer = io.StringIO()
        result = self.apply(io.StringIO(text, newline=""), writer)
        result.output = writer.getvalue()
        return result

    def render_group(self, group: SnippetGroup) -> str:
        template = self._env.get_template(_TEMPLATE_NAME)
        show_header = len(group.entries) > 1
        blocks: List[str] = []
        for entry in group.entries:
            rendered = template.render(
                header=describe_entry(entry) if show_header else "",
                language=group.language,
                content=entry.content,
                entry=entry,
                group=group,
            )
            if not rendered.endswith("\n"):
                rendered += "\n"
            blocks.append(rendered + "\n")
        return "".join(blocks)


def _create_env(templates_dir: Path | None) -> Environment:
    directories: List[str] = []
    if templates_dir is not None:
        directories.append(str(templates_dir))
    directories.append(str(Path(__file__).with_name("templates")))
    return Environment(
        loader=FileSystemLoader(directories),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


__all__ = ["MarkdownProcessor", "describe_entry"]
