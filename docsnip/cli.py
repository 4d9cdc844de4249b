"""CLI entrypoints for docsnip commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigurationError, DocSnipConfig, load_config
from .extraction import build_extractor, build_processor
from .logging import configure_logging
from .models import ExtractionResult


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Log every file read and cache decision.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_quiet_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Only log warnings and errors.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-q", "--quiet", **kwargs)


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a .docsnip.yml file (defaults to the one in the snippet directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsnip",
        description="Extract versioned code snippets and inject them into Markdown documents.",
    )
    _add_verbose_option(parser)
    _add_quiet_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser(
        "extract",
        help="List the snippet groups, errors and conflicts found under a directory.",
    )
    _add_verbose_option(extract_parser, suppress_default=True)
    _add_quiet_option(extract_parser, suppress_default=True)
    _add_config_option(extract_parser)
    extract_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Snippet directory to scan (defaults to current directory).",
    )
    extract_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any snippet error or conflict is found.",
    )

    inject_parser = subparsers.add_parser(
        "inject",
        help="Replace import placeholders in a document with extracted snippets.",
    )
    _add_verbose_option(inject_parser, suppress_default=True)
    _add_quiet_option(inject_parser, suppress_default=True)
    _add_config_option(inject_parser)
    inject_parser.add_argument("document", help="Markdown document containing placeholders.")
    inject_parser.add_argument(
        "--snippets",
        required=True,
        help="Snippet directory to extract from.",
    )
    inject_parser.add_argument(
        "--output",
        default=None,
        help="Write the rendered document here instead of standard output.",
    )
    inject_parser.add_argument(
        "--check",
        action="store_true",
        help="Only report missing placeholders; write nothing.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docsnip commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet))

    if args.command == "extract":
        try:
            config = _load(args.config, Path(args.path))
            result = build_extractor(config).extract(args.path)
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except ConfigurationError as exc:
            parser.exit(1, f"docsnip extract failed: {exc}\n")
        _print_report(result)
        if args.strict and (result.errors or result.conflicts):
            parser.exit(1, "Snippet errors or conflicts found.\n")
    elif args.command == "inject":
        document = Path(args.document)
        try:
            config = _load(args.config, Path(args.snippets))
            result = build_extractor(config).extract(args.snippets)
            with document.open("r", encoding="utf-8", newline="") as handle:
                text = handle.read()
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except ConfigurationError as exc:
            parser.exit(1, f"docsnip inject failed: {exc}\n")

        processed = build_processor(config, result).apply_text(text)
        if not args.check:
            if args.output:
                with Path(args.output).open("w", encoding="utf-8", newline="") as handle:
                    handle.write(processed.output)
            else:
                sys.stdout.write(processed.output)
        if processed.missing_snippets:
            parser.exit(
                1,
                f"Missing snippets: {', '.join(processed.missing_snippets)}\n",
            )
        if args.check:
            print(f"All {len(processed.used_snippets)} placeholders resolved")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _load(config_path: str | None, snippets_dir: Path) -> DocSnipConfig:
    return load_config(Path(config_path) if config_path else snippets_dir)


def _print_report(result: ExtractionResult) -> None:
    for group in result.groups:
        versions = ", ".join(
            " ".join(part for part in (entry.package, str(entry.version)) if part)
            for entry in group.entries
        )
        print(f"{group.key} [{group.language}] {versions}")
    for error in result.errors:
        label = f"'{error.key}' " if error.key else ""
        print(f"error: {label}{error.file_location}: {error.error}")
    for conflict in result.conflicts:
        print(f"conflict ({conflict.kind}): {conflict.message}")


if __name__ == "__main__":
    main(sys.argv[1:])
