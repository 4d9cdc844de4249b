"""Configuration loading for docsnip (.docsnip.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".docsnip.yml"

_NEWLINES = {"lf": "\n", "crlf": "\r\n", "\n": "\n", "\r\n": "\r\n"}
_DIALECT_NAMES = ("inline", "tag")


class ConfigurationError(RuntimeError):
    """Raised when a deployment's extractors or settings are broken."""


class ConfigError(ConfigurationError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class MarkerConfig:
    """Snippet marker syntax accepted while scanning source files."""

    dialects: List[str] = field(default_factory=lambda: list(_DIALECT_NAMES))
    newline: str = "\n"


@dataclass
class ExtractConfig:
    """Which directories and files are scanned for snippets."""

    exclude_dirs: List[str] = field(default_factory=list)
    extensions: List[str] = field(default_factory=list)
    exclude_files: List[str] = field(default_factory=list)


@dataclass
class PackageConfig:
    """Package alias translation and per-component ordering."""

    aliases: Dict[str, str] = field(default_factory=dict)
    strict_aliases: bool = False
    order: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class PlaceholderConfig:
    """Comment syntax wrapped around ``import <key>`` placeholders."""

    open: str = "<!--"
    close: str = "-->"


@dataclass
class RenderConfig:
    templates_dir: Optional[Path] = None


@dataclass
class DocSnipConfig:
    """Represents the settings defined in .docsnip.yml."""

    root: Path
    markers: MarkerConfig = field(default_factory=MarkerConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    packages: PackageConfig = field(default_factory=PackageConfig)
    placeholder: PlaceholderConfig = field(default_factory=PlaceholderConfig)
    render: RenderConfig = field(default_factory=RenderConfig)


def load_config(config_path: Path) -> DocSnipConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocSnipConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    markers = MarkerConfig()
    marker_data = _as_dict(data.get("markers"))
    if marker_data:
        if "dialects" in marker_data:
            dialects = [name.lower() for name in _as_str_list(marker_data.get("dialects"))]
            unknown = sorted(set(dialects) - set(_DIALECT_NAMES))
            if unknown:
                raise ConfigError(
                    f"Unknown marker dialects: {', '.join(unknown)} "
                    f"(expected any of {', '.join(_DIALECT_NAMES)})"
                )
            if not dialects:
                raise ConfigError("markers.dialects must list at least one dialect")
            markers.dialects = dialects
        newline = _as_str(marker_data.get("newline"))
        if newline is not None:
            if newline.lower() not in _NEWLINES:
                raise ConfigError(f"markers.newline must be 'lf' or 'crlf', got {newline!r}")
            markers.newline = _NEWLINES[newline.lower()]

    extract_data = _as_dict(data.get("extract"))
    extract = ExtractConfig(
        exclude_dirs=_as_str_list(extract_data.get("exclude_dirs")),
        extensions=_as_str_list(extract_data.get("extensions")),
        exclude_files=_as_str_list(extract_data.get("exclude_files")),
    )

    package_data = _as_dict(data.get("packages"))
    packages = PackageConfig(
        aliases={
            str(alias): str(name)
            for alias, name in _as_dict(package_data.get("aliases")).items()
            if _as_str(name)
        },
        strict_aliases=_as_bool(package_data.get("strict_aliases")) or False,
        order={
            str(component): _as_str_list(names)
            for component, names in _as_dict(package_data.get("order")).items()
        },
    )

    placeholder_data = _as_dict(data.get("placeholder"))
    placeholder = PlaceholderConfig(
        open=_as_str(placeholder_data.get("open")) or PlaceholderConfig.open,
        close=_as_str(placeholder_data.get("close")) or PlaceholderConfig.close,
    )

    render_data = _as_dict(data.get("render"))
    templates_dir_str = _as_str(render_data.get("templates_dir"))
    render = RenderConfig(templates_dir=root / templates_dir_str if templates_dir_str else None)

    return DocSnipConfig(
        root=root,
        markers=markers,
        extract=extract,
        packages=packages,
        placeholder=placeholder,
        render=render,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "ConfigurationError",
    "DocSnipConfig",
    "ExtractConfig",
    "MarkerConfig",
    "PackageConfig",
    "PlaceholderConfig",
    "RenderConfig",
    "load_config",
]
