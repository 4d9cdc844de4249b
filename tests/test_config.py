"""Tests for docsnip.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from docsnip.config import ConfigError, ConfigurationError, DocSnipConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, DocSnipConfig)
    assert config.root == tmp_path.resolve()
    assert config.markers.dialects == ["inline", "tag"]
    assert config.markers.newline == "\n"
    assert config.extract.exclude_dirs == []
    assert config.extract.extensions == []
    assert config.packages.aliases == {}
    assert config.packages.strict_aliases is False
    assert config.placeholder.open == "<!--"
    assert config.placeholder.close == "-->"
    assert config.render.templates_dir is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".docsnip.yml"
    config_file.write_text(
        """
markers:
  dialects: [Tag]
  newline: crlf
extract:
  exclude_dirs:
    - "drafts/"
  extensions: [cs, ".vb"]
  exclude_files:
    - "*.g.cs"
packages:
  aliases:
    Core: NServiceBus
  strict_aliases: "yes"
  order:
    Gateway: [NServiceBus.Gateway, NServiceBus]
placeholder:
  open: "{{"
  close: "}}"
render:
  templates_dir: "docs/templates"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.markers.dialects == ["tag"]
    assert config.markers.newline == "\r\n"
    assert config.extract.exclude_dirs == ["drafts/"]
    assert config.extract.extensions == ["cs", ".vb"]
    assert config.extract.exclude_files == ["*.g.cs"]
    assert config.packages.aliases == {"Core": "NServiceBus"}
    assert config.packages.strict_aliases is True
    assert config.packages.order == {"Gateway": ["NServiceBus.Gateway", "NServiceBus"]}
    assert config.placeholder.open == "{{"
    assert config.placeholder.close == "}}"
    assert config.render.templates_dir == tmp_path.resolve() / "docs" / "templates"


def test_load_config_rejects_unknown_dialect(tmp_path: Path) -> None:
    (tmp_path / ".docsnip.yml").write_text("markers:\n  dialects: [region]\n", encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)

    assert "region" in str(excinfo.value)


def test_load_config_rejects_bad_newline(tmp_path: Path) -> None:
    (tmp_path / ".docsnip.yml").write_text("markers:\n  newline: cr\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    (tmp_path / ".docsnip.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(tmp_path)


def test_load_config_wraps_yaml_errors(tmp_path: Path) -> None:
    (tmp_path / ".docsnip.yml").write_text("markers: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)

    assert excinfo.value.__cause__ is not None


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".docsnip.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.markers.dialects == ["inline", "tag"]
