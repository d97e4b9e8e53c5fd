"""Tests for docmigrate.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from docmigrate.config import DEFAULT_CALLOUTS, ConfigError, MigrationConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, MigrationConfig)
    assert config.root == tmp_path.resolve()
    assert config.include == ["*.md", "*.mdx"]
    assert config.source_extensions == [".md", ".mdx"]
    assert config.target_extension == ".mdx"
    assert config.assets_root is None
    assert config.assets_url == "/assets"
    assert config.rewrite_front_matter is False
    assert config.callouts == DEFAULT_CALLOUTS
    assert config.navigation.docs_json is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".docmigrate.yml"
    config_file.write_text(
        """
include: ["*.md"]
exclude_paths:
  - "drafts/"
target_extension: "mdx"
image_extensions: [png, "svg"]
assets_root: "../mintlify/assets"
assets_url: "media/"
staging_dir: "tmp/stage"
rewrite_front_matter: "yes"
known_products: [sdk, ibc]
callouts:
  Important: Warning
  note: Info
navigation:
  docs_json: "../mintlify/docs.json"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)
    root = tmp_path.resolve()

    assert config.include == ["*.md"]
    assert config.source_extensions == [".md"]
    assert config.exclude_paths == ["drafts/"]
    assert config.target_extension == ".mdx"
    assert config.image_extensions == [".png", ".svg"]
    assert config.assets_root == root / "../mintlify/assets"
    assert config.assets_url == "/media"
    assert config.staging_dir == root / "tmp/stage"
    assert config.rewrite_front_matter is True
    assert config.known_products == ["sdk", "ibc"]
    assert config.callouts["important"] == "Warning"
    assert config.callouts["note"] == "Info"
    assert config.callouts["tip"] == "Tip"
    assert config.navigation.docs_json == root / "../mintlify/docs.json"
    assert config.navigation.versions_json is None


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".docmigrate.yml").write_text("include: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_requires_mapping(tmp_path: Path) -> None:
    (tmp_path / ".docmigrate.yml").write_text("- one\n- two\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_lowercase_callout_tags(tmp_path: Path) -> None:
    (tmp_path / ".docmigrate.yml").write_text("callouts:\n  note: info\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_empty_config_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / ".docmigrate.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).include == ["*.md", "*.mdx"]


def test_load_config_rejects_undecodable_file(tmp_path: Path) -> None:
    (tmp_path / ".docmigrate.yml").write_bytes(b"\xff\xfe bad")

    with pytest.raises(ConfigError, match="Failed to read"):
        load_config(tmp_path)


def test_load_config_reports_unreadable_path(tmp_path: Path) -> None:
    (tmp_path / ".docmigrate.yml").mkdir()

    with pytest.raises(ConfigError, match="Failed to read"):
        load_config(tmp_path)
