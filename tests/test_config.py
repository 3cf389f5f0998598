"""Tests for contractweaver.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from contractweaver.config import (
    ConfigError,
    RuntimeConfig,
    WeaverConfig,
    WeavingConfig,
    load_config,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, WeaverConfig)
    assert config.root == tmp_path.resolve()
    assert config.runtime == RuntimeConfig()
    assert config.weaving == WeavingConfig()
    assert config.weaving.accessor_hooks == ["__get", "__set"]
    assert config.weaving.chunk_size is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".contractweaver.yml"
    config_file.write_text(
        """
runtime:
  context_class: "\\\\Acme\\\\Contracts"
  context_variable: "ctx"
  result_variable: "$out"
  exception_class: "\\\\Throwable"
weaving:
  original_suffix: "__wrapped"
  accessor_hooks: [__get, __set, __call]
  dir_constant: ACME_DIR
  file_constant: ACME_FILE
  chunk_size: 4096
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.root == tmp_path.resolve()
    assert config.runtime.context_class == "\\Acme\\Contracts"
    assert config.runtime.context_variable == "$ctx"
    assert config.runtime.result_variable == "$out"
    assert config.runtime.exception_class == "\\Throwable"
    assert config.weaving.original_suffix == "__wrapped"
    assert config.weaving.accessor_hooks == ["__get", "__set", "__call"]
    assert config.weaving.dir_constant == "ACME_DIR"
    assert config.weaving.file_constant == "ACME_FILE"
    assert config.weaving.chunk_size == 4096


def test_load_config_accepts_custom_yaml_file_name(tmp_path: Path) -> None:
    config_file = tmp_path / "weaver.yaml"
    config_file.write_text("weaving:\n  original_suffix: __alt\n", encoding="utf-8")

    config = load_config(config_file)

    assert config.weaving.original_suffix == "__alt"


def test_load_config_treats_non_positive_chunk_size_as_whole_file(tmp_path: Path) -> None:
    (tmp_path / ".contractweaver.yml").write_text("weaving:\n  chunk_size: 0\n", encoding="utf-8")

    assert load_config(tmp_path).weaving.chunk_size is None


def test_load_config_allows_empty_file(tmp_path: Path) -> None:
    (tmp_path / ".contractweaver.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).weaving == WeavingConfig()


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".contractweaver.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".contractweaver.yml").write_text("weaving: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_identical_substitution_constants(tmp_path: Path) -> None:
    (tmp_path / ".contractweaver.yml").write_text(
        "weaving:\n  dir_constant: SAME\n  file_constant: SAME\n", encoding="utf-8"
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)
