# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the osoquery configuration file."""

from pathlib import Path

import pytest

from osoquery.config import (
    CONFIG_FILE_NAME,
    QueryConfig,
    QueryConfigError,
    find_query_config,
    load_query_config,
)

# ###############
# Helpers
# ###############


def _write_config(tmp_path: Path, content: str) -> Path:
    """Write a config file and return its path."""
    config_file = tmp_path / CONFIG_FILE_NAME
    config_file.write_text(content, encoding="utf-8")
    return config_file


# ###############
# Normal Cases
# ###############


def test_empty_config_gives_defaults(tmp_path: Path) -> None:
    """An empty file yields the default configuration."""
    config = load_query_config(_write_config(tmp_path, ""))
    assert config == QueryConfig()
    assert config.color is True
    assert config.discard_output_defaults is False


def test_full_config(tmp_path: Path) -> None:
    """All fields are read and relative search-path entries resolve against the file's directory."""
    content = """\
search-path:
  - shaders
  - /opt/osl/shaders
color: false
discard-output-defaults: true
"""
    config = load_query_config(_write_config(tmp_path, content))

    assert config.search_path == [str(tmp_path / "shaders"), "/opt/osl/shaders"]
    assert config.color is False
    assert config.discard_output_defaults is True


def test_search_path_as_string(tmp_path: Path) -> None:
    """A colon-separated string is accepted for search-path."""
    config = load_query_config(_write_config(tmp_path, "search-path: a:b\n"))
    assert config.search_path == [str(tmp_path / "a"), str(tmp_path / "b")]


def test_find_config_in_parent(tmp_path: Path) -> None:
    """The nearest config file in an ancestor directory is found."""
    config_file = _write_config(tmp_path, "color: false\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert find_query_config(nested) == config_file


def test_find_config_none(tmp_path: Path) -> None:
    """A directory tree without a config file yields None."""
    nested = tmp_path / "empty"
    nested.mkdir()
    found = find_query_config(nested)
    assert found is None or not found.is_relative_to(tmp_path)


# ###############
# Error Cases
# ###############


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(QueryConfigError, match="not found"):
        load_query_config(tmp_path / CONFIG_FILE_NAME)


def test_invalid_yaml(tmp_path: Path) -> None:
    with pytest.raises(QueryConfigError, match="Invalid YAML"):
        load_query_config(_write_config(tmp_path, "color: [unclosed\n"))


def test_not_a_mapping(tmp_path: Path) -> None:
    with pytest.raises(QueryConfigError, match="must be a YAML mapping"):
        load_query_config(_write_config(tmp_path, "- a\n- b\n"))


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("color: maybe\n", "'color' must be true or false"),
        ("discard-output-defaults: 1\n", "'discard-output-defaults' must be true or false"),
        ("search-path: 42\n", "'search-path' must be a list or a string"),
        ("search-path:\n  - 1\n", r"search-path\[0\] must be a string"),
        ("colour: false\n", "unknown field"),
    ],
)
def test_invalid_fields(tmp_path: Path, content: str, message: str) -> None:
    with pytest.raises(QueryConfigError, match=message):
        load_query_config(_write_config(tmp_path, content))
