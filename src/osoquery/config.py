# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the osoquery configuration file.

Example ``.osoquery.yaml``::

    search-path:
      - shaders
      - /opt/osl/shaders
    color: false
    discard-output-defaults: true
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".osoquery.yaml"


class QueryConfigError(Exception):
    """Raised when a configuration file is invalid or cannot be loaded."""


@dataclass
class QueryConfig:
    """Settings for the osoquery command-line tool.

    Attributes:
        search_path: Directories searched for shaders named on the command line.
            Relative entries are resolved against the config file's directory.
        color: Whether colored output is allowed.
        discard_output_defaults: Accept initial values on output parameters.
    """

    search_path: list[str] = field(default_factory=list)
    color: bool = True
    discard_output_defaults: bool = False


def load_query_config(path: Path) -> QueryConfig:
    """Load and parse an osoquery configuration file.

    Args:
        path: Path to the `.osoquery.yaml` file.

    Returns:
        A QueryConfig instance populated from the file.

    Raises:
        QueryConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise QueryConfigError(f"Config file not found: {path}") from None
    except OSError as exc:
        raise QueryConfigError(f"Cannot read config file: {exc}") from exc

    config = _parse_query_config(text, source_label=str(path))
    base = path.parent
    config.search_path = [str(base / entry) for entry in config.search_path]
    return config


def find_query_config(directory: Path) -> Path | None:
    """Return the config file in *directory* or its nearest ancestor, if any."""
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


# ################
# Implementation
# ################


def _parse_query_config(text: str, source_label: str = "<string>") -> QueryConfig:
    """Parse config YAML text into a QueryConfig.

    An empty document yields the default configuration.

    Raises:
        QueryConfigError: If the YAML is invalid or a field has the wrong type.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise QueryConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        return QueryConfig()
    if not isinstance(data, dict):
        raise QueryConfigError(f"{source_label}: config must be a YAML mapping")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise QueryConfigError(f"{source_label}: unknown field(s): {', '.join(map(str, unknown))}")

    config = QueryConfig()
    if "search-path" in data:
        config.search_path = _parse_search_path(data["search-path"], source_label)
    if "color" in data:
        config.color = _require_bool(data, "color", source_label)
    if "discard-output-defaults" in data:
        config.discard_output_defaults = _require_bool(data, "discard-output-defaults", source_label)
    return config


_KNOWN_KEYS = frozenset({"search-path", "color", "discard-output-defaults"})


def _parse_search_path(value: object, source_label: str) -> list[str]:
    """Accept either a list of strings or a single colon-separated string."""
    if isinstance(value, str):
        return [entry for entry in value.split(":") if entry]
    if not isinstance(value, list):
        raise QueryConfigError(f"{source_label}: 'search-path' must be a list or a string")
    for index, entry in enumerate(value):
        if not isinstance(entry, str):
            raise QueryConfigError(f"{source_label}: search-path[{index}] must be a string")
    return list(value)


def _require_bool(mapping: dict[str, object], key: str, source_label: str) -> bool:
    value = mapping[key]
    if not isinstance(value, bool):
        raise QueryConfigError(f"{source_label}: '{key}' must be true or false")
    return value
