# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Resolution of shader names to .oso files on disk.

A shader may be named with or without its ``.oso`` extension, and may live
next to the caller or in any directory of a search path.
"""

import logging
import os
from collections.abc import Iterator, Sequence
from pathlib import Path

from osoquery.model.entities import ShaderRecord
from osoquery.parser.parser import ParseOptions, parse_file

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

OSO_SUFFIX = ".oso"

SearchPath = str | Sequence[str | Path] | None


class ShaderNotFoundError(FileNotFoundError):
    """Raised when a shader name cannot be resolved to an existing file."""

    def __init__(self, name: str, candidates: list[Path]) -> None:
        super().__init__(f"Shader file not found: {name!r}")
        self.name = name
        self.candidates = candidates


def split_search_path(search_path: SearchPath) -> list[Path]:
    """Normalise *search_path* into a list of directories.

    A string is split on ``os.pathsep`` (':' on POSIX); empty entries are
    dropped.
    """
    if search_path is None:
        return []
    if isinstance(search_path, str):
        return [Path(entry) for entry in search_path.split(os.pathsep) if entry]
    return [Path(entry) for entry in search_path if str(entry)]


def resolve_shader_path(name: str | Path, search_path: SearchPath = None) -> Path:
    """Locate the .oso file for *name*.

    Candidates are tried in order: *name* with ``.oso`` appended (unless it
    already has that suffix), *name* itself, then for each search-path
    directory the joined path and the joined path with ``.oso`` appended.

    Raises:
        ShaderNotFoundError: If no candidate is an existing file.
    """
    tried: list[Path] = []
    for candidate in _candidates(Path(name), split_search_path(search_path)):
        tried.append(candidate)
        if candidate.is_file():
            logger.debug(f"Resolved shader {str(name)!r} to {candidate}")
            return candidate
    raise ShaderNotFoundError(str(name), tried)


def open_shader(
    name: str | Path,
    search_path: SearchPath = None,
    options: ParseOptions | None = None,
) -> ShaderRecord:
    """Resolve *name* against *search_path* and parse the file found."""
    return parse_file(resolve_shader_path(name, search_path), options)


# ################
# Implementation
# ################


def _with_suffix(path: Path) -> Path:
    return path.with_name(path.name + OSO_SUFFIX)


def _candidates(path: Path, directories: list[Path]) -> Iterator[Path]:
    if path.suffix != OSO_SUFFIX:
        yield _with_suffix(path)
    yield path
    if path.is_absolute():
        return
    for directory in directories:
        joined = directory / path
        yield joined
        if path.suffix != OSO_SUFFIX:
            yield _with_suffix(joined)
