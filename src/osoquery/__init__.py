# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Read-only query access to compiled OSL shader (.oso) declarations."""

from osoquery.model import Direction, IndexOutOfRangeError, Metadata, Parameter, ShaderRecord
from osoquery.parser import ErrorKind, LexerError, OsoError, ParseError, ParseOptions, parse, parse_file
from osoquery.search import ShaderNotFoundError, open_shader, resolve_shader_path

__version__ = "0.1.0"

__all__ = [
    "parse",
    "parse_file",
    "ParseOptions",
    "open_shader",
    "resolve_shader_path",
    "ShaderRecord",
    "Parameter",
    "Metadata",
    "Direction",
    "ErrorKind",
    "OsoError",
    "LexerError",
    "ParseError",
    "IndexOutOfRangeError",
    "ShaderNotFoundError",
]
