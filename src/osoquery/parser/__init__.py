# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexer and declaration parser for .oso files."""

from osoquery.parser.errors import ErrorKind, LexerError, OsoError, ParseError
from osoquery.parser.lexer import Lexer, Token, TokenType, tokenize
from osoquery.parser.parser import ParseOptions, parse, parse_file

__all__ = [
    "parse",
    "parse_file",
    "ParseOptions",
    "tokenize",
    "Lexer",
    "Token",
    "TokenType",
    "ErrorKind",
    "OsoError",
    "LexerError",
    "ParseError",
]
