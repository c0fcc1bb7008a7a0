# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Error taxonomy shared by the OSO lexer and parser."""

import enum

# ###############
# Public Interface
# ###############


class ErrorKind(enum.Enum):
    """Classification of every failure the parser can report."""

    MALFORMED_TOKEN = "MalformedToken"
    UNKNOWN_TYPE = "UnknownType"
    INVALID_ARRAY_SIZE = "InvalidArraySize"
    ARITY_MISMATCH = "ArityMismatch"
    TYPE_MISMATCH = "TypeMismatch"
    UNEXPECTED_DECLARATION = "UnexpectedDeclaration"
    DUPLICATE_PARAMETER_NAME = "DuplicateParameterName"
    UNEXPECTED_END_OF_INPUT = "UnexpectedEndOfInput"


class OsoError(Exception):
    """Base class for failures raised while reading an OSO file.

    Attributes:
        kind: The classified failure kind.
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, kind: ErrorKind, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.kind = kind
        self.message = message
        self.line = line
        self.column = column


class LexerError(OsoError):
    """Raised when the scanner encounters an invalid character or malformed literal."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(ErrorKind.MALFORMED_TOKEN, message, line, column)


class ParseError(OsoError):
    """Raised when a declaration is structurally or type-wise invalid."""
