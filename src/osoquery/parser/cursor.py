# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Per-line token access and per-parse string interning."""

from osoquery.parser.errors import ErrorKind, ParseError
from osoquery.parser.lexer import KEYWORD_TYPES, Token, TokenType

# ###############
# Public Interface
# ###############

# Tokens accepted wherever a name is expected. Keywords are allowed so that a
# parameter may be called e.g. 'color' or 'code'.
NAME_TYPES: frozenset[TokenType] = KEYWORD_TYPES | {TokenType.IDENTIFIER}

LINE_END_TYPES: frozenset[TokenType] = frozenset({TokenType.NEWLINE, TokenType.EOF})


class TokenCursor:
    """Read position within the tokens of a single declaration line.

    The token list must end with its NEWLINE or EOF terminator; the cursor
    never moves past it.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def current(self) -> Token:
        """Return the current (un-consumed) token."""
        return self._tokens[self._pos]

    def peek(self, offset: int = 1) -> Token:
        """Return the token *offset* positions ahead, clamped to the line terminator."""
        return self._tokens[min(self._pos + offset, len(self._tokens) - 1)]

    def advance(self) -> Token:
        """Consume and return the current token, stopping at the line terminator."""
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def check(self, *types: TokenType) -> bool:
        """Return True if the current token matches any of the given types (without consuming)."""
        return self._tokens[self._pos].type in types

    def at_line_end(self) -> bool:
        return self._tokens[self._pos].type in LINE_END_TYPES

    def expect(self, *types: TokenType, what: str) -> Token:
        """Consume the current token if it matches any of the given types.

        Raises ParseError (UNEXPECTED_END_OF_INPUT at the end of the line,
        UNEXPECTED_DECLARATION otherwise) if it does not.
        """
        if self.check(*types):
            return self.advance()
        raise self.unexpected(what)

    def expect_name(self, what: str = "a name") -> Token:
        """Consume an identifier, or a keyword used in a name position."""
        if self._tokens[self._pos].type in NAME_TYPES:
            return self.advance()
        raise self.unexpected(what)

    def unexpected(self, what: str) -> ParseError:
        """Build the error for a missing *what* at the current token."""
        tok = self.current()
        if tok.type in LINE_END_TYPES:
            return error_at(ErrorKind.UNEXPECTED_END_OF_INPUT, f"Expected {what}, got end of line", tok)
        return error_at(ErrorKind.UNEXPECTED_DECLARATION, f"Expected {what}, got {tok.value!r}", tok)


def error_at(kind: ErrorKind, message: str, token: Token) -> ParseError:
    """Build a ParseError located at *token*."""
    return ParseError(kind, message, token.line, token.column)


class StringTable:
    """Intern table owned by a single parse.

    Every name and string value passes through :meth:`intern`, so equal
    strings within one parsed model share a single object. Tables are never
    shared between parses.
    """

    def __init__(self) -> None:
        self._strings: dict[str, str] = {}

    def intern(self, text: str) -> str:
        return self._strings.setdefault(text, text)

    def __len__(self) -> int:
        return len(self._strings)

    def __contains__(self, text: object) -> bool:
        return text in self._strings
