# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for .oso files.

Converts raw source text into a stream of tokens for the declaration parser.
Unlike free-form languages, OSO is line oriented, so line breaks are emitted
as NEWLINE tokens instead of being discarded with the other whitespace.
"""

import enum
from collections.abc import Iterator
from dataclasses import dataclass

from osoquery.parser.errors import LexerError

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """All token types produced by the OSO lexer."""

    # Declaration keywords
    PARAM = "param"
    OPARAM = "oparam"
    SHADER = "shader"
    CLOSURE = "closure"
    CODE = "code"

    # Base type keywords
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    POINT = "point"
    VECTOR = "vector"
    NORMAL = "normal"
    COLOR = "color"
    MATRIX = "matrix"
    STRUCT = "struct"
    VOID = "void"

    # Punctuation
    LBRACKET = "["
    RBRACKET = "]"
    LBRACE = "{"
    RBRACE = "}"
    COMMA = ","
    PERCENT = "%"

    # Literals
    STRING_LITERAL = "STRING_LITERAL"
    INTEGER_LITERAL = "INTEGER_LITERAL"
    FLOAT_LITERAL = "FLOAT_LITERAL"

    # Identifiers
    IDENTIFIER = "IDENTIFIER"

    # Line and input terminators
    NEWLINE = "NEWLINE"
    EOF = "EOF"


BASE_TYPE_KEYWORDS: frozenset[TokenType] = frozenset(
    {
        TokenType.INT,
        TokenType.FLOAT,
        TokenType.STRING,
        TokenType.POINT,
        TokenType.VECTOR,
        TokenType.NORMAL,
        TokenType.COLOR,
        TokenType.MATRIX,
        TokenType.STRUCT,
        TokenType.VOID,
    }
)

KEYWORD_TYPES: frozenset[TokenType] = BASE_TYPE_KEYWORDS | {
    TokenType.PARAM,
    TokenType.OPARAM,
    TokenType.SHADER,
    TokenType.CLOSURE,
    TokenType.CODE,
}


@dataclass(frozen=True)
class Token:
    """A lexical token with its source location.

    Attributes:
        type: The kind of token.
        value: The raw text of the token (or decoded string content for STRING_LITERAL tokens).
        line: 1-based line number where the token starts.
        column: 1-based column number where the token starts.
    """

    type: TokenType
    value: str
    line: int
    column: int


class Lexer:
    """Lazy token stream over OSO source text.

    Iterating a Lexer scans on demand, so a consumer that stops early (for
    example at the start of the instruction section) never pays for, or fails
    on, the rest of the file. Every call to ``iter()`` restarts from the first
    character.
    """

    def __init__(self, source: str) -> None:
        self._source = source

    def __iter__(self) -> Iterator[Token]:
        return _Scanner(self._source).scan()


def tokenize(source: str) -> list[Token]:
    """Tokenize OSO source text into a list of tokens.

    Comments and horizontal whitespace are consumed and not included in the
    output. Each line break yields a NEWLINE token and the final token is
    always an EOF token.

    Args:
        source: The full text of an .oso file.

    Returns:
        A list of Token objects ending with a single EOF token.

    Raises:
        LexerError: On unexpected characters, unterminated string literals,
            or malformed numeric literals.
    """
    return list(Lexer(source))


# ################
# Implementation
# ################

_KEYWORDS: dict[str, TokenType] = {t.value: t for t in KEYWORD_TYPES}

_SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ",": TokenType.COMMA,
    "%": TokenType.PERCENT,
}

_SIMPLE_ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
    "'": "'",
}

_OCTAL_DIGITS = "01234567"
_HEX_DIGITS = "0123456789abcdefABCDEF"
_NON_FINITE = ("inf", "nan")


def _is_identifier_start(ch: str) -> bool:
    return ch.isalpha() or ch in "_$"


def _is_identifier_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_$."


def _flush_bytes(pending: bytearray, chars: list[str]) -> None:
    if pending:
        chars.append(pending.decode("utf-8", errors="surrogateescape"))
        pending.clear()


class _Scanner:
    """Internal scanner state machine."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._column = 1

    def scan(self) -> Iterator[Token]:
        """Yield tokens one at a time, ending with the terminal EOF."""
        while True:
            self._skip_blanks_and_comments()
            if self._pos >= len(self._source):
                break
            yield self._scan_token()
        yield Token(TokenType.EOF, "", self._line, self._column)

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _peek(self, offset: int = 1) -> str:
        """Return the character *offset* positions ahead, or '' past end of input."""
        if self._pos + offset < len(self._source):
            return self._source[self._pos + offset]
        return ""

    def _advance(self) -> str:
        """Consume the current character, update position tracking, and return it."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    # ------------------------------------------------------------------
    # Whitespace and comment skipping
    # ------------------------------------------------------------------

    def _skip_blanks_and_comments(self) -> None:
        """Skip horizontal whitespace and '#' comments, stopping at line breaks."""
        while self._pos < len(self._source):
            ch = self._current()
            if ch in " \t\r\f\v":
                self._advance()
            elif ch == "#":
                while self._pos < len(self._source) and self._current() != "\n":
                    self._advance()
            else:
                break

    # ------------------------------------------------------------------
    # Token scanning dispatcher
    # ------------------------------------------------------------------

    def _scan_token(self) -> Token:
        """Dispatch to the appropriate handler based on the current character."""
        ch = self._current()
        line = self._line
        col = self._column

        if ch == "\n":
            self._advance()
            return Token(TokenType.NEWLINE, "\n", line, col)
        if ch in _SINGLE_CHAR_TOKENS:
            self._advance()
            return Token(_SINGLE_CHAR_TOKENS[ch], ch, line, col)
        if ch == '"':
            return self._scan_string(line, col)
        if self._starts_number():
            return self._scan_number(line, col)
        if _is_identifier_start(ch):
            return self._scan_identifier_or_keyword(line, col)
        raise LexerError(f"Unexpected character: {ch!r}", line, col)

    def _starts_number(self) -> bool:
        """Return True if a numeric literal begins at the current position."""
        offset = 1 if self._current() in "+-" else 0
        ch = self._peek(offset)
        if ch.isdigit():
            return True
        if ch == "." and self._peek(offset + 1).isdigit():
            return True
        if offset:
            rest = self._source[self._pos + offset : self._pos + offset + 3]
            return rest in _NON_FINITE
        return False

    # ------------------------------------------------------------------
    # Literal scanners
    # ------------------------------------------------------------------

    def _scan_string(self, line: int, col: int) -> Token:
        """Scan a double-quoted string literal with escape sequences.

        Octal and hex escapes denote raw bytes. Each run of them is decoded
        as UTF-8 with surrogate escapes, the same rule applied to file input.
        """
        self._advance()  # opening "
        chars: list[str] = []
        pending = bytearray()
        while self._pos < len(self._source):
            ch = self._current()
            if ch == '"':
                self._advance()  # closing "
                _flush_bytes(pending, chars)
                return Token(TokenType.STRING_LITERAL, "".join(chars), line, col)
            if ch == "\n":
                raise LexerError("Unterminated string literal", line, col)
            if ch == "\\":
                self._advance()
                if self._pos >= len(self._source) or self._current() == "\n":
                    raise LexerError("Unterminated string literal", line, col)
                escaped = self._scan_escape()
                if isinstance(escaped, int):
                    pending.append(escaped)
                    continue
                _flush_bytes(pending, chars)
                chars.append(escaped)
            else:
                _flush_bytes(pending, chars)
                chars.append(ch)
                self._advance()
        raise LexerError("Unterminated string literal", line, col)

    def _scan_escape(self) -> str | int:
        """Decode the escape sequence following a backslash.

        Returns the replacement text, or the byte value of an octal or hex
        escape. Unknown escapes are kept as written, backslash included.
        """
        esc = self._current()
        if esc in _SIMPLE_ESCAPES:
            self._advance()
            return _SIMPLE_ESCAPES[esc]
        if esc in _OCTAL_DIGITS:
            digits = ""
            while len(digits) < 3 and self._current() and self._current() in _OCTAL_DIGITS:
                digits += self._advance()
            return int(digits, 8) & 0xFF
        if esc == "x" and self._peek() and self._peek() in _HEX_DIGITS:
            self._advance()  # x
            digits = ""
            while len(digits) < 2 and self._current() and self._current() in _HEX_DIGITS:
                digits += self._advance()
            return int(digits, 16)
        self._advance()
        return "\\" + esc

    def _scan_number(self, line: int, col: int) -> Token:
        """Scan an integer or floating-point literal.

        Accepts an optional sign, a fractional part, an exponent, and the
        signed non-finite spellings produced by printf (``-inf``, ``+nan``).
        """
        start = self._pos
        is_float = False
        if self._current() in "+-":
            self._advance()

        rest = self._source[self._pos : self._pos + 3]
        if rest in _NON_FINITE:
            for _ in range(3):
                self._advance()
            is_float = True
        else:
            self._consume_digits()
            if self._current() == ".":
                is_float = True
                self._advance()
                self._consume_digits()
            if self._current() in ("e", "E") and self._has_exponent():
                is_float = True
                self._advance()  # e
                if self._current() in "+-":
                    self._advance()
                self._consume_digits()

        if self._current() and _is_identifier_char(self._current()):
            bad_end = self._pos
            while bad_end < len(self._source) and _is_identifier_char(self._source[bad_end]):
                bad_end += 1
            raise LexerError(
                f"Malformed numeric literal: {self._source[start:bad_end]!r}",
                line,
                col,
            )

        value = self._source[start : self._pos]
        token_type = TokenType.FLOAT_LITERAL if is_float else TokenType.INTEGER_LITERAL
        return Token(token_type, value, line, col)

    def _consume_digits(self) -> None:
        while self._pos < len(self._source) and self._current().isdigit():
            self._advance()

    def _has_exponent(self) -> bool:
        """Return True if the 'e' at the current position starts a valid exponent."""
        nxt = self._peek()
        if nxt.isdigit():
            return True
        return nxt in ("+", "-") and self._peek(2).isdigit()

    def _scan_identifier_or_keyword(self, line: int, col: int) -> Token:
        """Scan an identifier and map it to a keyword token type if applicable."""
        start = self._pos
        while self._pos < len(self._source) and _is_identifier_char(self._current()):
            self._advance()
        value = self._source[start : self._pos]
        token_type = _KEYWORDS.get(value, TokenType.IDENTIFIER)
        return Token(token_type, value, line, col)
