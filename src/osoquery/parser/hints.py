# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Decoding of '%'-prefixed hints attached to shader and parameter declarations.

Two spellings of metadata are understood::

    %string label "Diffuse color"          typed form, values run to the next '%'
    %meta{string,label,"Diffuse color"}    braced form written by the compiler

Other compiler hints (``%struct{...}``, ``%structfields{...}``,
``%space{...}``, ``%default{...}``, ``%initexpr``) are decoded into their own
hint records. Bookkeeping hints such as ``%read{...}`` or ``%derivs`` are
recognised and returned as IgnoredHint so the caller can skip them.
"""

from dataclasses import dataclass

from osoquery.model.entities import Metadata
from osoquery.model.types import ArraySize, BaseType, TypeDescriptor
from osoquery.parser.cursor import NAME_TYPES, StringTable, TokenCursor, error_at
from osoquery.parser.errors import ErrorKind
from osoquery.parser.lexer import BASE_TYPE_KEYWORDS, Token, TokenType
from osoquery.parser.typespec import parse_type_descriptor
from osoquery.parser.values import collect_value_tokens, decode_tokens

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class MetadataHint:
    """A key/typed-value annotation."""

    metadata: Metadata


@dataclass(frozen=True)
class StructHint:
    """``%struct{"Name"}``: the struct type of a struct parameter."""

    name: str


@dataclass(frozen=True)
class StructFieldsHint:
    """``%structfields{a,b,c}``: field names of a struct parameter."""

    fields: tuple[str, ...]


@dataclass(frozen=True)
class SpaceHint:
    """``%space{"world"}``: coordinate or color space of a geometric parameter."""

    space: str


@dataclass(frozen=True)
class DefaultHint:
    """``%default{...}``: default value tokens, to be decoded against the parameter type."""

    tokens: tuple[Token, ...]


@dataclass(frozen=True)
class InitExprHint:
    """``%initexpr``: the default is computed by shader code, not by the literal values."""


@dataclass(frozen=True)
class IgnoredHint:
    """Any hint without meaning for the declaration model."""

    name: str


Hint = MetadataHint | StructHint | StructFieldsHint | SpaceHint | DefaultHint | InitExprHint | IgnoredHint


def parse_hint(cursor: TokenCursor, strings: StringTable) -> Hint:
    """Consume one hint starting at a '%' token.

    Raises:
        ParseError: UNKNOWN_TYPE for a typed hint whose type keyword is not a
            base type; TYPE_MISMATCH or ARITY_MISMATCH from value decoding;
            UNEXPECTED_END_OF_INPUT if the line ends inside the hint.
    """
    cursor.expect(TokenType.PERCENT, what="'%'")
    tok = cursor.current()

    # 'struct' is also a type keyword, so braced hints are recognised first.
    if tok.type in NAME_TYPES and cursor.peek().type == TokenType.LBRACE:
        cursor.advance()  # hint name
        if tok.value == "meta":
            return _parse_braced_metadata(cursor, strings)
        return _named_hint(tok, _read_braced_body(cursor), strings)

    if tok.type in BASE_TYPE_KEYWORDS or tok.type == TokenType.CLOSURE:
        return _parse_typed_metadata(cursor, strings)

    if tok.type == TokenType.IDENTIFIER:
        if cursor.peek().type in (TokenType.PERCENT, TokenType.NEWLINE, TokenType.EOF):
            cursor.advance()
            if tok.value == "initexpr":
                return InitExprHint()
            return IgnoredHint(name=tok.value)
        raise error_at(ErrorKind.UNKNOWN_TYPE, f"Unknown metadata type {tok.value!r}", tok)

    if cursor.at_line_end():
        raise cursor.unexpected("a hint after '%'")
    raise error_at(ErrorKind.UNKNOWN_TYPE, f"Expected a metadata type after '%', got {tok.value!r}", tok)


# ################
# Implementation
# ################

# Separators dropped from a %default body before its values are decoded.
_DEFAULT_SEPARATORS = frozenset({TokenType.COMMA, TokenType.LBRACKET, TokenType.RBRACKET})


def _parse_typed_metadata(cursor: TokenCursor, strings: StringTable) -> MetadataHint:
    """Parse: %<type> <key> <value>+"""
    descriptor = parse_type_descriptor(cursor, strings)
    key_tok = cursor.expect_name("a metadata key")
    values = collect_value_tokens(cursor)
    return _build_metadata(descriptor, key_tok, values, strings)


def _parse_braced_metadata(cursor: TokenCursor, strings: StringTable) -> MetadataHint:
    """Parse: meta{ <type> [,] <key> ( [,] <value> )* }  or the short  meta{ <key> , <value> }

    The opening brace is the current token. The short form has no type and
    is always a string entry.
    """
    cursor.advance()  # consume {
    first = cursor.current()
    if first.type in BASE_TYPE_KEYWORDS or first.type == TokenType.CLOSURE:
        descriptor = parse_type_descriptor(cursor, strings)
        if cursor.check(TokenType.COMMA):
            cursor.advance()
        key_tok = cursor.expect_name("a metadata key")
        return _build_metadata(descriptor, key_tok, _read_braced_values(cursor), strings)

    key_tok = cursor.expect_name("a metadata type or key")
    values = _read_braced_values(cursor)
    if len(values) != 1:
        raise error_at(ErrorKind.UNKNOWN_TYPE, f"Unknown type {first.value!r}", first)
    return _build_metadata(TypeDescriptor(base=BaseType.STRING), key_tok, values, strings)


def _read_braced_values(cursor: TokenCursor) -> list[Token]:
    """Collect the comma-separated value tokens up to and including the closing '}'."""
    values: list[Token] = []
    while not cursor.check(TokenType.RBRACE):
        if cursor.at_line_end():
            raise cursor.unexpected("'}'")
        tok = cursor.advance()
        if tok.type != TokenType.COMMA:
            values.append(tok)
    cursor.advance()  # consume }
    return values


def _build_metadata(
    descriptor: TypeDescriptor,
    key_tok: Token,
    values: list[Token],
    strings: StringTable,
) -> MetadataHint:
    """Decode metadata values, inferring the count from the tokens present."""
    if not values:
        raise error_at(ErrorKind.ARITY_MISMATCH, f"Metadata {key_tok.value!r} has no value", key_tok)
    decode_as = descriptor
    if descriptor.array_length is None:
        decode_as = descriptor.model_copy(update={"array_length": ArraySize(unsized=True)})
    decoded = decode_tokens(decode_as, values, strings)
    scalar = TypeDescriptor(base=descriptor.base, struct_name=descriptor.struct_name)
    return MetadataHint(
        metadata=Metadata(
            key=strings.intern(key_tok.value),
            type=scalar,
            value=decoded.value,
        )
    )


def _read_braced_body(cursor: TokenCursor) -> list[Token]:
    """Consume a balanced '{' ... '}' group and return the tokens inside it."""
    cursor.advance()  # consume {
    depth = 1
    body: list[Token] = []
    while True:
        if cursor.at_line_end():
            raise cursor.unexpected("'}'")
        tok = cursor.advance()
        if tok.type == TokenType.LBRACE:
            depth += 1
        elif tok.type == TokenType.RBRACE:
            depth -= 1
            if depth == 0:
                return body
        body.append(tok)


def _named_hint(name_tok: Token, body: list[Token], strings: StringTable) -> Hint:
    """Interpret the body of a braced hint other than %meta."""
    words = [tok.value for tok in body if tok.type == TokenType.STRING_LITERAL or tok.type in NAME_TYPES]
    if name_tok.value == "struct" and words:
        return StructHint(name=strings.intern(words[0]))
    if name_tok.value == "structfields":
        return StructFieldsHint(fields=tuple(strings.intern(word) for word in words))
    if name_tok.value == "space" and words:
        return SpaceHint(space=strings.intern(words[0]))
    if name_tok.value == "default":
        values = tuple(tok for tok in body if tok.type not in _DEFAULT_SEPARATORS)
        if values:
            return DefaultHint(tokens=values)
    return IgnoredHint(name=name_tok.value)
