# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parsing of declared types into TypeDescriptor records.

Grammar (one line, whitespace separated)::

    typespec := ['closure'] basetype [structname] [arraysuffix] ['closure']
    arraysuffix := '[' [INTEGER] ']'
"""

from osoquery.model.types import ArraySize, BaseType, TypeDescriptor
from osoquery.parser.cursor import NAME_TYPES, StringTable, TokenCursor, error_at
from osoquery.parser.errors import ErrorKind
from osoquery.parser.lexer import BASE_TYPE_KEYWORDS, TokenType

# ###############
# Public Interface
# ###############


def parse_type_descriptor(cursor: TokenCursor, strings: StringTable) -> TypeDescriptor:
    """Consume a type specification and return its descriptor.

    Raises:
        ParseError: UNKNOWN_TYPE if the base type keyword is not recognised,
            INVALID_ARRAY_SIZE if the bracketed length is negative or not an
            integer, UNEXPECTED_END_OF_INPUT if the line ends mid-type.
    """
    is_closure = False
    if cursor.check(TokenType.CLOSURE):
        cursor.advance()
        is_closure = True

    tok = cursor.current()
    if tok.type not in BASE_TYPE_KEYWORDS:
        if cursor.at_line_end():
            raise cursor.unexpected("a type")
        raise error_at(ErrorKind.UNKNOWN_TYPE, f"Unknown type {tok.value!r}", tok)
    cursor.advance()
    base = BaseType(tok.value)

    struct_name: str | None = None
    if base is BaseType.STRUCT and _struct_name_follows(cursor):
        struct_name = strings.intern(cursor.advance().value)

    array_length: ArraySize | None = None
    if cursor.check(TokenType.LBRACKET):
        array_length = _parse_array_suffix(cursor)

    # A trailing marker only counts as one when a name still follows it;
    # otherwise 'closure' is itself the declared name.
    if cursor.check(TokenType.CLOSURE) and cursor.peek().type in NAME_TYPES:
        cursor.advance()
        is_closure = True

    return TypeDescriptor(
        base=base,
        array_length=array_length,
        is_closure=is_closure,
        struct_name=struct_name,
    )


# ################
# Implementation
# ################


def _struct_name_follows(cursor: TokenCursor) -> bool:
    """Return True if the token after 'struct' names the struct rather than the symbol."""
    if not cursor.check(TokenType.IDENTIFIER):
        return False
    nxt = cursor.peek()
    return nxt.type in NAME_TYPES or nxt.type == TokenType.LBRACKET


def _parse_array_suffix(cursor: TokenCursor) -> ArraySize:
    """Parse: '[' ']' | '[' INTEGER ']'"""
    cursor.advance()  # consume [
    if cursor.check(TokenType.RBRACKET):
        cursor.advance()
        return ArraySize(unsized=True)

    tok = cursor.current()
    if cursor.at_line_end():
        raise cursor.unexpected("an array length")
    if tok.type != TokenType.INTEGER_LITERAL:
        raise error_at(
            ErrorKind.INVALID_ARRAY_SIZE,
            f"Array length must be a non-negative integer, got {tok.value!r}",
            tok,
        )
    length = int(tok.value)
    if length < 0:
        raise error_at(ErrorKind.INVALID_ARRAY_SIZE, f"Array length must not be negative, got {length}", tok)
    cursor.advance()

    if not cursor.check(TokenType.RBRACKET):
        if cursor.at_line_end():
            raise cursor.unexpected("']'")
        bad = cursor.current()
        raise error_at(ErrorKind.INVALID_ARRAY_SIZE, f"Expected ']' after array length, got {bad.value!r}", bad)
    cursor.advance()
    return ArraySize(length=length)
