# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type-directed decoding of default and metadata values.

The declared type is always resolved first; its base type then selects
exactly one scalar decoder, and its arity fixes how many tokens must be
present. Unsized arrays take every value token up to the next hint or the
end of the line and record the resulting element count.
"""

from collections.abc import Callable
from dataclasses import dataclass

from osoquery.model.types import ArraySize, ParameterValue, TypeDescriptor, make_value
from osoquery.parser.cursor import StringTable, TokenCursor, error_at
from osoquery.parser.errors import ErrorKind, ParseError
from osoquery.parser.lexer import Token, TokenType

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class DecodedValue:
    """Outcome of decoding a value list.

    Attributes:
        value: The decoded value, or None when no value tokens were present.
        type: The descriptor the value was decoded against; for unsized
            arrays this carries the resolved element count.
    """

    value: ParameterValue | None
    type: TypeDescriptor


def collect_value_tokens(cursor: TokenCursor) -> list[Token]:
    """Consume every token up to the next '%' hint marker or the end of the line."""
    tokens: list[Token] = []
    while not cursor.at_line_end() and not cursor.check(TokenType.PERCENT):
        tokens.append(cursor.advance())
    return tokens


def decode_tokens(descriptor: TypeDescriptor, tokens: list[Token], strings: StringTable) -> DecodedValue:
    """Decode *tokens* as a value of type *descriptor*.

    An empty token list means "no value supplied" and is not an error.

    Raises:
        ParseError: TYPE_MISMATCH if a token cannot be read as the required
            scalar kind, or if the type cannot carry a value at all (closure,
            struct, void); ARITY_MISMATCH if the token count does not match
            the arity of the type.
    """
    if not tokens:
        return DecodedValue(value=None, type=descriptor)

    kind = descriptor.base.value_kind
    if descriptor.is_closure or kind is None:
        raise error_at(
            ErrorKind.TYPE_MISMATCH,
            f"Type '{descriptor}' cannot carry a value, got {tokens[0].value!r}",
            tokens[0],
        )

    decode = _SCALAR_DECODERS[kind]
    values = [decode(tok, strings) for tok in tokens]

    components = descriptor.base.components
    expected = descriptor.arity
    if expected is None:
        if len(values) % components:
            raise error_at(
                ErrorKind.ARITY_MISMATCH,
                f"Type '{descriptor}' needs a multiple of {components} values, got {len(values)}",
                tokens[0],
            )
        descriptor = descriptor.model_copy(
            update={"array_length": ArraySize(length=len(values) // components, unsized=True)}
        )
    elif len(values) != expected:
        raise error_at(
            ErrorKind.ARITY_MISMATCH,
            f"Type '{descriptor}' needs {expected} value(s), got {len(values)}",
            tokens[0],
        )

    return DecodedValue(value=make_value(kind, values), type=descriptor)


# ################
# Implementation
# ################

_BOOLEAN_WORDS: dict[str, int] = {"true": 1, "false": 0}
_NON_FINITE_WORDS = frozenset({"inf", "nan"})


def _mismatch(tok: Token, expected: str) -> ParseError:
    return error_at(ErrorKind.TYPE_MISMATCH, f"Expected {expected} value, got {tok.value!r}", tok)


def _decode_int(tok: Token, strings: StringTable) -> int:
    if tok.type == TokenType.INTEGER_LITERAL:
        return int(tok.value)
    if tok.type == TokenType.IDENTIFIER and tok.value in _BOOLEAN_WORDS:
        return _BOOLEAN_WORDS[tok.value]
    raise _mismatch(tok, "an int")


def _decode_float(tok: Token, strings: StringTable) -> float:
    if tok.type in (TokenType.FLOAT_LITERAL, TokenType.INTEGER_LITERAL):
        return float(tok.value)
    if tok.type == TokenType.IDENTIFIER and tok.value in _NON_FINITE_WORDS:
        return float(tok.value)
    raise _mismatch(tok, "a float")


def _decode_string(tok: Token, strings: StringTable) -> str:
    if tok.type == TokenType.STRING_LITERAL:
        return strings.intern(tok.value)
    raise _mismatch(tok, "a string")


_SCALAR_DECODERS: dict[str, Callable[[Token, StringTable], int | float | str]] = {
    "int": _decode_int,
    "float": _decode_float,
    "string": _decode_string,
}
