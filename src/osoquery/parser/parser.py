# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Line-oriented declaration parser for .oso files.

Consumes the token stream produced by the lexer one line at a time and
assembles an immutable ShaderRecord. Parsing stops at the start of the
instruction section ('code'); nothing after it is scanned.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from osoquery.model.entities import Direction, Metadata, Parameter, ShaderRecord
from osoquery.model.types import ArraySize, ParameterValue, TypeDescriptor
from osoquery.parser.cursor import NAME_TYPES, StringTable, TokenCursor, error_at
from osoquery.parser.errors import ErrorKind, ParseError
from osoquery.parser.hints import (
    DefaultHint,
    Hint,
    InitExprHint,
    MetadataHint,
    SpaceHint,
    StructFieldsHint,
    StructHint,
    parse_hint,
)
from osoquery.parser.lexer import Lexer, Token, TokenType
from osoquery.parser.typespec import parse_type_descriptor
from osoquery.parser.values import DecodedValue, collect_value_tokens, decode_tokens

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class ParseOptions:
    """Switches that relax the parser for real compiler output.

    Attributes:
        discard_output_defaults: Accept (type-check, then drop) initial values
            on ``oparam`` lines instead of rejecting them.
    """

    discard_output_defaults: bool = False


def parse(source: str | bytes, options: ParseOptions | None = None) -> ShaderRecord:
    """Parse OSO source text into a ShaderRecord.

    Args:
        source: The full text of an .oso file. Bytes are decoded as UTF-8;
            undecodable bytes are preserved as surrogate escapes.
        options: Optional parser switches.

    Returns:
        The immutable ShaderRecord describing the shader's declarations.

    Raises:
        LexerError: If the declaration section contains a malformed token.
        ParseError: If the declarations are structurally or type-wise invalid.
    """
    if isinstance(source, bytes):
        source = source.decode("utf-8", errors="surrogateescape")
    return _Parser(Lexer(source), options or ParseOptions()).parse()


def parse_file(path: Path | str, options: ParseOptions | None = None) -> ShaderRecord:
    """Read and parse the .oso file at *path*.

    Raises:
        OSError: If the file cannot be read.
        LexerError, ParseError: As for :func:`parse`.
    """
    path = Path(path)
    logger.debug(f"Parsing {path}")
    return parse(path.read_bytes(), options)


# ################
# Implementation
# ################

_VERSION_MARKER = "OpenShadingLanguage"

# Shader types that may open a shader declaration without the 'shader' keyword.
_SHADER_TYPES: frozenset[str] = frozenset({"surface", "displacement", "volume", "light"})

# Symbol kinds that follow the parameters but are not part of the signature.
_SKIPPED_SYMBOLS: frozenset[str] = frozenset({"local", "temp", "global", "const"})

_SHADER_NAME_TYPES: frozenset[TokenType] = NAME_TYPES | {TokenType.STRING_LITERAL}


@dataclass
class _ParameterBuilder:
    """Mutable parameter state while its line (and any hint lines) are read."""

    name: str
    type: TypeDescriptor
    direction: Direction
    default: ParameterValue | None
    metadata: list[Metadata] = field(default_factory=list)
    spaces: list[str] = field(default_factory=list)
    struct_fields: tuple[str, ...] = ()

    def apply(self, hint: Hint) -> None:
        if isinstance(hint, MetadataHint):
            self.metadata.append(hint.metadata)
        elif isinstance(hint, StructHint):
            self.type = self.type.model_copy(update={"struct_name": hint.name})
        elif isinstance(hint, StructFieldsHint):
            self.struct_fields = hint.fields
        elif isinstance(hint, SpaceHint):
            self.spaces.append(hint.space)
        elif isinstance(hint, InitExprHint):
            self.default = None
            self.type = self.declared_type()

    def declared_type(self) -> TypeDescriptor:
        """The type with any resolved unsized-array length cleared."""
        if self.type.is_unsized_array:
            return self.type.model_copy(update={"array_length": ArraySize(unsized=True)})
        return self.type

    def build(self) -> Parameter:
        return Parameter(
            name=self.name,
            type=self.type,
            direction=self.direction,
            default=self.default,
            metadata=tuple(self.metadata),
            spaces=tuple(self.spaces),
            struct_fields=self.struct_fields,
        )


@dataclass
class _ShaderBuilder:
    name: str
    shader_type: str
    metadata: list[Metadata] = field(default_factory=list)

    def apply(self, hint: Hint) -> None:
        if isinstance(hint, MetadataHint):
            self.metadata.append(hint.metadata)


class _Parser:
    """Declaration parser driven by the lexer's token stream."""

    def __init__(self, tokens: Iterable[Token], options: ParseOptions) -> None:
        self._tokens = tokens
        self._options = options
        self._strings = StringTable()
        self._version: tuple[int, int] | None = None
        self._shader: _ShaderBuilder | None = None
        self._params: list[_ParameterBuilder] = []
        self._current: _ParameterBuilder | None = None
        self._names: set[str] = set()
        self._last: Token | None = None

    def parse(self) -> ShaderRecord:
        """Parse every declaration line and return the assembled ShaderRecord."""
        for line in self._lines():
            cursor = TokenCursor(line)
            if cursor.at_line_end():
                continue
            if cursor.check(TokenType.CODE):
                break
            self._parse_line(cursor)

        if self._shader is None:
            line, column = (self._last.line, self._last.column) if self._last else (1, 1)
            raise ParseError(ErrorKind.UNEXPECTED_END_OF_INPUT, "No shader declaration found", line, column)

        record = ShaderRecord(
            name=self._shader.name,
            shader_type=self._shader.shader_type,
            version=self._version,
            parameters=tuple(builder.build() for builder in self._params),
            metadata=tuple(self._shader.metadata),
        )
        logger.debug(
            f"Parsed {record.shader_type} shader {record.name!r} with {record.param_count()} parameter(s)"
        )
        return record

    def _lines(self) -> Iterator[list[Token]]:
        """Group the token stream into lines, each ending with NEWLINE or EOF."""
        line: list[Token] = []
        for tok in self._tokens:
            self._last = tok
            line.append(tok)
            if tok.type == TokenType.NEWLINE:
                yield line
                line = []
            elif tok.type == TokenType.EOF:
                yield line
                return

    # ------------------------------------------------------------------
    # Line dispatch
    # ------------------------------------------------------------------

    def _parse_line(self, cursor: TokenCursor) -> None:
        """Parse one non-blank declaration line."""
        tok = cursor.current()
        if tok.type == TokenType.IDENTIFIER and tok.value == _VERSION_MARKER:
            self._parse_version(cursor)
        elif tok.type == TokenType.SHADER or (tok.type == TokenType.IDENTIFIER and tok.value in _SHADER_TYPES):
            self._parse_shader(cursor)
        elif tok.type in (TokenType.PARAM, TokenType.OPARAM):
            self._parse_parameter(cursor)
        elif tok.type == TokenType.PERCENT:
            self._parse_hint_line(cursor)
        elif tok.type == TokenType.IDENTIFIER and tok.value in _SKIPPED_SYMBOLS:
            # Hint lines after a symbol line belong to the shader again.
            self._current = None
        else:
            raise error_at(
                ErrorKind.UNEXPECTED_DECLARATION,
                f"Unexpected token {tok.value!r} at start of declaration",
                tok,
            )

    # ------------------------------------------------------------------
    # Header and shader declarations
    # ------------------------------------------------------------------

    def _parse_version(self, cursor: TokenCursor) -> None:
        """Parse: OpenShadingLanguage <major>.<minor>"""
        marker = cursor.advance()
        if self._version is not None or self._shader is not None:
            raise error_at(
                ErrorKind.UNEXPECTED_DECLARATION,
                "Version marker must be the first declaration",
                marker,
            )
        tok = cursor.expect(TokenType.FLOAT_LITERAL, TokenType.INTEGER_LITERAL, what="a version number")
        major, _, minor = tok.value.partition(".")
        try:
            self._version = (int(major), int(minor or "0"))
        except ValueError:
            raise error_at(
                ErrorKind.UNEXPECTED_DECLARATION,
                f"Invalid version number {tok.value!r}",
                tok,
            ) from None
        self._expect_line_end(cursor)
        logger.debug(f"OSO version {self._version[0]}.{self._version[1]}")

    def _parse_shader(self, cursor: TokenCursor) -> None:
        """Parse: shader <type> <name> | shader <name> | <type> <name>, plus hints."""
        first = cursor.advance()
        if self._shader is not None:
            raise error_at(ErrorKind.UNEXPECTED_DECLARATION, "Duplicate shader declaration", first)

        max_names = 2 if first.type == TokenType.SHADER else 1
        names: list[Token] = []
        while len(names) < max_names and cursor.current().type in _SHADER_NAME_TYPES:
            names.append(cursor.advance())
        if not names:
            raise cursor.unexpected("a shader name")

        if len(names) == 2:
            shader_type, name = names[0].value, names[1].value
        else:
            shader_type, name = first.value, names[0].value

        self._shader = _ShaderBuilder(
            name=self._strings.intern(name),
            shader_type=self._strings.intern(shader_type),
        )
        self._parse_hints(cursor, self._shader)

    # ------------------------------------------------------------------
    # Parameter declarations
    # ------------------------------------------------------------------

    def _parse_parameter(self, cursor: TokenCursor) -> None:
        """Parse: param|oparam <type> <name> [<value>*] [<hint>*]"""
        decl = cursor.advance()
        if self._shader is None:
            raise error_at(
                ErrorKind.UNEXPECTED_DECLARATION,
                f"'{decl.value}' declaration before shader declaration",
                decl,
            )
        direction = Direction.OUTPUT if decl.type == TokenType.OPARAM else Direction.INPUT

        descriptor = parse_type_descriptor(cursor, self._strings)
        name_tok = cursor.expect_name("a parameter name")
        name = self._strings.intern(name_tok.value)
        if name in self._names:
            raise error_at(
                ErrorKind.DUPLICATE_PARAMETER_NAME,
                f"Duplicate parameter name {name!r}",
                name_tok,
            )

        decoded = self._decode_default(name, direction, descriptor, collect_value_tokens(cursor))
        builder = _ParameterBuilder(name=name, type=decoded.type, direction=direction, default=decoded.value)
        self._parse_hints(cursor, builder)
        self._names.add(name)
        self._params.append(builder)
        self._current = builder

    def _decode_default(
        self,
        name: str,
        direction: Direction,
        descriptor: TypeDescriptor,
        tokens: list[Token],
    ) -> DecodedValue:
        """Decode default value tokens, applying the output-parameter rule."""
        if direction == Direction.OUTPUT and tokens:
            if not self._options.discard_output_defaults:
                raise error_at(
                    ErrorKind.UNEXPECTED_DECLARATION,
                    f"Output parameter {name!r} cannot declare a default value",
                    tokens[0],
                )
            decode_tokens(descriptor, tokens, self._strings)
            return DecodedValue(value=None, type=descriptor)
        return decode_tokens(descriptor, tokens, self._strings)

    # ------------------------------------------------------------------
    # Hints
    # ------------------------------------------------------------------

    def _parse_hint_line(self, cursor: TokenCursor) -> None:
        """Attach a line of hints to the current parameter, or to the shader."""
        if self._shader is None:
            tok = cursor.current()
            raise error_at(ErrorKind.UNEXPECTED_DECLARATION, "Hint before shader declaration", tok)
        target = self._current or self._shader
        self._parse_hints(cursor, target)

    def _parse_hints(self, cursor: TokenCursor, target: _ParameterBuilder | _ShaderBuilder) -> None:
        """Parse hints until the end of the line, applying each to *target*."""
        while not cursor.at_line_end():
            if not cursor.check(TokenType.PERCENT):
                tok = cursor.current()
                raise error_at(ErrorKind.UNEXPECTED_DECLARATION, f"Unexpected token {tok.value!r}", tok)
            hint = parse_hint(cursor, self._strings)
            if isinstance(hint, DefaultHint) and isinstance(target, _ParameterBuilder):
                self._apply_default(target, hint)
            else:
                target.apply(hint)

    def _apply_default(self, builder: _ParameterBuilder, hint: DefaultHint) -> None:
        """Replace the parameter's default with the values of a %default hint."""
        decoded = self._decode_default(builder.name, builder.direction, builder.declared_type(), list(hint.tokens))
        if decoded.value is not None:
            builder.type, builder.default = decoded.type, decoded.value

    def _expect_line_end(self, cursor: TokenCursor) -> None:
        if not cursor.at_line_end():
            tok = cursor.current()
            raise error_at(ErrorKind.UNEXPECTED_DECLARATION, f"Unexpected token {tok.value!r}", tok)
