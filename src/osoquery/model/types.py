# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type system and typed default values for the OSO query model."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############

ValueKind = Literal["int", "float", "string"]


class BaseType(Enum):
    """Base types of the shading language type system."""

    UNKNOWN = "unknown"
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

    @property
    def components(self) -> int:
        """Number of scalar components in one element of this type."""
        return _COMPONENTS.get(self, 1)

    @property
    def value_kind(self) -> ValueKind | None:
        """The scalar kind defaults of this type are stored as, or None if undecodable."""
        return _VALUE_KINDS.get(self)


class ArraySize(BaseModel):
    """Length of an array type.

    Fixed arrays carry their declared length. Unsized arrays carry
    ``unsized=True`` and, once a default has been decoded, the number of
    elements it resolved to.
    """

    model_config = ConfigDict(frozen=True)

    length: int = _Field(default=0, ge=0)
    unsized: bool = False


class TypeDescriptor(BaseModel):
    """A fully resolved declared type."""

    model_config = ConfigDict(frozen=True)

    base: BaseType
    array_length: ArraySize | None = None
    is_closure: bool = False
    struct_name: str | None = None

    @property
    def is_array(self) -> bool:
        return self.array_length is not None

    @property
    def is_unsized_array(self) -> bool:
        return self.array_length is not None and self.array_length.unsized

    @property
    def arity(self) -> int | None:
        """Total scalar count of a value of this type, or None for unsized arrays."""
        if self.array_length is None:
            return self.base.components
        if self.array_length.unsized:
            return None
        return self.base.components * self.array_length.length

    def __str__(self) -> str:
        text = self.base.value
        if self.base is BaseType.STRUCT and self.struct_name:
            text = f"struct {self.struct_name}"
        if self.is_closure:
            text = f"closure {text}"
        if self.array_length is not None:
            text += "[]" if self.array_length.unsized else f"[{self.array_length.length}]"
        return text


class IntValue(BaseModel):
    """A sequence of integer scalars."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["int"] = "int"
    values: tuple[int, ...] = ()


class FloatValue(BaseModel):
    """A sequence of float scalars (also used for points, vectors, normals, colors, and matrices)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["float"] = "float"
    values: tuple[float, ...] = ()


class StringValue(BaseModel):
    """A sequence of string scalars."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["string"] = "string"
    values: tuple[str, ...] = ()


# A decoded default or metadata value. The `kind` discriminator matches
# BaseType.value_kind of the type it was decoded against.
ParameterValue = Annotated[IntValue | FloatValue | StringValue, _Field(discriminator="kind")]


def make_value(kind: ValueKind, values: list[int] | list[float] | list[str]) -> IntValue | FloatValue | StringValue:
    """Build the ParameterValue variant for *kind* holding *values*."""
    if kind == "int":
        return IntValue(values=tuple(values))
    if kind == "float":
        return FloatValue(values=tuple(values))
    return StringValue(values=tuple(values))


# ################
# Implementation
# ################

_COMPONENTS: dict[BaseType, int] = {
    BaseType.POINT: 3,
    BaseType.VECTOR: 3,
    BaseType.NORMAL: 3,
    BaseType.COLOR: 3,
    BaseType.MATRIX: 16,
}

_VALUE_KINDS: dict[BaseType, ValueKind] = {
    BaseType.INT: "int",
    BaseType.FLOAT: "float",
    BaseType.STRING: "string",
    BaseType.POINT: "float",
    BaseType.VECTOR: "float",
    BaseType.NORMAL: "float",
    BaseType.COLOR: "float",
    BaseType.MATRIX: "float",
}
