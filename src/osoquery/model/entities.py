# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Shader, parameter, and metadata records of the OSO query model.

Every record is frozen: the parser builds a ShaderRecord once and consumers
only ever read it.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, PrivateAttr, model_validator

from osoquery.model.types import ParameterValue, TypeDescriptor

# ###############
# Public Interface
# ###############


class IndexOutOfRangeError(IndexError):
    """Raised when a parameter index is negative or not below the parameter count."""

    def __init__(self, index: int, count: int) -> None:
        super().__init__(f"Parameter index {index} out of range for shader with {count} parameter(s)")
        self.index = index
        self.count = count


class Direction(Enum):
    """Whether a parameter is read by the shader or written by it."""

    INPUT = "input"
    OUTPUT = "output"


class Metadata(BaseModel):
    """A typed key/value annotation attached to a parameter or shader."""

    model_config = ConfigDict(frozen=True)

    key: str
    type: TypeDescriptor
    value: ParameterValue


class Parameter(BaseModel):
    """A shader parameter with its type, optional default, and annotations."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: TypeDescriptor
    direction: Direction = Direction.INPUT
    default: ParameterValue | None = None
    metadata: tuple[Metadata, ...] = ()
    spaces: tuple[str, ...] = ()
    struct_fields: tuple[str, ...] = ()

    @property
    def is_output(self) -> bool:
        return self.direction is Direction.OUTPUT

    @property
    def has_default(self) -> bool:
        return self.default is not None

    @property
    def array_length(self) -> int | None:
        """Declared or resolved element count, or None for non-array parameters."""
        if self.type.array_length is None:
            return None
        return self.type.array_length.length

    def find_metadata(self, key: str) -> Metadata | None:
        """Return the first metadata entry named *key*, or None."""
        for meta in self.metadata:
            if meta.key == key:
                return meta
        return None

    def metadata_values(self, key: str) -> list[Metadata]:
        """Return every metadata entry named *key* in declaration order."""
        return [meta for meta in self.metadata if meta.key == key]


class ShaderRecord(BaseModel):
    """Top-level model representing the declarations of a single .oso file."""

    model_config = ConfigDict(frozen=True)

    name: str
    shader_type: str
    version: tuple[int, int] | None = None
    parameters: tuple[Parameter, ...] = ()
    metadata: tuple[Metadata, ...] = ()

    _by_name: dict[str, Parameter] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _check_unique_names(self) -> ShaderRecord:
        seen: set[str] = set()
        for param in self.parameters:
            if param.name in seen:
                raise ValueError(f"Duplicate parameter name {param.name!r}")
            seen.add(param.name)
        return self

    def model_post_init(self, __context: Any) -> None:
        self._by_name = {param.name: param for param in self.parameters}

    # ------------------------------------------------------------------
    # Query accessors
    # ------------------------------------------------------------------

    def param_count(self) -> int:
        return len(self.parameters)

    def iter_parameters(self):
        """Iterate over parameters in declaration order."""
        return iter(self.parameters)

    def param_by_name(self, name: str) -> Parameter | None:
        """Return the parameter called *name*, or None if the shader has none."""
        return self._by_name.get(name)

    def param_at(self, index: int) -> Parameter:
        """Return the parameter at *index*.

        Raises:
            IndexOutOfRangeError: If *index* is negative or >= param_count().
        """
        if index < 0 or index >= len(self.parameters):
            raise IndexOutOfRangeError(index, len(self.parameters))
        return self.parameters[index]

    def input_params(self) -> tuple[Parameter, ...]:
        return tuple(p for p in self.parameters if not p.is_output)

    def output_params(self) -> tuple[Parameter, ...]:
        return tuple(p for p in self.parameters if p.is_output)

    def find_metadata(self, key: str) -> Metadata | None:
        """Return the first shader-level metadata entry named *key*, or None."""
        for meta in self.metadata:
            if meta.key == key:
                return meta
        return None

    def is_valid(self) -> bool:
        return bool(self.name) and bool(self.shader_type)
