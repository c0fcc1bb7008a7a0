# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Query model for parsed OSO files (shaders, parameters, types, values)."""

from osoquery.model.entities import (
    Direction,
    IndexOutOfRangeError,
    Metadata,
    Parameter,
    ShaderRecord,
)
from osoquery.model.types import (
    ArraySize,
    BaseType,
    FloatValue,
    IntValue,
    ParameterValue,
    StringValue,
    TypeDescriptor,
    make_value,
)

__all__ = [
    # Type system
    "BaseType",
    "ArraySize",
    "TypeDescriptor",
    "IntValue",
    "FloatValue",
    "StringValue",
    "ParameterValue",
    "make_value",
    # Records
    "Direction",
    "Metadata",
    "Parameter",
    "ShaderRecord",
    "IndexOutOfRangeError",
]
