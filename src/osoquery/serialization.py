# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""JSON serialization of parsed ShaderRecords.

The document is versioned so future schema changes can be detected. Types
are written in their declared spelling (``color[3]``, ``closure color``) and
values as plain JSON lists, so the output is readable without this package.
"""

from __future__ import annotations

import json
from typing import Any

from osoquery.model.entities import Direction, Metadata, Parameter, ShaderRecord
from osoquery.model.types import ArraySize, BaseType, ParameterValue, TypeDescriptor, make_value

# ###############
# Public Interface
# ###############

FORMAT_VERSION = "1"


def to_dict(record: ShaderRecord) -> dict[str, Any]:
    """Convert a ShaderRecord into a JSON-compatible dict."""
    d: dict[str, Any] = {
        "v": FORMAT_VERSION,
        "name": record.name,
        "type": record.shader_type,
        "parameters": [parameter_to_dict(p) for p in record.parameters],
        "metadata": [_metadata_to_dict(m) for m in record.metadata],
    }
    if record.version is not None:
        d["version"] = list(record.version)
    return d


def to_json(record: ShaderRecord, *, indent: int | None = None) -> str:
    """Serialize a ShaderRecord to JSON.

    Args:
        record: The record to serialize.
        indent: Pretty-print with this indent; compact output when None.
    """
    if indent is None:
        return json.dumps(to_dict(record), separators=(",", ":"))
    return json.dumps(to_dict(record), indent=indent)


def from_json(data: str) -> ShaderRecord:
    """Deserialize a ShaderRecord from a JSON string.

    Args:
        data: JSON string produced by :func:`to_json`.

    Returns:
        The reconstructed :class:`ShaderRecord`.

    Raises:
        ValueError: If the format version is not recognised.
    """
    obj = json.loads(data)
    version = obj.get("v")
    if version != FORMAT_VERSION:
        raise ValueError(f"Unsupported shader record format version: {version!r}")
    return _record_from_dict(obj)


def parameter_to_dict(param: Parameter) -> dict[str, Any]:
    """Convert a single Parameter into a JSON-compatible dict."""
    d: dict[str, Any] = {
        "name": param.name,
        "type": _type_to_dict(param.type),
        "output": param.is_output,
        "metadata": [_metadata_to_dict(m) for m in param.metadata],
    }
    if param.default is not None:
        d["default"] = _value_to_dict(param.default)
    if param.spaces:
        d["spaces"] = list(param.spaces)
    if param.struct_fields:
        d["fields"] = list(param.struct_fields)
    return d


# ################
# Implementation
# ################


def _record_from_dict(obj: dict[str, Any]) -> ShaderRecord:
    version = obj.get("version")
    return ShaderRecord(
        name=obj["name"],
        shader_type=obj["type"],
        version=tuple(version) if version is not None else None,
        parameters=tuple(_parameter_from_dict(p) for p in obj.get("parameters", [])),
        metadata=tuple(_metadata_from_dict(m) for m in obj.get("metadata", [])),
    )


def _parameter_from_dict(obj: dict[str, Any]) -> Parameter:
    default = obj.get("default")
    return Parameter(
        name=obj["name"],
        type=_type_from_dict(obj["type"]),
        direction=Direction.OUTPUT if obj.get("output", False) else Direction.INPUT,
        default=_value_from_dict(default) if default is not None else None,
        metadata=tuple(_metadata_from_dict(m) for m in obj.get("metadata", [])),
        spaces=tuple(obj.get("spaces", [])),
        struct_fields=tuple(obj.get("fields", [])),
    )


def _metadata_to_dict(meta: Metadata) -> dict[str, Any]:
    return {"key": meta.key, "type": _type_to_dict(meta.type), "value": _value_to_dict(meta.value)}


def _metadata_from_dict(obj: dict[str, Any]) -> Metadata:
    return Metadata(
        key=obj["key"],
        type=_type_from_dict(obj["type"]),
        value=_value_from_dict(obj["value"]),
    )


def _type_to_dict(descriptor: TypeDescriptor) -> dict[str, Any]:
    """Encode a TypeDescriptor with compact keys, plus its display spelling."""
    d: dict[str, Any] = {"t": descriptor.base.value, "s": str(descriptor)}
    if descriptor.is_closure:
        d["closure"] = True
    if descriptor.struct_name is not None:
        d["struct"] = descriptor.struct_name
    if descriptor.array_length is not None:
        d["len"] = descriptor.array_length.length
        if descriptor.array_length.unsized:
            d["unsized"] = True
    return d


def _type_from_dict(obj: dict[str, Any]) -> TypeDescriptor:
    array_length = None
    if "len" in obj:
        array_length = ArraySize(length=obj["len"], unsized=obj.get("unsized", False))
    return TypeDescriptor(
        base=BaseType(obj["t"]),
        array_length=array_length,
        is_closure=obj.get("closure", False),
        struct_name=obj.get("struct"),
    )


def _value_to_dict(value: ParameterValue) -> dict[str, Any]:
    return {"k": value.kind, "values": list(value.values)}


def _value_from_dict(obj: dict[str, Any]) -> ParameterValue:
    kind = obj["k"]
    if kind not in ("int", "float", "string"):
        raise ValueError(f"Unknown value kind: {kind!r}")
    return make_value(kind, list(obj["values"]))
