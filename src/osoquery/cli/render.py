# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Human-readable rendering of ShaderRecords for the terminal.

Two layouts are produced: a compact aligned table (one parameter per line)
and a verbose listing that also shows every metadata entry.
"""

from collections.abc import Callable
from dataclasses import dataclass

from yachalk import chalk

from osoquery.model.entities import Metadata, Parameter, ShaderRecord
from osoquery.model.types import ParameterValue, TypeDescriptor

# ###############
# Public Interface
# ###############

Paint = Callable[[str], str]


@dataclass(frozen=True)
class Styles:
    """Painters applied to each syntactic role of the output."""

    keyword: Paint
    type_name: Paint
    identifier: Paint
    value: Paint
    delimiter: Paint


def make_styles(color: bool) -> Styles:
    """Return colored styles, or identity painters when *color* is False."""
    if not color:
        return Styles(_plain, _plain, _plain, _plain, _plain)
    return Styles(
        keyword=chalk.magenta.bold,
        type_name=chalk.cyan,
        identifier=chalk.green,
        value=chalk.yellow,
        delimiter=chalk.dim,
    )


def render_record(
    record: ShaderRecord,
    styles: Styles,
    *,
    verbose: bool = False,
    param_filter: str | None = None,
) -> list[str]:
    """Render *record* as output lines.

    Args:
        record: The parsed shader.
        styles: Painters for the output roles.
        verbose: Use the multi-line layout including parameter metadata.
        param_filter: Only render the parameter with this name.
    """
    lines = [f'{styles.keyword(record.shader_type)} "{styles.identifier(record.name)}"']
    lines.extend(render_metadata(meta, "\t", styles) for meta in record.metadata)

    params = [p for p in record.parameters if param_filter is None or p.name == param_filter]
    if verbose:
        for param in params:
            lines.extend(_render_verbose(param, styles))
    else:
        name_width = max((len(p.name) for p in params), default=0)
        type_width = max((len(_type_label(p)) for p in params), default=0)
        for param in params:
            lines.append(_render_row(param, name_width, type_width, styles))
    return lines


def render_metadata(meta: Metadata, indent: str, styles: Styles) -> str:
    """Render one metadata entry as ``metadata: <type> <key> = <values>``."""
    values = meta.value.values
    type_text = meta.type.base.value if len(values) == 1 else f"{meta.type.base.value}[]"
    rendered = " ".join(_format_scalar(v) for v in values)
    return f"{indent}metadata: {styles.type_name(type_text)} {meta.key} = {styles.value(rendered)}"


def format_value(value: ParameterValue, descriptor: TypeDescriptor) -> str:
    """Format a default value according to its type's shape.

    Scalars print bare, aggregates (color, matrix, ...) as ``[x y z]``, and
    arrays as a bracketed list of their elements.
    """
    scalars = [_format_scalar(v) for v in value.values]
    components = descriptor.base.components
    if components > 1:
        elements = [f"[{' '.join(scalars[i : i + components])}]" for i in range(0, len(scalars), components)]
    else:
        elements = scalars
    if descriptor.is_array:
        return f"[{' '.join(elements)}]"
    return " ".join(elements)


# ################
# Implementation
# ################

_NO_DEFAULT = "<no default>"
_OUTPUT = "output"


def _plain(text: str) -> str:
    return text


def _type_label(param: Parameter) -> str:
    text = str(param.type)
    return f"{_OUTPUT} {text}" if param.is_output else text


def _render_row(param: Parameter, name_width: int, type_width: int, styles: Styles) -> str:
    type_text = str(param.type)
    if param.is_output:
        label = f"{styles.keyword(_OUTPUT)} {styles.type_name(type_text)}"
    else:
        label = styles.type_name(type_text)
    padding = " " * (type_width - len(_type_label(param)))
    name_padding = " " * (name_width - len(param.name))
    return f"{styles.identifier(param.name)}{name_padding} {label}{padding}  {_render_default(param, styles)}"


def _render_verbose(param: Parameter, styles: Styles) -> list[str]:
    type_text = styles.type_name(str(param.type))
    if param.is_output:
        type_text = f"{styles.keyword(_OUTPUT)} {type_text}"
    lines = [
        f'    "{styles.identifier(param.name)}" "{type_text}"',
        f"\t\tDefault value: {_render_default(param, styles)}",
    ]
    if param.spaces:
        lines.append(f"\t\tSpace: {', '.join(param.spaces)}")
    lines.extend(render_metadata(meta, "\t\t", styles) for meta in param.metadata)
    return lines


def _render_default(param: Parameter, styles: Styles) -> str:
    if param.default is None:
        return styles.delimiter(_NO_DEFAULT)
    return styles.value(format_value(param.default, param.type))


def _format_scalar(value: int | float | str) -> str:
    if isinstance(value, str):
        return '"' + _escape(value) + '"'
    if isinstance(value, float):
        text = repr(value)
        return text[:-2] if text.endswith(".0") else text
    return str(value)


def _escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    )
