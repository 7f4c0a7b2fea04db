# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Serialization of entity graphs to canonical Part 21 text.

Output is deterministic: records are written in ascending id order, one
statement per line, without comments or optional whitespace. Value rendering
is the inverse of the lexer, so reading the output back yields an equal graph.
"""

from __future__ import annotations

import math
from collections.abc import Mapping

from step21.model.entities import EntityGraph, EntityRecord, GraphSource, HeaderBlock, HeaderEntity, SubtypeRecord
from step21.model.values import (
    BinaryValue,
    EnumerationValue,
    IntegerValue,
    ListValue,
    OmittedValue,
    RealValue,
    RedeclaredValue,
    ReferenceValue,
    StringValue,
    TypedValue,
    Value,
)
from step21.parser.lexer import WRAPPER_BEGIN, WRAPPER_END
from step21.registry.known_types import DEFAULT_REGISTRY, TypeRegistry

# ###############
# Public Interface
# ###############


class WriteError(Exception):
    """Raised when a graph holds a value that has no Part 21 spelling."""


def serialize(
    graph: EntityGraph,
    *,
    registry: TypeRegistry | None = DEFAULT_REGISTRY,
    line_ending: str = "\n",
) -> str:
    """Serialize an entity graph to Part 21 text.

    Args:
        graph: The graph to write.
        registry: Orders the subtype blocks of complex instances in graphs built
            in code. Parsed graphs keep the order they were read in. ``None``
            keeps construction order everywhere.
        line_ending: Written after every statement.

    Returns:
        The complete file text, ending with a line ending.

    Raises:
        WriteError: If a real built in code is NaN or infinite.
    """
    order_registry = registry if graph.source == GraphSource.CONSTRUCTED else None
    return render_file(graph.header, graph.records, registry=order_registry, line_ending=line_ending)


def encode(
    graph: EntityGraph,
    *,
    registry: TypeRegistry | None = DEFAULT_REGISTRY,
    line_ending: str = "\n",
    encoding: str = "utf-8",
) -> bytes:
    """Serialize an entity graph and encode the text as bytes.

    Raises:
        WriteError: If a real built in code is NaN or infinite, or if the text
            holds a character that *encoding* cannot represent.
    """
    text = serialize(graph, registry=registry, line_ending=line_ending)
    try:
        return text.encode(encoding)
    except UnicodeEncodeError as exc:
        line_start = text.rfind("\n", 0, exc.start) + 1
        statement = text[line_start : text.find("(", line_start)].split("=", 1)[0]
        raise WriteError(f"Entity {statement}: character {text[exc.start]!r} cannot be encoded as {encoding}") from exc


def render_file(
    header: HeaderBlock,
    records: Mapping[int, EntityRecord],
    *,
    registry: TypeRegistry | None = None,
    line_ending: str = "\n",
) -> str:
    """Render a header block and a record mapping in any iteration order.

    When *registry* is given, complex instances have their subtype blocks
    reordered by it.
    """
    lines: list[str] = [f"{WRAPPER_BEGIN};", "HEADER;"]
    lines.extend(render_header_entity(entity) for entity in header.entities)
    lines.append("ENDSEC;")
    lines.append("DATA;")
    for entity_id in sorted(records):
        record = records[entity_id]
        if registry is not None and record.is_complex:
            record = EntityRecord(id=record.id, subtypes=registry.order_subtypes(record.subtypes))
        lines.append(render_record(record))
    lines.append("ENDSEC;")
    lines.append(f"{WRAPPER_END};")
    return line_ending.join(lines) + line_ending


def render_header_entity(entity: HeaderEntity) -> str:
    """Render ``NAME(params);``."""
    return f"{entity.name}({_render_parameters(entity.parameters)});"


def render_record(record: EntityRecord) -> str:
    """Render ``#id=TYPE(params);`` or ``#id=(T1(p1)T2(p2));`` for complex instances."""
    if record.is_complex:
        body = "".join(_render_subtype(subtype) for subtype in record.subtypes)
        return f"#{record.id}=({body});"
    return f"#{record.id}={_render_subtype(record.subtypes[0])};"


def render_value(value: Value) -> str:
    """Render one parameter value exactly as the lexer reads it back."""
    parts: list[str] = []
    pending: list[Value | str] = [value]
    while pending:
        item = pending.pop()
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, ListValue):
            pending.append(")")
            for index in range(len(item.items) - 1, -1, -1):
                pending.append(item.items[index])
                if index:
                    pending.append(",")
            pending.append("(")
        elif isinstance(item, TypedValue):
            pending.extend((")", item.inner, f"{item.type_name}("))
        else:
            parts.append(_render_scalar(item))
    return "".join(parts)


def format_real(value: float) -> str:
    """Return the shortest Part 21 literal that reads back as *value*.

    The mantissa always contains a ``.`` and the exponent marker is ``E``:
    ``100.0`` becomes ``100.``, ``1e-07`` becomes ``1.E-07``.

    Raises:
        WriteError: If *value* is NaN or infinite.
    """
    if not math.isfinite(value):
        raise WriteError(f"Non-finite real {value!r} cannot be written")
    mantissa, marker, exponent = repr(value).partition("e")
    if mantissa.endswith(".0"):
        mantissa = mantissa[:-1]
    elif "." not in mantissa:
        mantissa += "."
    if not marker:
        return mantissa
    sign = exponent[0] if exponent[0] in "+-" else "+"
    return f"{mantissa}E{sign}{exponent.lstrip('+-')}"


# ################
# Implementation
# ################


def _render_subtype(subtype: SubtypeRecord) -> str:
    return f"{subtype.type_name}({_render_parameters(subtype.parameters)})"


def _render_parameters(values: tuple[Value, ...]) -> str:
    return ",".join(render_value(value) for value in values)


def _render_scalar(value: Value) -> str:
    if isinstance(value, IntegerValue):
        return str(value.value)
    if isinstance(value, RealValue):
        return value.text if value.text is not None else format_real(value.value)
    if isinstance(value, StringValue):
        return "'" + value.value.replace("'", "''") + "'"
    if isinstance(value, BinaryValue):
        return f'"{value.value}"'
    if isinstance(value, EnumerationValue):
        return f".{value.name}."
    if isinstance(value, ReferenceValue):
        return f"#{value.id}"
    if isinstance(value, OmittedValue):
        return "$"
    # RedeclaredValue is the only remaining variant.
    assert isinstance(value, RedeclaredValue)
    return "*"
