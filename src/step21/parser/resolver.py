# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Reference resolution: the pass that turns parsed records into an entity graph.

Links stay id-based. The resolver only checks that every ``#id`` appearing in
any parameter tree names a defined record, so reference cycles between
entities are legal and never followed.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from step21.model.entities import EntityGraph, EntityRecord, GraphSource, HeaderBlock
from step21.parser.lexer import Token

# ###############
# Public Interface
# ###############


class UnresolvedReferenceError(Exception):
    """Raised when a record references an instance id that is not defined.

    Attributes:
        referencing_id: The id of the record holding the dangling reference.
        missing_id: The referenced id that has no record.
        line: 1-based line of the referencing record, when known.
        column: 1-based column of the referencing record, when known.
    """

    def __init__(
        self,
        referencing_id: int,
        missing_id: int,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        message = f"Entity #{referencing_id} references undefined entity #{missing_id}"
        if line is not None and column is not None:
            message = f"Line {line}, column {column}: {message}"
        super().__init__(message)
        self.referencing_id = referencing_id
        self.missing_id = missing_id
        self.line = line
        self.column = column


def resolve(
    header: HeaderBlock,
    records: Sequence[EntityRecord],
    *,
    positions: Mapping[int, Token] | None = None,
    source: GraphSource = GraphSource.PARSED,
) -> EntityGraph:
    """Check every reference of *records* and build the entity graph.

    Records are examined in the given order and the first dangling reference
    aborts resolution; no partial graph is returned.

    Args:
        header: The header block to carry into the graph.
        records: The records of the data section.
        positions: Optional ``#id`` tokens by record id, used to attach source
            positions to errors.
        source: How the records were produced.

    Returns:
        The resolved :class:`~step21.model.entities.EntityGraph`.

    Raises:
        UnresolvedReferenceError: On the first reference to an undefined id.
        ValueError: If two records share an id. Parsed input never does, the
            parser rejects duplicates while reading.
    """
    table: dict[int, EntityRecord] = {}
    for record in records:
        if record.id in table:
            raise ValueError(f"Duplicate entity id #{record.id}")
        table[record.id] = record

    for record in records:
        for referenced in record.references():
            if referenced not in table:
                line = column = None
                if positions is not None and record.id in positions:
                    line = positions[record.id].line
                    column = positions[record.id].column
                raise UnresolvedReferenceError(record.id, referenced, line, column)

    return EntityGraph(header=header, records=table, source=source)
