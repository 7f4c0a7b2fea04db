# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Header entities, data entity records and the resolved entity graph."""

from __future__ import annotations

import enum
from collections import Counter
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic import Field as _Field

from step21.model.values import KEYWORD_PATTERN, Value, iter_references

# ###############
# Public Interface
# ###############


class GraphSource(enum.Enum):
    """Where an entity graph came from."""

    PARSED = "parsed"
    CONSTRUCTED = "constructed"


class HeaderEntity(BaseModel):
    """One header statement such as ``FILE_NAME(...)``, kept structurally."""

    model_config = ConfigDict(frozen=True)

    name: str = _Field(pattern=KEYWORD_PATTERN)
    parameters: tuple[Value, ...] = ()


class HeaderBlock(BaseModel):
    """The ordered header entities of a file."""

    model_config = ConfigDict(frozen=True)

    entities: tuple[HeaderEntity, ...] = ()

    def get(self, name: str) -> HeaderEntity | None:
        """Return the first header entity called *name*, or None."""
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None


class SubtypeRecord(BaseModel):
    """One ``TYPE(parameters)`` block of an entity instance."""

    model_config = ConfigDict(frozen=True)

    type_name: str = _Field(pattern=KEYWORD_PATTERN)
    parameters: tuple[Value, ...] = ()


class EntityRecord(BaseModel):
    """A data-section instance.

    A simple instance has exactly one subtype block; a complex instance lists
    several, in the order they were written or constructed.
    """

    model_config = ConfigDict(frozen=True)

    id: int = _Field(ge=0)
    subtypes: tuple[SubtypeRecord, ...] = _Field(min_length=1)

    @classmethod
    def simple(cls, id: int, type_name: str, parameters: Iterable[Value] = ()) -> EntityRecord:
        """Build a single-type record."""
        return cls(id=id, subtypes=(SubtypeRecord(type_name=type_name, parameters=tuple(parameters)),))

    @property
    def is_complex(self) -> bool:
        return len(self.subtypes) > 1

    @property
    def type_names(self) -> tuple[str, ...]:
        return tuple(subtype.type_name for subtype in self.subtypes)

    def references(self) -> Iterator[int]:
        """Yield every referenced entity id in parameter order."""
        for subtype in self.subtypes:
            for parameter in subtype.parameters:
                yield from iter_references(parameter)


class EntityGraph(BaseModel):
    """A header block plus a reference-closed mapping from id to record.

    Every reference found in any record names a key of ``records`` and every key
    equals the id of its record. Construction checks both, and ``records`` is a
    read-only view, so a graph stays closed once built. Use
    :func:`step21.parser.resolver.resolve` or :meth:`build` to get errors that
    name the dangling reference.
    """

    model_config = ConfigDict(frozen=True)

    header: HeaderBlock = _Field(default_factory=HeaderBlock)
    records: Mapping[int, EntityRecord] = _Field(default_factory=lambda: MappingProxyType({}))
    source: GraphSource = GraphSource.CONSTRUCTED

    @field_validator("records", mode="after")
    @classmethod
    def read_only_records(cls, value: Mapping[int, EntityRecord]) -> Mapping[int, EntityRecord]:
        return MappingProxyType(dict(value))

    @model_validator(mode="after")
    def records_are_closed(self) -> EntityGraph:
        for key, record in self.records.items():
            if key != record.id:
                raise ValueError(f"Record #{record.id} is stored under id #{key}")
            for referenced in record.references():
                if referenced not in self.records:
                    raise ValueError(f"Entity #{record.id} references undefined entity #{referenced}")
        return self

    @classmethod
    def build(cls, header: HeaderBlock, records: Iterable[EntityRecord]) -> EntityGraph:
        """Resolve programmatically built records into a graph.

        Raises:
            UnresolvedReferenceError: If a record references an undefined id.
            ValueError: If two records share an id.
        """
        from step21.parser.resolver import resolve

        return resolve(header, list(records), source=GraphSource.CONSTRUCTED)

    def get(self, entity_id: int) -> EntityRecord | None:
        return self.records.get(entity_id)

    def sorted_records(self) -> list[EntityRecord]:
        """Return all records ordered by ascending id."""
        return [self.records[key] for key in sorted(self.records)]

    def records_of_type(self, type_name: str) -> list[EntityRecord]:
        """Return the records (ascending id) with a subtype block called *type_name*."""
        return [record for record in self.sorted_records() if type_name in record.type_names]

    def type_counts(self) -> Counter[str]:
        """Count subtype blocks per type name across all records."""
        counts: Counter[str] = Counter()
        for record in self.records.values():
            counts.update(record.type_names)
        return counts
