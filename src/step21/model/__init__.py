# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""In-memory model for Part 21 files: values, records and entity graphs."""

from step21.model.entities import (
    EntityGraph,
    EntityRecord,
    GraphSource,
    HeaderBlock,
    HeaderEntity,
    SubtypeRecord,
)
from step21.model.values import (
    OMITTED,
    REDECLARED,
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
    iter_references,
)

__all__ = [
    # Values
    "IntegerValue",
    "RealValue",
    "StringValue",
    "BinaryValue",
    "EnumerationValue",
    "ReferenceValue",
    "OmittedValue",
    "RedeclaredValue",
    "ListValue",
    "TypedValue",
    "Value",
    "OMITTED",
    "REDECLARED",
    "iter_references",
    # Entities
    "HeaderEntity",
    "HeaderBlock",
    "SubtypeRecord",
    "EntityRecord",
    "EntityGraph",
    "GraphSource",
]
