# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parameter values carried by header and data entities."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############

INTEGER_MIN = -(2**63)
INTEGER_MAX = 2**63 - 1

# Entity, type and header names; `!` marks a user-defined name.
KEYWORD_PATTERN = r"^!?[A-Za-z_][A-Za-z0-9_]*$"
ENUMERATION_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"


class IntegerValue(BaseModel):
    """An integer literal such as ``42`` or ``-7``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["integer"] = "integer"
    value: int = _Field(ge=INTEGER_MIN, le=INTEGER_MAX)


class RealValue(BaseModel):
    """A real literal.

    Attributes:
        value: The parsed numeric value.
        text: The normalized literal as read from a file. ``None`` for reals built
            in code, in which case the writer derives a canonical rendering.

    Two reals are equal when their values are equal; ``text`` only affects how
    the value is written.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["real"] = "real"
    value: float
    text: str | None = None

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RealValue):
            return self.value == other.value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("real", self.value))


class StringValue(BaseModel):
    """A quoted string; ``value`` holds the content with ``''`` already unescaped."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["string"] = "string"
    value: str


class BinaryValue(BaseModel):
    """A binary literal (``"0FF"``); ``value`` holds the hex digits between the quotes."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["binary"] = "binary"
    value: str = _Field(pattern=r"^[0-9A-Fa-f]*$")


class EnumerationValue(BaseModel):
    """An enumeration literal such as ``.MILLI.``; ``name`` excludes the dots."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["enumeration"] = "enumeration"
    name: str = _Field(pattern=ENUMERATION_PATTERN)

    @property
    def logical(self) -> bool | None:
        """Interpret the literal as a LOGICAL/BOOLEAN.

        Returns True for ``.T.``, False for ``.F.`` and None for ``.U.``.

        Raises:
            ValueError: If the enumeration is not a logical literal.
        """
        upper = self.name.upper()
        if upper in ("T", "TRUE"):
            return True
        if upper in ("F", "FALSE"):
            return False
        if upper in ("U", "UNKNOWN"):
            return None
        raise ValueError(f"Enumeration .{self.name}. is not a logical literal")


class ReferenceValue(BaseModel):
    """A link to another entity instance (``#12``) by graph-local id."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["reference"] = "reference"
    id: int = _Field(ge=0)


class OmittedValue(BaseModel):
    """The ``$`` marker: an optional parameter with no value."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["omitted"] = "omitted"


class RedeclaredValue(BaseModel):
    """The ``*`` marker: a parameter derived or redeclared by a subtype."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["redeclared"] = "redeclared"


class ListValue(BaseModel):
    """A parenthesized aggregate of values; may nest to any depth."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["list"] = "list"
    items: tuple[Value, ...] = ()


class TypedValue(BaseModel):
    """A select-type value wrapped in its type name, e.g. ``LENGTH_MEASURE(1.E-07)``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["typed"] = "typed"
    type_name: str = _Field(pattern=KEYWORD_PATTERN)
    inner: Value


# A parameter value. The `kind` discriminator keeps validation and dumps unambiguous.
Value = Annotated[
    IntegerValue
    | RealValue
    | StringValue
    | BinaryValue
    | EnumerationValue
    | ReferenceValue
    | OmittedValue
    | RedeclaredValue
    | ListValue
    | TypedValue,
    _Field(discriminator="kind"),
]

OMITTED = OmittedValue()
REDECLARED = RedeclaredValue()


def iter_references(value: Value) -> Iterator[int]:
    """Yield the id of every reference inside *value*, in written order.

    Nested lists and typed values are walked with an explicit stack, so deeply
    nested aggregates cannot exhaust the interpreter's recursion limit.
    """
    stack: list[Value] = [value]
    while stack:
        current = stack.pop()
        if isinstance(current, ReferenceValue):
            yield current.id
        elif isinstance(current, ListValue):
            stack.extend(reversed(current.items))
        elif isinstance(current, TypedValue):
            stack.append(current.inner)


# Resolve forward references for models that use Value.
ListValue.model_rebuild()
TypedValue.model_rebuild()
