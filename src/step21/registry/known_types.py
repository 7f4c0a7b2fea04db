# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""A minimal, read-only registry of known entity type names.

The registry never decides whether a file is valid. It only gives complex
instances built in code a stable subtype order when they are written.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from step21.model.entities import SubtypeRecord

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class TypeRegistry:
    """An immutable set of upper-case entity type names."""

    names: frozenset[str] = frozenset()

    def is_known(self, type_name: str) -> bool:
        return type_name.upper() in self.names

    def order_key(self, type_name: str) -> tuple[int, str]:
        """Sort key placing known names first, each group in alphabetical order."""
        upper = type_name.upper()
        return (0 if upper in self.names else 1, upper)

    def order_subtypes(self, subtypes: Iterable[SubtypeRecord]) -> tuple[SubtypeRecord, ...]:
        """Return *subtypes* in canonical order; ties keep their given order."""
        return tuple(sorted(subtypes, key=lambda subtype: self.order_key(subtype.type_name)))

    def with_names(self, type_names: Iterable[str]) -> TypeRegistry:
        """Return a new registry that also knows *type_names*."""
        return TypeRegistry(self.names | {name.upper() for name in type_names})


# AP203/AP214 entities commonly found in solid-model exchange files.
_AP214_ENTITY_NAMES: tuple[str, ...] = (
    "ADVANCED_BREP_SHAPE_REPRESENTATION",
    "ADVANCED_FACE",
    "APPLICATION_CONTEXT",
    "APPLICATION_PROTOCOL_DEFINITION",
    "AXIS1_PLACEMENT",
    "AXIS2_PLACEMENT_2D",
    "AXIS2_PLACEMENT_3D",
    "B_SPLINE_CURVE",
    "B_SPLINE_CURVE_WITH_KNOTS",
    "B_SPLINE_SURFACE",
    "B_SPLINE_SURFACE_WITH_KNOTS",
    "BOUNDED_CURVE",
    "BOUNDED_SURFACE",
    "BREP_WITH_VOIDS",
    "CARTESIAN_POINT",
    "CIRCLE",
    "CLOSED_SHELL",
    "COLOUR_RGB",
    "CONICAL_SURFACE",
    "CONTEXT_DEPENDENT_SHAPE_REPRESENTATION",
    "CONVERSION_BASED_UNIT",
    "CURVE",
    "CURVE_STYLE",
    "CYLINDRICAL_SURFACE",
    "DIMENSIONAL_EXPONENTS",
    "DIRECTION",
    "DRAUGHTING_PRE_DEFINED_COLOUR",
    "DRAUGHTING_PRE_DEFINED_CURVE_FONT",
    "EDGE_CURVE",
    "EDGE_LOOP",
    "ELLIPSE",
    "FACE_BOUND",
    "FACE_OUTER_BOUND",
    "FILL_AREA_STYLE",
    "FILL_AREA_STYLE_COLOUR",
    "GEOMETRIC_CURVE_SET",
    "GEOMETRIC_REPRESENTATION_CONTEXT",
    "GEOMETRIC_REPRESENTATION_ITEM",
    "GLOBAL_UNCERTAINTY_ASSIGNED_CONTEXT",
    "GLOBAL_UNIT_ASSIGNED_CONTEXT",
    "ITEM_DEFINED_TRANSFORMATION",
    "LENGTH_MEASURE_WITH_UNIT",
    "LENGTH_UNIT",
    "LINE",
    "MANIFOLD_SOLID_BREP",
    "MASS_UNIT",
    "MECHANICAL_DESIGN_GEOMETRIC_PRESENTATION_REPRESENTATION",
    "NAMED_UNIT",
    "NEXT_ASSEMBLY_USAGE_OCCURRENCE",
    "ORIENTED_CLOSED_SHELL",
    "ORIENTED_EDGE",
    "OVER_RIDING_STYLED_ITEM",
    "PCURVE",
    "PLANE",
    "PLANE_ANGLE_MEASURE_WITH_UNIT",
    "PLANE_ANGLE_UNIT",
    "PRESENTATION_LAYER_ASSIGNMENT",
    "PRESENTATION_STYLE_ASSIGNMENT",
    "PRODUCT",
    "PRODUCT_CATEGORY",
    "PRODUCT_CONTEXT",
    "PRODUCT_DEFINITION",
    "PRODUCT_DEFINITION_CONTEXT",
    "PRODUCT_DEFINITION_FORMATION",
    "PRODUCT_DEFINITION_FORMATION_WITH_SPECIFIED_SOURCE",
    "PRODUCT_DEFINITION_SHAPE",
    "PRODUCT_RELATED_PRODUCT_CATEGORY",
    "RATIONAL_B_SPLINE_CURVE",
    "RATIONAL_B_SPLINE_SURFACE",
    "REPRESENTATION",
    "REPRESENTATION_CONTEXT",
    "REPRESENTATION_ITEM",
    "REPRESENTATION_RELATIONSHIP",
    "REPRESENTATION_RELATIONSHIP_WITH_TRANSFORMATION",
    "SEAM_CURVE",
    "SHAPE_DEFINITION_REPRESENTATION",
    "SHAPE_REPRESENTATION",
    "SHAPE_REPRESENTATION_RELATIONSHIP",
    "SHELL_BASED_SURFACE_MODEL",
    "SI_UNIT",
    "SOLID_ANGLE_UNIT",
    "SPHERICAL_SURFACE",
    "STYLED_ITEM",
    "SURFACE",
    "SURFACE_CURVE",
    "SURFACE_OF_LINEAR_EXTRUSION",
    "SURFACE_OF_REVOLUTION",
    "SURFACE_SIDE_STYLE",
    "SURFACE_STYLE_FILL_AREA",
    "SURFACE_STYLE_USAGE",
    "TOROIDAL_SURFACE",
    "TRIMMED_CURVE",
    "UNCERTAINTY_MEASURE_WITH_UNIT",
    "VECTOR",
    "VERTEX_LOOP",
    "VERTEX_POINT",
)

# Shared by every reader and writer; never mutated.
DEFAULT_REGISTRY = TypeRegistry(frozenset(_AP214_ENTITY_NAMES))
