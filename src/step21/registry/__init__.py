# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Known entity type names used to order complex instances."""

from step21.registry.known_types import DEFAULT_REGISTRY, TypeRegistry

__all__ = [
    "TypeRegistry",
    "DEFAULT_REGISTRY",
]
