# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Canonical Part 21 writer."""

from step21.writer.writer import (
    WriteError,
    encode,
    format_real,
    render_file,
    render_record,
    render_value,
    serialize,
)

__all__ = [
    "serialize",
    "encode",
    "render_file",
    "render_record",
    "render_value",
    "format_real",
    "WriteError",
]
