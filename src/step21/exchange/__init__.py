# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Reading and writing whole Part 21 files."""

from step21.exchange.pipeline import PipelineStage, read_step, read_step_file, write_step, write_step_file

__all__ = [
    "read_step",
    "read_step_file",
    "write_step",
    "write_step_file",
    "PipelineStage",
]
