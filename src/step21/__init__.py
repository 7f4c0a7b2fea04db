# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Reader and writer for ISO 10303-21 (STEP Part 21) clear-text files."""

from step21.exchange.pipeline import read_step, read_step_file, write_step, write_step_file
from step21.model.entities import EntityGraph, EntityRecord, HeaderBlock, HeaderEntity, SubtypeRecord
from step21.parser.lexer import LexError
from step21.parser.parser import ParseError
from step21.parser.resolver import UnresolvedReferenceError
from step21.writer.writer import WriteError

__all__ = [
    "read_step",
    "read_step_file",
    "write_step",
    "write_step_file",
    "EntityGraph",
    "EntityRecord",
    "HeaderBlock",
    "HeaderEntity",
    "SubtypeRecord",
    "LexError",
    "ParseError",
    "UnresolvedReferenceError",
    "WriteError",
]
