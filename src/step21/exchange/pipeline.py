# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""End-to-end read and write of Part 21 files.

Reading runs the stages in a straight line, lexing, parsing and resolving,
and the first failing stage aborts the file. Its error (``LexError``,
``ParseError`` or ``UnresolvedReferenceError``) propagates unchanged; no
partial graph is ever returned. File access is limited to one whole-file read
or write, so handles are released on every exit path.
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path

from step21.config.settings import DEFAULT_SETTINGS, Settings
from step21.model.entities import EntityGraph
from step21.parser.lexer import decode_source, tokenize
from step21.parser.parser import parse_tokens
from step21.parser.resolver import resolve
from step21.writer.writer import encode

LOGGER = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class PipelineStage(enum.Enum):
    """Stages a file passes through while being read."""

    LEXING = "lexing"
    PARSING = "parsing"
    RESOLVING = "resolving"
    READY = "ready"


def read_step(data: bytes | str, *, settings: Settings | None = None, label: str = "<input>") -> EntityGraph:
    """Read Part 21 content into a resolved entity graph.

    Args:
        data: Raw file bytes, decoded with the reader encoding, or text.
        settings: Reader settings; defaults apply when omitted.
        label: Name used in log records.

    Returns:
        The resolved graph.

    Raises:
        LexError: On invalid characters, literals or undecodable bytes.
        ParseError: On syntax errors or duplicate entity ids.
        UnresolvedReferenceError: On a reference to an undefined entity.
    """
    settings = settings or DEFAULT_SETTINGS

    _enter(PipelineStage.LEXING, label)
    source = data if isinstance(data, str) else decode_source(data, settings.reader.encoding)
    tokens = tokenize(source)

    _enter(PipelineStage.PARSING, label)
    parsed = parse_tokens(tokens, require_wrapper=settings.reader.require_wrapper)

    _enter(PipelineStage.RESOLVING, label)
    graph = resolve(parsed.header, parsed.records, positions=parsed.positions)

    _enter(PipelineStage.READY, label)
    LOGGER.debug(
        "%s: %d header entities, %d data entities",
        label,
        len(graph.header.entities),
        len(graph.records),
    )
    return graph


def read_step_file(path: Path, *, settings: Settings | None = None) -> EntityGraph:
    """Read a Part 21 file from *path*.

    Raises:
        OSError: If the file cannot be read.
        LexError, ParseError, UnresolvedReferenceError: As for :func:`read_step`.
    """
    data = path.read_bytes()
    return read_step(data, settings=settings, label=str(path))


def write_step(graph: EntityGraph, *, settings: Settings | None = None) -> bytes:
    """Serialize *graph* to encoded Part 21 bytes using the writer settings.

    Raises:
        WriteError: If the graph holds an unwritable value.
    """
    settings = settings or DEFAULT_SETTINGS
    return encode(
        graph,
        registry=settings.type_registry(),
        line_ending=settings.writer.newline,
        encoding=settings.writer.encoding,
    )


def write_step_file(graph: EntityGraph, path: Path, *, settings: Settings | None = None) -> None:
    """Write *graph* to *path*, creating parent directories as needed.

    Raises:
        OSError: If the file cannot be written.
        WriteError: If the graph holds an unwritable value.
    """
    data = write_step(graph, settings=settings)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    LOGGER.debug("%s: wrote %d bytes", path, len(data))


# ################
# Implementation
# ################


def _enter(stage: PipelineStage, label: str) -> None:
    LOGGER.debug("%s: %s", label, stage.value)
