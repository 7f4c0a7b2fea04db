# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the step21 command-line interface."""

import argparse
import logging
import sys
from pathlib import Path

from step21.config.settings import DEFAULT_SETTINGS, SETTINGS_FILE_NAME, Settings, SettingsError, load_settings
from step21.exchange.pipeline import read_step_file, write_step_file
from step21.model.entities import EntityGraph
from step21.parser.lexer import LexError
from step21.parser.parser import ParseError
from step21.parser.resolver import UnresolvedReferenceError
from step21.writer.writer import WriteError

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the step21 CLI."""
    parser = argparse.ArgumentParser(
        prog="step21",
        description="step21 - read and re-write ISO 10303-21 (STEP) files",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Settings file (default: {SETTINGS_FILE_NAME} in the current directory, if present)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log pipeline stages to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # write subcommand
    write_parser = subparsers.add_parser(
        "write",
        help="Read a STEP file and write it back in canonical form",
        description="Parse INPUT, check all entity references, and write the result to OUTPUT.",
    )
    write_parser.add_argument("input", type=Path, help="STEP file to read")
    write_parser.add_argument("output", type=Path, help="Path of the STEP file to write")

    # parse subcommand
    parse_parser = subparsers.add_parser(
        "parse",
        help="Read a STEP file and summarize its entities",
        description="Parse INPUT, check all entity references, and print entity counts per type.",
    )
    parse_parser.add_argument("input", type=Path, help="STEP file to read")

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################

_READ_ERRORS = (LexError, ParseError, UnresolvedReferenceError)


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    try:
        settings = _load_settings(args.config)
    except SettingsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.command == "write":
        return _cmd_write(args, settings)
    if args.command == "parse":
        return _cmd_parse(args, settings)
    return 0


def _load_settings(config: Path | None) -> Settings:
    """Load the explicit settings file, else the default one if it exists."""
    if config is not None:
        return load_settings(config)
    default = Path.cwd() / SETTINGS_FILE_NAME
    if default.exists():
        return load_settings(default)
    return DEFAULT_SETTINGS


def _read(path: Path, settings: Settings) -> EntityGraph | None:
    """Read *path*, printing the error and returning None on failure."""
    try:
        return read_step_file(path, settings=settings)
    except OSError as exc:
        print(f"Error: cannot read '{path}': {exc}", file=sys.stderr)
    except _READ_ERRORS as exc:
        print(f"Error: {path}: {exc}", file=sys.stderr)
    return None


def _cmd_write(args: argparse.Namespace, settings: Settings) -> int:
    """Handle the write subcommand."""
    graph = _read(args.input, settings)
    if graph is None:
        return 1

    try:
        write_step_file(graph, args.output, settings=settings)
    except OSError as exc:
        print(f"Error: cannot write '{args.output}': {exc}", file=sys.stderr)
        return 1
    except WriteError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def _cmd_parse(args: argparse.Namespace, settings: Settings) -> int:
    """Handle the parse subcommand."""
    graph = _read(args.input, settings)
    if graph is None:
        return 1

    complex_count = sum(1 for record in graph.records.values() if record.is_complex)
    print(f"header entities : {len(graph.header.entities)}")
    print(f"data entities   : {len(graph.records)}")
    print(f"complex entities: {complex_count}")

    counts = graph.type_counts()
    if counts:
        width = max(len(name) for name in counts)
        print()
        for name, count in sorted(counts.items(), key=lambda item: (-item[1], item[0])):
            print(f"  {name.ljust(width)}  {count}")
    return 0
