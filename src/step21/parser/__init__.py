# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexer, parser and reference resolver for Part 21 files."""

from step21.parser.lexer import LexError, LexErrorKind, Token, TokenType, iter_tokens, tokenize
from step21.parser.parser import ParsedFile, ParseError, ParseErrorKind, parse, parse_tokens
from step21.parser.resolver import UnresolvedReferenceError, resolve

__all__ = [
    "tokenize",
    "iter_tokens",
    "Token",
    "TokenType",
    "LexError",
    "LexErrorKind",
    "parse",
    "parse_tokens",
    "ParsedFile",
    "ParseError",
    "ParseErrorKind",
    "resolve",
    "UnresolvedReferenceError",
]
