# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for ISO 10303-21 files.

Converts a token stream produced by the lexer into a header block and the
table of data-section entity records. References are kept as plain ids; the
resolver checks them once the whole table is known.
"""

import enum
from dataclasses import dataclass, field

from step21.model.entities import EntityRecord, HeaderBlock, HeaderEntity, SubtypeRecord
from step21.model.values import (
    OMITTED,
    REDECLARED,
    BinaryValue,
    EnumerationValue,
    IntegerValue,
    ListValue,
    RealValue,
    ReferenceValue,
    StringValue,
    TypedValue,
    Value,
)
from step21.parser.lexer import WRAPPER_BEGIN, WRAPPER_END, Token, TokenType, tokenize

# ###############
# Public Interface
# ###############


class ParseErrorKind(enum.Enum):
    """Categories of syntactic failure."""

    UNBALANCED_PARENS = "unbalanced parentheses"
    MISSING_TERMINATOR = "missing terminator"
    UNEXPECTED_TOKEN = "unexpected token"
    DUPLICATE_ENTITY_ID = "duplicate entity id"


class ParseError(Exception):
    """Raised when the parser encounters a syntactically invalid construct.

    Attributes:
        kind: The category of the failure.
        line: 1-based line number of the error.
        column: 1-based column number of the error.
        offset: 0-based character offset of the error.
        entity_id: The offending instance id for DUPLICATE_ENTITY_ID errors.
    """

    def __init__(
        self,
        kind: ParseErrorKind,
        message: str,
        line: int,
        column: int,
        offset: int,
        entity_id: int | None = None,
    ) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.kind = kind
        self.line = line
        self.column = column
        self.offset = offset
        self.entity_id = entity_id


@dataclass
class ParsedFile:
    """The unresolved result of parsing one file.

    Attributes:
        header: The header entities in written order.
        records: The data-section records in written order.
        positions: The ``#id`` token that defined each record, by id.
    """

    header: HeaderBlock
    records: list[EntityRecord] = field(default_factory=list)
    positions: dict[int, Token] = field(default_factory=dict)


def parse(source: str, *, require_wrapper: bool = False) -> ParsedFile:
    """Parse Part 21 source text.

    Args:
        source: The full text of a STEP file.
        require_wrapper: Reject files without the ``ISO-10303-21;`` wrapper.

    Returns:
        A ParsedFile with the header block and the unresolved records.

    Raises:
        LexError: If the source contains invalid characters or literals.
        ParseError: If the source is syntactically invalid.
    """
    return parse_tokens(tokenize(source), require_wrapper=require_wrapper)


def parse_tokens(tokens: list[Token], *, require_wrapper: bool = False) -> ParsedFile:
    """Parse an already tokenized file; *tokens* must end with an EOF token."""
    return _Parser(tokens, require_wrapper=require_wrapper).parse()


# ################
# Implementation
# ################

_SECTION_HEADER = "HEADER"
_SECTION_DATA = "DATA"
_SECTION_END = "ENDSEC"

# Keywords that may not start a statement inside a section.
_STRUCTURE_KEYWORDS: frozenset[str] = frozenset(
    {WRAPPER_BEGIN, WRAPPER_END, _SECTION_HEADER, _SECTION_DATA, _SECTION_END}
)


@dataclass
class _OpenAggregate:
    """A list, or a typed value when ``type_name`` is set, whose ``)`` is still pending."""

    opening: Token
    type_name: str | None = None
    items: list[Value] = field(default_factory=list)


class _Parser:
    """Recursive-descent parser for Part 21 token streams."""

    def __init__(self, tokens: list[Token], *, require_wrapper: bool) -> None:
        self._tokens = tokens
        self._pos = 0
        self._require_wrapper = require_wrapper
        self._records: list[EntityRecord] = []
        self._positions: dict[int, Token] = {}

    def parse(self) -> ParsedFile:
        """Parse the full token stream and return the unresolved file."""
        wrapped = self._check_keyword(WRAPPER_BEGIN)
        if wrapped:
            self._advance()
            self._expect_terminator()
        elif self._require_wrapper:
            tok = self._current()
            raise self._error(ParseErrorKind.UNEXPECTED_TOKEN, f"Expected '{WRAPPER_BEGIN}', got {_describe(tok)}", tok)

        header = self._parse_header_section()

        self._parse_data_section()
        while self._check_keyword(_SECTION_DATA):
            self._parse_data_section()

        if wrapped:
            if not self._check_keyword(WRAPPER_END):
                tok = self._current()
                raise self._error(
                    ParseErrorKind.MISSING_TERMINATOR,
                    f"Expected '{WRAPPER_END};', got {_describe(tok)}",
                    tok,
                )
            self._advance()
            self._expect_terminator()
        elif self._check_keyword(WRAPPER_END):
            self._advance()
            self._expect_terminator()

        if not self._at_end():
            tok = self._current()
            raise self._error(ParseErrorKind.UNEXPECTED_TOKEN, f"Unexpected {_describe(tok)} after end of file", tok)

        return ParsedFile(header=header, records=self._records, positions=self._positions)

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        """Return the current (un-consumed) token."""
        return self._tokens[self._pos]

    def _peek_type(self) -> TokenType:
        """Return the token type of the current token."""
        return self._tokens[self._pos].type

    def _at_end(self) -> bool:
        """Return True if the current token is the EOF token."""
        return self._peek_type() == TokenType.EOF

    def _advance(self) -> Token:
        """Consume and return the current token, stopping at EOF."""
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def _check(self, *types: TokenType) -> bool:
        """Return True if the current token matches any of the given types (without consuming)."""
        return self._peek_type() in types

    def _check_keyword(self, name: str) -> bool:
        tok = self._current()
        return tok.type == TokenType.KEYWORD and tok.value == name

    def _expect(self, *types: TokenType) -> Token:
        """Consume the current token if it matches any of the given types.

        Raises ParseError if the current token does not match.
        """
        tok = self._current()
        if tok.type not in types:
            expected = ", ".join(repr(t.value) for t in types)
            raise self._error(ParseErrorKind.UNEXPECTED_TOKEN, f"Expected {expected}, got {_describe(tok)}", tok)
        return self._advance()

    def _expect_terminator(self) -> None:
        """Consume the ``;`` closing a statement."""
        tok = self._current()
        if tok.type == TokenType.SEMICOLON:
            self._advance()
            return
        if tok.type == TokenType.RPAREN:
            raise self._error(ParseErrorKind.UNBALANCED_PARENS, "Unmatched ')'", tok)
        raise self._error(ParseErrorKind.MISSING_TERMINATOR, f"Expected ';', got {_describe(tok)}", tok)

    def _error(self, kind: ParseErrorKind, message: str, tok: Token, entity_id: int | None = None) -> ParseError:
        return ParseError(kind, message, tok.line, tok.column, tok.offset, entity_id)

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _expect_type_name(self) -> Token:
        """Consume an entity or type name; the wrapper keywords are not names."""
        tok = self._expect(TokenType.KEYWORD)
        if tok.value in (WRAPPER_BEGIN, WRAPPER_END):
            raise self._error(ParseErrorKind.UNEXPECTED_TOKEN, f"Expected a type name, got {_describe(tok)}", tok)
        return tok

    def _expect_section_keyword(self, name: str) -> None:
        tok = self._current()
        if not self._check_keyword(name):
            raise self._error(ParseErrorKind.UNEXPECTED_TOKEN, f"Expected '{name};', got {_describe(tok)}", tok)
        self._advance()

    def _at_section_end(self, section: str, opening: Token) -> bool:
        """Return True at ``ENDSEC``; fail if the section runs into EOF or another section."""
        tok = self._current()
        if self._check_keyword(_SECTION_END):
            return True
        if tok.type == TokenType.EOF or (tok.type == TokenType.KEYWORD and tok.value in _STRUCTURE_KEYWORDS):
            raise self._error(
                ParseErrorKind.MISSING_TERMINATOR,
                f"Section '{section}' opened at line {opening.line} is not closed by 'ENDSEC;'",
                tok,
            )
        return False

    def _parse_header_section(self) -> HeaderBlock:
        """Parse: HEADER; NAME(params); ... ENDSEC;"""
        opening = self._current()
        self._expect_section_keyword(_SECTION_HEADER)
        self._expect_terminator()
        entities: list[HeaderEntity] = []
        while not self._at_section_end(_SECTION_HEADER, opening):
            name_tok = self._expect(TokenType.KEYWORD)
            parameters = self._parse_parameter_list()
            self._expect_terminator()
            entities.append(HeaderEntity(name=name_tok.value, parameters=parameters))
        self._advance()  # ENDSEC
        self._expect_terminator()
        return HeaderBlock(entities=tuple(entities))

    def _parse_data_section(self) -> None:
        """Parse: DATA [ (params) ]; #id=...; ... ENDSEC;

        The optional section parameters (name and governing schemas) are read
        and discarded; all sections share one instance table.
        """
        opening = self._current()
        self._expect_section_keyword(_SECTION_DATA)
        if self._check(TokenType.LPAREN):
            self._parse_parameter_list()
        self._expect_terminator()
        while not self._at_section_end(_SECTION_DATA, opening):
            self._parse_entity_instance()
        self._advance()  # ENDSEC
        self._expect_terminator()

    # ------------------------------------------------------------------
    # Entity instances
    # ------------------------------------------------------------------

    def _parse_entity_instance(self) -> None:
        """Parse: #id = TYPE(params); or #id = (TYPE1(params) TYPE2(params) ...);"""
        id_tok = self._expect(TokenType.ENTITY_ID)
        entity_id = int(id_tok.value)
        if entity_id in self._positions:
            first = self._positions[entity_id]
            raise self._error(
                ParseErrorKind.DUPLICATE_ENTITY_ID,
                f"Entity #{entity_id} is already defined at line {first.line}, column {first.column}",
                id_tok,
                entity_id,
            )
        self._expect(TokenType.EQUALS)

        if self._check(TokenType.LPAREN):
            subtypes = self._parse_complex_subtypes()
        else:
            subtypes = [self._parse_subtype()]
        self._expect_terminator()

        self._positions[entity_id] = id_tok
        self._records.append(EntityRecord(id=entity_id, subtypes=tuple(subtypes)))

    def _parse_complex_subtypes(self) -> list[SubtypeRecord]:
        """Parse the parenthesized subtype blocks of a complex instance."""
        opening = self._expect(TokenType.LPAREN)
        subtypes: list[SubtypeRecord] = []
        while not self._check(TokenType.RPAREN):
            if self._check(TokenType.SEMICOLON, TokenType.EOF):
                raise self._error(ParseErrorKind.UNBALANCED_PARENS, "Unclosed '(' of complex instance", opening)
            subtypes.append(self._parse_subtype())
        if not subtypes:
            raise self._error(ParseErrorKind.UNEXPECTED_TOKEN, "Complex instance has no subtypes", opening)
        self._advance()  # )
        return subtypes

    def _parse_subtype(self) -> SubtypeRecord:
        """Parse: TYPE(params)"""
        name_tok = self._expect_type_name()
        return SubtypeRecord(type_name=name_tok.value, parameters=self._parse_parameter_list())

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def _parse_parameter_list(self) -> tuple[Value, ...]:
        """Parse: ( [value (, value)*] )"""
        opening = self._expect(TokenType.LPAREN)
        if self._check(TokenType.RPAREN):
            self._advance()
            return ()
        parameters = self._parse_nested([_OpenAggregate(opening)])
        assert isinstance(parameters, ListValue)
        return parameters.items

    def _parse_value(self) -> Value:
        """Parse a single parameter value."""
        return self._parse_nested([])

    def _parse_nested(self, stack: list[_OpenAggregate]) -> Value:
        """Parse values until every aggregate on *stack* is closed.

        Lists and typed values are tracked on *stack* rather than the call
        stack, so nesting depth is bounded only by memory.
        """
        while True:
            tok = self._current()
            if tok.type == TokenType.LPAREN:
                opening = self._advance()
                if not self._check(TokenType.RPAREN):
                    stack.append(_OpenAggregate(opening))
                    continue
                self._advance()
                value: Value = ListValue(items=())
            elif tok.type == TokenType.KEYWORD:
                name_tok = self._expect_type_name()
                if not self._check(TokenType.LPAREN):
                    tok = self._current()
                    raise self._error(
                        ParseErrorKind.UNEXPECTED_TOKEN,
                        f"Expected '(' after type name {name_tok.value!r}, got {_describe(tok)}",
                        tok,
                    )
                stack.append(_OpenAggregate(self._advance(), type_name=name_tok.value))
                continue
            else:
                value = self._parse_scalar(tok)

            # Close every aggregate that ends right after this value.
            while stack:
                top = stack[-1]
                tok = self._current()
                if tok.type in (TokenType.SEMICOLON, TokenType.EOF):
                    raise self._error(ParseErrorKind.UNBALANCED_PARENS, "Unclosed '('", top.opening)
                if top.type_name is not None:
                    if tok.type != TokenType.RPAREN:
                        raise self._error(
                            ParseErrorKind.UNEXPECTED_TOKEN,
                            f"Typed value {top.type_name!r} takes exactly one parameter, got {_describe(tok)}",
                            tok,
                        )
                    self._advance()
                    stack.pop()
                    value = TypedValue(type_name=top.type_name, inner=value)
                    continue
                top.items.append(value)
                if tok.type == TokenType.COMMA:
                    self._advance()
                    break
                if tok.type != TokenType.RPAREN:
                    raise self._error(
                        ParseErrorKind.UNEXPECTED_TOKEN, f"Expected ',' or ')', got {_describe(tok)}", tok
                    )
                self._advance()
                stack.pop()
                value = ListValue(items=tuple(top.items))
            else:
                return value

    def _parse_scalar(self, tok: Token) -> Value:
        """Parse a value that is neither a list nor a typed value."""
        if tok.type == TokenType.INTEGER:
            self._advance()
            return IntegerValue(value=int(tok.value))
        if tok.type == TokenType.REAL:
            self._advance()
            return RealValue(value=float(tok.value), text=tok.value)
        if tok.type == TokenType.STRING:
            self._advance()
            return StringValue(value=tok.value)
        if tok.type == TokenType.BINARY:
            self._advance()
            return BinaryValue(value=tok.value)
        if tok.type == TokenType.ENUMERATION:
            self._advance()
            return EnumerationValue(name=tok.value)
        if tok.type == TokenType.ENTITY_ID:
            self._advance()
            return ReferenceValue(id=int(tok.value))
        if tok.type == TokenType.OMITTED:
            self._advance()
            return OMITTED
        if tok.type == TokenType.REDECLARED:
            self._advance()
            return REDECLARED
        if tok.type in (TokenType.SEMICOLON, TokenType.EOF):
            raise self._error(ParseErrorKind.UNBALANCED_PARENS, f"Expected a parameter, got {_describe(tok)}", tok)
        raise self._error(ParseErrorKind.UNEXPECTED_TOKEN, f"Expected a parameter, got {_describe(tok)}", tok)


def _describe(tok: Token) -> str:
    """Render a token for error messages."""
    if tok.type == TokenType.EOF:
        return "end of file"
    if tok.type == TokenType.STRING:
        return "string literal"
    if tok.type == TokenType.ENTITY_ID:
        return f"'#{tok.value}'"
    if tok.type == TokenType.ENUMERATION:
        return f"'.{tok.value}.'"
    return repr(tok.value)
