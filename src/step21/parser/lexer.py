# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for ISO 10303-21 clear-text files.

Converts raw source text into a sequence of tokens for subsequent parsing.
"""

import codecs
import enum
from collections.abc import Iterator
from dataclasses import dataclass

from step21.model.values import INTEGER_MAX, INTEGER_MIN

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """All token types produced by the Part 21 lexer."""

    # Names: section keywords, entity and select type names
    KEYWORD = "KEYWORD"

    # Literals
    ENTITY_ID = "ENTITY_ID"
    INTEGER = "INTEGER"
    REAL = "REAL"
    STRING = "STRING"
    BINARY = "BINARY"
    ENUMERATION = "ENUMERATION"

    # Parameter markers
    OMITTED = "$"
    REDECLARED = "*"

    # Punctuation
    LPAREN = "("
    RPAREN = ")"
    COMMA = ","
    SEMICOLON = ";"
    EQUALS = "="

    # End of file
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexical token with its source location.

    Attributes:
        type: The kind of token.
        value: The token text. STRING tokens carry the unescaped content, REAL
            tokens the normalized literal, ENTITY_ID tokens the digits after ``#``,
            ENUMERATION tokens the name between the dots and BINARY tokens the
            hex digits between the double quotes.
        line: 1-based line number where the token starts.
        column: 1-based column number where the token starts.
        offset: 0-based character offset where the token starts.
    """

    type: TokenType
    value: str
    line: int
    column: int
    offset: int


class LexErrorKind(enum.Enum):
    """Categories of lexical failure."""

    UNTERMINATED_STRING = "unterminated string"
    UNTERMINATED_COMMENT = "unterminated comment"
    MALFORMED_NUMBER = "malformed number"
    DANGLING_REFERENCE_MARKER = "dangling reference marker"
    UNEXPECTED_CHARACTER = "unexpected character"


class LexError(Exception):
    """Raised when the scanner encounters invalid input.

    Attributes:
        kind: The category of the failure.
        line: 1-based line number of the error.
        column: 1-based column number of the error.
        offset: 0-based character offset of the error.
    """

    def __init__(self, kind: LexErrorKind, message: str, line: int, column: int, offset: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.kind = kind
        self.line = line
        self.column = column
        self.offset = offset


WRAPPER_BEGIN = "ISO-10303-21"
WRAPPER_END = "END-ISO-10303-21"


def iter_tokens(source: str) -> Iterator[Token]:
    """Lazily scan Part 21 source text.

    Each call starts a fresh scan from the beginning of *source*. The last
    token yielded is always EOF.

    Raises:
        LexError: When the scan reaches invalid input.
    """
    return _Lexer(source).scan()


def tokenize(source: str) -> list[Token]:
    """Tokenize Part 21 source text into a list of tokens.

    Comments and whitespace are consumed and not included in the output.

    Args:
        source: The full text of a STEP file.

    Returns:
        A list of Token objects ending with a single EOF token.

    Raises:
        LexError: On unexpected characters, unterminated strings or comments,
            malformed numbers, or a ``#`` without digits.
    """
    return list(iter_tokens(source))


def decode_source(data: bytes, encoding: str = "utf-8") -> str:
    """Decode raw file bytes into source text.

    A UTF-8 byte-order mark at the start of *data* is dropped.

    Raises:
        LexError: If the bytes are not valid in *encoding*; the error points at
            the first offending byte.
    """
    if data.startswith(codecs.BOM_UTF8) and codecs.lookup(encoding).name == "utf-8":
        data = data[len(codecs.BOM_UTF8) :]
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as exc:
        text = data[: exc.start].decode(encoding, errors="replace")
        line = text.count("\n") + 1
        column = len(text) - (text.rfind("\n") + 1) + 1
        raise LexError(
            LexErrorKind.UNEXPECTED_CHARACTER,
            f"Byte 0x{data[exc.start]:02X} is not valid {encoding}",
            line,
            column,
            len(text),
        ) from exc


def normalize_real(literal: str) -> str:
    """Return the canonical spelling of a real literal.

    A leading ``+`` is dropped, the exponent marker is upper-cased and a ``.`` is
    added to a mantissa that lacks one. All digits are kept as written.
    """
    text = literal[1:] if literal.startswith("+") else literal
    mantissa, marker, exponent = text.upper().partition("E")
    if "." not in mantissa:
        mantissa += "."
    return mantissa + marker + exponent


# ################
# Implementation
# ################

_SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "=": TokenType.EQUALS,
    "$": TokenType.OMITTED,
    "*": TokenType.REDECLARED,
}

_DIGITS = frozenset("0123456789")
_HEX_DIGITS = frozenset("0123456789ABCDEFabcdef")
_NAME_START = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz_")
_NAME_CHARS = _NAME_START | _DIGITS


class _Lexer:
    """Internal scanner state machine."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._column = 1

    def scan(self) -> Iterator[Token]:
        """Yield all tokens including the terminal EOF."""
        while self._pos < len(self._source):
            self._skip_whitespace_and_comments()
            if self._pos >= len(self._source):
                break
            yield self._scan_token()
        yield Token(TokenType.EOF, "", self._line, self._column, self._pos)

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _peek(self) -> str:
        """Return the character one position ahead, or '' at end of input."""
        if self._pos + 1 < len(self._source):
            return self._source[self._pos + 1]
        return ""

    def _advance(self) -> str:
        """Consume the current character, update position tracking, and return it."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    # ------------------------------------------------------------------
    # Whitespace and comment skipping
    # ------------------------------------------------------------------

    def _skip_whitespace_and_comments(self) -> None:
        """Skip all whitespace and comment runs at the current position."""
        while self._pos < len(self._source):
            ch = self._current()
            if ch in " \t\r\n\f\v":
                self._advance()
            elif ch == "/" and self._peek() == "*":
                self._skip_block_comment()
            else:
                break

    def _skip_block_comment(self) -> None:
        """Consume from '/*' through the first '*/'; comments do not nest."""
        start_line = self._line
        start_col = self._column
        start_pos = self._pos
        self._advance()  # /
        self._advance()  # *
        while self._pos < len(self._source):
            if self._current() == "*" and self._peek() == "/":
                self._advance()  # *
                self._advance()  # /
                return
            self._advance()
        raise LexError(
            LexErrorKind.UNTERMINATED_COMMENT, "Unterminated comment", start_line, start_col, start_pos
        )

    # ------------------------------------------------------------------
    # Token scanning dispatcher
    # ------------------------------------------------------------------

    def _scan_token(self) -> Token:
        """Dispatch to the appropriate handler based on the current character."""
        ch = self._current()
        line = self._line
        col = self._column
        start = self._pos

        if ch in _SINGLE_CHAR_TOKENS:
            self._advance()
            return Token(_SINGLE_CHAR_TOKENS[ch], ch, line, col, start)
        if ch == "'":
            return self._scan_string(line, col, start)
        if ch == '"':
            return self._scan_binary(line, col, start)
        if ch == "#":
            return self._scan_entity_id(line, col, start)
        if ch in _DIGITS or ch in "+-":
            return self._scan_number(line, col, start)
        if ch == ".":
            return self._scan_enumeration(line, col, start)
        if ch in _NAME_START or ch == "!":
            return self._scan_keyword(line, col, start)
        raise LexError(LexErrorKind.UNEXPECTED_CHARACTER, f"Unexpected character: {ch!r}", line, col, start)

    # ------------------------------------------------------------------
    # Literal scanners
    # ------------------------------------------------------------------

    def _scan_string(self, line: int, col: int, start: int) -> Token:
        """Scan a single-quoted string; ``''`` stands for one quote, line breaks are content."""
        self._advance()  # opening '
        chars: list[str] = []
        while self._pos < len(self._source):
            ch = self._advance()
            if ch == "'":
                if self._current() == "'":
                    self._advance()
                    chars.append("'")
                    continue
                return Token(TokenType.STRING, "".join(chars), line, col, start)
            chars.append(ch)
        raise LexError(LexErrorKind.UNTERMINATED_STRING, "Unterminated string literal", line, col, start)

    def _scan_binary(self, line: int, col: int, start: int) -> Token:
        """Scan a double-quoted binary literal made of hex digits."""
        self._advance()  # opening "
        digits: list[str] = []
        while self._pos < len(self._source):
            ch = self._current()
            if ch == '"':
                self._advance()
                return Token(TokenType.BINARY, "".join(digits), line, col, start)
            if ch not in _HEX_DIGITS:
                raise LexError(
                    LexErrorKind.UNEXPECTED_CHARACTER,
                    f"Invalid character in binary literal: {ch!r}",
                    self._line,
                    self._column,
                    self._pos,
                )
            digits.append(self._advance())
        raise LexError(LexErrorKind.UNTERMINATED_STRING, "Unterminated binary literal", line, col, start)

    def _scan_entity_id(self, line: int, col: int, start: int) -> Token:
        """Scan ``#`` followed by the digits of an instance id."""
        self._advance()  # #
        digits_start = self._pos
        while self._current() in _DIGITS:
            self._advance()
        if self._pos == digits_start:
            raise LexError(
                LexErrorKind.DANGLING_REFERENCE_MARKER, "Expected digits after '#'", line, col, start
            )
        return Token(TokenType.ENTITY_ID, self._source[digits_start : self._pos], line, col, start)

    def _scan_number(self, line: int, col: int, start: int) -> Token:
        """Scan an integer or real literal.

        A literal with a ``.`` or an exponent is a real. The fraction digits may
        be empty (``1.``) but the mantissa needs at least one leading digit.
        """
        if self._current() in "+-":
            self._advance()
        if self._current() not in _DIGITS:
            raise LexError(
                LexErrorKind.MALFORMED_NUMBER, "Expected digits in numeric literal", line, col, start
            )
        while self._current() in _DIGITS:
            self._advance()

        is_real = False
        if self._current() == ".":
            is_real = True
            self._advance()
            while self._current() in _DIGITS:
                self._advance()
        if self._current() in ("E", "e"):
            is_real = True
            self._advance()
            if self._current() and self._current() in "+-":
                self._advance()
            if self._current() not in _DIGITS:
                raise LexError(
                    LexErrorKind.MALFORMED_NUMBER, "Exponent has no digits", line, col, start
                )
            while self._current() in _DIGITS:
                self._advance()

        ch = self._current()
        if ch and (ch.isalnum() or ch in "_."):
            raise LexError(
                LexErrorKind.MALFORMED_NUMBER,
                f"Unexpected {ch!r} in numeric literal",
                self._line,
                self._column,
                self._pos,
            )

        literal = self._source[start : self._pos]
        if is_real:
            return Token(TokenType.REAL, normalize_real(literal), line, col, start)
        if not INTEGER_MIN <= int(literal) <= INTEGER_MAX:
            raise LexError(
                LexErrorKind.MALFORMED_NUMBER, f"Integer literal out of range: {literal}", line, col, start
            )
        return Token(TokenType.INTEGER, literal, line, col, start)

    def _scan_enumeration(self, line: int, col: int, start: int) -> Token:
        """Scan ``.NAME.``; a dot followed by a digit is a real missing its leading digit."""
        self._advance()  # opening .
        ch = self._current()
        if ch in _DIGITS:
            raise LexError(
                LexErrorKind.MALFORMED_NUMBER, "Real literal must start with a digit", line, col, start
            )
        if ch not in _NAME_START:
            raise LexError(LexErrorKind.UNEXPECTED_CHARACTER, "Unexpected character: '.'", line, col, start)
        name_start = self._pos
        while self._current() in _NAME_CHARS:
            self._advance()
        name = self._source[name_start : self._pos]
        if self._current() != ".":
            raise LexError(
                LexErrorKind.UNEXPECTED_CHARACTER, f"Unterminated enumeration '.{name}'", line, col, start
            )
        self._advance()  # closing .
        return Token(TokenType.ENUMERATION, name, line, col, start)

    def _scan_keyword(self, line: int, col: int, start: int) -> Token:
        """Scan a keyword; the two file wrapper keywords contain hyphens and digits."""
        for wrapper in (WRAPPER_END, WRAPPER_BEGIN):
            if self._source.startswith(wrapper, start):
                end = start + len(wrapper)
                if end >= len(self._source) or not _is_keyword_char(self._source[end]):
                    for _ in wrapper:
                        self._advance()
                    return Token(TokenType.KEYWORD, wrapper, line, col, start)
        if self._current() == "!":
            self._advance()
            if self._current() not in _NAME_START:
                raise LexError(LexErrorKind.UNEXPECTED_CHARACTER, "Unexpected character: '!'", line, col, start)
        while _is_keyword_char(self._current()):
            self._advance()
        return Token(TokenType.KEYWORD, self._source[start : self._pos], line, col, start)


def _is_keyword_char(ch: str) -> bool:
    return ch in _NAME_CHARS
