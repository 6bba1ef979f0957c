"""Tokeniser for the language's source text."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator

from dslc import logger

__all__ = ["TokenType", "Token", "Lexer", "tokenize"]


class TokenType(enum.Enum):
    # Literals
    INT_LITERAL = enum.auto()
    FLOAT_LITERAL = enum.auto()
    BOOL_LITERAL = enum.auto()
    IDENTIFIER = enum.auto()
    # Keywords
    FN = enum.auto()
    LET = enum.auto()
    RETURN = enum.auto()
    IF = enum.auto()
    ELSE = enum.auto()
    WHILE = enum.auto()
    FOR = enum.auto()
    TRUE = enum.auto()
    FALSE = enum.auto()
    # Types
    I32 = enum.auto()
    I64 = enum.auto()
    F32 = enum.auto()
    F64 = enum.auto()
    BOOL = enum.auto()
    VOID = enum.auto()
    # Operators
    PLUS = enum.auto()
    MINUS = enum.auto()
    STAR = enum.auto()
    SLASH = enum.auto()
    MOD = enum.auto()
    EQ = enum.auto()
    NE = enum.auto()
    LT = enum.auto()
    LE = enum.auto()
    GT = enum.auto()
    GE = enum.auto()
    AND = enum.auto()
    OR = enum.auto()
    NOT = enum.auto()
    ASSIGN = enum.auto()
    # Delimiters
    LPAREN = enum.auto()
    RPAREN = enum.auto()
    LBRACE = enum.auto()
    RBRACE = enum.auto()
    COMMA = enum.auto()
    COLON = enum.auto()
    SEMICOLON = enum.auto()
    ARROW = enum.auto()
    # Special
    EOF = enum.auto()
    ERROR = enum.auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int
    column: int


_KEYWORDS = {
    "fn": TokenType.FN,
    "let": TokenType.LET,
    "return": TokenType.RETURN,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "for": TokenType.FOR,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "i32": TokenType.I32,
    "i64": TokenType.I64,
    "f32": TokenType.F32,
    "f64": TokenType.F64,
    "bool": TokenType.BOOL,
    "void": TokenType.VOID,
}

_SINGLE = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
    ";": TokenType.SEMICOLON,
    "+": TokenType.PLUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.MOD,
}

# First character -> (second character, two-char type, fallback type or None for error).
_PAIRED = {
    "-": (">", TokenType.ARROW, TokenType.MINUS),
    "=": ("=", TokenType.EQ, TokenType.ASSIGN),
    "!": ("=", TokenType.NE, TokenType.NOT),
    "<": ("=", TokenType.LE, TokenType.LT),
    ">": ("=", TokenType.GE, TokenType.GT),
    "&": ("&", TokenType.AND, TokenType.ERROR),
    "|": ("|", TokenType.OR, TokenType.ERROR),
}

_WHITESPACE = " \t\r\n"
_DIGITS = "0123456789"


def _is_alpha(c: str) -> bool:
    return c.isascii() and c.isalpha()


def _is_ident_char(c: str) -> bool:
    return c == "_" or (c.isascii() and c.isalnum())


class Lexer:
    """Turns source text into tokens, tracking line and column."""

    def __init__(self, source: str) -> None:
        self.source = source
        self._pos = 0
        self._line = 1
        self._column = 1

    def _peek(self, offset: int = 0) -> str:
        index = self._pos + offset
        return self.source[index] if index < len(self.source) else ""

    def _advance(self) -> str:
        if self._pos >= len(self.source):
            return ""
        c = self.source[self._pos]
        self._pos += 1
        if c == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return c

    def _skip_trivia(self) -> None:
        while True:
            while self._peek() and self._peek() in _WHITESPACE:
                self._advance()
            if self._peek() == "/" and self._peek(1) == "/":
                while self._peek() and self._peek() != "\n":
                    self._advance()
                continue
            return

    def _scan_number(self, line: int, column: int) -> Token:
        chars = []
        is_float = False
        while (c := self._peek()):
            if c in _DIGITS:
                chars.append(self._advance())
            elif c == "." and not is_float:
                is_float = True
                chars.append(self._advance())
            else:
                break
        kind = TokenType.FLOAT_LITERAL if is_float else TokenType.INT_LITERAL
        return Token(kind, "".join(chars), line, column)

    def _scan_identifier(self, line: int, column: int) -> Token:
        chars = []
        while (c := self._peek()) and _is_ident_char(c):
            chars.append(self._advance())
        ident = "".join(chars)
        return Token(_KEYWORDS.get(ident, TokenType.IDENTIFIER), ident, line, column)

    def next_token(self) -> Token:
        """Scan and return the next token; ``EOF`` once input is exhausted."""
        self._skip_trivia()
        line, column = self._line, self._column
        c = self._peek()
        if not c:
            return Token(TokenType.EOF, "", line, column)

        if c in _SINGLE:
            self._advance()
            return Token(_SINGLE[c], c, line, column)

        if c in _PAIRED:
            second, paired_type, fallback = _PAIRED[c]
            self._advance()
            if self._peek() == second:
                self._advance()
                return Token(paired_type, c + second, line, column)
            return Token(fallback, c, line, column)

        if c in _DIGITS:
            return self._scan_number(line, column)

        if c == "_" or _is_alpha(c):
            return self._scan_identifier(line, column)

        message = f"Unexpected character: {c}"
        logger.error(message)
        self._advance()
        return Token(TokenType.ERROR, message, line, column)

    def __iter__(self) -> Iterator[Token]:
        while (token := self.next_token()).type is not TokenType.EOF:
            yield token
        yield token

    def tokenize(self) -> list[Token]:
        """Return all remaining tokens, ending with a single ``EOF`` token."""
        return list(self)


def tokenize(source: str) -> list[Token]:
    """Tokenise ``source`` completely."""
    return Lexer(source).tokenize()