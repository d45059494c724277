"""Token kinds and token representation for the WTFScript scanner."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wtfscript.errors import LexicalError
    from wtfscript.source import Span


class TokenKind(Enum):
    # Special
    ILLEGAL = auto()
    EOF = auto()

    # Identifiers and literals
    IDENTIFIER = auto()
    INTEGER_LIT = auto()
    FLOAT_LIT = auto()
    STRING_LIT = auto()
    TRUE = auto()
    FALSE = auto()

    # Operators
    ASSIGN = auto()
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    BANG = auto()
    EQUAL = auto()
    NOT_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    AND = auto()
    OR = auto()

    # Delimiters
    SEMICOLON = auto()
    COMMA = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()

    # Type keywords
    TYPE_INT = auto()
    TYPE_UINT = auto()
    TYPE_FLOAT = auto()
    TYPE_UNOFLOAT = auto()
    TYPE_BOOL = auto()
    TYPE_STRING = auto()

    # Control flow
    IF = auto()
    ELSE = auto()
    IFRAND = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    literal: str
    span: Span
    error: LexicalError | None = None  # set on ILLEGAL tokens only

    @property
    def line(self) -> int:
        return self.span.start_line

    @property
    def column(self) -> int:
        return self.span.start_col

    def __str__(self) -> str:
        return f"{self.kind.name}:{self.literal}"


KEYWORDS: dict[str, TokenKind] = {
    "int": TokenKind.TYPE_INT,
    "uint": TokenKind.TYPE_UINT,
    "float": TokenKind.TYPE_FLOAT,
    "unofloat": TokenKind.TYPE_UNOFLOAT,
    "bool": TokenKind.TYPE_BOOL,
    "string": TokenKind.TYPE_STRING,
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "ifrand": TokenKind.IFRAND,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
}

TYPE_KEYWORDS: frozenset[TokenKind] = frozenset({
    TokenKind.TYPE_INT,
    TokenKind.TYPE_UINT,
    TokenKind.TYPE_FLOAT,
    TokenKind.TYPE_UNOFLOAT,
    TokenKind.TYPE_BOOL,
    TokenKind.TYPE_STRING,
})

# Two-character operators are tried before their one-character prefixes.
OPERATORS: dict[str, TokenKind] = {
    "==": TokenKind.EQUAL,
    "!=": TokenKind.NOT_EQUAL,
    "<=": TokenKind.LESS_EQUAL,
    ">=": TokenKind.GREATER_EQUAL,
    "&&": TokenKind.AND,
    "||": TokenKind.OR,
    "=": TokenKind.ASSIGN,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "!": TokenKind.BANG,
    "<": TokenKind.LESS,
    ">": TokenKind.GREATER,
    ";": TokenKind.SEMICOLON,
    ",": TokenKind.COMMA,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
}


def lookup_identifier(word: str) -> TokenKind:
    """Map a scanned word to its keyword kind, or IDENTIFIER."""
    return KEYWORDS.get(word, TokenKind.IDENTIFIER)
