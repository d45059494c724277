"""Scanner for WTFScript.

Hands out one token per ``next_token()`` call, so the parser pulls the
stream lazily instead of receiving a materialized list. A scanner is
single-use: once EOF has been produced it keeps returning EOF, and
iteration stops right after it.
"""

from __future__ import annotations

from collections import deque

from wtfscript.errors import LexicalError
from wtfscript.source import Span
from wtfscript.tokens import OPERATORS, Token, TokenKind, lookup_identifier


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


class Scanner:
    """Tokenizes WTFScript source on demand."""

    def __init__(self, source: str, filename: str = "<stdin>") -> None:
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.col = 1
        self.errors: list[LexicalError] = []
        self._pending: deque[Token] = deque()
        self._eof: Token | None = None
        self._exhausted = False

    def __iter__(self) -> Scanner:
        return self

    def __next__(self) -> Token:
        if self._exhausted:
            raise StopIteration
        tok = self.next_token()
        if tok.kind == TokenKind.EOF:
            self._exhausted = True
        return tok

    def next_token(self) -> Token:
        """Scan and return the next token."""
        if self._pending:
            return self._pending.popleft()
        if self._eof is not None:
            return self._eof

        self._skip_trivia()
        if self.pos >= len(self.source):
            self._eof = self._make(TokenKind.EOF, "", self.line, self.col)
            return self._eof

        ch = self.source[self.pos]
        if ch == '"':
            return self._scan_string()
        if _is_digit(ch) or (ch == "-" and _is_digit(self._peek(1))):
            return self._scan_number()
        if _is_ident_start(ch):
            return self._scan_identifier()
        return self._scan_operator()

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return "\0"

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _make(
        self, kind: TokenKind, literal: str, start_line: int, start_col: int,
        error: LexicalError | None = None,
    ) -> Token:
        end_col = self.col - 1 if self.col > 1 else 1
        span = Span(self.filename, start_line, start_col, self.line, end_col)
        return Token(kind, literal, span, error)

    def _illegal(self, literal: str, message: str, line: int, col: int) -> Token:
        error = LexicalError(message, Span.point(self.filename, line, col))
        self.errors.append(error)
        return self._make(TokenKind.ILLEGAL, literal, line, col, error)

    # ── Whitespace and comments ──────────────────────────────────

    def _skip_trivia(self) -> None:
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch in " \t\r\n":
                self._advance()
            elif ch == "/" and self._peek(1) == "/":
                while self.pos < len(self.source) and self.source[self.pos] != "\n":
                    self._advance()
            else:
                return

    # ── Literals ─────────────────────────────────────────────────

    def _scan_string(self) -> Token:
        start_line, start_col = self.line, self.col
        start = self.pos
        self._advance()  # opening "
        while self.pos < len(self.source) and self.source[self.pos] != '"':
            if self.source[self.pos] == "\\" and self.pos + 1 < len(self.source):
                self._advance()
            self._advance()

        if self.pos >= len(self.source):
            tok = self._make(TokenKind.STRING_LIT, self.source[start:], start_line, start_col)
            self._pending.append(self._illegal(
                "", "unterminated string literal", start_line, start_col,
            ))
            return tok

        self._advance()  # closing "
        return self._make(
            TokenKind.STRING_LIT, self.source[start:self.pos], start_line, start_col,
        )

    def _scan_number(self) -> Token:
        start_line, start_col = self.line, self.col
        start = self.pos
        if self.source[self.pos] == "-":
            self._advance()
        while self.pos < len(self.source) and (
            _is_digit(self.source[self.pos]) or self.source[self.pos] == "."
        ):
            self._advance()
        text = self.source[start:self.pos]
        kind = TokenKind.FLOAT_LIT if "." in text else TokenKind.INTEGER_LIT
        return self._make(kind, text, start_line, start_col)

    # ── Identifiers and keywords ─────────────────────────────────

    def _scan_identifier(self) -> Token:
        start_line, start_col = self.line, self.col
        start = self.pos
        while self.pos < len(self.source) and _is_ident_char(self.source[self.pos]):
            self._advance()
        word = self.source[start:self.pos]
        return self._make(lookup_identifier(word), word, start_line, start_col)

    # ── Operators and delimiters ─────────────────────────────────

    def _scan_operator(self) -> Token:
        start_line, start_col = self.line, self.col
        two = self.source[self.pos:self.pos + 2]
        if len(two) == 2 and two in OPERATORS:
            self._advance()
            self._advance()
            return self._make(OPERATORS[two], two, start_line, start_col)

        ch = self._advance()
        if ch in OPERATORS:
            return self._make(OPERATORS[ch], ch, start_line, start_col)
        if ch in "&|":
            return self._illegal(
                ch, f"unexpected character {ch!r}, did you mean '{ch * 2}'?",
                start_line, start_col,
            )
        return self._illegal(ch, f"unexpected character {ch!r}", start_line, start_col)
