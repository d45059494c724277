"""Parser for WTFScript.

Pulls tokens from a ``Scanner`` one at a time and builds the AST using a
Pratt expression parser for expressions and recursive descent for
statements. Errors do not stop the parse: the parser resynchronises at
the next statement boundary so that one pass reports every independent
problem.
"""

from __future__ import annotations

from typing import NoReturn

from wtfscript.ast_nodes import (
    AssignStmt,
    BinaryExpr,
    BlockStmt,
    BooleanLit,
    CallExpr,
    Expr,
    ExprStmt,
    FloatLit,
    Identifier,
    IfStmt,
    IntegerLit,
    Program,
    Stmt,
    StringLit,
    UnaryExpr,
    VarDecl,
)
from wtfscript.errors import CompileError, ParserError, ParserErrorKind
from wtfscript.scanner import Scanner
from wtfscript.source import Span
from wtfscript.tokens import TYPE_KEYWORDS, Token, TokenKind
from wtfscript.types import I64_MAX, I64_MIN, DeclaredType

# ── Binding powers for Pratt parser ─────────────────────────────

# (left_bp, right_bp) for infix operators
_INFIX_BP: dict[TokenKind, tuple[int, int]] = {
    TokenKind.OR: (1, 2),
    TokenKind.AND: (3, 4),
    TokenKind.EQUAL: (5, 6),
    TokenKind.NOT_EQUAL: (5, 6),
    TokenKind.LESS: (7, 8),
    TokenKind.LESS_EQUAL: (7, 8),
    TokenKind.GREATER: (7, 8),
    TokenKind.GREATER_EQUAL: (7, 8),
    TokenKind.PLUS: (9, 10),
    TokenKind.MINUS: (9, 10),
    TokenKind.STAR: (11, 12),
    TokenKind.SLASH: (11, 12),
}

_PREFIX_BP = 13  # right bp for unary ! and -
_CALL_BP = 15    # left bp for f(...)

_STATEMENT_STARTS = TYPE_KEYWORDS | {TokenKind.IF, TokenKind.IFRAND}

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "\\": "\\", '"': '"'}


def decode_string(literal: str) -> str:
    """Strip the quotes from a string literal and resolve its escapes.

    Unknown escapes keep the escaped character as is.
    """
    if len(literal) >= 2 and literal.endswith('"') and not _escaped_end(literal):
        body = literal[1:-1]
    else:
        body = literal[1:]
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            out.append(_ESCAPES.get(body[i + 1], body[i + 1]))
            i += 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _escaped_end(literal: str) -> bool:
    # An odd run of backslashes before the final quote escapes it.
    run = 0
    for ch in reversed(literal[1:-1]):
        if ch != "\\":
            break
        run += 1
    return run % 2 == 1


class Parser:
    """Parses the token stream of a ``Scanner`` into a ``Program``."""

    def __init__(self, scanner: Scanner) -> None:
        self.scanner = scanner
        self.filename = scanner.filename
        self.errors: list[ParserError] = []
        self._consumed = 0
        self._current = self._pull()
        self._peek = self._pull()
        self._last = self._current

    # ── Token access ─────────────────────────────────────────────

    def _pull(self) -> Token:
        """Next significant token. ILLEGAL tokens are reported and dropped."""
        while True:
            tok = self.scanner.next_token()
            if tok.kind != TokenKind.ILLEGAL:
                return tok
            detail = tok.error.message if tok.error is not None else "unrecognised input"
            self.errors.append(ParserError(
                ParserErrorKind.ILLEGAL_TOKEN,
                f"illegal token {tok.literal!r}: {detail}",
                tok.span,
            ))

    def _at(self, kind: TokenKind) -> bool:
        return self._current.kind == kind

    def _at_any(self, *kinds: TokenKind) -> bool:
        return self._current.kind in kinds

    def _advance(self) -> Token:
        tok = self._current
        if tok.kind != TokenKind.EOF:
            self._current = self._peek
            self._peek = self._pull()
            self._last = tok
            self._consumed += 1
        return tok

    def _expect(self, kind: TokenKind) -> Token:
        if self._at(kind):
            return self._advance()
        tok = self._current
        self._fail(
            ParserErrorKind.EXPECTED_TOKEN,
            f"expected next token to be {kind.name}, got {tok.kind.name} instead",
            tok.span,
        )

    def _skip_semicolon(self) -> None:
        if self._at(TokenKind.SEMICOLON):
            self._advance()

    def _fail(self, kind: ParserErrorKind, message: str, span: Span) -> NoReturn:
        self.errors.append(ParserError(kind, message, span))
        raise _ParseError(message)

    def _span_from(self, start: Span) -> Span:
        """Span from ``start`` through the last consumed token."""
        return start.through(self._last.span)

    def _synchronize(self) -> None:
        """Skip tokens until the next statement boundary."""
        while not self._at(TokenKind.EOF):
            if self._at(TokenKind.SEMICOLON):
                self._advance()
                return
            if self._at(TokenKind.RBRACE) or self._current.kind in _STATEMENT_STARTS:
                return
            self._advance()

    # ── Statements ───────────────────────────────────────────────

    def parse(self) -> Program:
        """Parse the whole stream.

        Raises ``CompileError`` holding every error, sorted by position,
        and the statements that did parse.
        """
        statements = self._parse_statements(until=TokenKind.EOF)
        end = self._current.span
        program = Program(statements, Span(self.filename, 1, 1, end.end_line, end.end_col))
        if self.errors:
            ordered = sorted(self.errors, key=lambda e: (e.line, e.column))
            raise CompileError(list(ordered), program)
        return program

    def _parse_statements(self, until: TokenKind) -> list[Stmt]:
        statements: list[Stmt] = []
        while not self._at_any(until, TokenKind.EOF):
            if self._at(TokenKind.SEMICOLON):
                self._advance()
                continue
            mark = self._consumed
            try:
                statements.append(self._parse_statement())
            except _ParseError:
                if self._consumed == mark:
                    self._advance()
                self._synchronize()
        return statements

    def _parse_statement(self) -> Stmt:
        tok = self._current
        if tok.kind in TYPE_KEYWORDS:
            return self._parse_var_decl()
        if tok.kind in (TokenKind.IF, TokenKind.IFRAND):
            return self._parse_if()
        if tok.kind == TokenKind.IDENTIFIER and self._peek.kind == TokenKind.ASSIGN:
            return self._parse_assign()
        expr = self._parse_expression(0)
        self._skip_semicolon()
        return ExprStmt(expr, self._span_from(expr.span))

    def _parse_var_decl(self) -> VarDecl:
        type_tok = self._advance()
        declared = DeclaredType(type_tok.literal)

        range_min = range_max = None
        if self._at(TokenKind.LPAREN):
            self._advance()
            range_min = self._parse_expression(0)
            self._expect(TokenKind.COMMA)
            range_max = self._parse_expression(0)
            self._expect(TokenKind.RPAREN)

        name_tok = self._expect(TokenKind.IDENTIFIER)
        name = Identifier(name_tok.literal, name_tok.span)

        value = None
        if self._at(TokenKind.ASSIGN):
            self._advance()
            value = self._parse_expression(0)

        self._skip_semicolon()
        return VarDecl(
            declared, name, value, range_min, range_max,
            self._span_from(type_tok.span),
        )

    def _parse_assign(self) -> AssignStmt:
        name_tok = self._advance()
        self._expect(TokenKind.ASSIGN)
        value = self._parse_expression(0)
        self._skip_semicolon()
        return AssignStmt(
            Identifier(name_tok.literal, name_tok.span), value,
            self._span_from(name_tok.span),
        )

    def _parse_if(self) -> IfStmt:
        start = self._advance()
        is_random = start.kind == TokenKind.IFRAND

        condition: Expr | None = None
        if not is_random or self._at(TokenKind.LPAREN):
            self._expect(TokenKind.LPAREN)
            condition = self._parse_expression(0)
            self._expect(TokenKind.RPAREN)

        consequence = self._parse_block()

        alternative: IfStmt | BlockStmt | None = None
        if self._at(TokenKind.ELSE):
            self._advance()
            if self._at_any(TokenKind.IF, TokenKind.IFRAND):
                alternative = self._parse_if()
            else:
                alternative = self._parse_block()

        return IfStmt(
            is_random, condition, consequence, alternative,
            self._span_from(start.span),
        )

    def _parse_block(self) -> BlockStmt:
        open_tok = self._expect(TokenKind.LBRACE)
        statements = self._parse_statements(until=TokenKind.RBRACE)
        self._expect(TokenKind.RBRACE)
        return BlockStmt(statements, self._span_from(open_tok.span))

    # ── Expressions ──────────────────────────────────────────────

    def _parse_expression(self, min_bp: int) -> Expr:
        """Parse an expression using Pratt parsing with binding powers."""
        left = self._parse_prefix()

        while True:
            tok = self._current

            if tok.kind == TokenKind.LPAREN:
                if _CALL_BP < min_bp:
                    break
                left = self._parse_call(left)
                continue

            if tok.kind in _INFIX_BP:
                left_bp, right_bp = _INFIX_BP[tok.kind]
                if left_bp < min_bp:
                    break
                op_tok = self._advance()
                right = self._parse_expression(right_bp)
                left = BinaryExpr(
                    left, op_tok.literal, right,
                    left.span.through(right.span), op_tok.span,
                )
                continue

            break

        return left

    def _parse_prefix(self) -> Expr:
        """Parse a prefix expression (atom or unary operator)."""
        tok = self._current

        match tok.kind:
            case TokenKind.MINUS | TokenKind.BANG:
                self._advance()
                operand = self._parse_expression(_PREFIX_BP)
                return UnaryExpr(tok.literal, operand, tok.span.through(operand.span))
            case TokenKind.LPAREN:
                self._advance()
                expr = self._parse_expression(0)
                self._expect(TokenKind.RPAREN)
                return expr
            case TokenKind.IDENTIFIER:
                self._advance()
                return Identifier(tok.literal, tok.span)
            case TokenKind.INTEGER_LIT:
                self._advance()
                return self._integer_literal(tok)
            case TokenKind.FLOAT_LIT:
                self._advance()
                return self._float_literal(tok)
            case TokenKind.STRING_LIT:
                self._advance()
                return StringLit(decode_string(tok.literal), tok.literal, tok.span)
            case TokenKind.TRUE | TokenKind.FALSE:
                self._advance()
                return BooleanLit(tok.kind == TokenKind.TRUE, tok.span)

        self._fail(
            ParserErrorKind.NO_PREFIX_PARSE_FN,
            f"no prefix parse function for {tok.kind.name} found",
            tok.span,
        )

    def _integer_literal(self, tok: Token) -> IntegerLit:
        try:
            value = int(tok.literal)
        except ValueError:
            value = None
        if value is None or not I64_MIN <= value <= I64_MAX:
            self._fail(
                ParserErrorKind.INTEGER_PARSE_FAILURE,
                f"could not parse {tok.literal!r} as integer",
                tok.span,
            )
        return IntegerLit(value, tok.literal, tok.span)

    def _float_literal(self, tok: Token) -> FloatLit:
        try:
            value = float(tok.literal)
        except ValueError:
            self._fail(
                ParserErrorKind.FLOAT_PARSE_FAILURE,
                f"could not parse {tok.literal!r} as float",
                tok.span,
            )
        return FloatLit(value, tok.literal, tok.span)

    def _parse_call(self, func: Expr) -> CallExpr:
        self._expect(TokenKind.LPAREN)
        args: list[Expr] = []
        if not self._at(TokenKind.RPAREN):
            args.append(self._parse_expression(0))
            while self._at(TokenKind.COMMA):
                self._advance()
                args.append(self._parse_expression(0))
        self._expect(TokenKind.RPAREN)
        return CallExpr(func, args, self._span_from(func.span))


class _ParseError(Exception):
    """Internal exception for parser error recovery."""


def parse(source: str, filename: str = "<stdin>") -> Program:
    """Scan and parse ``source`` in one go."""
    return Parser(Scanner(source, filename)).parse()
