"""AST node definitions for WTFScript."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from wtfscript.source import Span
from wtfscript.types import DeclaredType

# ── Expressions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Identifier:
    name: str
    span: Span


@dataclass(frozen=True)
class IntegerLit:
    value: int
    literal: str
    span: Span


@dataclass(frozen=True)
class FloatLit:
    value: float
    literal: str
    span: Span


@dataclass(frozen=True)
class StringLit:
    value: str    # escapes decoded
    literal: str  # exact source text, quotes included
    span: Span


@dataclass(frozen=True)
class BooleanLit:
    value: bool
    span: Span


@dataclass(frozen=True)
class BinaryExpr:
    left: Expr
    op: str
    right: Expr
    span: Span
    op_span: Span


@dataclass(frozen=True)
class UnaryExpr:
    op: str
    operand: Expr
    span: Span


@dataclass(frozen=True)
class CallExpr:
    func: Expr
    args: list[Expr]
    span: Span


Expr = Union[
    Identifier, IntegerLit, FloatLit, StringLit, BooleanLit,
    BinaryExpr, UnaryExpr, CallExpr,
]

LITERAL_NODES = (IntegerLit, FloatLit, StringLit, BooleanLit)


# ── Statements ───────────────────────────────────────────────────


@dataclass(frozen=True)
class VarDecl:
    declared_type: DeclaredType
    name: Identifier
    value: Expr | None
    range_min: Expr | None
    range_max: Expr | None
    span: Span

    @property
    def has_range(self) -> bool:
        return self.range_min is not None and self.range_max is not None


@dataclass(frozen=True)
class AssignStmt:
    name: Identifier
    value: Expr
    span: Span


@dataclass(frozen=True)
class ExprStmt:
    expr: Expr
    span: Span


@dataclass(frozen=True)
class BlockStmt:
    statements: list[Stmt]
    span: Span


@dataclass(frozen=True)
class IfStmt:
    is_random: bool
    condition: Expr | None  # None only for a bare ``ifrand``
    consequence: BlockStmt
    alternative: IfStmt | BlockStmt | None
    span: Span


Stmt = Union[VarDecl, AssignStmt, ExprStmt, BlockStmt, IfStmt]


# ── Program ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Program:
    statements: list[Stmt]
    span: Span
