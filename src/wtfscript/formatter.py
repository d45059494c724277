"""AST-walking pretty-printer for WTFScript source code.

Produces canonical formatting for .wtf files: one statement per line,
four-space block indentation, a ``;`` after every simple statement and
only the parentheses that precedence requires.

Comments are dropped by the scanner, so they do not survive formatting.
"""

from __future__ import annotations

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

# Binding levels, loosest first
_PRECEDENCE: dict[str, int] = {
    "||": 1,
    "&&": 2,
    "==": 3, "!=": 3,
    "<": 4, ">": 4, "<=": 4, ">=": 4,
    "+": 5, "-": 5,
    "*": 6, "/": 6,
}

_PREFIX_PREC = 7
_CALL_PREC = 99
_INDENT = "    "


class WtfFormatter:
    """Format a parsed Program back to canonical source text."""

    def format(self, program: Program) -> str:
        """Format a program to canonical source text."""
        if not program.statements:
            return ""
        return "\n".join(self._stmt(s) for s in program.statements) + "\n"

    # ── Statements ─────────────────────────────────────────────

    def _stmt(self, stmt: Stmt) -> str:
        match stmt:
            case VarDecl():
                return self._var_decl(stmt)
            case AssignStmt(name=name, value=value):
                return f"{name.name} = {self._expr(value)};"
            case ExprStmt(expr=expr):
                return f"{self._expr(expr)};"
            case IfStmt():
                return self._if(stmt)
            case BlockStmt():
                return self._block(stmt)
        raise TypeError(f"not a statement: {type(stmt).__name__}")

    def _var_decl(self, node: VarDecl) -> str:
        parts = [str(node.declared_type)]
        if node.has_range:
            parts.append(f"({self._expr(node.range_min)}, {self._expr(node.range_max)})")
        parts.append(f" {node.name.name}")
        if node.value is not None:
            parts.append(f" = {self._expr(node.value)}")
        return "".join(parts) + ";"

    def _if(self, node: IfStmt) -> str:
        if not node.is_random:
            head = f"if ({self._expr(node.condition)})"
        elif node.condition is None:
            head = "ifrand"
        else:
            head = f"ifrand({self._expr(node.condition)})"

        text = f"{head} {self._block(node.consequence)}"
        match node.alternative:
            case IfStmt() as chained:
                text += f" else {self._if(chained)}"
            case BlockStmt() as block:
                text += f" else {self._block(block)}"
        return text

    def _block(self, block: BlockStmt) -> str:
        if not block.statements:
            return "{}"
        inner = "\n".join(self._stmt(s) for s in block.statements)
        return "{\n" + _indented(inner) + "\n}"

    # ── Expressions ────────────────────────────────────────────

    def _expr(self, expr: Expr, parent_prec: int = 0) -> str:
        match expr:
            case IntegerLit() | FloatLit() | StringLit():
                return expr.literal
            case BooleanLit(value=value):
                return "true" if value else "false"
            case Identifier(name=name):
                return name
            case BinaryExpr(left=left, op=op, right=right):
                prec = _PRECEDENCE[op]
                text = f"{self._expr(left, prec)} {op} {self._expr(right, prec + 1)}"
                return f"({text})" if prec < parent_prec else text
            case UnaryExpr(op="-", operand=IntegerLit() | FloatLit() as literal):
                # "-5" would scan back as a single negative literal
                return f"-({literal.literal})"
            case UnaryExpr(op=op, operand=operand):
                return op + self._expr(operand, _PREFIX_PREC)
            case CallExpr(func=func, args=args):
                rendered = ", ".join(self._expr(a) for a in args)
                return f"{self._expr(func, _CALL_PREC)}({rendered})"
        raise TypeError(f"not an expression: {type(expr).__name__}")


def _indented(text: str) -> str:
    return "\n".join(_INDENT + line if line else line for line in text.splitlines())


def parenthesize(expr: object) -> str:
    """Render an expression with every operation wrapped in parentheses."""
    match expr:
        case IntegerLit() | FloatLit() | StringLit():
            return expr.literal
        case BooleanLit(value=value):
            return "true" if value else "false"
        case Identifier(name=name):
            return name
        case BinaryExpr(left=left, op=op, right=right):
            return f"({parenthesize(left)} {op} {parenthesize(right)})"
        case UnaryExpr(op=op, operand=operand):
            return f"({op}{parenthesize(operand)})"
        case CallExpr(func=func, args=args):
            return f"{parenthesize(func)}({', '.join(parenthesize(a) for a in args)})"
    raise TypeError(f"not an expression: {type(expr).__name__}")
