"""Tree-walking evaluator for WTFScript.

One ``Evaluator`` owns one environment and one random generator. Every
random draw (range and default declarations, ``ifrand``, generated
strings) goes through that generator, so ``seed(n)`` makes a whole run
reproducible.

Runtime errors are raised as ``ScriptRuntimeError`` and stop the run at
the first failure. Bindings made before the failing statement stay in
``evaluator.environment``.
"""

from __future__ import annotations

import random

import click

from wtfscript.ast_nodes import (
    LITERAL_NODES,
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
from wtfscript.builtins import BuiltinFunc, register_builtins
from wtfscript.config import Config
from wtfscript.environment import Environment
from wtfscript.errors import CompileError, RuntimeErrorKind, ScriptRuntimeError
from wtfscript.operators import apply_binary, is_truthy
from wtfscript.parser import parse
from wtfscript.source import Span
from wtfscript.types import (
    NIL,
    BoolValue,
    DeclaredType,
    FloatValue,
    IntValue,
    StringValue,
    UintValue,
    UnofloatValue,
    Value,
    coerce_assignment,
    is_numeric,
    to_float,
    to_int,
)

DEFAULT_IFRAND_PROBABILITY = 0.5


class Evaluator:
    """Runs programs against a single flat environment."""

    def __init__(
        self, config: Config | None = None, *, seed: int | None = None, name: str = "wtf",
    ) -> None:
        self.config = config or Config()
        self.name = name
        self.environment = Environment()
        self.rng = random.Random(seed)
        self.builtins: dict[str, BuiltinFunc] = {}
        register_builtins(self.register)

    # ── Builtin host ─────────────────────────────────────────────

    def register(self, name: str, fn: BuiltinFunc) -> None:
        self.builtins[name] = fn

    def get_config(self) -> Config:
        return self.config

    def generate_random_string(self, length: int, charset: str) -> str:
        return "".join(self.rng.choice(charset) for _ in range(length))

    def set_seed(self, seed: int) -> None:
        self.rng.seed(seed)

    def log_error(self, message: str) -> None:
        click.echo(click.style(f"[{self.name}] {message}", fg="red"), err=True)

    # ── Entry points ─────────────────────────────────────────────

    def run(self, source: str, filename: str = "<stdin>") -> None:
        """Parse and evaluate ``source``.

        Raises ``CompileError`` without evaluating anything when the
        source does not parse, and ``ScriptRuntimeError`` on the first
        runtime failure.
        """
        self.evaluate(parse(source, filename))

    def execute(self, source: str, filename: str = "<stdin>") -> None:
        """Like ``run``, but reports errors on stderr instead of raising."""
        try:
            self.run(source, filename)
        except CompileError as e:
            for err in e.errors:
                self.log_error(str(err))
        except ScriptRuntimeError as e:
            self.log_error(str(e))

    def evaluate(self, node: Program | Stmt) -> None:
        match node:
            case Program(statements=statements) | BlockStmt(statements=statements):
                for stmt in statements:
                    self.evaluate(stmt)
            case VarDecl():
                self._eval_var_decl(node)
            case AssignStmt():
                self._eval_assign(node)
            case ExprStmt(expr=expr):
                self.eval_expr(expr)
            case IfStmt():
                self._eval_if(node)
            case _:
                raise TypeError(f"cannot evaluate {type(node).__name__}")

    # ── Statements ───────────────────────────────────────────────

    def _eval_var_decl(self, node: VarDecl) -> None:
        start = _start(node.span)
        if node.has_range:
            value = self._random_in_range(node, start)
        elif node.value is not None:
            raw = self.eval_expr(node.value)
            value = coerce_assignment(
                node.declared_type, raw, strict=_is_strict(node.value), span=start,
            )
        else:
            value = self._random_default(node.declared_type)
        self.environment.declare(node.name.name, node.declared_type, value)

    def _eval_assign(self, node: AssignStmt) -> None:
        start = _start(node.span)
        name = node.name.name
        raw = self.eval_expr(node.value)
        var = self.environment.lookup(name)
        if var is None:
            raise ScriptRuntimeError(
                RuntimeErrorKind.VARIABLE_NOT_DEFINED, f"variable not defined: {name}", start,
            )
        value = coerce_assignment(
            var.declared_type, raw, strict=_is_strict(node.value), span=start,
        )
        self.environment.assign(name, value)

    def _eval_if(self, node: IfStmt) -> None:
        if node.is_random:
            taken = self.rng.random() < self._probability(node)
        else:
            cond = self.eval_expr(node.condition)
            if not isinstance(cond, BoolValue):
                raise ScriptRuntimeError(
                    RuntimeErrorKind.TYPE_MISMATCH,
                    f"if condition must be bool, got {cond.kind}",
                    node.condition.span,
                )
            taken = cond.value

        if taken:
            self.evaluate(node.consequence)
        elif node.alternative is not None:
            self.evaluate(node.alternative)

    def _probability(self, node: IfStmt) -> float:
        if node.condition is None:
            return DEFAULT_IFRAND_PROBABILITY
        value = self.eval_expr(node.condition)
        if not is_numeric(value):
            raise ScriptRuntimeError(
                RuntimeErrorKind.TYPE_MISMATCH,
                f"ifrand probability must be numeric, got {value.kind}",
                node.condition.span,
            )
        p = to_float(value)
        if not 0.0 <= p <= 1.0:
            raise ScriptRuntimeError(
                RuntimeErrorKind.INVALID_RANGE,
                f"ifrand probability must be between 0.0 and 1.0, got {p}",
                node.condition.span,
            )
        return p

    # ── Random values ────────────────────────────────────────────

    def _random_in_range(self, node: VarDecl, span: Span) -> Value:
        lo = self.eval_expr(node.range_min)
        hi = self.eval_expr(node.range_max)
        for bound in (lo, hi):
            if not is_numeric(bound):
                raise ScriptRuntimeError(
                    RuntimeErrorKind.TYPE_MISMATCH,
                    f"range bounds must be numeric, got {bound.kind}",
                    span,
                )

        match node.declared_type:
            case DeclaredType.INT:
                low, high = to_int(lo), to_int(hi)
                _check_order(low, high, span)
                return IntValue(self.rng.randint(low, high))
            case DeclaredType.FLOAT:
                low_f, high_f = to_float(lo), to_float(hi)
                _check_order(low_f, high_f, span)
                return FloatValue(self.rng.random() * (high_f - low_f) + low_f)

        raise ScriptRuntimeError(
            RuntimeErrorKind.INVALID_RANGE,
            f"range declarations are only supported for int and float, not {node.declared_type}",
            span,
        )

    def _random_default(self, declared: DeclaredType) -> Value:
        cfg = self.config
        match declared:
            case DeclaredType.INT:
                return IntValue(self.rng.randint(int(cfg.int.min), int(cfg.int.max)))
            case DeclaredType.UINT:
                return UintValue(self.rng.randint(int(cfg.uint.min), int(cfg.uint.max)))
            case DeclaredType.FLOAT:
                return FloatValue(self.rng.uniform(cfg.float.min, cfg.float.max))
            case DeclaredType.UNOFLOAT:
                return UnofloatValue(self.rng.uniform(cfg.unofloat.min, cfg.unofloat.max))
            case DeclaredType.BOOL:
                return BoolValue(self.rng.random() < 0.5)
            case DeclaredType.STRING:
                return StringValue(self.generate_random_string(
                    int(cfg.string.length.min), cfg.string.charset,
                ))
        raise ValueError(f"no default value for {declared}")

    # ── Expressions ──────────────────────────────────────────────

    def eval_expr(self, expr: Expr) -> Value:
        match expr:
            case IntegerLit(value=v):
                return IntValue(v)
            case FloatLit(value=v):
                return FloatValue(v)
            case StringLit(value=v):
                return StringValue(v)
            case BooleanLit(value=v):
                return BoolValue(v)
            case Identifier(name=name):
                var = self.environment.lookup(name)
                if var is None:
                    raise ScriptRuntimeError(
                        RuntimeErrorKind.IDENTIFIER_NOT_FOUND,
                        f"identifier not found: {name}",
                        expr.span,
                    )
                return var.value
            case BinaryExpr():
                return self._eval_binary(expr)
            case UnaryExpr():
                return self._eval_unary(expr)
            case CallExpr():
                return self._eval_call(expr)
        raise TypeError(f"cannot evaluate {type(expr).__name__}")

    def _eval_binary(self, expr: BinaryExpr) -> Value:
        left = self.eval_expr(expr.left)
        if expr.op == "&&":
            if not is_truthy(left):
                return BoolValue(False)
            return BoolValue(is_truthy(self.eval_expr(expr.right)))
        if expr.op == "||":
            if is_truthy(left):
                return BoolValue(True)
            return BoolValue(is_truthy(self.eval_expr(expr.right)))
        right = self.eval_expr(expr.right)
        return apply_binary(expr.op, left, right, expr.op_span)

    def _eval_unary(self, expr: UnaryExpr) -> Value:
        operand = self.eval_expr(expr.operand)
        match expr.op, operand:
            case "-", IntValue(value=v):
                return IntValue(-v)
            case "-", UintValue(value=v):
                return UintValue(0 - v)
            case "-", FloatValue(value=v):
                return FloatValue(-v)
            case "-", UnofloatValue(value=v):
                return FloatValue(-v)
            case "!", BoolValue(value=b):
                return BoolValue(not b)
        raise ScriptRuntimeError(
            RuntimeErrorKind.UNKNOWN_UNARY_OPERATOR,
            f"unknown operator: {expr.op}{operand.kind}",
            expr.span,
        )

    def _eval_call(self, expr: CallExpr) -> Value:
        args = [self.eval_expr(arg) for arg in expr.args]
        if not isinstance(expr.func, Identifier):
            raise ScriptRuntimeError(
                RuntimeErrorKind.INVALID_FUNCTION_CALL,
                "invalid function call: callee must be an identifier",
                expr.span,
            )
        fn = self.builtins.get(expr.func.name)
        if fn is None:
            raise ScriptRuntimeError(
                RuntimeErrorKind.FUNCTION_NOT_FOUND,
                f"function not found: {expr.func.name}",
                expr.func.span,
            )
        result = fn(args, self)
        return NIL if result is None else result


def _start(span: Span) -> Span:
    return Span.point(span.file, span.start_line, span.start_col)


def _is_strict(expr: Expr) -> bool:
    return isinstance(expr, LITERAL_NODES + (Identifier,))


def _check_order(low: float, high: float, span: Span) -> None:
    if low == high:
        raise ScriptRuntimeError(
            RuntimeErrorKind.INVALID_RANGE, "invalid range: min is equal to max", span,
        )
    if low > high:
        raise ScriptRuntimeError(
            RuntimeErrorKind.INVALID_RANGE, "invalid range: min is greater than max", span,
        )
