"""Binary operator semantics.

Operands follow first-come-first-served coercion: the right operand is
converted to the runtime kind of the left one before the operator runs,
so ``1 + 2.9`` is ``3`` while ``2.9 + 1`` is ``3.9``.
"""

from __future__ import annotations

import operator
from collections.abc import Callable

from wtfscript.errors import RuntimeErrorKind, ScriptRuntimeError
from wtfscript.source import Span
from wtfscript.types import (
    NIL,
    BoolValue,
    FloatValue,
    IntValue,
    NilValue,
    NumericValue,
    StringValue,
    UintValue,
    UnofloatValue,
    Value,
    is_numeric,
    to_float,
    to_int,
)

ARITHMETIC_OPS = frozenset({"+", "-", "*", "/"})
COMPARISON_OPS = frozenset({"==", "!=", "<", "<=", ">", ">="})

_COMPARE: dict[str, Callable[[object, object], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def is_truthy(value: Value) -> bool:
    match value:
        case BoolValue(value=b):
            return b
        case StringValue(value=s):
            return s != ""
        case NilValue():
            return False
        case _ if is_numeric(value):
            return value.value != 0
    return True


def apply_binary(op: str, left: Value, right: Value, span: Span) -> Value:
    """Evaluate ``left op right`` for every operator but ``&&`` and ``||``."""
    if op not in ARITHMETIC_OPS and op not in COMPARISON_OPS:
        raise _unknown(op, left, right, span)

    match left:
        case NilValue():
            raise _unknown(op, left, right, span)
        case BoolValue():
            return _bool_op(op, left, right, span)
        case StringValue():
            return _string_op(op, left, right, span)

    if not is_numeric(right):
        raise _mismatch(op, left, right, span)
    return _numeric_op(op, left, right, span)


# ── Per-kind rules ───────────────────────────────────────────────


def _bool_op(op: str, left: BoolValue, right: Value, span: Span) -> Value:
    if op not in ("==", "!="):
        raise _unknown(op, left, right, span)
    if not isinstance(right, BoolValue):
        raise _mismatch(op, left, right, span)
    return BoolValue(_COMPARE[op](left.value, right.value))


def _string_op(op: str, left: StringValue, right: Value, span: Span) -> Value:
    if op != "+" and op not in COMPARISON_OPS:
        raise _unknown(op, left, right, span)
    if not isinstance(right, StringValue):
        raise _mismatch(op, left, right, span)
    if op == "+":
        return StringValue(left.value + right.value)
    return BoolValue(_COMPARE[op](left.value, right.value))


def _numeric_op(op: str, left: NumericValue, right: NumericValue, span: Span) -> Value:
    match left:
        case IntValue() | UintValue():
            # The right operand takes the left's 64-bit width and signedness
            a, b = left.value, type(left)(to_int(right)).value
            if op in COMPARISON_OPS:
                return BoolValue(_COMPARE[op](a, b))
            return type(left)(_int_arith(op, a, b, span))
        case FloatValue():
            result = _float_arith_or_compare(op, left.value, to_float(right), span)
            return result if isinstance(result, BoolValue) else FloatValue(result)
        case UnofloatValue():
            result = _float_arith_or_compare(op, left.value, to_float(right), span)
            return result if isinstance(result, BoolValue) else UnofloatValue(result)
    return NIL


def _int_arith(op: str, a: int, b: int, span: Span) -> int:
    match op:
        case "+":
            return a + b
        case "-":
            return a - b
        case "*":
            return a * b
    if b == 0:
        raise _division_by_zero(span)
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _float_arith_or_compare(op: str, a: float, b: float, span: Span) -> float | BoolValue:
    if op in COMPARISON_OPS:
        return BoolValue(_COMPARE[op](a, b))
    match op:
        case "+":
            return a + b
        case "-":
            return a - b
        case "*":
            return a * b
    if b == 0.0:
        raise _division_by_zero(span)
    return a / b


# ── Errors ───────────────────────────────────────────────────────


def _unknown(op: str, left: Value, right: Value, span: Span) -> ScriptRuntimeError:
    return ScriptRuntimeError(
        RuntimeErrorKind.UNKNOWN_OPERATOR,
        f"unknown operator: {left.kind} {op} {right.kind}",
        span,
    )


def _mismatch(op: str, left: Value, right: Value, span: Span) -> ScriptRuntimeError:
    return ScriptRuntimeError(
        RuntimeErrorKind.TYPE_MISMATCH,
        f"type mismatch: {left.kind} {op} {right.kind}",
        span,
    )


def _division_by_zero(span: Span) -> ScriptRuntimeError:
    return ScriptRuntimeError(RuntimeErrorKind.DIVISION_BY_ZERO, "division by zero", span)
