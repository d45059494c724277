"""Declared types and runtime values for the WTFScript evaluator.

Declared types are what a ``VarDecl`` names; runtime values are what
expressions evaluate to. Integers behave like 64-bit machine words and
unofloats never leave the unit interval: both invariants are enforced in
``__post_init__`` so that no construction path can break them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from wtfscript.errors import RuntimeErrorKind, ScriptRuntimeError
from wtfscript.source import Span

# ── Machine-word helpers ────────────────────────────────────────

_U64 = 1 << 64
I64_MIN = -(1 << 63)
I64_MAX = (1 << 63) - 1
U64_MAX = _U64 - 1

UNOFLOAT_MIN = 0.0
UNOFLOAT_MAX = 1.0


def wrap_int(value: int) -> int:
    """Reinterpret an arbitrary integer as a signed 64-bit word."""
    value &= U64_MAX
    return value - _U64 if value > I64_MAX else value


def wrap_uint(value: int) -> int:
    """Reinterpret an arbitrary integer as an unsigned 64-bit word."""
    return value & U64_MAX


def truncate(value: float) -> int:
    """Drop the fractional part, saturating non-finite floats."""
    if math.isnan(value):
        return 0
    if math.isinf(value):
        return I64_MAX if value > 0 else I64_MIN
    return int(value)


def clamp_unit(value: float) -> float:
    return max(UNOFLOAT_MIN, min(UNOFLOAT_MAX, value))


# ── Declared types ──────────────────────────────────────────────


class DeclaredType(Enum):
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    UNOFLOAT = "unofloat"
    BOOL = "bool"
    STRING = "string"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value

    @property
    def is_numeric(self) -> bool:
        return self in _NUMERIC_TYPES


_NUMERIC_TYPES = frozenset({
    DeclaredType.INT, DeclaredType.UINT, DeclaredType.FLOAT, DeclaredType.UNOFLOAT,
})


# ── Runtime values ──────────────────────────────────────────────


@dataclass(frozen=True)
class IntValue:
    value: int
    kind: ClassVar[str] = "int"

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", wrap_int(self.value))


@dataclass(frozen=True)
class UintValue:
    value: int
    kind: ClassVar[str] = "uint"

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", wrap_uint(self.value))


@dataclass(frozen=True)
class FloatValue:
    value: float
    kind: ClassVar[str] = "float"


@dataclass(frozen=True)
class UnofloatValue:
    value: float
    kind: ClassVar[str] = "unofloat"

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", clamp_unit(float(self.value)))


@dataclass(frozen=True)
class BoolValue:
    value: bool
    kind: ClassVar[str] = "bool"


@dataclass(frozen=True)
class StringValue:
    value: str
    kind: ClassVar[str] = "string"


@dataclass(frozen=True)
class NilValue:
    kind: ClassVar[str] = "nil"

    @property
    def value(self) -> None:
        return None


NIL = NilValue()

Value = (
    IntValue | UintValue | FloatValue | UnofloatValue
    | BoolValue | StringValue | NilValue
)

NumericValue = IntValue | UintValue | FloatValue | UnofloatValue

NUMERIC_VALUES = (IntValue, UintValue, FloatValue, UnofloatValue)


@dataclass
class Variable:
    """A binding: fixed declared type, replaceable value."""

    declared_type: DeclaredType
    value: Value


def is_numeric(value: Value) -> bool:
    return isinstance(value, NUMERIC_VALUES)


def display(value: Value) -> str:
    """Render a value the way ``print`` shows it."""
    match value:
        case BoolValue(value=b):
            return "true" if b else "false"
        case NilValue():
            return "nil"
        case FloatValue(value=f) | UnofloatValue(value=f):
            return repr(f)
        case _:
            return str(value.value)


# ── Casting ─────────────────────────────────────────────────────


def to_int(value: NumericValue) -> int:
    """Integer view of a numeric value (floats truncate toward zero)."""
    match value:
        case IntValue(value=n) | UintValue(value=n):
            return n
        case FloatValue(value=f) | UnofloatValue(value=f):
            return truncate(f)
    raise TypeError(f"not numeric: {value!r}")


def to_float(value: NumericValue) -> float:
    return float(value.value)


def cast_to_type(declared: DeclaredType, value: NumericValue) -> NumericValue:
    """Narrow or widen a numeric value into the declared numeric type."""
    match declared:
        case DeclaredType.INT:
            return IntValue(to_int(value))
        case DeclaredType.UINT:
            return UintValue(to_int(value))
        case DeclaredType.FLOAT:
            return FloatValue(to_float(value))
        case DeclaredType.UNOFLOAT:
            return UnofloatValue(to_float(value))
    raise ValueError(f"{declared} is not a numeric type")


def coerce_assignment(
    declared: DeclaredType, value: Value, *, strict: bool, span: Span,
) -> Value:
    """Check ``value`` against a declared type and convert it for storage.

    ``strict`` is true when the source expression is a literal or a bare
    identifier: out-of-range unofloats and negative uints are then errors.
    Computed sources are clamped or wrapped instead.
    """
    if declared in (DeclaredType.BOOL, DeclaredType.STRING):
        if value.kind != declared.value:
            raise _mismatch(declared, value, span)
        return value

    if not declared.is_numeric or not is_numeric(value):
        raise _mismatch(declared, value, span)

    if declared == DeclaredType.UNOFLOAT:
        number = to_float(value)
        if strict and not (UNOFLOAT_MIN <= number <= UNOFLOAT_MAX):
            raise ScriptRuntimeError(
                RuntimeErrorKind.INVALID_UNOFLOAT_ASSIGNMENT,
                f"cannot assign {number} to unofloat: value out of range [0.0, 1.0]",
                span,
            )
    elif declared == DeclaredType.UINT and strict:
        if isinstance(value, (IntValue, FloatValue)) and value.value < 0:
            raise ScriptRuntimeError(
                RuntimeErrorKind.NEGATIVE_UINT_ASSIGNMENT,
                f"cannot assign {display(value)} to uint: value must be non-negative",
                span,
            )

    return cast_to_type(declared, value)


def _mismatch(declared: DeclaredType, value: Value, span: Span) -> ScriptRuntimeError:
    return ScriptRuntimeError(
        RuntimeErrorKind.TYPE_MISMATCH,
        f"type mismatch: expected {declared}, got {value.kind}",
        span,
    )
