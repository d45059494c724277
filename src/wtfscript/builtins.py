"""Builtin functions and the interface they use to reach the evaluator.

Builtins receive their arguments already evaluated, left to right, and
may return a value or ``None`` (which the caller turns into ``nil``).
Misuse is reported through ``host.log_error`` rather than raised: a bad
``print`` call should not abort the script.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

import click

from wtfscript.config import Config
from wtfscript.types import IntValue, StringValue, UintValue, Value, display


class BuiltinHost(Protocol):
    def get_config(self) -> Config: ...

    def generate_random_string(self, length: int, charset: str) -> str: ...

    def set_seed(self, seed: int) -> None: ...

    def log_error(self, message: str) -> None: ...


BuiltinFunc = Callable[[list[Value], BuiltinHost], Value | None]


def builtin_print(args: list[Value], host: BuiltinHost) -> None:
    if not args:
        host.log_error("print expects at least 1 argument")
        return
    click.echo(" ".join(display(arg) for arg in args))


def builtin_seed(args: list[Value], host: BuiltinHost) -> None:
    if len(args) != 1:
        host.log_error("seed expects exactly 1 argument")
        return
    arg = args[0]
    if not isinstance(arg, (IntValue, UintValue)):
        host.log_error(f"seed expects an int or uint, got {arg.kind}")
        return
    host.set_seed(arg.value)


def builtin_typeof(args: list[Value], host: BuiltinHost) -> Value | None:
    if len(args) != 1:
        host.log_error("typeof expects exactly 1 argument")
        return None
    return StringValue(args[0].kind)


BUILTINS: dict[str, BuiltinFunc] = {
    "print": builtin_print,
    "seed": builtin_seed,
    "typeof": builtin_typeof,
}


def register_builtins(register: Callable[[str, BuiltinFunc], None]) -> None:
    """Hand every builtin to ``register``."""
    for name, fn in BUILTINS.items():
        register(name, fn)
