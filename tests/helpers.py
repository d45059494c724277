"""Shared test helpers for the WTFScript test suite."""

from __future__ import annotations

from wtfscript.ast_nodes import Program
from wtfscript.errors import CompileError, ParserErrorKind, RuntimeErrorKind, ScriptRuntimeError
from wtfscript.evaluator import Evaluator
from wtfscript.parser import parse
from wtfscript.types import Value


def parse_ok(source: str) -> Program:
    """Parse source, asserting there are no errors."""
    try:
        return parse(source, "<test>")
    except CompileError as e:
        raise AssertionError(f"Unexpected parse errors: {[str(err) for err in e.errors]}") from e


def parse_fails(source: str, kind: ParserErrorKind) -> CompileError:
    """Parse source, asserting an error of the given kind is reported."""
    try:
        parse(source, "<test>")
    except CompileError as e:
        kinds = [getattr(err, "kind", None) for err in e.errors]
        assert kind in kinds, f"Expected {kind.name} but got: {[str(err) for err in e.errors]}"
        return e
    raise AssertionError(f"Expected {kind.name} but the source parsed cleanly")


def run(source: str, *, seed: int | None = 0) -> Evaluator:
    """Run source on a fresh evaluator, asserting it completes."""
    evaluator = Evaluator(seed=seed)
    evaluator.run(source, "<test>")
    return evaluator


def run_fails(source: str, kind: RuntimeErrorKind, *, seed: int | None = 0) -> tuple[Evaluator, ScriptRuntimeError]:
    """Run source, asserting it stops with the given runtime error kind."""
    evaluator = Evaluator(seed=seed)
    try:
        evaluator.run(source, "<test>")
    except ScriptRuntimeError as e:
        assert e.kind == kind, f"Expected {kind.name} but got {e.kind.name}: {e}"
        return evaluator, e
    raise AssertionError(f"Expected {kind.name} but the script ran to completion")


def value_of(evaluator: Evaluator, name: str) -> Value:
    assert name in evaluator.environment, f"{name} is not bound"
    return evaluator.environment[name].value
