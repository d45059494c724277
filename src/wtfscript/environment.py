"""The flat, global variable namespace of one script run."""

from __future__ import annotations

from collections.abc import Iterator

from wtfscript.types import DeclaredType, Value, Variable


class Environment:
    """Maps names to ``Variable`` bindings. Blocks share a single instance."""

    def __init__(self) -> None:
        self._vars: dict[str, Variable] = {}

    def declare(self, name: str, declared_type: DeclaredType, value: Value) -> Variable:
        """Bind ``name``, replacing any earlier binding and its declared type."""
        var = Variable(declared_type, value)
        self._vars[name] = var
        return var

    def lookup(self, name: str) -> Variable | None:
        return self._vars.get(name)

    def assign(self, name: str, value: Value) -> bool:
        """Replace the value of an existing binding; its declared type stays.

        Returns False, binding nothing, when ``name`` was never declared.
        """
        var = self._vars.get(name)
        if var is None:
            return False
        var.value = value
        return True

    def __contains__(self, name: object) -> bool:
        return name in self._vars

    def __getitem__(self, name: str) -> Variable:
        return self._vars[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def __len__(self) -> int:
        return len(self._vars)
