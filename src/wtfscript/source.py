"""Source text and positions for tokens, nodes and diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Span:
    """A 1-indexed, inclusive range within a named source."""

    file: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    @classmethod
    def point(cls, file: str, line: int, col: int) -> Span:
        return cls(file, line, col, line, col)

    @property
    def line(self) -> int:
        return self.start_line

    @property
    def column(self) -> int:
        return self.start_col

    def through(self, other: Span) -> Span:
        """Span from the start of ``self`` to the end of ``other``."""
        return Span(
            self.file,
            self.start_line, self.start_col,
            other.end_line, other.end_col,
        )

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_col}"


class SourceFile:
    """Script text split into lines, used for snippets in diagnostics."""

    def __init__(self, text: str, name: str = "<stdin>") -> None:
        self.name = name
        self.text = text
        self.lines = text.splitlines()

    @classmethod
    def from_path(cls, path: Path) -> SourceFile:
        return cls(path.read_text(), str(path))

    def line_at(self, n: int) -> str | None:
        """Return the 1-indexed line, or None if out of range."""
        if 1 <= n <= len(self.lines):
            return self.lines[n - 1]
        return None
