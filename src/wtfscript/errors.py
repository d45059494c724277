"""Error taxonomy for scanning, parsing and evaluation, plus diagnostics.

Every error carries the line and column of the token or node that caused
it and prints in one uniform shape::

    [Line 3, Col 9] runtime error: division by zero

``Diagnostic`` and ``DiagnosticRenderer`` give the same errors a richer,
Rust-style rendering with the offending source line and carets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from wtfscript.source import SourceFile, Span

if TYPE_CHECKING:
    from wtfscript.ast_nodes import Program


class Severity(Enum):
    ERROR = "error"


class ParserErrorKind(Enum):
    ILLEGAL_TOKEN = "E200"
    EXPECTED_TOKEN = "E201"
    NO_PREFIX_PARSE_FN = "E202"
    INTEGER_PARSE_FAILURE = "E203"
    FLOAT_PARSE_FAILURE = "E204"


class RuntimeErrorKind(Enum):
    IDENTIFIER_NOT_FOUND = "E300"
    VARIABLE_NOT_DEFINED = "E301"
    DIVISION_BY_ZERO = "E302"
    TYPE_MISMATCH = "E303"
    UNKNOWN_OPERATOR = "E304"
    UNKNOWN_UNARY_OPERATOR = "E305"
    FUNCTION_NOT_FOUND = "E306"
    INVALID_FUNCTION_CALL = "E307"
    INVALID_RANGE = "E308"
    NEGATIVE_UINT_ASSIGNMENT = "E309"
    INVALID_UNOFLOAT_ASSIGNMENT = "E310"


LEXICAL_ERROR_CODE = "E100"


# ── Errors ───────────────────────────────────────────────────────


class WtfError(Exception):
    """Base for all script errors. ``category`` names the pipeline stage."""

    category = "script"

    def __init__(self, message: str, span: Span) -> None:
        self.message = message
        self.span = span
        super().__init__(message)

    @property
    def line(self) -> int:
        return self.span.start_line

    @property
    def column(self) -> int:
        return self.span.start_col

    @property
    def code(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return (
            f"[Line {self.line}, Col {self.column}] "
            f"{self.category} error: {self.message}"
        )

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            severity=Severity.ERROR,
            code=self.code,
            message=f"{self.category} error: {self.message}",
            labels=[DiagnosticLabel(span=self.span, message="")],
        )


class LexicalError(WtfError):
    category = "lexical"

    @property
    def code(self) -> str:
        return LEXICAL_ERROR_CODE


class ParserError(WtfError):
    category = "parser"

    def __init__(self, kind: ParserErrorKind, message: str, span: Span) -> None:
        self.kind = kind
        super().__init__(message, span)

    @property
    def code(self) -> str:
        return self.kind.value


class ScriptRuntimeError(WtfError):
    category = "runtime"

    def __init__(self, kind: RuntimeErrorKind, message: str, span: Span) -> None:
        self.kind = kind
        super().__init__(message, span)

    @property
    def code(self) -> str:
        return self.kind.value


class CompileError(Exception):
    """Every parse error from one pass, plus whatever program was salvaged."""

    def __init__(self, errors: list[WtfError], program: Program | None = None) -> None:
        self.errors = errors
        self.program = program
        messages = [str(e) for e in errors]
        super().__init__(f"{len(errors)} error(s): {'; '.join(messages)}")

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [e.to_diagnostic() for e in self.errors]


# ── Diagnostics ──────────────────────────────────────────────────

# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str


@dataclass
class Diagnostic:
    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)


class DiagnosticRenderer:
    """Rust-style rendering: header, location arrow, source line, carets."""

    def __init__(self, *, color: bool = True, source: SourceFile | None = None) -> None:
        self.color = color
        self._sources: dict[str, SourceFile | None] = {}
        if source is not None:
            self._sources[source.name] = source

    def _paint(self, code: str, text: str) -> str:
        return f"{code}{text}{_RESET}" if self.color else text

    def _source_line(self, filename: str, line_num: int) -> str | None:
        if filename not in self._sources:
            path = Path(filename)
            try:
                loaded = SourceFile.from_path(path) if path.is_file() else None
            except OSError:
                loaded = None
            self._sources[filename] = loaded
        source = self._sources[filename]
        return None if source is None else source.line_at(line_num)

    def render(self, diag: Diagnostic) -> str:
        color = _COLORS[diag.severity]
        lines = [
            self._paint(color, f"{diag.severity.value}[{diag.code}]")
            + self._paint(_BOLD, f": {diag.message}")
        ]
        for label in diag.labels:
            lines.extend(self._label_lines(label, color))
        return "\n".join(lines)

    def _label_lines(self, label: DiagnosticLabel, color: str) -> list[str]:
        span = label.span
        bar = "  " + self._paint(_BLUE, "   |")
        out = [f"  {self._paint(_BLUE, '-->')} {span}", bar]

        text = self._source_line(span.file, span.start_line)
        if text is not None:
            out.append(f"  {self._paint(_BLUE, f'{span.start_line:>4} |')} {text}")
            # Carets only for single-line spans
            if span.start_line == span.end_line:
                width = max(1, span.end_col - span.start_col + 1)
                indent = " " * (span.start_col - 1)
                out.append(f"{bar} {indent}{self._paint(color, '^' * width)}")
        if label.message:
            out.append(f"{bar}   {self._paint(color, label.message)}")
        return out
