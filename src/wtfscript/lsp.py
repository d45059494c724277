"""WTFScript Language Server: pygls-based LSP for .wtf files.

Provides diagnostics, hover, completion, document symbols and formatting
via stdio transport. Analysis stops at parsing: nothing is evaluated, so
random declarations are never drawn by the server.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from wtfscript import __version__
from wtfscript.ast_nodes import BlockStmt, IfStmt, Program, Stmt, VarDecl
from wtfscript.builtins import BUILTINS
from wtfscript.errors import CompileError, Diagnostic, Severity
from wtfscript.formatter import WtfFormatter
from wtfscript.parser import Parser
from wtfscript.scanner import Scanner
from wtfscript.source import Span
from wtfscript.tokens import KEYWORDS

# ── Conversion helpers ────────────────────────────────────────────

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
}

# All WTFScript keywords for completion
_KEYWORD_COMPLETIONS = sorted(KEYWORDS.keys())

_KEYWORD_DOCS = {
    "int": "signed 64-bit integer; random in the configured range when left unassigned",
    "uint": "unsigned 64-bit integer; negative computed values wrap around",
    "float": "64-bit float; `float(min, max) x` draws from [min, max)",
    "unofloat": "float clamped to [0.0, 1.0]",
    "bool": "`true` or `false`; a coin flip when left unassigned",
    "string": "text; random characters from the configured charset when left unassigned",
    "if": "`if (condition) { ... }`: the condition must be a bool",
    "else": "alternative branch of `if` or `ifrand`",
    "ifrand": "`ifrand(p) { ... }` runs the block with probability p (default 0.5)",
    "true": "boolean true",
    "false": "boolean false",
}

_BUILTIN_DOCS = {
    "print": "`print(args...)`: write the arguments separated by spaces",
    "seed": "`seed(n)`: reseed the random generator",
    "typeof": "`typeof(value)`: the runtime kind of a value, as a string",
}


def span_to_range(span: Span) -> lsp.Range:
    """Convert a 1-indexed Span to a 0-indexed LSP Range."""
    return lsp.Range(
        start=lsp.Position(line=span.start_line - 1, character=span.start_col - 1),
        end=lsp.Position(line=span.end_line - 1, character=span.end_col),
    )


def _to_lsp_diag(d: Diagnostic) -> lsp.Diagnostic:
    origin = lsp.Position(line=0, character=0)
    span_range = lsp.Range(start=origin, end=origin)
    if d.labels:
        span_range = span_to_range(d.labels[0].span)
    return lsp.Diagnostic(
        range=span_range,
        severity=_SEVERITY_MAP[d.severity],
        source="wtfscript",
        code=d.code,
        message=f"[{d.code}] {d.message}",
    )


def collect_declarations(statements: list[Stmt]) -> list[VarDecl]:
    """Every VarDecl in source order, including those inside blocks."""
    found: list[VarDecl] = []
    for stmt in statements:
        if isinstance(stmt, VarDecl):
            found.append(stmt)
        elif isinstance(stmt, BlockStmt):
            found.extend(collect_declarations(stmt.statements))
        elif isinstance(stmt, IfStmt):
            found.extend(collect_declarations(stmt.consequence.statements))
            if stmt.alternative is not None:
                found.extend(collect_declarations([stmt.alternative]))
    return found


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: str = ""
    program: Program | None = None
    complete: bool = False  # program parsed without errors
    declarations: list[VarDecl] = field(default_factory=list)
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)

    def declared_type_of(self, name: str) -> str | None:
        """Declared type of the last declaration of ``name``."""
        for decl in reversed(self.declarations):
            if decl.name.name == name:
                return str(decl.declared_type)
        return None


# ── Server ────────────────────────────────────────────────────────

server = LanguageServer(
    "wtfscript-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _analyze(uri: str, source: str) -> DocumentState:
    """Scan and parse, cache results, return state."""
    ds = DocumentState(source=source)
    try:
        ds.program = Parser(Scanner(source, uri)).parse()
        ds.complete = True
    except CompileError as e:
        ds.program = e.program
        ds.diagnostics = [_to_lsp_diag(d) for d in e.diagnostics]

    if ds.program is not None:
        ds.declarations = collect_declarations(ds.program.statements)

    _state[uri] = ds
    return ds


_WORD = re.compile(r"[A-Za-z0-9_]+")


def _get_word_at(source: str, line: int, character: int) -> str:
    """The identifier-like word touching a 0-indexed position.

    A cursor just past the end of a word still counts as on it.
    """
    lines = source.splitlines()
    if not 0 <= line < len(lines):
        return ""
    for m in _WORD.finditer(lines[line]):
        if m.start() <= character <= m.end():
            return m.group()
    return ""


def _markdown(value: str) -> lsp.Hover:
    return lsp.Hover(contents=lsp.MarkupContent(kind=lsp.MarkupKind.Markdown, value=value))


# ── LSP Feature Handlers ─────────────────────────────────────────


def _publish(uri: str, source: str) -> None:
    ds = _analyze(uri, source)
    server.text_document_publish_diagnostics(
        lsp.PublishDiagnosticsParams(uri=uri, diagnostics=ds.diagnostics),
    )


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    _publish(params.text_document.uri, params.text_document.text)


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    # Full sync: the last change holds the whole text
    changes = params.content_changes
    _publish(params.text_document.uri, changes[-1].text if changes else "")


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


def hover_text(ds: DocumentState, word: str) -> str | None:
    declared = ds.declared_type_of(word)
    if declared is not None:
        return f"**variable** `{word}` : `{declared}`"
    if word in _KEYWORD_DOCS:
        return f"**keyword** `{word}`: {_KEYWORD_DOCS[word]}"
    if word in _BUILTIN_DOCS:
        return f"**builtin** {_BUILTIN_DOCS[word]}"
    return None


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams) -> lsp.Hover | None:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return None
    word = _get_word_at(ds.source, params.position.line, params.position.character)
    if not word:
        return None
    text = hover_text(ds, word)
    return _markdown(text) if text is not None else None


def completion_items(ds: DocumentState | None) -> list[lsp.CompletionItem]:
    items: list[lsp.CompletionItem] = []

    for kw in _KEYWORD_COMPLETIONS:
        items.append(lsp.CompletionItem(
            label=kw,
            kind=lsp.CompletionItemKind.Keyword,
            detail=_KEYWORD_DOCS.get(kw),
        ))

    for name in BUILTINS:
        items.append(lsp.CompletionItem(
            label=name,
            kind=lsp.CompletionItemKind.Function,
            detail=_BUILTIN_DOCS.get(name),
        ))

    if ds is not None:
        for decl in ds.declarations:
            items.append(lsp.CompletionItem(
                label=decl.name.name,
                kind=lsp.CompletionItemKind.Variable,
                detail=str(decl.declared_type),
            ))

    # Deduplicate by label; later declarations win
    unique: dict[str, lsp.CompletionItem] = {}
    for item in items:
        unique[item.label] = item
    return list(unique.values())


@server.feature(
    lsp.TEXT_DOCUMENT_COMPLETION,
    lsp.CompletionOptions(trigger_characters=["("]),
)
def completion(params: lsp.CompletionParams) -> lsp.CompletionList:
    ds = _state.get(params.text_document.uri)
    return lsp.CompletionList(is_incomplete=False, items=completion_items(ds))


def _decl_to_symbol(decl: VarDecl) -> lsp.DocumentSymbol:
    return lsp.DocumentSymbol(
        name=decl.name.name,
        kind=lsp.SymbolKind.Variable,
        range=span_to_range(decl.span),
        selection_range=span_to_range(decl.name.span),
        detail=str(decl.declared_type),
    )


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.DocumentSymbol]:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return []
    return [_decl_to_symbol(decl) for decl in ds.declarations]


@server.feature(lsp.TEXT_DOCUMENT_FORMATTING)
def formatting(params: lsp.DocumentFormattingParams) -> list[lsp.TextEdit] | None:
    ds = _state.get(params.text_document.uri)
    # A partial program would drop the broken statements
    if ds is None or ds.program is None or not ds.complete:
        return None

    formatted = WtfFormatter().format(ds.program)
    if formatted == ds.source:
        return None

    # Replace entire document, trailing newline included
    end_line = len(ds.source.splitlines()) + 1

    return [lsp.TextEdit(
        range=lsp.Range(
            start=lsp.Position(line=0, character=0),
            end=lsp.Position(line=end_line, character=0),
        ),
        new_text=formatted,
    )]


def main() -> None:
    """Start the WTFScript language server on stdio."""
    server.start_io()
