"""WTFScript command line."""

from __future__ import annotations

import dataclasses
import sys
from pathlib import Path

import click

from wtfscript import __version__
from wtfscript.config import Config, ConfigError, find_config, load_config
from wtfscript.errors import CompileError, DiagnosticRenderer, ScriptRuntimeError, WtfError
from wtfscript.evaluator import Evaluator
from wtfscript.parser import parse
from wtfscript.source import SourceFile
from wtfscript.types import DeclaredType, display


def _echo_error(message: str) -> None:
    click.echo(click.style(message, fg="red"), err=True)


def _report(errors: list[WtfError], source: SourceFile, *, pretty: bool) -> None:
    """Print errors as one-liners, or as full diagnostics when ``pretty``."""
    if pretty:
        renderer = DiagnosticRenderer(color=sys.stderr.isatty(), source=source)
        for err in errors:
            click.echo(renderer.render(err.to_diagnostic()), err=True)
    else:
        for err in errors:
            _echo_error(str(err))


def _resolve_config(script: Path, explicit: str | None) -> Config:
    """Explicit --config, else the nearest wtf.toml, else the defaults."""
    if explicit is not None:
        return load_config(Path(explicit))
    try:
        return load_config(find_config(script))
    except FileNotFoundError:
        return Config()


def _read(file: str) -> SourceFile:
    return SourceFile.from_path(Path(file))


@click.group()
@click.version_option(__version__, prog_name="wtf")
def main() -> None:
    """The WTFScript interpreter."""


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="Config file (default: nearest wtf.toml).")
@click.option("--seed", type=int, default=None, help="Seed the random generator.")
@click.option("--pretty", is_flag=True, help="Render errors with source context.")
@click.option("--dump-vars", is_flag=True, help="Print every variable after the run.")
def run(file: str, config_path: str | None, seed: int | None,
        pretty: bool, dump_vars: bool) -> None:
    """Run a WTFScript file."""
    source = _read(file)
    try:
        config = _resolve_config(Path(file), config_path)
    except ConfigError as e:
        _echo_error(f"error: {e}")
        raise SystemExit(1)

    evaluator = Evaluator(config, seed=seed)
    failed = False
    try:
        evaluator.run(source.text, source.name)
    except CompileError as e:
        _report(e.errors, source, pretty=pretty)
        raise SystemExit(1)
    except ScriptRuntimeError as e:
        _report([e], source, pretty=pretty)
        failed = True

    if dump_vars:
        for name in evaluator.environment:
            var = evaluator.environment[name]
            click.echo(f"{name}: {var.declared_type} = {display(var.value)}")

    if failed:
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def check(file: str) -> None:
    """Scan and parse a file without running it."""
    source = _read(file)
    try:
        program = parse(source.text, source.name)
    except CompileError as e:
        _report(e.errors, source, pretty=True)
        click.echo(f"{len(e.errors)} error(s) in {file}", err=True)
        raise SystemExit(1)
    click.echo(f"checked {file}: {len(program.statements)} statement(s), no errors")


@main.command(name="format")
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--check", is_flag=True, help="Check formatting without modifying files.")
@click.option("--stdin", "use_stdin", is_flag=True, help="Read from stdin, write to stdout.")
def format_cmd(path: str, check: bool, use_stdin: bool) -> None:
    """Format WTFScript source files."""
    from wtfscript.formatter import WtfFormatter

    formatter = WtfFormatter()

    if use_stdin:
        source = SourceFile(sys.stdin.read())
        try:
            program = parse(source.text, source.name)
        except CompileError as e:
            _report(e.errors, source, pretty=True)
            raise SystemExit(1)
        formatted = formatter.format(program)
        if check:
            if formatted != source.text:
                raise SystemExit(1)
        else:
            sys.stdout.write(formatted)
        return

    target = Path(path)
    wtf_files = sorted(target.rglob("*.wtf")) if target.is_dir() else [target]

    if not wtf_files:
        click.echo("no .wtf files found", err=True)
        return

    needs_formatting = False
    for wtf_file in wtf_files:
        source = SourceFile.from_path(wtf_file)
        try:
            program = parse(source.text, source.name)
        except CompileError as e:
            _report(e.errors, source, pretty=True)
            continue

        formatted = formatter.format(program)
        if formatted != source.text:
            if check:
                click.echo(f"would reformat {source.name}")
                needs_formatting = True
            else:
                wtf_file.write_text(formatted)
                click.echo(f"formatted {source.name}")

    if check and needs_formatting:
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def highlight(file: str) -> None:
    """Print a file with terminal syntax highlighting."""
    from pygments import highlight as pygments_highlight
    from pygments.formatters import TerminalFormatter

    from wtfscript.highlight import WtfScriptLexer

    text = Path(file).read_text()
    click.echo(pygments_highlight(text, WtfScriptLexer(), TerminalFormatter()), nl=False)


@main.command()
def lsp() -> None:
    """Start the WTFScript language server."""
    from wtfscript.lsp import main as lsp_main

    lsp_main()


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def view(file: str) -> None:
    """View the AST of a WTFScript file."""
    source = _read(file)
    try:
        program = parse(source.text, source.name)
    except CompileError as e:
        _report(e.errors, source, pretty=True)
        raise SystemExit(1)

    _dump_ast(program, 0)


_HIDDEN_FIELDS = frozenset({"span", "op_span", "literal"})


def _dump_ast(node: object, depth: int) -> None:
    """Print one node per line with its fields indented beneath it."""
    pad = "  " * depth
    if not dataclasses.is_dataclass(node):
        click.echo(f"{pad}{node!r}")
        return

    click.echo(f"{pad}{type(node).__name__}")
    for f in dataclasses.fields(node):
        if f.name in _HIDDEN_FIELDS:
            continue
        value = getattr(node, f.name)
        if value is None:
            continue
        if isinstance(value, list):
            click.echo(f"{pad}  {f.name}: ({len(value)})")
            for item in value:
                _dump_ast(item, depth + 2)
        elif dataclasses.is_dataclass(value):
            click.echo(f"{pad}  {f.name}:")
            _dump_ast(value, depth + 2)
        elif isinstance(value, DeclaredType):
            click.echo(f"{pad}  {f.name}: {value}")
        else:
            click.echo(f"{pad}  {f.name}: {value!r}")
