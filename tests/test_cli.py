"""Tests for the wtf command line."""

from __future__ import annotations

from click.testing import CliRunner

from wtfscript import __version__
from wtfscript.cli import main


def invoke(*args: str, input: str | None = None):
    return CliRunner().invoke(main, list(args), input=input)


class TestCLIBasic:
    def test_version(self):
        result = invoke("--version")
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self):
        result = invoke("--help")
        assert result.exit_code == 0
        for command in ("run", "check", "format", "view", "highlight", "lsp"):
            assert command in result.output


class TestRun:
    def test_runs_script(self, script_file):
        path = script_file('int a = 2; int b = a * 21; print("answer", b);')
        result = invoke("run", str(path))
        assert result.exit_code == 0
        assert "answer 42" in result.output

    def test_runtime_error_exits_1(self, script_file):
        path = script_file("int a = 1;\nint b = a / 0;\n")
        result = invoke("run", str(path))
        assert result.exit_code == 1
        assert "[Line 2, Col 11] runtime error: division by zero" in result.output

    def test_parse_errors_exit_1_without_running(self, script_file):
        path = script_file('print("SIDE EFFECT");\nint x = ;\nfloat f = 1.2.3;\n')
        result = invoke("run", str(path))
        assert result.exit_code == 1
        assert "SIDE EFFECT" not in result.output
        assert "no prefix parse function" in result.output
        assert "could not parse '1.2.3' as float" in result.output

    def test_pretty_errors(self, script_file):
        path = script_file("int a = 1;\nint b = a / 0;\n")
        result = invoke("run", "--pretty", str(path))
        assert result.exit_code == 1
        assert "error[E302]" in result.output
        assert "int b = a / 0;" in result.output
        assert "^" in result.output

    def test_seed_option_is_deterministic(self, script_file):
        path = script_file("int(1, 1000000) x; print(x);")
        first = invoke("run", "--seed", "5", str(path))
        second = invoke("run", "--seed", "5", str(path))
        assert first.exit_code == 0
        assert first.output == second.output

    def test_dump_vars(self, script_file):
        path = script_file('int a = 3; string s = "hi"; bool b = a > 2;')
        result = invoke("run", "--dump-vars", str(path))
        assert result.exit_code == 0
        assert "a: int = 3" in result.output
        assert "s: string = hi" in result.output
        assert "b: bool = true" in result.output

    def test_dump_vars_after_runtime_error(self, script_file):
        path = script_file("int a = 3; int b = a / 0;")
        result = invoke("run", "--dump-vars", str(path))
        assert result.exit_code == 1
        assert "a: int = 3" in result.output
        assert "b:" not in result.output

    def test_explicit_config(self, script_file, tmp_path):
        config = tmp_path / "custom.toml"
        config.write_text('[string]\ncharset = "z"\nlength = { min = 3, max = 3 }\n')
        path = script_file("string s; print(s);")
        result = invoke("run", "--config", str(config), str(path))
        assert result.exit_code == 0
        assert result.output.strip() == "zzz"

    def test_discovered_config(self, script_file, tmp_path):
        (tmp_path / "wtf.toml").write_text("[int]\nmin = 7\nmax = 8\n")
        path = script_file("int x; print(x);")
        result = invoke("run", str(path))
        assert result.exit_code == 0
        assert result.output.strip() in ("7", "8")

    def test_invalid_config(self, script_file, tmp_path):
        config = tmp_path / "bad.toml"
        config.write_text("[int]\nmin = 5\nmax = 1\n")
        path = script_file("int x;")
        result = invoke("run", "--config", str(config), str(path))
        assert result.exit_code == 1
        assert "int.min (5) must be less than int.max (1)" in result.output

    def test_missing_file(self):
        result = invoke("run", "does-not-exist.wtf")
        assert result.exit_code != 0


class TestCheck:
    def test_clean_file(self, script_file):
        path = script_file("int x = 1; x = 2;")
        result = invoke("check", str(path))
        assert result.exit_code == 0
        assert "2 statement(s), no errors" in result.output

    def test_reports_every_error(self, script_file):
        path = script_file("int x = ;\nbool b = @;\n")
        result = invoke("check", str(path))
        assert result.exit_code == 1
        assert "error[E202]" in result.output
        assert "error[E200]" in result.output
        assert "error(s) in" in result.output

    def test_does_not_evaluate(self, script_file):
        path = script_file("int x = 1 / 0; print(x);")
        result = invoke("check", str(path))
        assert result.exit_code == 0


class TestView:
    def test_dumps_ast(self, script_file):
        path = script_file("int(1, 2) x;")
        result = invoke("view", str(path))
        assert result.exit_code == 0
        assert "Program" in result.output
        assert "VarDecl" in result.output
        assert "declared_type: int" in result.output
        assert "Identifier" in result.output
        assert "name: 'x'" in result.output
        assert "span" not in result.output


class TestFormat:
    def test_stdin(self):
        result = invoke("format", "--stdin", input="int   x=1+2*3\nif(x>1){x=2}")
        assert result.exit_code == 0
        assert result.output == "int x = 1 + 2 * 3;\nif (x > 1) {\n    x = 2;\n}\n"

    def test_stdin_check_clean(self):
        result = invoke("format", "--stdin", "--check", input="int x = 1;\n")
        assert result.exit_code == 0

    def test_stdin_check_dirty(self):
        result = invoke("format", "--stdin", "--check", input="int x=1")
        assert result.exit_code == 1

    def test_rewrites_files(self, script_file, tmp_path):
        path = script_file("bool   b=true")
        result = invoke("format", str(tmp_path))
        assert result.exit_code == 0
        assert "formatted" in result.output
        assert path.read_text() == "bool b = true;\n"

    def test_check_reports_without_writing(self, script_file):
        path = script_file("bool   b=true")
        result = invoke("format", "--check", str(path))
        assert result.exit_code == 1
        assert "would reformat" in result.output
        assert path.read_text() == "bool   b=true"


class TestHighlight:
    def test_highlights(self, script_file):
        path = script_file("int x = 1; // hi\n")
        result = CliRunner().invoke(main, ["highlight", str(path)], color=True)
        assert result.exit_code == 0
        assert "\x1b[" in result.output

    def test_plain_output_keeps_text(self, script_file):
        path = script_file("int x = 1; // hi\n")
        result = invoke("highlight", str(path))
        assert result.exit_code == 0
        assert "int x = 1; // hi" in result.output
