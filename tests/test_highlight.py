"""Tests for the Pygments lexer."""

from __future__ import annotations

from pygments.lexers import get_lexer_for_filename
from pygments.token import Comment, Error, Keyword, Name, Number, Operator, Punctuation, String

from wtfscript.highlight import WtfScriptLexer


def lex(source: str) -> list[tuple[object, str]]:
    """Tokens without whitespace."""
    return [
        (tok, value)
        for tok, value in WtfScriptLexer().get_tokens(source)
        if value.strip()
    ]


class TestLexer:
    def test_declaration(self):
        assert lex("int x = 42;") == [
            (Keyword.Type, "int"),
            (Name, "x"),
            (Operator, "="),
            (Number.Integer, "42"),
            (Punctuation, ";"),
        ]

    def test_ifrand_is_distinct_from_if(self):
        tokens = lex("ifrand(0.5) {} else if (true) {}")
        assert (Keyword.Pseudo, "ifrand") in tokens
        assert (Keyword, "if") in tokens
        assert (Keyword, "else") in tokens
        assert (Keyword.Constant, "true") in tokens
        assert (Number.Float, "0.5") in tokens

    def test_types_and_identifiers_with_type_prefix(self):
        tokens = lex("unofloat integer;")
        assert tokens[0] == (Keyword.Type, "unofloat")
        assert tokens[1] == (Name, "integer")

    def test_builtins(self):
        tokens = lex("print(typeof(x)); seed(1);")
        builtins = [value for tok, value in tokens if tok is Name.Builtin]
        assert builtins == ["print", "typeof", "seed"]

    def test_negative_literal(self):
        assert (Number.Integer, "-7") in lex("x = -7;")
        assert (Number.Float, "-1.5") in lex("x = -1.5;")

    def test_multi_char_operators(self):
        ops = [value for tok, value in lex("a <= b && c != d || !e") if tok is Operator]
        assert ops == ["<=", "&&", "!=", "||", "!"]

    def test_string_with_escape(self):
        tokens = lex(r'print("a\"b");')
        assert (String.Escape, '\\"') in tokens
        assert all(tok is not Error for tok, _ in tokens)

    def test_comment(self):
        assert (Comment.Single, "// note") in lex("x = 1; // note\n")

    def test_illegal_character(self):
        assert (Error, "@") in lex("x = @;")


class TestRegistration:
    def test_lexer_metadata(self):
        assert WtfScriptLexer.name == "WTFScript"
        assert "wtf" in WtfScriptLexer.aliases

    def test_found_by_filename(self):
        lexer = get_lexer_for_filename("main.wtf")
        assert isinstance(lexer, WtfScriptLexer)
