"""Pygments lexer for WTFScript."""

from pygments.lexer import RegexLexer, words
from pygments.token import (
    Comment,
    Error,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
)

from wtfscript.builtins import BUILTINS


class WtfScriptLexer(RegexLexer):
    """Pygments lexer for WTFScript."""

    name = "WTFScript"
    aliases = ["wtfscript", "wtf"]
    filenames = ["*.wtf"]
    mimetypes = ["text/x-wtfscript"]

    tokens = {
        "root": [
            # Whitespace
            (r"\s+", Text),
            # Line comments (// ...)
            (r"//.*$", Comment.Single),
            # Strings with escape support
            (r'"', String, "string"),
            # Numbers, with the sign the scanner folds into the literal
            (r"-?[0-9][0-9.]*\.[0-9.]*", Number.Float),
            (r"-?[0-9]+", Number.Integer),
            # Randomised branching
            (words(("ifrand",), prefix=r"\b", suffix=r"\b"), Keyword.Pseudo),
            # Control flow
            (words(("if", "else"), prefix=r"\b", suffix=r"\b"), Keyword),
            # Boolean constants
            (r"\b(true|false)\b", Keyword.Constant),
            # Declared types
            (
                words(
                    ("int", "uint", "float", "unofloat", "bool", "string"),
                    prefix=r"\b",
                    suffix=r"\b",
                ),
                Keyword.Type,
            ),
            # Builtin functions
            (words(tuple(BUILTINS), prefix=r"\b", suffix=r"\b"), Name.Builtin),
            # Operators (multi-char before single-char)
            (r"==|!=|<=|>=|&&|\|\|", Operator),
            (r"[+\-*/<>!=]", Operator),
            # Identifiers
            (r"[a-zA-Z_][a-zA-Z0-9_]*", Name),
            # Punctuation
            (r"[(),;{}]", Punctuation),
            # Anything the scanner would reject
            (r".", Error),
        ],
        # String state: a backslash escapes the next character
        "string": [
            (r"\\.", String.Escape),
            (r'[^"\\]+', String),
            (r'"', String, "#pop"),
        ],
    }
