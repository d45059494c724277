"""WTFScript: a tiny language of typed, randomly generated variables."""

__version__ = "0.1.0"
