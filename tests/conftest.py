"""Shared pytest fixtures for the WTFScript test suite."""

from __future__ import annotations

import pytest


@pytest.fixture
def script_file(tmp_path):
    """Write a script into a temporary directory and return its path."""

    def write(source: str, name: str = "main.wtf"):
        path = tmp_path / name
        path.write_text(source)
        return path

    return write
