"""Pytest fixtures for chatdoc tests."""

import pytest

HEADER = "Server Type: Ollama\nServer URL: http://x\nModel ID: m\n* ENDSETUP *\n"


@pytest.fixture
def header_text():
    """Minimal valid header, separator included."""
    return HEADER


@pytest.fixture
def make_doc():
    """Build transcript lines from a body string placed under the minimal header."""

    def _make(body: str, header: str = HEADER) -> list[str]:
        return (header + body).split("\n")

    return _make


@pytest.fixture
def transcript_file(tmp_path):
    """Write a transcript to a temporary file and return its path."""

    def _write(text: str):
        path = tmp_path / "chat.txt"
        path.write_text(text, encoding="utf-8")
        return path

    return _write
