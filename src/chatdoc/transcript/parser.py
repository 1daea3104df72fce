"""Parse a whole chat transcript into a ParseResult."""

from __future__ import annotations

from typing import Iterable

from .body import parse_body
from .header import parse_header
from .models import ParseResult


def parse_transcript(lines: Iterable[str], header_only: bool = False) -> ParseResult:
    """Parse transcript lines into header, interactions and flags.

    Args:
        lines: Transcript lines; trailing newlines are tolerated
        header_only: Stop after the separator and return no interactions

    Returns:
        A fresh ParseResult

    Raises:
        TranscriptParseError: If the document is malformed
    """
    lines = list(lines)
    header, body_start = parse_header(lines)
    if header_only:
        return ParseResult(header=header)
    interactions, flags = parse_body(lines, body_start)
    return ParseResult(header=header, interactions=tuple(interactions), flags=frozenset(flags))


def parse_transcript_text(text: str, header_only: bool = False) -> ParseResult:
    """Parse a transcript held in a single string."""
    return parse_transcript(text.splitlines(), header_only=header_only)
