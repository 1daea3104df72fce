"""Chat transcript format: parsing, escaping and wrapping."""

from .escape import escape, unescape
from .models import Header, Interaction, ParseFlag, ParseResult, ResourceKind, ResourceReference
from .parser import parse_transcript, parse_transcript_text
from .wrap import wrap_text

__all__ = [
    "Header",
    "Interaction",
    "ParseFlag",
    "ParseResult",
    "ResourceKind",
    "ResourceReference",
    "escape",
    "parse_transcript",
    "parse_transcript_text",
    "unescape",
    "wrap_text",
]
