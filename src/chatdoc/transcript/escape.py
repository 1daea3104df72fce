"""Escaping of reserved token sequences inside message text.

Every occurrence of a reserved sequence is escaped, wherever it sits in the
text. Re-escaping already escaped text doubles the backslash, so each
``unescape`` call peels exactly one layer.
"""

# Encoding order matters: decoding walks the same list in reverse.
RESERVED_SEQUENCES = (">>>", "=>>", "<<<", "<<=", "[")

_NEWLINE_ESCAPE = "\\n"


def escape(text: str) -> str:
    """Backslash-prefix every reserved sequence in ``text``."""
    for seq in RESERVED_SEQUENCES:
        text = text.replace(seq, "\\" + seq)
    return text


def unescape(text: str) -> str:
    """Undo one layer of :func:`escape` and turn ``\\n`` into a newline."""
    for seq in reversed(RESERVED_SEQUENCES):
        text = text.replace("\\" + seq, seq)
    return text.replace(_NEWLINE_ESCAPE, "\n")
