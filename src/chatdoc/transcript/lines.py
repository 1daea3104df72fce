"""Line classification shared by the header and body parsers."""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional


class LineKind(Enum):
    COMMENT = "comment"
    BLANK = "blank"
    SEPARATOR = "separator"
    DIVIDER = "divider"
    FIELD = "field"
    USER_OPEN = "user_open"
    USER_CLOSE = "user_close"
    ASSISTANT_OPEN = "assistant_open"
    ASSISTANT_CLOSE = "assistant_close"
    RESOURCE = "resource"
    UNRECOGNIZED = "unrecognized"


# Header labels, case-sensitive. Inner whitespace between words is flexible.
FIELD_LABELS = {
    "Server Type": "server_type",
    "Server URL": "server_url",
    "Model ID": "model_id",
    "Use Auth Token": "use_auth",
    "Show Reasoning": "show_thinking",
    "Auth Token": "auth_key",
    "System Prompt": "system_prompt",
    "Option": "option",
}

_FIELD_RE = re.compile(
    r"^\s*("
    + "|".join(r"\s+".join(map(re.escape, label.split())) for label in FIELD_LABELS)
    + r")\s*:(.*)$"
)
_SEPARATOR_RE = re.compile(r"^\s*\*+\s*ENDSETUP\s*\*+\s*$")
_COMMENT_RE = re.compile(r"^\s*#")
_USER_OPEN_RE = re.compile(r"^>>>(.*)$")
_USER_CLOSE_RE = re.compile(r"^\s*<<<\s*$")
_ASSISTANT_OPEN_RE = re.compile(r"^=>>(.*)$")
_ASSISTANT_CLOSE_RE = re.compile(r"^\s*<<=\s*$")
_RESOURCE_RE = re.compile(r"^\s*\[\s*(\S.*?)\s*\]\s*$")
_DIVIDER_RE = re.compile(r"-")


def strip_eol(line: str) -> str:
    """Drop a trailing newline (and carriage return) from a raw line."""
    return line.rstrip("\r\n")


def is_blank(line: str) -> bool:
    return not line.strip()


def is_comment(line: str) -> bool:
    return bool(_COMMENT_RE.match(line))


def is_separator(line: str) -> bool:
    return bool(_SEPARATOR_RE.match(line))


def match_field(line: str) -> Optional[tuple[str, str]]:
    """Match a ``Label: value`` header declaration.

    Returns:
        (field name, value with surrounding whitespace trimmed), or None
    """
    m = _FIELD_RE.match(line)
    if not m:
        return None
    label = " ".join(m.group(1).split())
    return FIELD_LABELS[label], m.group(2).strip()


def open_token_text(line: str) -> Optional[str]:
    """Return the text trailing a ``>>>`` or ``=>>`` open token, or None."""
    m = _USER_OPEN_RE.match(line) or _ASSISTANT_OPEN_RE.match(line)
    if not m:
        return None
    return m.group(1)


def resource_body(line: str) -> Optional[str]:
    """Return the trimmed text between the brackets of a ``[...]`` line."""
    m = _RESOURCE_RE.match(line)
    if not m:
        return None
    return m.group(1)


def classify_header_line(line: str) -> LineKind:
    if is_comment(line):
        return LineKind.COMMENT
    if is_blank(line):
        return LineKind.BLANK
    if is_separator(line):
        return LineKind.SEPARATOR
    if match_field(line):
        return LineKind.FIELD
    return LineKind.UNRECOGNIZED


def classify_body_line(line: str) -> LineKind:
    # Open tokens are tested before the divider rule so that an opening line
    # containing a dash still opens a message.
    if is_comment(line):
        return LineKind.COMMENT
    if is_blank(line):
        return LineKind.BLANK
    if is_separator(line):
        return LineKind.SEPARATOR
    if _USER_OPEN_RE.match(line):
        return LineKind.USER_OPEN
    if _USER_CLOSE_RE.match(line):
        return LineKind.USER_CLOSE
    if _ASSISTANT_OPEN_RE.match(line):
        return LineKind.ASSISTANT_OPEN
    if _ASSISTANT_CLOSE_RE.match(line):
        return LineKind.ASSISTANT_CLOSE
    if _RESOURCE_RE.match(line):
        return LineKind.RESOURCE
    # Any line containing a dash counts as a divider, not only dash-only lines.
    if _DIVIDER_RE.search(line):
        return LineKind.DIVIDER
    return LineKind.UNRECOGNIZED
