"""Parser for the settings section above the separator line."""

from __future__ import annotations

import re
from typing import Any, Optional, Sequence

from ..errors import TranscriptParseError
from .lines import LineKind, classify_header_line, is_blank, is_comment, is_separator, match_field, strip_eol
from .models import Header

_OPTION_LABEL_RE = re.compile(r"^\s*Option\s*:")

_LABELS = {
    "server_type": "Server Type",
    "server_url": "Server URL",
    "model_id": "Model ID",
    "use_auth": "Use Auth Token",
    "show_thinking": "Show Reasoning",
    "auth_key": "Auth Token",
    "system_prompt": "System Prompt",
}

_REQUIRED = ("server_type", "server_url", "model_id")


def parse_option_declaration(line: str, line_no: int) -> tuple[str, str]:
    """Split an ``Option: name=value`` line into its name and value.

    Only the first ``=`` separates name from value. The value is kept as the
    literal text written in the transcript.

    Args:
        line: Full text of the declaration line
        line_no: 1-based line number, used in error messages

    Returns:
        (name, value) pair

    Raises:
        TranscriptParseError: If there is no ``=``, or the name or value is empty
    """
    body = _OPTION_LABEL_RE.sub("", line, count=1)
    eq = body.find("=")
    if eq == -1:
        raise TranscriptParseError(f"Option declaration has no '=': {line.strip()!r}", line_no)
    name = body[:eq].rstrip("=").strip()
    value = body[eq:].lstrip("=").strip()
    if not name:
        raise TranscriptParseError("Option declaration has an empty name", line_no)
    if not value:
        raise TranscriptParseError(f"Option '{name}' has an empty value", line_no)
    return name, value


class _HeaderBuilder:
    """Collects field declarations and rejects duplicates."""

    def __init__(self) -> None:
        self.fields: dict[str, Any] = {}
        self.options: dict[str, str] = {}
        self.system_prompt_declared = False

    def set(self, field: str, value: Any, line_no: int) -> None:
        if field in self.fields:
            raise TranscriptParseError(f"Duplicate '{_LABELS[field]}:' declaration", line_no)
        self.fields[field] = value

    def add_option(self, name: str, value: str, line_no: int) -> None:
        if name in self.options:
            raise TranscriptParseError(f"Duplicate option '{name}'", line_no)
        self.options[name] = value

    def build(self, line_no: int) -> Header:
        for field in _REQUIRED:
            if not self.fields.get(field):
                raise TranscriptParseError(f"Missing required '{_LABELS[field]}:' declaration", line_no)
        return Header(options=self.options, **self.fields)


def _parse_use_auth(value: str, line_no: int) -> bool:
    lowered = value.lower()
    if lowered not in ("true", "false"):
        raise TranscriptParseError(f"'Use Auth Token:' must be true or false, got {value!r}", line_no)
    return lowered == "true"


def _collect_system_prompt(
    lines: Sequence[str], first: str, start: int
) -> tuple[Optional[str], int]:
    """Accumulate a multi-line system prompt.

    Returns:
        (joined prompt or None if empty, index of the line that ended it)
    """
    parts = [first] if first else []
    i = start
    while i < len(lines):
        line = strip_eol(lines[i])
        if is_blank(line) or is_separator(line):
            break
        if not is_comment(line):
            parts.append(line.strip())
        i += 1
    prompt = " ".join(parts).strip()
    return (prompt or None), i


def parse_header(lines: Sequence[str], start: int = 0) -> tuple[Header, int]:
    """Parse header declarations up to and including the separator line.

    Args:
        lines: All lines of the transcript
        start: Index of the first header line

    Returns:
        (header, index of the first line after the separator)

    Raises:
        TranscriptParseError: On duplicate, malformed or unknown declarations,
            missing required fields, or a missing separator
    """
    builder = _HeaderBuilder()
    i = start
    while i < len(lines):
        line = strip_eol(lines[i])
        line_no = i + 1
        kind = classify_header_line(line)

        if kind in (LineKind.COMMENT, LineKind.BLANK):
            i += 1
            continue

        if kind is LineKind.SEPARATOR:
            return builder.build(line_no), i + 1

        if kind is LineKind.UNRECOGNIZED:
            raise TranscriptParseError(f"Unrecognized header line: {line.strip()!r}", line_no)

        field, value = match_field(line)

        if field == "option":
            name, option_value = parse_option_declaration(line, line_no)
            builder.add_option(name, option_value, line_no)
        elif field == "system_prompt":
            if builder.system_prompt_declared:
                raise TranscriptParseError("Duplicate 'System Prompt:' declaration", line_no)
            builder.system_prompt_declared = True
            prompt, i = _collect_system_prompt(lines, value, i + 1)
            if prompt is not None:
                builder.set("system_prompt", prompt, line_no)
            continue
        elif field == "auth_key":
            # An empty token declaration is ignored.
            if value:
                builder.set(field, value, line_no)
        elif field == "use_auth":
            builder.set(field, _parse_use_auth(value, line_no), line_no)
        else:
            if not value:
                raise TranscriptParseError(f"'{_LABELS[field]}:' has an empty value", line_no)
            builder.set(field, value, line_no)
        i += 1

    raise TranscriptParseError("Reached end of document without a '* ENDSETUP *' separator line")
