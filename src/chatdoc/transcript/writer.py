"""Render server replies and fresh documents in transcript syntax."""

from __future__ import annotations

from typing import Optional

from .escape import escape
from .models import ParseFlag, ParseResult
from .wrap import wrap_text

SEPARATOR_LINE = "***** ENDSETUP *****"
PROMPT_LINE = ">>> "


def render_response(
    text: str,
    *,
    width: int,
    thinking: Optional[str] = None,
    close_user: bool = False,
) -> list[str]:
    """Render a reply as transcript lines ready to append.

    Args:
        text: Reply text from the server
        width: Wrap width for the reply and reasoning lines
        thinking: Optional reasoning text, written as comment lines
        close_user: Emit a ``<<<`` first to close an unclosed user message

    Returns:
        Lines without trailing newlines, ending with a fresh ``>>>`` prompt

    Raises:
        ValueError: If the reply is empty, since an empty assistant message
            would not parse back
    """
    text = text.strip()
    if not text:
        raise ValueError("Cannot write an empty assistant message")

    lines: list[str] = []
    if close_user:
        lines.append("<<<")
    lines.append("")
    if thinking and thinking.strip():
        for line in wrap_text(thinking.strip(), max(width - 2, 1)):
            lines.append(f"# {line}".rstrip())
        lines.append("")
    lines.append("=>>")
    lines.extend(line.rstrip() for line in wrap_text(escape(text), width))
    lines.append("<<=")
    lines.append("")
    lines.append(PROMPT_LINE)
    return lines


def append_response(
    document: str,
    reply: str,
    result: ParseResult,
    *,
    width: int,
    thinking: Optional[str] = None,
) -> str:
    """Return ``document`` with the rendered reply appended.

    Args:
        document: Current transcript text
        reply: Reply text from the server
        result: The parse of ``document`` the reply answers
        width: Wrap width
        thinking: Optional reasoning text
    """
    block = render_response(
        reply,
        width=width,
        thinking=thinking,
        close_user=ParseFlag.UNCLOSED_USER_MESSAGE in result.flags,
    )
    return document.rstrip() + "\n" + "\n".join(block) + "\n"


def new_transcript(
    server_type: str,
    server_url: str,
    model_id: str,
    *,
    system_prompt: Optional[str] = None,
    use_auth: Optional[bool] = None,
    options: Optional[dict[str, str]] = None,
) -> str:
    """Render a fresh transcript with a header and an empty prompt."""
    lines = [
        "# Write below the separator, then send the document.",
        f"Server Type: {server_type}",
        f"Server URL: {server_url}",
        f"Model ID: {model_id}",
    ]
    if use_auth is not None:
        lines.append(f"Use Auth Token: {'true' if use_auth else 'false'}")
    for name, value in (options or {}).items():
        lines.append(f"Option: {name}={value}")
    if system_prompt:
        lines.append(f"System Prompt: {system_prompt}")
        lines.append("")
    lines.append(SEPARATOR_LINE)
    lines.append("")
    lines.append(PROMPT_LINE)
    return "\n".join(lines) + "\n"
