"""Build server-specific request bodies from a parsed transcript."""

from __future__ import annotations

import json
import logging
from typing import Any, Union

from ..errors import ServerRequestError
from ..transcript.models import ParseResult, ResourceKind

logger = logging.getLogger(__name__)

OLLAMA = "ollama"
OPEN_WEBUI = "openwebui"

ENDPOINTS = {
    OLLAMA: "/api/chat",
    OPEN_WEBUI: "/api/chat/completions",
}


def normalize_server_type(server_type: str) -> str:
    """Map a ``Server Type:`` value to a known server key."""
    key = "".join(server_type.split()).replace("-", "").replace("_", "").lower()
    if key not in ENDPOINTS:
        raise ServerRequestError(
            f"Unsupported server type {server_type!r}; expected one of: Ollama, OpenWebUI"
        )
    return key


def endpoint_url(result: ParseResult) -> str:
    server = normalize_server_type(result.header.server_type)
    return result.header.server_url.rstrip("/") + ENDPOINTS[server]


def option_literal(value: str) -> Any:
    """Embed an option value the way it was written.

    JSON literals (numbers, booleans, arrays, quoted strings) keep their type;
    anything else becomes a JSON string.
    """
    try:
        return json.loads(value)
    except ValueError:
        logger.debug(f"Option value {value!r} is not a JSON literal, sending as string")
        return value


def _reasoning_value(value: str) -> Union[bool, str]:
    lowered = value.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    return value.strip()


def build_messages(result: ParseResult) -> list[dict[str, str]]:
    """Build the role/content message list shared by both servers."""
    if result.pending is None:
        raise ServerRequestError("Nothing to send: the last message already has a reply")

    messages: list[dict[str, str]] = []
    if result.header.system_prompt:
        messages.append({"role": "system", "content": result.header.system_prompt})
    for interaction in result.interactions:
        messages.append({"role": "user", "content": interaction.user_message})
        if interaction.assistant_message is not None:
            messages.append({"role": "assistant", "content": interaction.assistant_message})
    return messages


def _ollama_body(result: ParseResult) -> dict[str, Any]:
    if any(interaction.resources for interaction in result.interactions):
        raise ServerRequestError("Ollama does not support [f:...] or [c:...] resource references")

    body: dict[str, Any] = {
        "model": result.header.model_id,
        "messages": build_messages(result),
        "stream": False,
    }
    if result.header.options:
        body["options"] = {name: option_literal(value) for name, value in result.header.options.items()}
    if result.header.show_thinking is not None:
        body["think"] = _reasoning_value(result.header.show_thinking)
    return body


def _open_webui_body(result: ParseResult) -> dict[str, Any]:
    body: dict[str, Any] = {
        "model": result.header.model_id,
        "messages": build_messages(result),
        "stream": False,
    }
    for name, value in result.header.options.items():
        body[name] = option_literal(value)

    files = [
        {
            "type": "collection" if ref.kind is ResourceKind.COLLECTION else "file",
            "id": ref.id,
        }
        for interaction in result.interactions
        for ref in interaction.resources
    ]
    if files:
        body["files"] = files
    if result.header.show_thinking is not None:
        body["reasoning_effort"] = result.header.show_thinking.strip()
    return body


def build_request_body(result: ParseResult) -> dict[str, Any]:
    """Build the JSON body for the server named in the transcript header.

    Raises:
        ServerRequestError: For unknown servers, unsupported features, or a
            transcript with no message awaiting a reply
    """
    server = normalize_server_type(result.header.server_type)
    if server == OLLAMA:
        return _ollama_body(result)
    return _open_webui_body(result)
