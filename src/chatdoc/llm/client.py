"""HTTP client sending a transcript to a chat server."""

import logging
from typing import Any, Optional

import requests
from pydantic import BaseModel, Field

from ..errors import ServerRequestError
from ..transcript.models import ParseResult
from .payloads import OLLAMA, build_request_body, endpoint_url, normalize_server_type

logger = logging.getLogger(__name__)


class ChatReply(BaseModel):
    """Text returned by the server for one request."""

    content: str = Field(..., description="Assistant reply text")
    thinking: Optional[str] = Field(None, description="Reasoning text, if the server returned any")


class ChatClient:
    """Client for Ollama and Open WebUI chat endpoints.

    Sends one request per call and never retries.
    """

    def __init__(self, auth_token: Optional[str] = None, timeout: float = 300.0):
        """Initialize chat client.

        Args:
            auth_token: Bearer token, or None to send no Authorization header
            timeout: Request timeout in seconds
        """
        self.auth_token = auth_token
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def send(self, result: ParseResult) -> ChatReply:
        """Send the pending message of a parsed transcript.

        Args:
            result: Parsed transcript ending with an unanswered message

        Returns:
            ChatReply with the reply text

        Raises:
            ServerRequestError: If the request cannot be built or fails, or
                the response is not in the expected shape
        """
        server = normalize_server_type(result.header.server_type)
        body = build_request_body(result)
        url = endpoint_url(result)

        logger.info(f"Sending {len(body['messages'])} messages to {url}")
        try:
            response = requests.post(url, json=body, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise ServerRequestError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise ServerRequestError(f"Server at {url} returned invalid JSON: {e}") from e

        logger.debug(f"Server responded with status {response.status_code}")
        return parse_reply(server, data)


def parse_reply(server: str, data: Any) -> ChatReply:
    """Extract reply text from a server response body."""
    try:
        if server == OLLAMA:
            message = data["message"]
            content = message["content"]
            thinking = message.get("thinking")
        else:
            message = data["choices"][0]["message"]
            content = message["content"]
            thinking = message.get("reasoning_content")
    except (KeyError, IndexError, TypeError) as e:
        raise ServerRequestError(f"Unexpected response shape from server: {e!r}") from e

    if not isinstance(content, str) or not content.strip():
        raise ServerRequestError("Server returned an empty reply")
    return ChatReply(content=content, thinking=thinking or None)
