"""Server clients for chatdoc."""

from .client import ChatClient, ChatReply, parse_reply
from .payloads import build_messages, build_request_body, endpoint_url, normalize_server_type

__all__ = [
    "ChatClient",
    "ChatReply",
    "build_messages",
    "build_request_body",
    "endpoint_url",
    "normalize_server_type",
    "parse_reply",
]
