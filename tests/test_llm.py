"""Tests for request building and the chat client."""

from unittest.mock import Mock, patch

import pytest
import requests

from chatdoc.errors import ServerRequestError
from chatdoc.llm import ChatClient, build_request_body, endpoint_url, parse_reply
from chatdoc.llm.payloads import option_literal
from chatdoc.transcript import parse_transcript_text


def _result(server_type: str, header_extra: str = "", body: str = ">>> q\n"):
    text = (
        f"Server Type: {server_type}\nServer URL: http://host:1234/\nModel ID: llama3\n"
        + header_extra
        + "* ENDSETUP *\n"
        + body
    )
    return parse_transcript_text(text)


def test_ollama_body():
    result = _result(
        "Ollama",
        "Option: temperature=0.5\nOption: stop=[\"x\"]\nShow Reasoning: true\nSystem Prompt: Be brief.\n\n",
        ">>> one\n<<<\n=>> two\n<<=\n>>> three\n",
    )
    body = build_request_body(result)
    assert body == {
        "model": "llama3",
        "messages": [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "one"},
            {"role": "assistant", "content": "two"},
            {"role": "user", "content": "three"},
        ],
        "stream": False,
        "options": {"temperature": 0.5, "stop": ["x"]},
        "think": True,
    }
    assert endpoint_url(result) == "http://host:1234/api/chat"


def test_ollama_rejects_resources():
    with pytest.raises(ServerRequestError, match="resource references"):
        build_request_body(_result("Ollama", body=">>> q\n[f:abc]\n"))


def test_open_webui_body_with_files():
    result = _result(
        "Open WebUI",
        "Option: temperature=0.2\nShow Reasoning: high\n",
        ">>> q\n[f:abc]\n[c:docs]\n<<<\n",
    )
    body = build_request_body(result)
    assert body["temperature"] == 0.2
    assert body["files"] == [{"type": "file", "id": "abc"}, {"type": "collection", "id": "docs"}]
    assert body["reasoning_effort"] == "high"
    assert body["messages"] == [{"role": "user", "content": "q"}]
    assert endpoint_url(result) == "http://host:1234/api/chat/completions"


def test_unknown_server_type():
    with pytest.raises(ServerRequestError, match="Unsupported server type"):
        build_request_body(_result("Mystery"))


def test_nothing_to_send_when_last_message_answered():
    with pytest.raises(ServerRequestError, match="Nothing to send"):
        build_request_body(_result("Ollama", body=">>> q\n<<<\n=>> a\n<<=\n"))


@pytest.mark.parametrize(
    ("literal", "expected"),
    [("0.5", 0.5), ("42", 42), ("true", True), ('"x"', "x"), ("plain words", "plain words")],
)
def test_option_literal(literal, expected):
    assert option_literal(literal) == expected


def test_parse_reply_shapes():
    ollama = parse_reply("ollama", {"message": {"content": "hi", "thinking": "hmm"}})
    assert ollama.content == "hi"
    assert ollama.thinking == "hmm"

    webui = parse_reply("openwebui", {"choices": [{"message": {"content": "yo"}}]})
    assert webui.content == "yo"
    assert webui.thinking is None


def test_parse_reply_rejects_bad_shape():
    with pytest.raises(ServerRequestError, match="Unexpected response shape"):
        parse_reply("openwebui", {"choices": []})
    with pytest.raises(ServerRequestError, match="empty reply"):
        parse_reply("ollama", {"message": {"content": "  "}})


@patch("chatdoc.llm.client.requests.post")
def test_client_sends_bearer_token(mock_post):
    mock_response = Mock()
    mock_response.status_code = 200
    mock_response.json.return_value = {"message": {"content": "reply"}}
    mock_post.return_value = mock_response

    client = ChatClient(auth_token="secret", timeout=5)
    reply = client.send(_result("Ollama"))

    assert reply.content == "reply"
    args, kwargs = mock_post.call_args
    assert args[0] == "http://host:1234/api/chat"
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["json"]["messages"] == [{"role": "user", "content": "q"}]
    assert kwargs["timeout"] == 5


@patch("chatdoc.llm.client.requests.post")
def test_client_without_token_sends_no_authorization(mock_post):
    mock_response = Mock()
    mock_response.status_code = 200
    mock_response.json.return_value = {"message": {"content": "reply"}}
    mock_post.return_value = mock_response

    ChatClient().send(_result("Ollama"))
    assert "Authorization" not in mock_post.call_args.kwargs["headers"]


@patch("chatdoc.llm.client.requests.post")
def test_client_wraps_http_errors(mock_post):
    mock_response = Mock()
    mock_response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    mock_post.return_value = mock_response

    with pytest.raises(ServerRequestError, match="failed"):
        ChatClient().send(_result("Ollama"))
