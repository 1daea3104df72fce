"""Tests for header and option declaration parsing."""

import pytest

from chatdoc.errors import TranscriptParseError
from chatdoc.transcript.header import parse_header, parse_option_declaration


def _lines(text: str) -> list[str]:
    return text.split("\n")


BASE = "Server Type: Ollama\nServer URL: http://x\nModel ID: m\n"


def test_required_fields_and_body_start():
    header, body_start = parse_header(_lines(BASE + "* ENDSETUP *\n>>> hi"))
    assert header.server_type == "Ollama"
    assert header.server_url == "http://x"
    assert header.model_id == "m"
    assert header.use_auth is None
    assert header.auth_key is None
    assert header.options == {}
    assert body_start == 4


def test_comments_blanks_and_flexible_whitespace():
    text = "# settings\n\n  Server   Type :  Ollama  \nServer URL:http://x\n\tModel ID: m\n**** ENDSETUP ****\n"
    header, _ = parse_header(_lines(text))
    assert header.server_type == "Ollama"
    assert header.server_url == "http://x"


@pytest.mark.parametrize("separator", ["* ENDSETUP *", "*ENDSETUP*", "  *** ENDSETUP *  "])
def test_separator_forms(separator):
    header, _ = parse_header(_lines(BASE + separator))
    assert header.model_id == "m"


def test_labels_are_case_sensitive():
    with pytest.raises(TranscriptParseError, match="Unrecognized header line") as exc:
        parse_header(_lines("server type: Ollama\n" + BASE + "* ENDSETUP *"))
    assert exc.value.line_no == 1


def test_missing_separator_is_fatal():
    with pytest.raises(TranscriptParseError, match="ENDSETUP"):
        parse_header(_lines(BASE))


@pytest.mark.parametrize("missing", ["Server Type", "Server URL", "Model ID"])
def test_missing_required_field_is_fatal(missing):
    text = "\n".join(line for line in BASE.splitlines() if not line.startswith(missing))
    with pytest.raises(TranscriptParseError, match=f"Missing required '{missing}:'"):
        parse_header(_lines(text + "\n* ENDSETUP *"))


def test_duplicate_model_id_names_second_line():
    text = BASE + "Model ID: other\n* ENDSETUP *"
    with pytest.raises(TranscriptParseError, match="Duplicate 'Model ID:'") as exc:
        parse_header(_lines(text))
    assert exc.value.line_no == 4
    assert str(exc.value).startswith("line 4:")


@pytest.mark.parametrize(
    "line",
    [
        "Server Type: Other",
        "Server URL: http://y",
        "Use Auth Token: true",
        "Show Reasoning: high",
        "Auth Token: abc",
    ],
)
def test_any_duplicate_field_is_fatal(line):
    text = BASE + "Use Auth Token: false\nShow Reasoning: low\nAuth Token: k\n" + line + "\n* ENDSETUP *"
    with pytest.raises(TranscriptParseError, match="Duplicate"):
        parse_header(_lines(text))


def test_use_auth_token_is_case_insensitive_boolean():
    header, _ = parse_header(_lines(BASE + "Use Auth Token: TRUE\n* ENDSETUP *"))
    assert header.use_auth is True
    header, _ = parse_header(_lines(BASE + "Use Auth Token: False\n* ENDSETUP *"))
    assert header.use_auth is False


def test_use_auth_token_rejects_other_values():
    with pytest.raises(TranscriptParseError, match="true or false"):
        parse_header(_lines(BASE + "Use Auth Token: yes\n* ENDSETUP *"))


def test_empty_auth_token_is_ignored():
    header, _ = parse_header(_lines(BASE + "Auth Token:\nAuth Token: real\n* ENDSETUP *"))
    assert header.auth_key == "real"


def test_empty_show_reasoning_is_fatal():
    with pytest.raises(TranscriptParseError, match="'Show Reasoning:' has an empty value"):
        parse_header(_lines(BASE + "Show Reasoning:   \n* ENDSETUP *"))


def test_show_reasoning_is_kept_verbatim():
    header, _ = parse_header(_lines(BASE + "Show Reasoning: High\n* ENDSETUP *"))
    assert header.show_thinking == "High"


def test_multiline_system_prompt_is_joined():
    text = BASE + "System Prompt: You are\n   a helpful\nassistant.  \n\n* ENDSETUP *"
    header, _ = parse_header(_lines(text))
    assert header.system_prompt == "You are a helpful assistant."


def test_system_prompt_ends_at_separator():
    text = BASE + "System Prompt: Be brief.\n* ENDSETUP *\n>>> hi"
    header, body_start = parse_header(_lines(text))
    assert header.system_prompt == "Be brief."
    assert body_start == 5


def test_system_prompt_continuation_swallows_field_lines_until_blank():
    text = BASE + "System Prompt: first\nOption: a=1\n\n* ENDSETUP *"
    header, _ = parse_header(_lines(text))
    assert header.system_prompt == "first Option: a=1"
    assert header.options == {}


def test_empty_system_prompt_is_not_stored():
    header, _ = parse_header(_lines(BASE + "System Prompt:\n\n* ENDSETUP *"))
    assert header.system_prompt is None


def test_duplicate_system_prompt_is_fatal_even_if_first_was_empty():
    text = BASE + "System Prompt:\n\nSystem Prompt: again\n\n* ENDSETUP *"
    with pytest.raises(TranscriptParseError, match="Duplicate 'System Prompt:'"):
        parse_header(_lines(text))


def test_options_are_collected():
    text = BASE + "Option: temp=0.5\nOption: top_p = 0.9\n* ENDSETUP *"
    header, _ = parse_header(_lines(text))
    assert header.options == {"temp": "0.5", "top_p": "0.9"}


def test_duplicate_option_is_fatal():
    text = BASE + "Option: temp=0.5\nOption: temp=0.9\n* ENDSETUP *"
    with pytest.raises(TranscriptParseError, match="Duplicate option 'temp'") as exc:
        parse_header(_lines(text))
    assert exc.value.line_no == 5


def test_option_declaration_splits_on_first_equals():
    assert parse_option_declaration("Option: stop = a=b", 3) == ("stop", "a=b")


def test_option_declaration_keeps_literal_value():
    assert parse_option_declaration('Option: stop=["\\n"]', 1) == ("stop", '["\\n"]')


@pytest.mark.parametrize(
    ("line", "message"),
    [
        ("Option: temp 0.5", "no '='"),
        ("Option: =0.5", "empty name"),
        ("Option: temp=  ", "empty value"),
    ],
)
def test_malformed_option_declarations(line, message):
    with pytest.raises(TranscriptParseError, match=message) as exc:
        parse_option_declaration(line, 7)
    assert exc.value.line_no == 7
