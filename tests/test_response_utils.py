"""Tests for backend error-body parsing."""

from __future__ import annotations

from utils.response_utils import extract_error_message, graphql_error_messages, robust_parse_text


def test_parse_plain_json():
    assert robust_parse_text('{"a": 1}') == {"a": 1}


def test_parse_ndjson():
    assert robust_parse_text('{"a": 1}\n{"b": 2}\n') == [{"a": 1}, {"b": 2}]


def test_parse_json_with_trailing_noise():
    assert robust_parse_text('{"a": 1} trailing garbage') == {"a": 1}


def test_parse_gives_up_on_text():
    assert robust_parse_text("Bad Gateway") == "Bad Gateway"


def test_graphql_messages_prefer_user_presentable():
    payload = {"errors": [
        {"message": "raw", "extensions": {"userPresentableMessage": "friendly"}},
        {"message": "second"},
        "not-a-dict",
    ]}
    assert graphql_error_messages(payload) == ["friendly", "second"]


def test_extract_error_message_variants():
    assert extract_error_message('{"errors": [{"message": "nope"}]}', "default") == "nope"
    assert extract_error_message('{"message": "Unauthorized"}', "default") == "Unauthorized"
    assert extract_error_message('{"other": 1}', "default") == "default"
    assert extract_error_message("", "default") == "default"
    assert extract_error_message("line one\nline two", "default") == "line one"
