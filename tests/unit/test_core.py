# tests/unit/test_core.py

import base64
from unittest.mock import patch

import pytest

from hello_pubsub import core
from hello_pubsub.config import DecodePolicy
from hello_pubsub.core import DEFAULT_NAME, decode_name, format_greeting
from hello_pubsub.exceptions import (
    DecodeError,
    InvalidBase64Error,
    InvalidUtf8Error,
)


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


# --- decode_name: well-formed input ---


@pytest.mark.parametrize(
    "text",
    [
        "World",
        "Cloud Function Gen2",
        "Zoë",
        "日本語のテキスト",
        "emoji 🚀 inside",
        "line\nbreak",
        "a=b&c=d",
        " padded ",
    ],
)
def test_decode_name_returns_utf8_text_of_base64_data(text):
    assert decode_name(_b64(text.encode("utf-8"))) == text


@pytest.mark.parametrize("data", [None, ""])
def test_decode_name_absent_or_empty_data_uses_default(data):
    assert decode_name(data) == DEFAULT_NAME == "World"


def test_decode_name_is_deterministic():
    data = _b64(b"repeat me")
    assert decode_name(data) == decode_name(data)


# --- decode_name: malformed input under FAIL ---


@pytest.mark.parametrize(
    "data",
    [
        "not base64!!",
        "%%%",
        "V29ybGQ",  # missing padding
        "V29y bGQ=",  # embedded whitespace
        "Wörld",  # non-ASCII
    ],
)
def test_decode_name_invalid_base64_raises_under_fail(data):
    with pytest.raises(InvalidBase64Error) as exc_info:
        decode_name(data, DecodePolicy.FAIL)

    error = exc_info.value
    assert isinstance(error, DecodeError)
    assert error.error_code == "INVALID_BASE64"
    assert error.context["data_length"] == len(data)


def test_decode_name_invalid_utf8_raises_under_fail():
    with pytest.raises(InvalidUtf8Error) as exc_info:
        decode_name(_b64(b"ok\xff\xfe"), DecodePolicy.FAIL)

    error = exc_info.value
    assert error.error_code == "INVALID_UTF8"
    assert error.context["byte_length"] == 4
    assert error.context["position"] == 2


def test_decode_name_default_policy_is_fail():
    with pytest.raises(DecodeError):
        decode_name("%%%")


# --- decode_name: malformed input under FALLBACK ---


@pytest.mark.parametrize(
    "data, error_code",
    [("%%%", "INVALID_BASE64"), (_b64(b"\xc3\x28"), "INVALID_UTF8")],
)
def test_decode_name_fallback_uses_default_and_warns(data, error_code):
    with patch.object(core, "logger") as mock_logger:
        name = decode_name(data, DecodePolicy.FALLBACK, log_keys={"execution_id": "d-1"})

    assert name == DEFAULT_NAME
    mock_logger.warning.assert_called_once()
    message = mock_logger.warning.call_args.args[0]
    extra = mock_logger.warning.call_args.kwargs["extra"]
    assert "Malformed payload" in message
    assert extra["error_code"] == error_code
    assert extra["execution_id"] == "d-1"
    assert data not in repr(extra)


def test_decode_name_fallback_does_not_warn_for_valid_data():
    with patch.object(core, "logger") as mock_logger:
        assert decode_name(_b64(b"fine"), DecodePolicy.FALLBACK) == "fine"
    mock_logger.warning.assert_not_called()


# --- format_greeting ---


@pytest.mark.parametrize(
    "name, expected",
    [
        ("World", "Hello, World!"),
        ("Cloud Function Gen2", "Hello, Cloud Function Gen2!"),
        ("{name}", "Hello, {name}!"),
        ("", "Hello, !"),
    ],
)
def test_format_greeting(name, expected):
    assert format_greeting(name) == expected
