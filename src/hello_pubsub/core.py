# src/hello_pubsub/core.py

"""
Core logic for turning a Pub/Sub message payload into a greeting.

Everything here is pure: no configuration reads, no module state, and no
greeting emission. The only side effect is the warning written when a
malformed payload is replaced by the default name under the fallback policy.
"""

import base64
import binascii
import logging
from collections.abc import Mapping
from typing import Any

from .config import DecodePolicy
from .exceptions import DecodeError, InvalidBase64Error, InvalidUtf8Error

logger = logging.getLogger(__name__)

DEFAULT_NAME = "World"
GREETING_TEMPLATE = "Hello, {name}!"


def _decode_strict(data: str) -> str:
    """Base64 then UTF-8, raising a DecodeError subclass on either failure."""
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidBase64Error(data_length=len(data)) from e

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidUtf8Error(byte_length=len(raw), position=e.start) from e


def decode_name(
    data: str | None,
    policy: DecodePolicy = DecodePolicy.FAIL,
    log_keys: Mapping[str, Any] | None = None,
) -> str:
    """
    Derive the name to greet from the transported `message.data` value.

    Absent or empty data yields DEFAULT_NAME. Present data must be strict
    base64 of UTF-8 text. When it is not, FAIL re-raises the DecodeError and
    FALLBACK logs a warning (tagged with *log_keys*) and yields DEFAULT_NAME.
    """
    if not data:
        return DEFAULT_NAME

    try:
        return _decode_strict(data)
    except DecodeError as e:
        if policy is DecodePolicy.FAIL:
            raise
        logger.warning(
            "Malformed payload replaced with default name.",
            extra={
                **(log_keys or {}),
                "error_code": e.error_code,
                "decode_context": e.context,
            },
        )
        return DEFAULT_NAME


def format_greeting(name: str) -> str:
    return GREETING_TEMPLATE.format(name=name)
