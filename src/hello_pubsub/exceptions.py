# src/hello_pubsub/exceptions.py

"""
Shared custom exceptions for the hello-pubsub function.

Centralizing exception definitions in a separate module prevents circular
import errors between other modules that need to raise or catch them.

Anything raised out of the handler reaches the event dispatcher, which owns
retry, backoff and dead-lettering. The Retryable/NonRetryable split only
tells operators, through the structured error log, whether a retry can help.

Exception Hierarchy:
- HelloPubSubError (base)
  - RetryableError (can be retried)
    - DecodeError
      - InvalidBase64Error
      - InvalidUtf8Error
  - NonRetryableError (should not be retried)
    - InvalidEnvelopeError
    - ConfigurationError
"""

from typing import Any, Dict, Optional


class HelloPubSubError(Exception):
    """Base exception for all hello-pubsub errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = dict(context) if context else {}  # Copy context to prevent mutation
        self.correlation_id = correlation_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "correlation_id": self.correlation_id,
            "retryable": isinstance(self, RetryableError),
        }


class RetryableError(HelloPubSubError):
    """Base class for errors that can be retried."""

    pass


class NonRetryableError(HelloPubSubError):
    """Base class for errors that should not be retried."""

    pass


# === Payload Errors ===


class DecodeError(RetryableError):
    """Raised when a present message payload cannot be decoded into a name."""

    def __init__(self, reason: str, **kwargs):
        message = f"Payload decode failed: {reason}"
        context = {}
        if "context" in kwargs:
            context.update(kwargs.pop("context"))
        context["reason"] = reason
        if "error_code" not in kwargs:
            kwargs["error_code"] = "PAYLOAD_DECODE_FAILED"
        super().__init__(message, context=context, **kwargs)


class InvalidBase64Error(DecodeError):
    """Raised when `message.data` is not valid base64."""

    def __init__(self, data_length: int, **kwargs):
        super().__init__(
            "data is not valid base64",
            error_code="INVALID_BASE64",
            context={"data_length": data_length},
            **kwargs,
        )


class InvalidUtf8Error(DecodeError):
    """Raised when the decoded payload bytes are not valid UTF-8."""

    def __init__(self, byte_length: int, position: Optional[int] = None, **kwargs):
        super().__init__(
            "decoded bytes are not valid UTF-8",
            error_code="INVALID_UTF8",
            context={"byte_length": byte_length, "position": position},
            **kwargs,
        )


# === Validation Errors ===


class InvalidEnvelopeError(NonRetryableError):
    """Raised when the event envelope structure is invalid."""

    def __init__(self, message: str, **kwargs):
        # Don't override error_code if it's already provided in kwargs
        if "error_code" not in kwargs:
            kwargs["error_code"] = "INVALID_ENVELOPE"
        super().__init__(message, **kwargs)


# === Configuration Errors ===


class ConfigurationError(NonRetryableError):
    """Raised when there's an error in the application configuration."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="CONFIGURATION_ERROR", **kwargs)


# === Utility Functions ===


def is_retryable_error(error: Exception) -> bool:
    """Check if an error is retryable."""
    return isinstance(error, RetryableError)


def get_error_context(error: Exception) -> Dict[str, Any]:
    """Extract error context for logging."""
    if isinstance(error, HelloPubSubError):
        return error.to_dict()
    else:
        return {
            "error_type": error.__class__.__name__,
            "message": str(error),
            "retryable": False,  # Unknown errors default to non-retryable
        }
