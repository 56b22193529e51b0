# src/hello_pubsub/sinks.py

"""
Logging sink wrappers for the greeting record.

The handler only talks to a `LogSink`. Production uses the Powertools
structured logger, which adds level, timestamp and the invocation keys.
Tests and the local invoke script swap in a `RecordingSink`.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from aws_lambda_powertools import Logger

from .exceptions import ConfigurationError


class LogSink(Protocol):
    def emit(self, message: str, **extra: Any) -> None:
        """Write one record. Returning means the record was accepted."""
        ...


class PowertoolsLogSink:
    """A LogSink backed by a Powertools Logger (JSON lines on stdout)."""

    def __init__(self, logger: Logger):
        self._logger = logger

    def emit(self, message: str, **extra: Any) -> None:
        # A filtered-out record would be acked by the dispatcher yet never written.
        if not self._logger.isEnabledFor(logging.INFO):
            level = logging.getLevelName(self._logger.getEffectiveLevel())
            raise ConfigurationError(
                "Greeting records are INFO but the logger level filters them out.",
                context={"log_level": level},
            )
        self._logger.info(message, extra=extra or None)


@dataclass
class RecordedLine:
    message: str
    extra: dict[str, Any]


@dataclass
class RecordingSink:
    """An in-memory LogSink that keeps every accepted record in order."""

    records: list[RecordedLine] = field(default_factory=list)

    def emit(self, message: str, **extra: Any) -> None:
        self.records.append(RecordedLine(message=message, extra=dict(extra)))

    @property
    def messages(self) -> list[str]:
        return [r.message for r in self.records]
