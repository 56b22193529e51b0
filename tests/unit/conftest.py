"""
Shared fixtures for unit tests.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest

from hello_pubsub.schemas import PUBSUB_EVENT_TYPE, EventEnvelope
from hello_pubsub.sinks import RecordingSink


@pytest.fixture(scope="session", autouse=True)
def _env_vars():
    """
    Ensures a deterministic environment for every test run.
    Overwrite *only* the variables needed by the handler.
    """
    original = os.environ.copy()
    os.environ.setdefault("SERVICE_NAME", "hello-pubsub-test")
    os.environ.setdefault("ENVIRONMENT", "test")
    os.environ.setdefault("LOG_LEVEL", "INFO")
    yield
    os.environ.clear()
    os.environ.update(original)


# ---------- Minimal, realistic dummy events ---------- #
@pytest.fixture
def make_event() -> Callable[..., dict]:
    """Builds the raw envelope mapping the dispatcher hands to the handler."""

    def _make(data: str | None = None, *, include_data: bool = True, **message):
        msg: dict[str, Any] = {
            "messageId": message.pop("messageId", "1234567890"),
            "publishTime": "2024-05-01T12:00:00.000Z",
            **message,
        }
        if include_data:
            msg["data"] = data
        return {
            "id": "delivery-" + uuid.uuid4().hex,
            "type": PUBSUB_EVENT_TYPE,
            "payload": {
                "message": msg,
                "subscription": "projects/demo/subscriptions/hello-sub",
            },
        }

    return _make


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


# ---------- Stand-in for the platform's event dispatcher ---------- #
@dataclass
class FakeDispatcher:
    """
    At-least-once delivery with retry on error, as the platform provides it.

    Every attempt gets a fresh delivery id for the same logical message. After
    `max_attempts` failed attempts the original envelope is dead-lettered.
    `duplicates` extra deliveries follow a successful one, which the
    at-least-once contract permits.
    """

    handler: Callable[[EventEnvelope], None]
    max_attempts: int = 3
    duplicates: int = 0
    delivery_ids: list[str] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)
    acked: list[EventEnvelope] = field(default_factory=list)
    dead_letters: list[EventEnvelope] = field(default_factory=list)

    def _deliver(self, envelope: EventEnvelope) -> bool:
        self.delivery_ids.append(envelope.id)
        try:
            self.handler(envelope)
        except Exception as e:
            self.errors.append(e)
            return False
        return True

    def publish(self, envelope: EventEnvelope) -> None:
        current = envelope
        for attempt in range(self.max_attempts):
            if attempt:
                current = envelope.redelivered()
            if self._deliver(current):
                self.acked.append(current)
                break
        else:
            self.dead_letters.append(envelope)
            return

        for _ in range(self.duplicates):
            self._deliver(envelope.redelivered())


@pytest.fixture
def dispatcher_factory() -> Callable[..., FakeDispatcher]:
    return FakeDispatcher
