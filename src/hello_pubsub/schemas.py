# src/hello_pubsub/schemas.py

import base64
import uuid
from typing import NotRequired, TypedDict

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

PUBSUB_EVENT_TYPE = "google.cloud.pubsub.topic.v1.messagePublished"

# --- Static Type Hinting (for mypy and IDEs) ---


class PubSubMessageDict(TypedDict):
    data: NotRequired[str | None]
    attributes: NotRequired[dict[str, str] | None]
    messageId: NotRequired[str]
    publishTime: NotRequired[str]


class MessagePayloadDict(TypedDict):
    message: PubSubMessageDict
    subscription: NotRequired[str]


class EventEnvelopeDict(TypedDict):
    """
    A TypedDict representing the raw event envelope handed over by the dispatcher.
    Used for static type analysis throughout the application.
    """

    id: str
    type: str
    payload: MessagePayloadDict


# --- Runtime Validation (using Pydantic) ---


class PubSubMessage(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # base64 text as transported; decoding happens in core
    data: str | None = None
    attributes: dict[str, str] | None = None
    message_id: str | None = Field(None, alias="messageId")
    publish_time: str | None = Field(None, alias="publishTime")


class MessagePayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: PubSubMessage
    subscription: str | None = None


class EventEnvelope(BaseModel):
    """
    Pydantic model for runtime parsing and validation of one delivery attempt.

    `id` identifies the delivery, not the logical message: a redelivery of the
    same message arrives with a new `id` and the same `message.message_id`.
    CloudEvents-style dispatchers put the payload under `data`, so that key is
    accepted as well as `payload`.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    payload: MessagePayload = Field(
        ..., validation_alias=AliasChoices("payload", "data")
    )

    @property
    def message(self) -> PubSubMessage:
        return self.payload.message

    @classmethod
    def from_text(
        cls,
        text: str | None,
        attributes: dict[str, str] | None = None,
        *,
        message_id: str | None = None,
        delivery_id: str | None = None,
    ) -> "EventEnvelope":
        """Build an envelope carrying *text* the way a publisher would send it."""
        data = None
        if text is not None:
            data = base64.b64encode(text.encode("utf-8")).decode("ascii")
        return cls.from_raw_data(
            data, attributes, message_id=message_id, delivery_id=delivery_id
        )

    @classmethod
    def from_raw_data(
        cls,
        data: str | None,
        attributes: dict[str, str] | None = None,
        *,
        message_id: str | None = None,
        delivery_id: str | None = None,
    ) -> "EventEnvelope":
        """Build an envelope around an already-encoded (or deliberately broken) `data` string."""
        return cls(
            id=delivery_id or uuid.uuid4().hex,
            type=PUBSUB_EVENT_TYPE,
            payload=MessagePayload(
                message=PubSubMessage(
                    data=data,
                    attributes=attributes,
                    message_id=message_id or uuid.uuid4().hex,
                )
            ),
        )

    def redelivered(self, delivery_id: str | None = None) -> "EventEnvelope":
        """Return a copy of this envelope as a new delivery attempt of the same message."""
        return self.model_copy(update={"id": delivery_id or uuid.uuid4().hex})
