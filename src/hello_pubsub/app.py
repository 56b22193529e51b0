"""
The function adapter for the hello-pubsub service.

This module is the entry point registered with the serverless platform. It is
responsible for:
1.  Initializing the Powertools structured Logger from configuration.
2.  Parsing and validating the event envelope handed over by the dispatcher.
3.  Invoking the core decode logic and emitting exactly one greeting record.
4.  Logging and re-raising failures so the dispatcher can apply its retry and
    dead-letter policy. Nothing here retries on its own.
"""

from collections.abc import Mapping
from typing import Any

import pydantic
from aws_lambda_powertools import Logger
from aws_lambda_powertools.logging.utils import copy_config_to_registered_loggers

from .config import DecodePolicy, get_config
from .core import decode_name, format_greeting
from .exceptions import (
    HelloPubSubError,
    InvalidEnvelopeError,
    get_error_context,
)
from .schemas import EventEnvelope
from .sinks import LogSink, PowertoolsLogSink

# --- Global & Reusable Components ---
CONFIG = get_config()

logger = Logger(service=CONFIG.service_name, level=CONFIG.log_level)
logger.append_keys(environment=CONFIG.environment)
if CONFIG.trigger_topic:
    logger.append_keys(trigger_topic=CONFIG.trigger_topic)

# Module loggers (core, config) write through the same JSON handler and level.
copy_config_to_registered_loggers(source_logger=logger, include={"hello_pubsub"})

logger.info(
    "Configuration loaded.",
    extra={"malformed_payload_policy": CONFIG.malformed_payload_policy.value},
)

greeting_sink = PowertoolsLogSink(logger)


def _as_mapping(event: Any) -> Mapping[str, Any]:
    """
    Normalise a CloudEvents-style object (item access for attributes, `.data`
    for the body) into the mapping shape the envelope model validates.
    """
    try:
        return {"id": event["id"], "type": event["type"], "data": event.data}
    except (KeyError, TypeError, AttributeError) as e:
        raise InvalidEnvelopeError(
            f"Unsupported event object: {type(event).__name__}",
            context={"event_class": type(event).__name__},
        ) from e


def parse_envelope(event: Any) -> EventEnvelope:
    """Validate *event* into a frozen EventEnvelope without touching the input."""
    if isinstance(event, EventEnvelope):
        return event

    raw = event if isinstance(event, Mapping) else _as_mapping(event)
    try:
        return EventEnvelope.model_validate(raw)
    except pydantic.ValidationError as e:
        raise InvalidEnvelopeError(
            "Event envelope failed validation.",
            context={
                "validation_errors": e.errors(include_url=False, include_input=False)
            },
        ) from e


def handle_event(
    event: Any, sink: LogSink, policy: DecodePolicy | None = None
) -> None:
    """
    Turn one delivery into one greeting record on *sink*.

    Returns once the sink accepted the record. Any HelloPubSubError is logged
    with its structured context and re-raised to the caller.
    """
    if policy is None:
        policy = CONFIG.malformed_payload_policy

    try:
        envelope = parse_envelope(event)
    except InvalidEnvelopeError as e:
        logger.error(
            "Rejected invalid event envelope.", extra={"error": get_error_context(e)}
        )
        raise

    # Per-invocation keys travel as record extras, never as logger state.
    invocation_keys = {
        "execution_id": envelope.id,
        "event_type": envelope.type,
        "message_id": envelope.message.message_id,
    }

    try:
        name = decode_name(envelope.message.data, policy, log_keys=invocation_keys)
    except HelloPubSubError as e:
        e.correlation_id = envelope.id
        logger.error(
            "Message payload could not be decoded; leaving retry to the dispatcher.",
            extra={**invocation_keys, "error": get_error_context(e)},
        )
        raise

    sink.emit(format_greeting(name), **invocation_keys)


def hello_pubsub(event: Any, context: Any = None) -> None:
    """Registered trigger entry point; writes the greeting through Powertools."""
    handle_event(event, greeting_sink)
