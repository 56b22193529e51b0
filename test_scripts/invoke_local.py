#!/usr/bin/env python

"""
Local stimulus for the hello-pubsub handler.

Builds the envelope a dispatcher would hand over for one published message,
delivers it one or more times (at-least-once redelivery gets a new delivery
id each time), and prints what the handler wrote.

    python test_scripts/invoke_local.py --message "Cloud Function Gen2"
    python test_scripts/invoke_local.py                       # no payload
    python test_scripts/invoke_local.py --raw-data '%%%' --policy fallback
"""

import argparse
from dataclasses import dataclass

from rich.console import Console
from rich.table import Table

from hello_pubsub.app import handle_event
from hello_pubsub.config import DecodePolicy
from hello_pubsub.exceptions import HelloPubSubError
from hello_pubsub.schemas import EventEnvelope
from hello_pubsub.sinks import RecordingSink


@dataclass
class DeliveryResult:
    delivery_id: str
    outcome: str
    log_line: str


def parse_attributes(pairs: list[str]) -> dict[str, str] | None:
    """Turn repeated KEY=VALUE arguments into a message attribute map."""
    if not pairs:
        return None
    attributes = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Attribute must look like KEY=VALUE, got '{pair}'")
        attributes[key] = value
    return attributes


def run_deliveries(
    envelope: EventEnvelope, deliveries: int, policy: DecodePolicy
) -> list[DeliveryResult]:
    results = []
    current = envelope
    for attempt in range(deliveries):
        if attempt:
            current = envelope.redelivered()
        sink = RecordingSink()
        try:
            handle_event(current, sink, policy=policy)
        except HelloPubSubError as e:
            results.append(DeliveryResult(current.id, f"FAILED ({e.error_code})", ""))
            continue
        results.append(DeliveryResult(current.id, "OK", " | ".join(sink.messages)))
    return results


def main():
    """Main entry point for the local invoke script."""
    parser = argparse.ArgumentParser(
        description="Deliver a Pub/Sub style message to the hello-pubsub handler locally.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    payload = parser.add_mutually_exclusive_group()
    payload.add_argument(
        "-m", "--message", help="UTF-8 text to publish. Omit to send no data."
    )
    payload.add_argument(
        "--raw-data", help="Send this string as message.data without encoding it."
    )
    parser.add_argument(
        "-a",
        "--attribute",
        action="append",
        default=[],
        help="Message attribute as KEY=VALUE. May be repeated.",
    )
    parser.add_argument(
        "-n",
        "--deliveries",
        type=int,
        default=1,
        help="How many times the dispatcher delivers the same message.",
    )
    parser.add_argument(
        "--policy",
        choices=[p.value for p in DecodePolicy],
        default=DecodePolicy.FAIL.value,
        help="What to do with a payload that does not decode.",
    )
    args = parser.parse_args()

    console = Console()
    try:
        if args.deliveries < 1:
            raise ValueError("--deliveries must be a positive integer.")
        attributes = parse_attributes(args.attribute)
    except ValueError as e:
        print(f"Configuration Error: {e}")
        exit(2)

    if args.raw_data is not None:
        envelope = EventEnvelope.from_raw_data(args.raw_data, attributes)
    else:
        envelope = EventEnvelope.from_text(args.message, attributes)

    console.print(
        f"\n--- [bold blue]Delivering message {envelope.message.message_id}[/bold blue] ---"
    )
    results = run_deliveries(envelope, args.deliveries, DecodePolicy(args.policy))

    table = Table(title="Deliveries")
    table.add_column("Delivery ID", style="cyan")
    table.add_column("Outcome")
    table.add_column("Log line", style="green")
    for result in results:
        style = "green" if result.outcome == "OK" else "red"
        table.add_row(
            result.delivery_id, f"[{style}]{result.outcome}[/{style}]", result.log_line
        )
    console.print(table)

    exit(0 if all(r.outcome == "OK" for r in results) else 1)


if __name__ == "__main__":
    main()
