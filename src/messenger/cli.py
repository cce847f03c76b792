"""Click CLI for classifying webhook payloads and sending messages."""

from __future__ import annotations

import json
import logging
import sys
from typing import IO

import click
import httpx

from src.messenger.config import MessengerSettings
from src.messenger.errors import MessengerError, UnrecognizedEventError
from src.messenger.events import classify, iter_records
from src.messenger.send import Sender


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Messenger webhook and Send API tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command("classify")
@click.argument("payload_file", type=click.File("r"))
def classify_command(payload_file: IO[str]) -> None:
    """Print the event kind of every record in a webhook envelope."""
    envelope = json.load(payload_file)
    for record in iter_records(envelope):
        try:
            event = classify(record)
        except UnrecognizedEventError:
            click.echo(json.dumps({"kind": "unrecognized"}))
            continue
        click.echo(json.dumps({
            "kind": event.kind.value,
            "sender": event.sender,
            "recipient": event.recipient,
            "sent_at": event.sent_at.isoformat(),
        }))


@cli.command()
@click.argument("recipient_id")
@click.argument("text")
def deliver(recipient_id: str, text: str) -> None:
    """Send a text message; reads MESSENGER_* environment variables."""
    try:
        settings = MessengerSettings.from_env()
    except KeyError as exc:
        click.echo(f"Missing environment variable: {exc.args[0]}", err=True)
        sys.exit(1)
    message = {"recipient": {"id": recipient_id}, "message": {"text": text}}
    with Sender(settings) as sender:
        try:
            message_id = sender.deliver(message)
        except (MessengerError, httpx.HTTPError) as exc:
            click.echo(f"{type(exc).__name__}: {exc}", err=True)
            sys.exit(1)
    click.echo(message_id)
