"""Typed views over Messenger webhook records, and the classifier that builds them.

Events keep the raw messaging record and read fields on access, so a
malformed record classifies fine and only fails when a handler touches
the broken field.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, ClassVar

from src.messenger.errors import UnrecognizedEventError

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    MESSAGE = "message"
    DELIVERY = "delivery"
    POSTBACK = "postback"
    OPTIN = "optin"
    READ = "read"
    ACCOUNT_LINKING = "account_linking"


def _from_millis(value: int) -> datetime:
    # Whole seconds only; sub-second part is truncated.
    return datetime.fromtimestamp(value // 1000, tz=UTC)


@dataclass(frozen=True)
class Event:
    """Common accessors shared by every messaging event."""

    kind: ClassVar[EventKind]

    messaging: dict[str, Any]

    @property
    def sender(self) -> dict[str, Any]:
        return self.messaging["sender"]

    @property
    def recipient(self) -> dict[str, Any]:
        return self.messaging["recipient"]

    @property
    def sent_at(self) -> datetime:
        return _from_millis(self.messaging["timestamp"])

    @property
    def _body(self) -> dict[str, Any]:
        return self.messaging[self.kind.value]


@dataclass(frozen=True)
class Message(Event):
    kind: ClassVar[EventKind] = EventKind.MESSAGE

    @property
    def id(self) -> str:
        return self._body["mid"]

    @property
    def seq(self) -> int | None:
        return self._body.get("seq")

    @property
    def text(self) -> str | None:
        return self._body.get("text")

    @property
    def attachments(self) -> list[dict[str, Any]]:
        return self._body.get("attachments") or []

    @property
    def quick_reply(self) -> str | None:
        quick_reply = self._body.get("quick_reply")
        if not quick_reply:
            return None
        return quick_reply.get("payload")

    @property
    def is_echo(self) -> bool:
        return bool(self._body.get("is_echo", False))

    @property
    def app_id(self) -> int | None:
        return self._body.get("app_id")


@dataclass(frozen=True)
class Delivery(Event):
    kind: ClassVar[EventKind] = EventKind.DELIVERY

    @property
    def ids(self) -> list[str]:
        return self._body.get("mids") or []

    @property
    def watermark(self) -> datetime:
        return _from_millis(self._body["watermark"])

    @property
    def seq(self) -> int | None:
        return self._body.get("seq")


@dataclass(frozen=True)
class Postback(Event):
    kind: ClassVar[EventKind] = EventKind.POSTBACK

    @property
    def payload(self) -> str:
        return self._body["payload"]

    @property
    def title(self) -> str | None:
        return self._body.get("title")

    @property
    def referral(self) -> dict[str, Any] | None:
        return self._body.get("referral")


@dataclass(frozen=True)
class Optin(Event):
    kind: ClassVar[EventKind] = EventKind.OPTIN

    @property
    def ref(self) -> str | None:
        return self._body.get("ref")


@dataclass(frozen=True)
class Read(Event):
    kind: ClassVar[EventKind] = EventKind.READ

    @property
    def watermark(self) -> datetime:
        return _from_millis(self._body["watermark"])

    @property
    def seq(self) -> int | None:
        return self._body.get("seq")


@dataclass(frozen=True)
class AccountLinking(Event):
    kind: ClassVar[EventKind] = EventKind.ACCOUNT_LINKING

    @property
    def status(self) -> str:
        return self._body["status"]

    @property
    def authorization_code(self) -> str | None:
        return self._body.get("authorization_code")


# Priority order: the first key present in a record decides its event type.
EVENT_TYPES: tuple[tuple[str, type[Event]], ...] = (
    ("message", Message),
    ("delivery", Delivery),
    ("postback", Postback),
    ("optin", Optin),
    ("read", Read),
    ("account_linking", AccountLinking),
)


def classify(record: dict[str, Any]) -> Event:
    """Build the typed event for one messaging record.

    Raises:
        UnrecognizedEventError: If the record has none of the known event keys.
    """
    if isinstance(record, dict):
        for key, event_type in EVENT_TYPES:
            if record.get(key) is not None:
                return event_type(record)
    raise UnrecognizedEventError(record)


def iter_records(envelope: dict[str, Any]) -> Iterator[dict[str, Any]]:
    """Yield every messaging record of a webhook envelope, in order.

    Entries that are not mappings, and ``messaging`` values that are not
    lists, are logged and skipped.
    """
    entries = envelope.get("entry") if isinstance(envelope, dict) else None
    if entries is None:
        return
    if not isinstance(entries, list):
        logger.warning("Skipping envelope: entry is not a list")
        return
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning("Skipping entry %d: not a mapping", index)
            continue
        messaging = entry.get("messaging")
        if messaging is None:
            continue
        if not isinstance(messaging, list):
            logger.warning("Skipping entry %d: messaging is not a list", index)
            continue
        yield from messaging
