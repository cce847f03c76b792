"""Hook registry and dispatcher for incoming Messenger events."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from src.messenger.errors import InvalidRegistrationError, UnrecognizedEventError
from src.messenger.events import EventKind, classify, iter_records

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


@dataclass
class ReceiveReport:
    """Per-envelope outcome counts returned by ``Dispatcher.receive``."""

    dispatched: int = 0
    ignored: int = 0
    unrecognized: int = 0
    failed: int = 0

    def merge(self, other: ReceiveReport) -> None:
        self.dispatched += other.dispatched
        self.ignored += other.ignored
        self.unrecognized += other.unrecognized
        self.failed += other.failed


def _coerce_kind(kind: EventKind | str) -> EventKind:
    try:
        return EventKind(kind)
    except ValueError:
        available = ", ".join(k.value for k in EventKind)
        raise InvalidRegistrationError(
            f"{kind} is not a valid event; available events are {available}"
        ) from None


class Dispatcher:
    """Routes classified events to at most one handler per event kind.

    Owned by the application; build a fresh one per test for isolation.
    Handlers run synchronously in the caller's thread. The lock only
    guards the kind -> handler mapping, never a running handler.
    """

    def __init__(self) -> None:
        self._hooks: dict[EventKind, Handler] = {}
        self._lock = threading.Lock()

    @property
    def hooks(self) -> Mapping[EventKind, Handler]:
        with self._lock:
            return MappingProxyType(dict(self._hooks))

    def on(
        self, kind: EventKind | str, handler: Handler | None = None,
    ) -> Any:
        """Register ``handler`` for ``kind``, replacing any previous one.

        Without a handler, returns a decorator doing the registration.

        Raises:
            InvalidRegistrationError: If ``kind`` is not a known event kind.
        """
        event_kind = _coerce_kind(kind)

        def register(fn: Handler) -> Handler:
            with self._lock:
                self._hooks[event_kind] = fn
            return fn

        if handler is None:
            return register
        return register(handler)

    def unhook(self) -> None:
        """Deregister all hooks."""
        with self._lock:
            self._hooks = {}

    def trigger(self, kind: EventKind | str, *args: Any) -> bool:
        """Run the hook for ``kind`` with ``args``.

        Returns False (and logs) when nothing is registered for the kind,
        including kinds that do not exist. Exceptions raised by the hook
        propagate to the caller.
        """
        try:
            event_kind = EventKind(kind)
        except ValueError:
            logger.info("Ignoring %s (no hook registered)", kind)
            return False
        with self._lock:
            handler = self._hooks.get(event_kind)
        if handler is None:
            logger.info("Ignoring %s (no hook registered)", event_kind.value)
            return False
        logger.debug("Dispatching %s to %r", event_kind.value, handler)
        handler(*args)
        return True

    def receive_record(self, record: dict[str, Any]) -> ReceiveReport:
        """Classify one messaging record and dispatch it.

        Unrecognized records and failing hooks are logged and counted,
        never raised.
        """
        report = ReceiveReport()
        try:
            event = classify(record)
        except UnrecognizedEventError as exc:
            logger.warning("Skipping record: %s", exc)
            report.unrecognized += 1
            return report

        try:
            handled = self.trigger(event.kind, event)
        except Exception:
            logger.exception("Hook for %s failed", event.kind.value)
            report.failed += 1
            return report

        if handled:
            report.dispatched += 1
        else:
            report.ignored += 1
        return report

    def receive(self, envelope: dict[str, Any]) -> ReceiveReport:
        """Dispatch every record of a webhook envelope, in array order.

        A bad record never stops the records after it.
        """
        report = ReceiveReport()
        for record in iter_records(envelope):
            report.merge(self.receive_record(record))
        return report
