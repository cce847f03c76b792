"""Outbound delivery through the Messenger Send API.

One POST per call, no retries and no queueing. Platform rejections come
back as typed results (``send``) or typed exceptions (``deliver``);
transport failures surface as ``httpx.HTTPError``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from src.messenger.config import MessengerSettings
from src.messenger.errors import MalformedResponseError, PlatformRejection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    """Either a message id or a platform rejection, never both."""

    message_id: str | None = None
    rejection: PlatformRejection | None = None

    def __post_init__(self) -> None:
        if (self.message_id is None) == (self.rejection is None):
            raise ValueError("DeliveryResult needs exactly one of message_id or rejection")

    @property
    def ok(self) -> bool:
        return self.rejection is None

    def unwrap(self) -> str:
        """Return the message id, or raise the rejection as its typed exception."""
        if self.rejection is not None:
            raise self.rejection.to_exception()
        if self.message_id is None:
            raise ValueError("DeliveryResult holds no message_id")
        return self.message_id


def parse_send_response(status_code: int, body: str) -> DeliveryResult:
    """Interpret a Send API response body.

    Raises:
        MalformedResponseError: If the body is neither an error nor a success.
    """
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        raise MalformedResponseError(status_code, body) from None
    if not isinstance(data, dict):
        raise MalformedResponseError(status_code, body)

    error = data.get("error")
    if isinstance(error, dict):
        return DeliveryResult(rejection=PlatformRejection.from_response(error))

    message_id = data.get("message_id")
    if not isinstance(message_id, str) or not message_id:
        raise MalformedResponseError(status_code, body)
    return DeliveryResult(message_id=message_id)


class Sender:
    """Sends message descriptors to the Send API."""

    def __init__(
        self,
        settings: MessengerSettings,
        client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=settings.timeout, verify=True)

    def __enter__(self) -> Sender:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def send(self, message: dict[str, Any]) -> DeliveryResult:
        """Post ``message`` and return the typed outcome."""
        url = f"{self._settings.api_base.rstrip('/')}/messages"
        resp = self._client.post(
            url,
            content=json.dumps(message),
            params={"access_token": self._settings.access_token},
            headers={"Content-Type": "application/json"},
        )
        result = parse_send_response(resp.status_code, resp.text)
        if result.rejection is not None:
            logger.warning(
                "Send API rejected message (code=%s, kind=%s): %s",
                result.rejection.code,
                result.rejection.kind.value,
                result.rejection.message,
            )
        else:
            logger.debug("Delivered message %s", result.message_id)
        return result

    def deliver(self, message: dict[str, Any]) -> str:
        """Send ``message`` and return its message id.

        Raises:
            PlatformError: A subclass matching the platform's error code.
            MalformedResponseError: If the response has no id and no error.
        """
        return self.send(message).unwrap()
