"""Shared test fixtures for messenger-hooks."""

from __future__ import annotations

from typing import Any

import pytest

from src.messenger.config import MessengerSettings
from src.messenger.hooks import Dispatcher

# 2016-04-07T03:33:20Z
MOCK_TIMESTAMP = 1460000000000


@pytest.fixture
def dispatcher() -> Dispatcher:
    return Dispatcher()


@pytest.fixture
def settings() -> MessengerSettings:
    return MessengerSettings(
        access_token="test-access-token",
        api_base="https://graph.test/v2.6/me",
        verify_token="test-verify-token",
    )


# --- Factory functions for test data ---

_EVENT_BODIES: dict[str, dict[str, Any]] = {
    "message": {"mid": "mid.1457764197618:41d102a3e1ae206a38", "seq": 73, "text": "hello"},
    "delivery": {"mids": ["mid.1458668856218:ed81099e15d3f4f233"], "watermark": 1458668856253, "seq": 37},
    "postback": {"payload": "USER_DEFINED_PAYLOAD", "title": "Start"},
    "optin": {"ref": "PASS_THROUGH_PARAM"},
    "read": {"watermark": 1458668856253, "seq": 38},
    "account_linking": {"status": "linked", "authorization_code": "PASS_THROUGH_AUTHORIZATION_CODE"},
}


def make_record(kind: str | None = "message", **kwargs: Any) -> dict[str, Any]:
    """Factory for a messaging record with sensible defaults.

    ``kind=None`` produces a record with no event key.
    """
    record: dict[str, Any] = {
        "sender": {"id": "USER_ID"},
        "recipient": {"id": "PAGE_ID"},
        "timestamp": MOCK_TIMESTAMP,
    }
    if kind is not None:
        record[kind] = dict(_EVENT_BODIES.get(kind, {}))
    record.update(kwargs)
    return record


def make_envelope(*records: dict[str, Any]) -> dict[str, Any]:
    """Factory for a webhook envelope holding ``records`` in one entry."""
    return {
        "object": "page",
        "entry": [
            {"id": "PAGE_ID", "time": MOCK_TIMESTAMP, "messaging": list(records)},
        ],
    }
