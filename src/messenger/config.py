"""Runtime settings for the Messenger client and webhook receiver."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_API_BASE = "https://graph.facebook.com/v2.6/me"


class MessengerSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_token: str = Field(min_length=1)
    api_base: str = DEFAULT_API_BASE
    verify_token: str | None = None
    timeout: float | None = Field(default=None, gt=0)  # None: no client-side timeout

    @classmethod
    def from_env(cls) -> MessengerSettings:
        """Create settings from environment variables.

        ``MESSENGER_ACCESS_TOKEN`` is required; a missing value raises KeyError.
        """
        timeout = os.environ.get("MESSENGER_TIMEOUT")
        return cls(
            access_token=os.environ["MESSENGER_ACCESS_TOKEN"],
            api_base=os.environ.get("MESSENGER_API_BASE", DEFAULT_API_BASE),
            verify_token=os.environ.get("MESSENGER_VERIFY_TOKEN") or None,
            timeout=float(timeout) if timeout else None,
        )
