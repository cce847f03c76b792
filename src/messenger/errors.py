"""Error taxonomy for the Messenger Send API and webhook handling."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class ErrorKind(str, Enum):
    RECIPIENT_NOT_FOUND = "recipient_not_found"
    PERMISSION_DENIED = "permission_denied"
    INTERNAL_ERROR = "internal_error"
    PLATFORM_ERROR = "platform_error"


# Graph API error code -> kind. Anything else is a generic platform error.
ERROR_KINDS: dict[int, ErrorKind] = {
    100: ErrorKind.RECIPIENT_NOT_FOUND,
    10: ErrorKind.PERMISSION_DENIED,
    2: ErrorKind.INTERNAL_ERROR,
}


def error_kind_from_code(code: int | None) -> ErrorKind:
    """Resolve a platform error code to its kind, never failing."""
    if code is None:
        return ErrorKind.PLATFORM_ERROR
    return ERROR_KINDS.get(code, ErrorKind.PLATFORM_ERROR)


class MessengerError(Exception):
    """Base class for every error raised by this library."""


class InvalidRegistrationError(MessengerError, ValueError):
    """Raised when a hook is registered for an event kind that does not exist."""


class UnrecognizedEventError(MessengerError):
    """Raised when a messaging record carries none of the known event keys."""

    def __init__(self, record: Any) -> None:
        self.record = record
        keys = sorted(record) if isinstance(record, dict) else []
        super().__init__(f"Unrecognized messaging record (keys: {keys})")


class MalformedResponseError(MessengerError):
    """The Send API answered with neither a message id nor an error object."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Malformed Send API response (HTTP {status_code}): {body!r}")


class PlatformError(MessengerError):
    """The platform rejected a request. Subclasses narrow the reason."""

    def __init__(self, rejection: PlatformRejection) -> None:
        self.rejection = rejection
        payload = rejection.payload
        super().__init__(payload if isinstance(payload, str) else repr(payload))


class RecipientNotFoundError(PlatformError):
    pass


class PermissionDeniedError(PlatformError):
    pass


class InternalPlatformError(PlatformError):
    pass


_EXCEPTIONS: dict[ErrorKind, type[PlatformError]] = {
    ErrorKind.RECIPIENT_NOT_FOUND: RecipientNotFoundError,
    ErrorKind.PERMISSION_DENIED: PermissionDeniedError,
    ErrorKind.INTERNAL_ERROR: InternalPlatformError,
    ErrorKind.PLATFORM_ERROR: PlatformError,
}


class PlatformRejection(BaseModel):
    """A typed platform rejection, as parsed from a Send API ``error`` object."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    code: int | None = None
    message: str | None = None
    error_data: Any = None
    type: str | None = None
    fbtrace_id: str | None = None

    @property
    def payload(self) -> Any:
        """Structured ``error_data`` when the platform sent one, else the message."""
        return self.error_data if self.error_data is not None else self.message

    @classmethod
    def from_response(cls, error: dict[str, Any]) -> PlatformRejection:
        code = error.get("code")
        if not isinstance(code, int):
            code = None
        return cls(
            kind=error_kind_from_code(code),
            code=code,
            message=error.get("message"),
            error_data=error.get("error_data"),
            type=error.get("type"),
            fbtrace_id=error.get("fbtrace_id"),
        )

    def to_exception(self) -> PlatformError:
        return _EXCEPTIONS[self.kind](self)
