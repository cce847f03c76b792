"""Messenger Platform webhook hooks and Send API client.

This package provides:
- Classification of webhook messaging records into typed events
- A per-application hook dispatcher
- An outbound sender with a typed error taxonomy
"""

from src.messenger.config import MessengerSettings
from src.messenger.errors import (
    ErrorKind,
    InternalPlatformError,
    InvalidRegistrationError,
    MalformedResponseError,
    MessengerError,
    PermissionDeniedError,
    PlatformError,
    PlatformRejection,
    RecipientNotFoundError,
    UnrecognizedEventError,
)
from src.messenger.events import (
    AccountLinking,
    Delivery,
    Event,
    EventKind,
    Message,
    Optin,
    Postback,
    Read,
    classify,
    iter_records,
)
from src.messenger.hooks import Dispatcher, ReceiveReport
from src.messenger.send import DeliveryResult, Sender

__all__ = [
    # Exceptions
    "InternalPlatformError",
    "InvalidRegistrationError",
    "MalformedResponseError",
    "MessengerError",
    "PermissionDeniedError",
    "PlatformError",
    "RecipientNotFoundError",
    "UnrecognizedEventError",
    # Components
    "Dispatcher",
    "Sender",
    "classify",
    "iter_records",
    # Result types
    "DeliveryResult",
    "PlatformRejection",
    "ReceiveReport",
    # Models
    "AccountLinking",
    "Delivery",
    "ErrorKind",
    "Event",
    "EventKind",
    "Message",
    "MessengerSettings",
    "Optin",
    "Postback",
    "Read",
]
