"""Messaging transports and their event types."""

from askdb.transport.base import EventSink, Transport, TransportFactory
from askdb.transport.credentials import CredentialStore, FileCredentialStore
from askdb.transport.events import (
    Closed,
    CloseReason,
    Connecting,
    CredentialsUpdated,
    InboundMessage,
    MessagesReceived,
    Open,
    TransportEvent,
)
from askdb.transport.telegram import TelegramConfig, TelegramTransport

__all__ = [
    "CloseReason",
    "Closed",
    "Connecting",
    "CredentialStore",
    "CredentialsUpdated",
    "EventSink",
    "FileCredentialStore",
    "InboundMessage",
    "MessagesReceived",
    "Open",
    "TelegramConfig",
    "TelegramTransport",
    "Transport",
    "TransportEvent",
    "TransportFactory",
]
