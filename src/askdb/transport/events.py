"""Typed events emitted by a messaging transport."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class CloseReason(StrEnum):
    LOGGED_OUT = "logged_out"
    CONNECTION_LOST = "connection_lost"
    STOPPED = "stopped"


@dataclass(frozen=True)
class InboundMessage:
    """Message received from the messaging network."""

    sender_id: str
    text: str | None
    from_self: bool = False
    message_id: str | None = None


@dataclass(frozen=True)
class Connecting:
    pass


@dataclass(frozen=True)
class Open:
    pass


@dataclass(frozen=True)
class Closed:
    reason: CloseReason
    detail: str = ""


@dataclass(frozen=True)
class MessagesReceived:
    batch: tuple[InboundMessage, ...]


@dataclass(frozen=True)
class CredentialsUpdated:
    blob: dict[str, Any] = field(default_factory=dict)


TransportEvent = Connecting | Open | Closed | MessagesReceived | CredentialsUpdated
