"""Messaging transport interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from askdb.transport.events import TransportEvent

EventSink = Callable[[TransportEvent], Awaitable[None]]
TransportFactory = Callable[[dict[str, Any] | None], "Transport"]


class Transport(ABC):
    """One connection attempt to the messaging network.

    A transport reports its lifecycle through ``emit`` and ends ``run`` after
    emitting ``Closed``. A closed transport is never reopened; the session
    manager builds a new one from the persisted credentials instead.
    """

    name: str = "base"

    @abstractmethod
    async def run(self, emit: EventSink) -> None:
        """Connect, then report events until the connection closes."""

    @abstractmethod
    async def send(self, recipient_id: str, text: str) -> None:
        """Send plain text, raising TransportError when the send fails."""

    @abstractmethod
    async def close(self) -> None:
        """Ask ``run`` to finish."""
