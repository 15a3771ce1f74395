"""Session lifecycle and per-message dispatch."""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Awaitable, Callable, Coroutine
from enum import StrEnum
from typing import Any

from loguru import logger

from askdb.errors import TransportError
from askdb.pipeline import Pipeline
from askdb.transport.base import Transport, TransportFactory
from askdb.transport.credentials import CredentialStore
from askdb.transport.events import (
    Closed,
    CloseReason,
    Connecting,
    CredentialsUpdated,
    MessagesReceived,
    Open,
    TransportEvent,
)


class ConnectionState(StrEnum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class SessionManager:
    """Owns the messaging session, reconnects it, and answers inbound messages.

    Each connection attempt gets a fresh transport from ``transport_factory``,
    built with whatever credentials the store holds at that moment. Events are
    dispatched per transport, so late events from a replaced transport cannot
    move the state machine. Every qualifying inbound message runs the pipeline
    in its own task and is answered on the transport it arrived on.
    """

    def __init__(
        self,
        transport_factory: TransportFactory,
        credentials: CredentialStore,
        pipeline: Pipeline,
        *,
        reconnect_delay: float = 0.0,
    ) -> None:
        self._transport_factory = transport_factory
        self._credentials = credentials
        self._pipeline = pipeline
        self._reconnect_delay = reconnect_delay
        self._state = ConnectionState.CLOSED
        self._transport: Transport | None = None
        self._connect_lock = asyncio.Lock()
        self._logged_out = asyncio.Event()
        self._stopping = False
        self._tasks: set[asyncio.Task[None]] = set()
        self._handlers: dict[type, Callable[[Transport, Any], Awaitable[None]]] = {
            Connecting: self._on_connecting,
            Open: self._on_open,
            Closed: self._on_closed,
            CredentialsUpdated: self._on_credentials,
            MessagesReceived: self._on_messages,
        }

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def transport(self) -> Transport | None:
        return self._transport

    async def start(self) -> None:
        self._stopping = False
        await self._connect()

    async def stop(self) -> None:
        self._stopping = True
        async with self._connect_lock:
            transport, self._transport = self._transport, None
        if transport is not None:
            await transport.close()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._set_state(ConnectionState.CLOSED)

    async def wait_logged_out(self) -> None:
        await self._logged_out.wait()

    async def _connect(self) -> None:
        async with self._connect_lock:
            if self._stopping or self._logged_out.is_set():
                return
            self._set_state(ConnectionState.CONNECTING)
            try:
                transport = self._transport_factory(self._credentials.load())
            except TransportError as exc:
                logger.error("session.connect.error error={}", exc)
                self._set_state(ConnectionState.CLOSED)
                self._spawn(self._reconnect())
                return
            self._transport = transport
            self._spawn(self._run_transport(transport))

    async def _reconnect(self) -> None:
        if self._reconnect_delay > 0:
            await asyncio.sleep(self._reconnect_delay)
        await self._connect()

    async def _run_transport(self, transport: Transport) -> None:
        try:
            await transport.run(functools.partial(self.dispatch, transport))
        except Exception as exc:
            logger.exception("session.transport.crashed transport={}", transport.name)
            await self.dispatch(transport, Closed(CloseReason.CONNECTION_LOST, str(exc)))

    async def dispatch(self, transport: Transport, event: TransportEvent) -> None:
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning("session.event.unknown event={}", event)
            return
        await handler(transport, event)

    async def _on_connecting(self, transport: Transport, event: Connecting) -> None:
        logger.info("session.connecting transport={}", transport.name)

    async def _on_open(self, transport: Transport, event: Open) -> None:
        if transport is not self._transport:
            return
        self._set_state(ConnectionState.OPEN)

    async def _on_closed(self, transport: Transport, event: Closed) -> None:
        if transport is not self._transport:
            logger.debug("session.closed.stale reason={}", event.reason)
            return
        self._set_state(ConnectionState.CLOSED)
        if event.reason is CloseReason.LOGGED_OUT:
            logger.warning("session.logged_out detail={}", event.detail)
            self._logged_out.set()
            return
        if self._stopping:
            return
        logger.info("session.reconnect reason={} detail={}", event.reason, event.detail)
        self._spawn(self._reconnect())

    async def _on_credentials(self, transport: Transport, event: CredentialsUpdated) -> None:
        try:
            self._credentials.save(event.blob)
        except OSError as exc:
            logger.error("session.credentials.save_error error={}", exc)

    async def _on_messages(self, transport: Transport, event: MessagesReceived) -> None:
        for message in event.batch:
            if message.from_self:
                continue
            text = (message.text or "").strip()
            if not text:
                continue
            self._spawn(self._handle_message(transport, message.sender_id, text))

    async def _handle_message(self, transport: Transport, sender_id: str, text: str) -> None:
        with logger.contextualize(sender=sender_id):
            logger.info("session.inbound content={}", text[:100])
            try:
                run = await self._pipeline.run(text)
                reply = run.reply
            except Exception as exc:
                logger.exception("session.pipeline.error")
                reply = f"Error: {exc}"
            try:
                await transport.send(sender_id, reply)
            except TransportError as exc:
                logger.warning("session.send.failed error={}", exc)

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        logger.info("session.state from={} to={}", self._state, state)
        self._state = state

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
