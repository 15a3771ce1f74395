"""Telegram transport using long polling."""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from telegram import Bot, Message
from telegram.error import InvalidToken, TelegramError

from askdb.errors import TokenNotConfiguredError, TransportError
from askdb.transport.base import EventSink, Transport
from askdb.transport.events import (
    Closed,
    CloseReason,
    Connecting,
    CredentialsUpdated,
    InboundMessage,
    MessagesReceived,
    Open,
)

MAX_MESSAGE_LENGTH = 4096


@dataclass(frozen=True)
class TelegramConfig:
    """Telegram adapter config."""

    token: str
    allow_from: set[str] = field(default_factory=set)
    poll_timeout: int = 30


class TelegramTransport(Transport):
    """Telegram Bot API session; the credential blob carries identity and update offset."""

    name = "telegram"

    def __init__(self, config: TelegramConfig, credentials: dict[str, Any] | None = None) -> None:
        if not config.token:
            raise TokenNotConfiguredError("telegram token is empty")
        self._config = config
        self._credentials = dict(credentials or {})
        self._offset: int | None = self._credentials.get("offset")
        self._bot = Bot(config.token)
        self._bot_id: int | None = None
        self._username: str = self._credentials.get("username", "")
        self._running = False

    @property
    def is_open(self) -> bool:
        return self._running and self._bot_id is not None

    async def run(self, emit: EventSink) -> None:
        self._running = True
        await emit(Connecting())
        try:
            await self._bot.initialize()
            me = await self._bot.get_me()
        except InvalidToken as exc:
            self._running = False
            await emit(Closed(CloseReason.LOGGED_OUT, str(exc)))
            return
        except TelegramError as exc:
            self._running = False
            await emit(Closed(CloseReason.CONNECTION_LOST, str(exc)))
            return

        self._bot_id = me.id
        self._username = me.username or ""
        if self._credentials.get("bot_id") != self._bot_id or self._credentials.get("username") != self._username:
            await emit(CredentialsUpdated(self._blob()))
        logger.info("telegram.open username={} offset={}", self._username, self._offset)
        await emit(Open())

        try:
            closed = await self._poll(emit)
        finally:
            self._running = False
            self._bot_id = None
            with contextlib.suppress(TelegramError):
                await self._bot.shutdown()
        await emit(closed)

    async def _poll(self, emit: EventSink) -> Closed:
        try:
            while self._running:
                updates = await self._bot.get_updates(
                    offset=self._offset,
                    timeout=self._config.poll_timeout,
                    allowed_updates=["message"],
                )
                if not updates:
                    continue
                self._offset = updates[-1].update_id + 1
                await emit(CredentialsUpdated(self._blob()))
                batch = tuple(
                    self._to_inbound(update.message)
                    for update in updates
                    if update.message is not None and self._allowed(update.message)
                )
                if batch:
                    await emit(MessagesReceived(batch))
        except InvalidToken as exc:
            return Closed(CloseReason.LOGGED_OUT, str(exc))
        except TelegramError as exc:
            logger.warning("telegram.poll.error error={}", exc)
            return Closed(CloseReason.CONNECTION_LOST, str(exc))
        return Closed(CloseReason.STOPPED)

    async def send(self, recipient_id: str, text: str) -> None:
        if not self.is_open:
            raise TransportError(f"telegram session is closed, cannot send to {recipient_id}")
        try:
            for chunk in self._chunk_message(text):
                await self._bot.send_message(chat_id=recipient_id, text=chunk)
        except TelegramError as exc:
            raise TransportError(f"telegram send failed: {exc}") from exc

    async def close(self) -> None:
        self._running = False

    def _blob(self) -> dict[str, Any]:
        self._credentials.update({"bot_id": self._bot_id, "username": self._username, "offset": self._offset})
        return dict(self._credentials)

    def _allowed(self, message: Message) -> bool:
        if not self._config.allow_from:
            return True
        if str(message.chat_id) in self._config.allow_from:
            return True
        logger.warning("telegram.inbound.denied chat_id={}", message.chat_id)
        return False

    def _to_inbound(self, message: Message) -> InboundMessage:
        author = message.from_user
        return InboundMessage(
            sender_id=str(message.chat_id),
            text=message.text or message.caption,
            from_self=author is not None and author.id == self._bot_id,
            message_id=str(message.message_id),
        )

    @staticmethod
    def _chunk_message(text: str, *, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
        if len(text) <= limit:
            return [text]
        chunks: list[str] = []
        remaining = text
        while remaining:
            if len(remaining) <= limit:
                chunks.append(remaining)
                break
            split_at = remaining.rfind("\n", 0, limit)
            if split_at <= 0:
                split_at = limit
            chunks.append(remaining[:split_at].rstrip())
            remaining = remaining[split_at:].lstrip("\n")
        return [chunk for chunk in chunks if chunk]
