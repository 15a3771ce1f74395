"""Process-scoped application context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine

from askdb.config import Settings
from askdb.database import QueryExecutor, create_engine
from askdb.errors import TokenNotConfiguredError
from askdb.llm import ModelClient, build_llm
from askdb.pipeline import Pipeline
from askdb.prompts import dialect_label, load_schema
from askdb.session import SessionManager
from askdb.synth import QuerySynthesizer, ReplySynthesizer
from askdb.transport.credentials import FileCredentialStore
from askdb.transport.telegram import TelegramConfig, TelegramTransport


@dataclass
class AppContext:
    """Everything shared by pipeline runs for the lifetime of the process."""

    settings: Settings
    engine: AsyncEngine
    model: ModelClient
    pipeline: Pipeline

    @classmethod
    def build(cls, settings: Settings) -> AppContext:
        schema = load_schema(settings.schema_file)
        engine = create_engine(settings)
        model = ModelClient(
            build_llm(settings),
            max_tokens=settings.max_tokens,
            timeout_seconds=settings.model_timeout_seconds,
        )
        pipeline = Pipeline(
            QuerySynthesizer(model, schema, dialect_label(engine.dialect.name)),
            QueryExecutor(engine, read_only=settings.read_only),
            ReplySynthesizer(model),
        )
        logger.info("app.build model={} read_only={}", settings.model, settings.read_only)
        return cls(settings=settings, engine=engine, model=model, pipeline=pipeline)

    def session_manager(self) -> SessionManager:
        """Build the Telegram-backed session manager for this context."""
        token = self.settings.telegram_token
        if not token:
            raise TokenNotConfiguredError("Telegram token not configured. Set ASKDB_TELEGRAM_TOKEN.")
        config = TelegramConfig(
            token=token,
            allow_from=set(self.settings.telegram_allow_from),
            poll_timeout=self.settings.poll_timeout_seconds,
        )

        def transport_factory(credentials: dict[str, Any] | None) -> TelegramTransport:
            return TelegramTransport(config, credentials)

        return SessionManager(
            transport_factory,
            FileCredentialStore(self.settings.credentials_path),
            self.pipeline,
            reconnect_delay=self.settings.reconnect_delay_seconds,
        )

    async def aclose(self) -> None:
        await self.engine.dispose()
        logger.info("app.closed")

    async def __aenter__(self) -> AppContext:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
