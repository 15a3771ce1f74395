"""Language model client built on Republic."""

from __future__ import annotations

import asyncio

from loguru import logger
from republic import LLM

from askdb.config import Settings
from askdb.errors import ModelNotConfiguredError, ServiceError

MODEL_NOT_CONFIGURED_ERROR = "Model not configured. Set ASKDB_MODEL (e.g., 'gemini:gemini-2.0-flash')."


def build_llm(settings: Settings) -> LLM:
    """Build the Republic LLM client for one process."""

    if not settings.model or ":" not in settings.model:
        raise ModelNotConfiguredError(MODEL_NOT_CONFIGURED_ERROR)
    return LLM(
        settings.model,
        api_key=settings.api_key,
        api_base=settings.api_base,
    )


class ModelClient:
    """Single-shot text completion; no history is kept between calls."""

    def __init__(self, llm: LLM, *, max_tokens: int | None = None, timeout_seconds: float | None = None) -> None:
        self._llm = llm
        self._max_tokens = max_tokens
        self._timeout_seconds = timeout_seconds

    async def complete(self, prompt: str) -> str:
        logger.debug("model.complete prompt_chars={}", len(prompt))
        try:
            if self._timeout_seconds is None:
                output = await self._chat(prompt)
            else:
                async with asyncio.timeout(self._timeout_seconds):
                    output = await self._chat(prompt)
        except TimeoutError as exc:
            raise ServiceError(f"model call timed out after {self._timeout_seconds}s") from exc
        except Exception as exc:
            raise ServiceError(f"model call failed: {exc}") from exc

        if not isinstance(output, str) or not output.strip():
            raise ServiceError("model returned no text")
        return output.strip()

    async def _chat(self, prompt: str) -> object:
        if self._max_tokens is None:
            return await self._llm.chat_async(prompt=prompt)
        return await self._llm.chat_async(prompt=prompt, max_tokens=self._max_tokens)
