from __future__ import annotations

import asyncio
from typing import Any

import pytest

from askdb.config import Settings
from askdb.errors import ModelNotConfiguredError, ServiceError
from askdb.llm import ModelClient, build_llm


class FakeLLM:
    def __init__(self, output: object = "  answer \n", *, error: Exception | None = None, delay: float = 0) -> None:
        self._output = output
        self._error = error
        self._delay = delay
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def chat_async(self, prompt: str, **kwargs: Any) -> object:
        self.calls.append((prompt, kwargs))
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._output


@pytest.mark.asyncio
async def test_complete_trims_output() -> None:
    llm = FakeLLM()

    assert await ModelClient(llm).complete("hi") == "answer"  # type: ignore[arg-type]
    assert llm.calls == [("hi", {})]


@pytest.mark.asyncio
async def test_complete_passes_max_tokens() -> None:
    llm = FakeLLM()

    await ModelClient(llm, max_tokens=256).complete("hi")  # type: ignore[arg-type]

    assert llm.calls == [("hi", {"max_tokens": 256})]


@pytest.mark.asyncio
async def test_complete_sends_only_the_given_prompt_each_time() -> None:
    llm = FakeLLM()
    client = ModelClient(llm)  # type: ignore[arg-type]

    await client.complete("first")
    await client.complete("second")

    assert [prompt for prompt, _ in llm.calls] == ["first", "second"]


@pytest.mark.asyncio
async def test_complete_wraps_provider_errors() -> None:
    client = ModelClient(FakeLLM(error=RuntimeError("quota exceeded")))  # type: ignore[arg-type]

    with pytest.raises(ServiceError, match="quota exceeded"):
        await client.complete("hi")


@pytest.mark.asyncio
@pytest.mark.parametrize("output", ["", "   ", None])
async def test_complete_rejects_unusable_output(output: object) -> None:
    client = ModelClient(FakeLLM(output))  # type: ignore[arg-type]

    with pytest.raises(ServiceError, match="no text"):
        await client.complete("hi")


@pytest.mark.asyncio
async def test_complete_timeout_raises_service_error() -> None:
    client = ModelClient(FakeLLM(delay=1), timeout_seconds=0.01)  # type: ignore[arg-type]

    with pytest.raises(ServiceError, match="timed out"):
        await client.complete("hi")


def test_build_llm_requires_provider_prefix() -> None:
    with pytest.raises(ModelNotConfiguredError):
        build_llm(Settings(model="gpt-4o"))
