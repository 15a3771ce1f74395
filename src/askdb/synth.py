"""Prompt composition around the model client."""

from __future__ import annotations

import re

from loguru import logger

from askdb.database import QueryResult
from askdb.llm import ModelClient
from askdb.prompts import DEFAULT_DIALECT, query_prompt, reply_prompt

CODE_FENCE_RE = re.compile(r"^```(?:[A-Za-z0-9_-]*\n)?(.*?)```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    match = CODE_FENCE_RE.match(text.strip())
    if match is None:
        return text
    return match.group(1).strip()


class QuerySynthesizer:
    """Turns a user request into query text for a fixed schema."""

    def __init__(self, model: ModelClient, schema: str, dialect: str = DEFAULT_DIALECT) -> None:
        self._model = model
        self._schema = schema
        self._dialect = dialect

    @property
    def schema(self) -> str:
        return self._schema

    async def synthesize(self, user_text: str) -> str:
        output = await self._model.complete(query_prompt(self._schema, user_text, self._dialect))
        query = strip_code_fence(output)
        logger.info("synth.query query={}", query)
        return query


class ReplySynthesizer:
    """Summarizes query results for the user."""

    def __init__(self, model: ModelClient) -> None:
        self._model = model

    async def synthesize(self, user_text: str, result: QueryResult) -> str:
        # Failed results go to the model as `null`, same shape as any other payload.
        return await self._model.complete(reply_prompt(user_text, result.serialize()))
