"""One message -> query -> reply run."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from askdb.database import QueryExecutor, QueryResult
from askdb.synth import QuerySynthesizer, ReplySynthesizer


@dataclass(frozen=True)
class PipelineRun:
    """Everything one pipeline run produced."""

    text: str
    query: str
    result: QueryResult
    reply: str


class Pipeline:
    """Query synthesis, execution and reply synthesis, in sequence."""

    def __init__(self, queries: QuerySynthesizer, executor: QueryExecutor, replies: ReplySynthesizer) -> None:
        self._queries = queries
        self._executor = executor
        self._replies = replies

    async def run(self, text: str) -> PipelineRun:
        query = await self._queries.synthesize(text)
        result = await self._executor.execute(query)
        if result.failed:
            logger.warning("pipeline.execute.failed error={}", result.error)
        reply = await self._replies.synthesize(text, result)
        return PipelineRun(text=text, query=query, result=result, reply=reply)
