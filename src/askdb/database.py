"""Query execution against the pooled database engine."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from askdb.config import Settings
from askdb.errors import ExecutionError

READ_ONLY_PREFIXES = ("SELECT", "WITH", "SHOW", "DESCRIBE", "DESC", "EXPLAIN")
WRITE_KEYWORDS = re.compile(
    r"\b(INSERT|UPDATE|DELETE|DROP|ALTER|CREATE|TRUNCATE|REPLACE(?!\s*\()|GRANT|REVOKE|EXEC|EXECUTE|CALL)\b",
    re.IGNORECASE,
)
QUOTED_RE = re.compile(r"""'(?:[^'\\]|\\.|'')*'|"(?:[^"\\]|\\.|"")*"|`[^`]*`""")


@dataclass(frozen=True)
class QueryResult:
    """Rows returned by one query, or the failed sentinel when ``rows`` is None."""

    rows: list[dict[str, Any]] | None
    error: str | None = None

    @classmethod
    def ok(cls, rows: list[dict[str, Any]]) -> QueryResult:
        return cls(rows=rows)

    @classmethod
    def failure(cls, error: str) -> QueryResult:
        return cls(rows=None, error=error)

    @property
    def failed(self) -> bool:
        return self.rows is None

    def serialize(self) -> str:
        return json.dumps(self.rows, ensure_ascii=False, default=_json_default)


def _json_default(value: object) -> str:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def create_engine(settings: Settings) -> AsyncEngine:
    """Open the connection pool shared by every pipeline run."""

    return create_async_engine(settings.database_url, pool_pre_ping=True)


def check_read_only(query: str) -> None:
    """Raise ExecutionError unless ``query`` looks like a read-only statement."""
    statement = query.strip().rstrip(";").strip()
    if not statement:
        raise ExecutionError("empty query")
    head = statement.split(None, 1)[0].upper()
    if head not in READ_ONLY_PREFIXES:
        raise ExecutionError(f"only read-only statements are allowed, got {head}")
    # Literals and quoted identifiers may spell keywords without being statements.
    match = WRITE_KEYWORDS.search(QUOTED_RE.sub("''", statement))
    if match is not None:
        raise ExecutionError(f"query contains forbidden keyword: {match.group(1).upper()}")


class QueryExecutor:
    """Runs generated query text on one pooled connection per call."""

    def __init__(self, engine: AsyncEngine, *, read_only: bool = False) -> None:
        self._engine = engine
        self._read_only = read_only

    async def execute(self, query: str) -> QueryResult:
        logger.info("db.execute query={}", query)
        try:
            if self._read_only:
                check_read_only(query)
            async with self._engine.connect() as conn:
                result = await conn.exec_driver_sql(query, execution_options={"no_parameters": True})
                rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
                await conn.commit()
        except Exception as exc:
            logger.error("db.execute.error error={}", exc)
            return QueryResult.failure(str(exc))
        logger.info("db.execute.done rows={}", len(rows))
        return QueryResult.ok(rows)
