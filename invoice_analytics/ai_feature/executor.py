import asyncio
import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Protocol

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from invoice_analytics.ai_feature.errors import DatabaseError, InvalidQuery
from invoice_analytics.core.config import settings

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class Executor(Protocol):
    async def execute(
        self, sql: str, params: Optional[Mapping[str, Any]] = None
    ) -> List[Row]: ...


class QueryExecutor:
    """
    Runs generated SQL against the shared pool.

    Each call borrows one connection and returns it on every exit path.
    Nothing is committed; the pipeline only reads.
    """

    def __init__(self, engine: AsyncEngine, timeout: float = settings.QUERY_TIMEOUT_SECONDS):
        self.engine = engine
        self.timeout = timeout

    async def execute(
        self, sql: str, params: Optional[Mapping[str, Any]] = None
    ) -> List[Row]:
        if not isinstance(sql, str) or not sql.strip():
            raise InvalidQuery()

        try:
            async with self.engine.connect() as conn:
                result = await asyncio.wait_for(
                    conn.execute(text(sql), dict(params or {})), timeout=self.timeout
                )
                rows = [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as error:
            logger.error(f"Database query error: {error}")
            raise DatabaseError(f"Database error: {error}") from error
        except asyncio.TimeoutError as error:
            logger.error(f"Database query timed out after {self.timeout}s")
            raise DatabaseError("Database error: query timed out") from error

        logger.info(f"Query returned {len(rows)} rows")
        return rows


def _json_default(value: Any):
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def serialize_rows(rows: List[Row]) -> str:
    """Rows as compact JSON for prompts; numerics and dates become plain JSON values."""
    return json.dumps(rows, default=_json_default)
