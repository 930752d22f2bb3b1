"""
Corpdata Gateway - Query Service
=================================

What:  The one database access sequence shared by every route.
How:   acquire → query → release on success, close on failure.
Who:   Called by route handlers with the request's ConnectionProvider.
When:  After validation has passed; exactly once per request.

Lifecycle per call:
    ┌──────────┐    ┌──────────┐    ┌──────────────┐
    │ acquire  │───▶│  query   │───▶│   release    │───▶ result
    └────┬─────┘    └────┬─────┘    └──────────────┘
         │ fails         │ fails / times out
         ▼               ▼
    ConnectionAcquireError   close() ───▶ QueryError

Nothing is retried. Every failure is logged here with full detail and
surfaced as a DatabaseError subclass, which the global handler turns into
an opaque HTTP 500.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Dict, List, Mapping, Optional, Union

from gateway.database import ConnectionProvider, PooledConnection, QueryResult
from gateway.exceptions import ConnectionAcquireError, QueryError
from gateway.schemas.api import MessageResponse, WriteResult

logger = logging.getLogger(__name__)


# ── Read Outcomes ─────────────────────────────────────────────────────────
# Filtered searches answer "nothing matched" with HTTP 200 and a message
# instead of an empty array. Existing clients tell the two apart by payload
# shape, so the distinction is kept explicit here.


@dataclass
class Found:
    rows: List[Dict[str, Any]]

    def payload(self) -> List[Dict[str, Any]]:
        return self.rows


@dataclass
class NotFound:
    message: str

    def payload(self) -> MessageResponse:
        return MessageResponse(message=self.message)


SearchResult = Union[Found, NotFound]

# Message shared by the class/section, agent, student and food searches.
NO_MATCH_MESSAGE = "Could not find the looking row"


class QueryService:
    """
    Runs single statements against a ConnectionProvider.

    Responsibilities:
        - execute(): the guarded acquire/query/release-or-close sequence
        - fetch_rows(): SELECT returning the raw row set
        - search(): SELECT returning Found or NotFound(message)
        - write(): INSERT/UPDATE/DELETE returning the affected-row descriptor

    Stateless; the provider is passed on every call.
    """

    @asynccontextmanager
    async def checkout(self, provider: ConnectionProvider) -> AsyncGenerator[PooledConnection, None]:
        """
        Scoped connection: released when the block exits normally, closed
        when it exits by any exception (cancellation included).

        Raises:
            ConnectionAcquireError: The pool could not supply a connection.
            QueryError: The connection could not be released (commit failed).
        """
        try:
            connection = await provider.acquire()
        except Exception as e:
            logger.error("Could not acquire database connection: %s", str(e), exc_info=True)
            raise ConnectionAcquireError(context={"error_type": type(e).__name__}) from e

        try:
            yield connection
        except BaseException:
            await connection.close()
            raise

        try:
            await connection.release()
        except Exception as e:
            logger.error("Could not release database connection: %s", str(e), exc_info=True)
            await connection.close()
            raise QueryError(context={"error_type": type(e).__name__}) from e

    async def execute(
        self,
        provider: ConnectionProvider,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> QueryResult:
        """
        Acquire a connection, run one statement, then release or close it.

        Raises:
            ConnectionAcquireError: The pool could not supply a connection.
            QueryError: The statement failed, timed out, or could not be
                committed. The connection has been closed, not released.
        """
        async with self.checkout(provider) as connection:
            try:
                return await connection.query(sql, params)
            except Exception as e:
                logger.error(
                    "Query failed: %s | SQL: %s",
                    str(e) or type(e).__name__,
                    sql,
                    exc_info=True,
                )
                raise QueryError(
                    context={"sql": sql, "error_type": type(e).__name__},
                ) from e

    async def fetch_rows(
        self,
        provider: ConnectionProvider,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        result = await self.execute(provider, sql, params)
        return result.rows

    async def search(
        self,
        provider: ConnectionProvider,
        sql: str,
        params: Mapping[str, Any],
        not_found_message: str,
    ) -> SearchResult:
        """SELECT whose empty row set is reported as NotFound(not_found_message)."""
        rows = await self.fetch_rows(provider, sql, params)
        if rows:
            return Found(rows=rows)
        logger.info("No rows matched: %s", not_found_message)
        return NotFound(message=not_found_message)

    async def write(
        self,
        provider: ConnectionProvider,
        sql: str,
        params: Mapping[str, Any],
    ) -> WriteResult:
        result = await self.execute(provider, sql, params)
        return WriteResult(affected_rows=result.affected_rows)


# ── Singleton Instance ────────────────────────────────────────────────────
query_service = QueryService()
