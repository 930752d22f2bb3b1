"""
Corpdata Gateway - Connection Provider
=======================================

What:  Pooled database connections behind a small async interface.
How:   ConnectionProvider.acquire() hands out a PooledConnection that can run
       one parameterized statement and is then either released (returned to
       the pool) or closed (discarded).
Who:   Attached to the FastAPI app by create_app(); resolved per request via
       the get_connection_provider dependency and driven by the query service.
When:  The engine is created with the app; connections are drawn per request.

Contract:
    acquire()                -> PooledConnection   (may wait on an exhausted pool)
    PooledConnection.query() -> QueryResult        (exactly one statement)
    PooledConnection.release()                     (commit, back to the pool)
    PooledConnection.close()                       (invalidate, never reused)

The production implementation wraps an async SQLAlchemy engine. Tests swap in
a fake provider through create_app(connection_provider=...).

Connection Pooling Strategy:
    pool_size / max_overflow: upper bound on concurrent checked-out connections
    pool_timeout:             how long acquire() waits before failing
    pool_pre_ping:            validates connections before handing them out
    pool_recycle=3600:        recycles connections every hour
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from fastapi import Request
from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from gateway.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """
    Outcome of a single statement.

    rows:           Row set as a list of column → value dicts, in database order.
                    Empty for INSERT/UPDATE/DELETE.
    affected_rows:  Row count reported by the driver for writes; len(rows) for reads.
    """

    rows: List[Dict[str, Any]] = field(default_factory=list)
    affected_rows: int = 0


# ══════════════════════════════════════════════════════════════════════════
# Interfaces
# ══════════════════════════════════════════════════════════════════════════


class PooledConnection(ABC):
    """A connection checked out of the pool for the duration of one request."""

    @abstractmethod
    async def query(
        self, sql: str, params: Optional[Mapping[str, Any]] = None
    ) -> QueryResult:
        """
        Execute one statement with bound parameters.

        Args:
            sql:    Statement text using named placeholders (:name).
            params: Values for the placeholders. Never interpolated into `sql`.

        Raises:
            Any driver exception, or asyncio.TimeoutError when the statement
            exceeds the provider's query timeout.
        """
        ...

    @abstractmethod
    async def release(self) -> None:
        """Commit and return the connection to the pool for reuse."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Discard the connection so it is never handed out again."""
        ...


class ConnectionProvider(ABC):
    """Source of pooled connections."""

    @abstractmethod
    async def acquire(self) -> PooledConnection:
        """
        Check a connection out of the pool.

        Suspends while the pool is exhausted. Raises the driver/pool exception
        when no connection can be supplied.
        """
        ...

    async def dispose(self) -> None:
        """Close every pooled connection. Called on application shutdown."""


# ══════════════════════════════════════════════════════════════════════════
# SQLAlchemy Implementation
# ══════════════════════════════════════════════════════════════════════════


class SQLAlchemyConnection(PooledConnection):
    """PooledConnection backed by a SQLAlchemy AsyncConnection."""

    def __init__(self, connection: AsyncConnection, query_timeout: Optional[float] = None):
        self._connection = connection
        self._query_timeout = query_timeout

    async def query(
        self, sql: str, params: Optional[Mapping[str, Any]] = None
    ) -> QueryResult:
        # Each bind carries the SQL type of its Python value (int → INTEGER,
        # Decimal → NUMERIC, str → VARCHAR) so the driver encodes it as the
        # column expects.
        statement = text(sql)
        if params:
            statement = statement.bindparams(
                *(bindparam(key, value) for key, value in params.items())
            )

        result = await asyncio.wait_for(
            self._connection.execute(statement),
            timeout=self._query_timeout,
        )

        if result.returns_rows:
            rows = [dict(row) for row in result.mappings().all()]
            return QueryResult(rows=rows, affected_rows=len(rows))

        return QueryResult(rows=[], affected_rows=result.rowcount)

    async def release(self) -> None:
        # SQLAlchemy autobegins a transaction; commit so writes persist,
        # then close() hands the DBAPI connection back to the pool.
        await self._connection.commit()
        await self._connection.close()

    async def close(self) -> None:
        # invalidate() drops the DBAPI connection instead of pooling it.
        await self._connection.invalidate()
        await self._connection.close()


class SQLAlchemyConnectionProvider(ConnectionProvider):
    """
    ConnectionProvider over an async SQLAlchemy engine.

    The engine owns the pool. Construct with an existing engine (tests,
    scripts) or from application settings via from_settings().
    """

    def __init__(self, engine: AsyncEngine, query_timeout: Optional[float] = None):
        self.engine = engine
        self.query_timeout = query_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SQLAlchemyConnectionProvider":
        engine = create_async_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
            # Echo SQL in DEBUG mode for development visibility
            echo=settings.log_level == "DEBUG",
        )
        return cls(engine, query_timeout=settings.db_query_timeout)

    async def acquire(self) -> PooledConnection:
        connection = await self.engine.connect()
        return SQLAlchemyConnection(connection, query_timeout=self.query_timeout)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connection pool disposed")


# ── Dependency ────────────────────────────────────────────────────────────
def get_connection_provider(request: Request) -> ConnectionProvider:
    """
    FastAPI dependency returning the provider attached to the running app.

    Example usage in a route:
        @router.get("/companies")
        async def list_companies(provider: ConnectionProvider = Depends(get_connection_provider)):
            return await fetch_rows(provider, "SELECT * FROM company")
    """
    return request.app.state.connection_provider
