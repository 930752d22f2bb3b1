"""
Corpdata Gateway - Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── fake_connection: Recording PooledConnection (no real DB needed)
    ├── fake_provider: ConnectionProvider handing out fake_connection
    ├── test_app: FastAPI app wired to fake_provider
    ├── test_client: HTTPX AsyncClient for API endpoint testing
    ├── sqlite_provider: Real SQLAlchemyConnectionProvider on a temp SQLite file
    ├── sqlite_client: HTTPX AsyncClient wired to sqlite_provider
    └── slow_provider: SQLite provider with a tiny query timeout and sleep_ms()
"""

import os
import time

# Override settings for testing BEFORE any gateway imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["COMPANY_FOODS_ID_SUFFIX"] = ""

from typing import Any, Dict, List, Mapping, Optional  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event, text  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402

from gateway.database import (  # noqa: E402
    ConnectionProvider,
    PooledConnection,
    QueryResult,
    SQLAlchemyConnectionProvider,
)
from gateway.main import create_app  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Fakes
# ══════════════════════════════════════════════════════════════════════════


class FakeConnection(PooledConnection):
    """
    Records every statement and whether it ended in release() or close().

    Usage:
        fake_connection.result = QueryResult(rows=[{"COMPANY_ID": "1"}])
        fake_connection.error = RuntimeError("boom")   # make query() fail
    """

    def __init__(self):
        self.result = QueryResult()
        self.error: Optional[BaseException] = None
        self.statements: List[tuple] = []
        self.release = AsyncMock()
        self.close = AsyncMock()

    async def query(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> QueryResult:
        self.statements.append((sql, dict(params or {})))
        if self.error is not None:
            raise self.error
        return self.result

    async def release(self) -> None:  # replaced by AsyncMock in __init__
        ...

    async def close(self) -> None:  # replaced by AsyncMock in __init__
        ...

    @property
    def last_sql(self) -> str:
        return self.statements[-1][0]

    @property
    def last_params(self) -> Dict[str, Any]:
        return self.statements[-1][1]


class FakeProvider(ConnectionProvider):
    """Hands out one FakeConnection; `acquire` is an AsyncMock for call assertions."""

    def __init__(self, connection: FakeConnection):
        self.connection = connection
        self.acquire = AsyncMock(return_value=connection)
        self.dispose = AsyncMock()

    async def acquire(self) -> PooledConnection:  # replaced by AsyncMock in __init__
        ...


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def fake_connection():
    return FakeConnection()


@pytest.fixture
def fake_provider(fake_connection):
    return FakeProvider(fake_connection)


@pytest.fixture
def test_app(fake_provider):
    return create_app(connection_provider=fake_provider)


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient talking to an app backed by fake_provider.

    Usage:
        async def test_companies(test_client, fake_connection):
            response = await test_client.get("/companies")
            assert fake_connection.last_sql == "SELECT * FROM company"
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ── SQLite-backed fixtures ────────────────────────────────────────────────

SCHEMA = [
    "CREATE TABLE company (COMPANY_ID VARCHAR(6) PRIMARY KEY, COMPANY_NAME VARCHAR(25), "
    "COMPANY_CITY VARCHAR(25))",
    "CREATE TABLE customer (CUST_CODE VARCHAR(6) PRIMARY KEY, CUST_NAME VARCHAR(40), "
    "CUST_CITY VARCHAR(35), WORKING_AREA VARCHAR(35), CUST_COUNTRY VARCHAR(20), GRADE INTEGER, "
    "OPENING_AMT DECIMAL(12,2), RECEIVE_AMT DECIMAL(12,2), PAYMENT_AMT DECIMAL(12,2), "
    "OUTSTANDING_AMT DECIMAL(12,2), PHONE_NO VARCHAR(17), AGENT_CODE VARCHAR(6))",
    "CREATE TABLE orders (ORD_NUM INTEGER PRIMARY KEY, ORD_AMOUNT DECIMAL(12,2), "
    "ADVANCE_AMOUNT DECIMAL(12,2), ORD_DATE DATE, CUST_CODE VARCHAR(6), AGENT_CODE VARCHAR(6), "
    "ORD_DESCRIPTION VARCHAR(60))",
    "CREATE TABLE agents (AGENT_CODE VARCHAR(6) PRIMARY KEY, AGENT_NAME VARCHAR(40), "
    "WORKING_AREA VARCHAR(35), COMMISSION DECIMAL(10,2), PHONE_NO VARCHAR(15), COUNTRY VARCHAR(25))",
    "CREATE TABLE student (ROLLID INTEGER, NAME VARCHAR(30), CLASS VARCHAR(5), SECTION VARCHAR(1))",
    "CREATE TABLE studentreport (CLASS VARCHAR(5), SECTION VARCHAR(1), GRADE VARCHAR(2))",
    "CREATE TABLE foods (ITEM_ID VARCHAR(6), ITEM_NAME VARCHAR(25), ITEM_UNIT VARCHAR(5), "
    "COMPANY_ID VARCHAR(6))",
]

SEED = [
    "INSERT INTO company VALUES ('18', 'Order All', 'Boston')",
    "INSERT INTO company VALUES ('15', 'Jack Hill Ltd', 'London')",
    "INSERT INTO company VALUES ('16', 'Akas Foods', 'Delhi')",
    "INSERT INTO customer (CUST_CODE, CUST_NAME, CUST_CITY, AGENT_CODE) "
    "VALUES ('C00013', 'Holmes', 'London', 'A003')",
    "INSERT INTO customer (CUST_CODE, CUST_NAME, CUST_CITY, AGENT_CODE) "
    "VALUES ('C00001', 'Micheal', 'New York', 'A008')",
    "INSERT INTO orders VALUES (200100, 1000, 600, '2008-08-01', 'C00013', 'A003', 'SOD')",
    "INSERT INTO orders VALUES (200110, 3000, 500, '2008-04-15', 'C00019', 'A010', 'SOD')",
    "INSERT INTO orders VALUES (200107, 4500, 900, '2008-08-30', 'C00007', 'A010', 'POD')",
    "INSERT INTO agents VALUES ('A007', 'Ramasundar', 'Bangalore', 0.15, '077-25814763', '')",
    "INSERT INTO agents VALUES ('A011', 'Ravi Kumar', 'Bangalore', 0.15, '077-45625874', '')",
    "INSERT INTO agents VALUES ('A010', 'Santakumar', 'Chennai', 0.14, '007-22388644', '')",
    "INSERT INTO agents VALUES ('A012', 'Lucida', 'Bangalore', 0.12, '044-52981425', '')",
    "INSERT INTO agents VALUES ('A013', 'Anderson', 'Bangalore', 0.16, '045-21447739', '')",
    "INSERT INTO student VALUES (15, 'Ravi', 'V', 'A')",
    "INSERT INTO studentreport VALUES ('V', 'A', 'A+')",
    "INSERT INTO foods VALUES ('1', 'Chex Mix', 'Pcs', '16')",
    "INSERT INTO foods VALUES ('6', 'Cheez-It', 'Pcs', '15')",
]


@pytest_asyncio.fixture
async def sqlite_provider(tmp_path):
    """
    Real SQLAlchemyConnectionProvider over a seeded temporary SQLite file.

    Exercises commit-on-release and invalidate-on-close against an actual
    pool, which the fake provider cannot.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'corpdata.db'}")
    async with engine.begin() as conn:
        for statement in SCHEMA + SEED:
            await conn.execute(text(statement))

    provider = SQLAlchemyConnectionProvider(engine, query_timeout=5)
    yield provider
    await provider.dispose()


@pytest_asyncio.fixture
async def sqlite_client(sqlite_provider):
    app = create_app(connection_provider=sqlite_provider)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def _sleep_ms(ms):
    time.sleep(ms / 1000)
    return ms


@pytest_asyncio.fixture
async def slow_provider(tmp_path):
    """
    SQLite provider with a 50 ms query timeout and a `sleep_ms(n)` SQL function,
    so a statement can be made to outlive the timeout.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'slow.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def register_sleep(dbapi_connection, connection_record):
        dbapi_connection.create_function("sleep_ms", 1, _sleep_ms)

    provider = SQLAlchemyConnectionProvider(engine, query_timeout=0.05)
    yield provider
    await provider.dispose()
