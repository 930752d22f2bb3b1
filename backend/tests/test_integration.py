"""
Corpdata Gateway - Integration Tests
=====================================

What:  End-to-end requests against a real pooled engine.
How:   sqlite_client (conftest) runs the app on SQLAlchemyConnectionProvider
       over a seeded temporary SQLite file via aiosqlite.

What we test:
    ✅ Writes are committed on release and visible to the next request
    ✅ PATCH changes only the name
    ✅ LIKE prefix search, numeric threshold and commission ceiling
    ✅ A failed statement does not poison the pool
    ✅ Integer and decimal values bound with their own types; form bodies
    ✅ A statement outliving the query timeout fails and its connection is dropped
"""

from decimal import Decimal

import pytest
from sqlalchemy import event

from gateway.exceptions import QueryError
from gateway.services.query_service import query_service


class TestCompanyLifecycle:

    @pytest.mark.asyncio
    async def test_register_then_list(self, sqlite_client):
        response = await sqlite_client.post(
            "/company",
            json={"companyId": "45", "companyName": "Wendys", "companyCity": "Charlotte"},
        )
        assert response.json() == {"affectedRows": 1}

        companies = (await sqlite_client.get("/companies")).json()
        assert {"COMPANY_ID": "45", "COMPANY_NAME": "Wendys", "COMPANY_CITY": "Charlotte"} in companies
        assert len(companies) == 4

    @pytest.mark.asyncio
    async def test_duplicate_id_then_pool_still_serves(self, sqlite_client):
        response = await sqlite_client.post(
            "/company",
            json={"companyId": "18", "companyName": "Again", "companyCity": "Boston"},
        )
        assert response.status_code == 500
        assert response.text == "Error"

        response = await sqlite_client.get("/companies")
        assert response.status_code == 200
        assert len(response.json()) == 3

    @pytest.mark.asyncio
    async def test_rename_keeps_city(self, sqlite_client):
        response = await sqlite_client.patch(
            "/company", json={"companyId": "15", "companyName": "Jack Hill Group"}
        )
        assert response.json() == {"affectedRows": 1}

        companies = (await sqlite_client.get("/companies")).json()
        renamed = next(c for c in companies if c["COMPANY_ID"] == "15")
        assert renamed == {"COMPANY_ID": "15", "COMPANY_NAME": "Jack Hill Group", "COMPANY_CITY": "London"}

    @pytest.mark.asyncio
    async def test_update_and_delete(self, sqlite_client):
        response = await sqlite_client.put(
            "/company/16", json={"companyName": "Akas", "companyCity": "Mumbai"}
        )
        assert response.json() == {"affectedRows": 1}

        response = await sqlite_client.delete("/company/16")
        assert response.json() == {"affectedRows": 1}

        response = await sqlite_client.delete("/company/16")
        assert response.json() == {"affectedRows": 0}


class TestSearches:

    @pytest.mark.asyncio
    async def test_order_prefix(self, sqlite_client):
        rows = (await sqlite_client.get("/order", params={"searchString": "S"})).json()
        assert sorted(r["ORD_NUM"] for r in rows) == [200100, 200110]

    @pytest.mark.asyncio
    async def test_order_prefix_no_match(self, sqlite_client):
        response = await sqlite_client.get("/order", params={"searchString": "ZZZNOPE"})
        assert response.json() == {"message": "Could not find order description starting with ZZZNOPE"}

    @pytest.mark.asyncio
    async def test_order_amount_is_strict(self, sqlite_client):
        rows = (await sqlite_client.get("/order-amount", params={"total": "3000"})).json()
        assert [r["ORD_NUM"] for r in rows] == [200107]

    @pytest.mark.asyncio
    async def test_agents_at_or_below_commission(self, sqlite_client):
        rows = (
            await sqlite_client.get("/agents", params={"area": "Bangalore", "commission": "0.15"})
        ).json()
        assert sorted(r["AGENT_CODE"] for r in rows) == ["A007", "A011", "A012"]

    @pytest.mark.asyncio
    async def test_customer_by_code(self, sqlite_client):
        rows = (await sqlite_client.get("/customer/C00013")).json()
        assert [r["CUST_NAME"] for r in rows] == ["Holmes"]

    @pytest.mark.asyncio
    async def test_student(self, sqlite_client):
        rows = (await sqlite_client.get("/student/V", params={"id": "15", "section": "A"})).json()
        assert [r["NAME"] for r in rows] == ["Ravi"]

    @pytest.mark.asyncio
    async def test_students_report(self, sqlite_client):
        rows = (await sqlite_client.get("/students-report", params={"class": "V", "section": "A"})).json()
        assert rows == [{"CLASS": "V", "SECTION": "A", "GRADE": "A+"}]

    @pytest.mark.asyncio
    async def test_company_foods(self, sqlite_client):
        rows = (await sqlite_client.get("/company-foods/16")).json()
        assert [r["ITEM_NAME"] for r in rows] == ["Chex Mix"]

    @pytest.mark.asyncio
    async def test_health(self, sqlite_client):
        response = await sqlite_client.get("/health")
        assert response.json()["database"] == "connected"


class TestTypedBinding:
    """Values reach the driver as the column's type, not as text."""

    @pytest.fixture
    def bound_parameters(self, sqlite_provider):
        seen = []

        @event.listens_for(sqlite_provider.engine.sync_engine, "before_cursor_execute")
        def capture(conn, cursor, statement, parameters, context, executemany):
            seen.append(parameters)

        yield seen
        event.remove(sqlite_provider.engine.sync_engine, "before_cursor_execute", capture)

    @pytest.mark.asyncio
    async def test_integer_id(self, sqlite_provider, bound_parameters):
        connection = await sqlite_provider.acquire()
        result = await connection.query("SELECT NAME FROM student WHERE ROLLID = :id", {"id": 15})
        await connection.release()

        assert result.rows == [{"NAME": "Ravi"}]
        assert [type(p) for p in bound_parameters[-1]] == [int]

    @pytest.mark.asyncio
    async def test_decimal_commission(self, sqlite_provider, bound_parameters):
        connection = await sqlite_provider.acquire()
        result = await connection.query(
            "SELECT AGENT_CODE FROM agents WHERE COMMISSION <= :commission ORDER BY AGENT_CODE",
            {"commission": Decimal("0.14")},
        )
        await connection.release()

        assert result.rows == [{"AGENT_CODE": "A010"}, {"AGENT_CODE": "A012"}]
        assert not isinstance(bound_parameters[-1][0], str)

    @pytest.mark.asyncio
    async def test_student_route_binds_integer(self, sqlite_client, bound_parameters):
        response = await sqlite_client.get("/student/V", params={"id": "15", "section": "A"})

        assert response.json()[0]["ROLLID"] == 15
        assert 15 in bound_parameters[-1]

    @pytest.mark.asyncio
    async def test_form_encoded_register(self, sqlite_client):
        response = await sqlite_client.post(
            "/company",
            data={"companyId": "46", "companyName": "Tim Hortons", "companyCity": "Toronto"},
        )
        assert response.json() == {"affectedRows": 1}

        companies = (await sqlite_client.get("/companies")).json()
        assert {"COMPANY_ID": "46", "COMPANY_NAME": "Tim Hortons", "COMPANY_CITY": "Toronto"} in companies


class TestQueryTimeout:

    @pytest.mark.asyncio
    async def test_slow_statement_times_out_and_is_closed(self, slow_provider):
        with pytest.raises(QueryError) as exc_info:
            await query_service.execute(slow_provider, "SELECT sleep_ms(:ms) AS slept", {"ms": 500})

        assert exc_info.value.context["error_type"] == "TimeoutError"
        assert slow_provider.engine.pool.checkedout() == 0

    @pytest.mark.asyncio
    async def test_pool_serves_after_timeout(self, slow_provider):
        with pytest.raises(QueryError):
            await query_service.execute(slow_provider, "SELECT sleep_ms(:ms) AS slept", {"ms": 500})

        result = await query_service.execute(slow_provider, "SELECT sleep_ms(:ms) AS slept", {"ms": 1})
        assert result.rows == [{"slept": 1}]
