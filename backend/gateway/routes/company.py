"""
Corpdata Gateway - Company Route Handlers
==========================================

What:  The four company writes plus the full company listing.
How:   Validate → one parameterized statement → result descriptor or rows.
Who:   Called by any API client; documented under the "Company" tag.

Every write targets exactly one row by the caller-supplied COMPANY_ID.
A write that matches no row still returns 200 with affectedRows = 0.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Path

from gateway.database import ConnectionProvider, get_connection_provider
from gateway.docs import ROUTE_DOCS
from gateway.schemas.api import WriteResult
from gateway.services.query_service import query_service
from gateway.validation import validated

logger = logging.getLogger(__name__)

router = APIRouter()

# ── SQL Templates ─────────────────────────────────────────────────────────
INSERT_COMPANY = (
    "INSERT INTO company (COMPANY_ID, COMPANY_NAME, COMPANY_CITY) "
    "VALUES (:company_id, :company_name, :company_city)"
)
SELECT_COMPANIES = "SELECT * FROM company"
UPDATE_COMPANY = (
    "UPDATE company SET COMPANY_NAME = :company_name, COMPANY_CITY = :company_city "
    "WHERE COMPANY_ID = :company_id"
)
RENAME_COMPANY = "UPDATE company SET COMPANY_NAME = :company_name WHERE COMPANY_ID = :company_id"
DELETE_COMPANY = "DELETE FROM company WHERE COMPANY_ID = :company_id"


@router.post("/company", response_model=WriteResult, **ROUTE_DOCS["register_company"])
async def register_company(
    fields: Dict[str, Any] = Depends(validated("register_company")),
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> WriteResult:
    """
    Register a company.

    What:    INSERT one company row from the JSON or form body.
    Returns: {"affectedRows": 1}. A duplicate COMPANY_ID is rejected by the
             database and answered with 500 "Error".
    """
    result = await query_service.write(
        provider,
        INSERT_COMPANY,
        {
            "company_id": fields["companyId"],
            "company_name": fields["companyName"],
            "company_city": fields["companyCity"],
        },
    )
    logger.info("Registered company %s", fields["companyId"])
    return result


@router.get("/companies", response_model=None, **ROUTE_DOCS["list_companies"])
async def list_companies(
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> Any:
    """Every company row, in table order; [] when the table is empty."""
    return await query_service.fetch_rows(provider, SELECT_COMPANIES)


@router.put("/company/{id}", response_model=WriteResult, **ROUTE_DOCS["update_company"])
async def update_company(
    id: str = Path(description="id that needs to be updated", examples=["45"]),
    fields: Dict[str, Any] = Depends(validated("update_company")),
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> WriteResult:
    """
    Replace name and city of the company addressed by the path id.

    Returns: {"affectedRows": n}, 0 when no company has that id.
    """
    return await query_service.write(
        provider,
        UPDATE_COMPANY,
        {
            "company_name": fields["companyName"],
            "company_city": fields["companyCity"],
            "company_id": fields["id"],
        },
    )


@router.patch("/company", response_model=WriteResult, **ROUTE_DOCS["rename_company"])
async def rename_company(
    fields: Dict[str, Any] = Depends(validated("rename_company")),
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> WriteResult:
    """Change only COMPANY_NAME; COMPANY_CITY is left as stored."""
    return await query_service.write(
        provider,
        RENAME_COMPANY,
        {"company_name": fields["companyName"], "company_id": fields["companyId"]},
    )


@router.delete("/company/{id}", response_model=WriteResult, **ROUTE_DOCS["delete_company"])
async def delete_company(
    id: str = Path(description="id that needs to be deleted", examples=["45"]),
    fields: Dict[str, Any] = Depends(validated("delete_company")),
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> WriteResult:
    """
    Delete the company addressed by the path id.

    Returns: {"affectedRows": n}, 0 when no company has that id.
    """
    result = await query_service.write(provider, DELETE_COMPANY, {"company_id": fields["id"]})
    logger.info("Deleted company %s (%d rows)", fields["id"], result.affected_rows)
    return result
