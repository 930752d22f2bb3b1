"""
Corpdata Gateway - Company Foods Route Handler
===============================================

What:  Food products belonging to one company.

The company id is bound with settings.company_foods_id_suffix appended
(empty by default). Legacy `foods` imports kept a trailing carriage return
on COMPANY_ID; deployments serving that data set the suffix to "\\r".
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Path

from gateway.config import settings
from gateway.database import ConnectionProvider, get_connection_provider
from gateway.docs import ROUTE_DOCS
from gateway.services.query_service import NO_MATCH_MESSAGE, query_service
from gateway.validation import validated

router = APIRouter()

SELECT_COMPANY_FOODS = "SELECT * FROM foods WHERE COMPANY_ID = :company_id"


@router.get("/company-foods/{id}", response_model=None, **ROUTE_DOCS["company_foods"])
async def company_foods(
    id: str = Path(description="id of the company", examples=["16"]),
    fields: Dict[str, Any] = Depends(validated("company_foods")),
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> Any:
    """Food products whose COMPANY_ID matches the path id (plus the configured suffix)."""
    result = await query_service.search(
        provider,
        SELECT_COMPANY_FOODS,
        {"company_id": fields["id"] + settings.company_foods_id_suffix},
        not_found_message=NO_MATCH_MESSAGE,
    )
    return result.payload()
