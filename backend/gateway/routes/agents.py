"""
Corpdata Gateway - Agent Route Handlers
========================================

What:  Agents in a working area whose commission is at most a ceiling.

GET /agents?area=Bangalore&commission=0.15 returns every Bangalore agent
with COMMISSION <= 0.15.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from gateway.database import ConnectionProvider, get_connection_provider
from gateway.docs import ROUTE_DOCS
from gateway.services.query_service import NO_MATCH_MESSAGE, query_service
from gateway.validation import validated

router = APIRouter()

SELECT_AGENTS = "SELECT * FROM agents WHERE WORKING_AREA = :area AND COMMISSION <= :commission"


@router.get("/agents", response_model=None, **ROUTE_DOCS["search_agents"])
async def search_agents(
    area: str = Query(description="areas to include", examples=["Bangalore"]),
    commission: str = Query(description="maximum commission of the agent", examples=["0.15"]),
    fields: Dict[str, Any] = Depends(validated("search_agents")),
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> Any:
    """
    Agents of one working area with COMMISSION at most `commission`.

    Returns: The matching rows, or {"message": "Could not find the looking row"}.
    """
    result = await query_service.search(
        provider,
        SELECT_AGENTS,
        {"area": fields["area"], "commission": fields["commission"]},
        not_found_message=NO_MATCH_MESSAGE,
    )
    return result.payload()
