"""
Corpdata Gateway - Order Route Handlers
========================================

What:  Order listing, description prefix search and amount threshold search.
Who:   Documented under the "Order" tag.

Prefix search:
    The search string gets a trailing "%" and is bound as a LIKE pattern.
    "%" and "_" typed by the caller keep their pattern meaning; they are not
    escaped. Case sensitivity is whatever the database collation says.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from gateway.database import ConnectionProvider, get_connection_provider
from gateway.docs import ROUTE_DOCS
from gateway.services.query_service import query_service
from gateway.validation import validated

router = APIRouter()

SELECT_ORDERS = "SELECT * FROM orders"
SELECT_ORDERS_BY_DESCRIPTION = "SELECT * FROM orders WHERE ORD_DESCRIPTION LIKE :pattern"
SELECT_ORDERS_ABOVE_AMOUNT = "SELECT * FROM orders WHERE ORD_AMOUNT > :total"

NO_ORDERS_MESSAGE = "There are no orders"


@router.get("/orders", response_model=None, **ROUTE_DOCS["list_orders"])
async def list_orders(
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> Any:
    """Every order row, in table order."""
    return await query_service.fetch_rows(provider, SELECT_ORDERS)


@router.get("/order", response_model=None, **ROUTE_DOCS["search_orders"])
async def search_orders(
    searchString: str = Query(description="String used to search orders", examples=["S"]),
    fields: Dict[str, Any] = Depends(validated("search_orders")),
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> Any:
    """
    Orders whose ORD_DESCRIPTION starts with searchString.

    Example:
        GET /order?searchString=S   → [{"ORD_NUM": 200100, ..., "ORD_DESCRIPTION": "SOD"}, ...]
        GET /order?searchString=ZZZ → {"message": "Could not find order description starting with ZZZ"}
    """
    prefix = fields["searchString"]
    result = await query_service.search(
        provider,
        SELECT_ORDERS_BY_DESCRIPTION,
        {"pattern": prefix + "%"},
        not_found_message=f"Could not find order description starting with {prefix}",
    )
    return result.payload()


@router.get("/order-amount", response_model=None, **ROUTE_DOCS["orders_above_amount"])
async def orders_above_amount(
    total: str = Query(description="total amount", examples=["3000"]),
    fields: Dict[str, Any] = Depends(validated("orders_above_amount")),
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> Any:
    """
    Orders with ORD_AMOUNT strictly greater than total.

    Returns: The matching rows, or {"message": "There are no orders"}.
    """
    result = await query_service.search(
        provider,
        SELECT_ORDERS_ABOVE_AMOUNT,
        {"total": fields["total"]},
        not_found_message=NO_ORDERS_MESSAGE,
    )
    return result.payload()
