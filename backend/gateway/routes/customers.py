"""
Corpdata Gateway - Customer Route Handlers
===========================================

What:  Read-only access to the `customer` table.

GET /customer/{id} answers an unknown code with an empty array, not with a
not-found message; only the filtered searches elsewhere use messages.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Path

from gateway.database import ConnectionProvider, get_connection_provider
from gateway.docs import ROUTE_DOCS
from gateway.services.query_service import query_service
from gateway.validation import validated

router = APIRouter()

SELECT_CUSTOMERS = "SELECT * FROM customer"
SELECT_CUSTOMER_BY_CODE = "SELECT * FROM customer WHERE CUST_CODE = :cust_code"


@router.get("/customers", response_model=None, **ROUTE_DOCS["list_customers"])
async def list_customers(
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> Any:
    """Every customer row, in table order."""
    return await query_service.fetch_rows(provider, SELECT_CUSTOMERS)


@router.get("/customer/{id}", response_model=None, **ROUTE_DOCS["get_customer"])
async def get_customer(
    id: str = Path(description="Customer id", examples=["C00001"]),
    fields: Dict[str, Any] = Depends(validated("get_customer")),
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> Any:
    """
    Customers whose CUST_CODE equals the path id.

    Returns: A (normally one-element) array; [] for an unknown code.
    """
    return await query_service.fetch_rows(
        provider, SELECT_CUSTOMER_BY_CODE, {"cust_code": fields["id"]}
    )
