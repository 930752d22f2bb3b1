"""
Corpdata Gateway - API Documentation Metadata
==============================================

What:  Static description of every route: tags, summaries, response
       descriptions, the form-encoded request body alternative and the document's info block.
How:   Route decorators splat ROUTE_DOCS[<route>] into their keyword
       arguments; FastAPI turns the result into the OpenAPI document.
Who:   Read by gateway/routes/* and by create_app() in gateway/main.py.

Mount points:
    /api-docs               Swagger UI (interactive viewer)
    /api-docs/openapi.json  Raw OpenAPI document
    /api-docs/redoc         ReDoc

None of this affects request handling.
"""

from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel

from gateway import __version__
from gateway.schemas.api import (
    MessageResponse,
    ValidationErrorResponse,
    WriteResult,
)
from gateway.schemas.entities import Agent, Company, Customer, Order
from gateway.validation import BODY_MODEL_NAMES

API_TITLE = "Corpdata API"
API_DESCRIPTION = (
    "CRUD and read-query endpoints over the company, customer, order, agent, "
    "student and food tables. Every endpoint validates its input, runs one "
    "parameterized SQL statement, and returns the result as JSON."
)
API_VERSION = __version__

DOCS_URL = "/api-docs"
OPENAPI_URL = "/api-docs/openapi.json"
REDOC_URL = "/api-docs/redoc"

SERVERS = [{"url": "/", "description": "This server"}]

OPENAPI_TAGS = [
    {"name": "Company", "description": "Register, list, update and delete companies"},
    {"name": "Customer", "description": "Customer lookups"},
    {"name": "Order", "description": "Order listing and searches"},
    {"name": "Student", "description": "Students and student reports"},
    {"name": "Agent", "description": "Agent searches"},
    {"name": "Food", "description": "Food products by company"},
    {"name": "Health", "description": "Service health"},
]


# ── Shared Response Descriptions ──────────────────────────────────────────
VALIDATION_FAILED = {
    "description": "Validation failed",
    "model": ValidationErrorResponse,
}


def _server_error(description: str) -> Dict[str, Any]:
    return {
        "description": description,
        "content": {"text/plain": {"schema": {"type": "string"}, "example": "Error"}},
    }


def _form_body(route: str) -> Dict[str, Any]:
    """
    openapi_extra fragment adding the form-encoded variant of a route's body.

    The JSON variant comes from the generated body model itself; both share
    its component schema.
    """
    schema_ref = f"#/components/schemas/{BODY_MODEL_NAMES[route]}"
    return {
        "requestBody": {
            "content": {"application/x-www-form-urlencoded": {"schema": {"$ref": schema_ref}}},
        }
    }


def _rows_or_message(description: str, item: Optional[Type[BaseModel]] = None) -> Dict[str, Any]:
    items: Dict[str, Any] = item.model_json_schema() if item else {"type": "object"}
    return {
        "description": description,
        "content": {
            "application/json": {
                "schema": {
                    "anyOf": [
                        {"type": "array", "items": items},
                        MessageResponse.model_json_schema(),
                    ]
                }
            }
        },
    }


def _route(
    summary: str,
    tags: List[str],
    ok: Dict[str, Any],
    failure: str,
    validates: bool = True,
    body: Optional[str] = None,
) -> Dict[str, Any]:
    responses: Dict[int, Dict[str, Any]] = {200: ok}
    if validates:
        responses[422] = VALIDATION_FAILED
    responses[500] = _server_error(failure)

    docs: Dict[str, Any] = {"summary": summary, "tags": tags, "responses": responses}
    if body is not None:
        docs["openapi_extra"] = _form_body(body)
    return docs


# ══════════════════════════════════════════════════════════════════════════
# Per-Route Metadata
# ══════════════════════════════════════════════════════════════════════════

ROUTE_DOCS: Dict[str, Dict[str, Any]] = {
    "register_company": _route(
        "Registers a company",
        ["Company"],
        {"description": "Successfully registered", "model": WriteResult},
        "Could not register",
        body="register_company",
    ),
    "list_companies": _route(
        "Returns the list of all the companies",
        ["Company"],
        {"description": "The list of the companies", "model": List[Company]},
        "Could not get companies",
        validates=False,
    ),
    "update_company": _route(
        "Updates company data",
        ["Company"],
        {"description": "Successfully updated", "model": WriteResult},
        "Could not update company",
        body="update_company",
    ),
    "rename_company": _route(
        "Updates company name",
        ["Company"],
        {"description": "Successfully updated", "model": WriteResult},
        "Could not update name",
        body="rename_company",
    ),
    "delete_company": _route(
        "Deletes a company with specified id",
        ["Company"],
        {"description": "Successfully deleted", "model": WriteResult},
        "Could not delete company",
    ),
    "list_customers": _route(
        "Gets all list of customers",
        ["Customer"],
        {"description": "List of all customers", "model": List[Customer]},
        "Could not get customers",
        validates=False,
    ),
    "get_customer": _route(
        "Gets a customer with specified id",
        ["Customer"],
        {"description": "Customers with the specified code (empty when none)", "model": List[Customer]},
        "Could not get customer",
    ),
    "list_orders": _route(
        "Gets all list of orders",
        ["Order"],
        {"description": "List of all orders", "model": List[Order]},
        "Could not get orders",
        validates=False,
    ),
    "search_orders": _route(
        "Gets all the orders starting with specified string",
        ["Order"],
        _rows_or_message("Orders whose description starts with the search string", Order),
        "Could not get orders",
    ),
    "orders_above_amount": _route(
        "Gets all the orders with total amount greater than the specified amount",
        ["Order"],
        _rows_or_message("Orders with amount greater than the specified total", Order),
        "Could not get orders",
    ),
    "students_report": _route(
        "Gets all the student reports with specified class and section",
        ["Student"],
        _rows_or_message("Student reports of the class and section"),
        "Could not get report",
    ),
    "search_agents": _route(
        "Gets all the agents in the specified area and commission",
        ["Agent"],
        _rows_or_message("Agents in the area with commission at most the given value", Agent),
        "Could not get agents",
    ),
    "get_student": _route(
        "Gets a student details of a class and section",
        ["Student"],
        _rows_or_message("Student details"),
        "Could not get student",
    ),
    "company_foods": _route(
        "Gets all food products of a company",
        ["Company", "Food"],
        _rows_or_message("Food products of the company"),
        "Could not get company foods",
    ),
}
