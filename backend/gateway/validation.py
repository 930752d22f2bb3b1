"""
Corpdata Gateway - Declarative Request Validation
==================================================

What:  Per-route field rules held as data, and everything derived from them:
       the path/query check, the generated request-body models, and the
       typed values handed to the SQL templates.
How:   RULES maps a route name to an ordered list of FieldRule.
       `validated(route)` builds the FastAPI dependency for that route:
         - body rules become a pydantic model (BODY_MODELS) that FastAPI
           parses and validates; failures surface as RequestValidationError
         - path and query rules are checked by evaluate_rules(); failures
           raise ValidationError
       Both end as HTTP 422 {"errors": [...]} before any connection is taken.
Who:   Every route that takes input declares Depends(validated("<route>")).

Semantics:
    - A missing field counts as the empty string.
    - Non-string body values are checked in their string form (45 → "45").
    - All rules of one location run; failures are reported in declaration order.
    - INTEGER and NUMBER fields are converted to int / Decimal after the
      length check, so the driver receives the type the column expects.
    - Nothing here touches the database.
"""

import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Awaitable, Callable, Dict, List, Mapping, Optional, Type

from fastapi import Body, Request
from fastapi.exceptions import RequestValidationError
from pydantic import AfterValidator, BaseModel, BeforeValidator, Field, create_model, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError
from starlette.datastructures import QueryParams

from gateway.exceptions import ValidationError

PATH = "path"
QUERY = "query"
BODY = "body"

TEXT = "text"
INTEGER = "integer"
NUMBER = "number"


@dataclass(frozen=True)
class FieldRule:
    """Constraint on one request field, plus the type it is bound as."""

    field: str
    location: str
    min_length: int = 1
    message: Optional[str] = None
    kind: str = TEXT
    description: Optional[str] = None
    example: Optional[str] = None

    @property
    def error_message(self) -> str:
        return self.message or f"{self.field} must not be empty"

    def convert(self, value: str) -> Any:
        """
        Turn the checked text into the value bound to SQL.

        Raises:
            ValueError: the text is not a valid INTEGER / NUMBER.
        """
        if self.kind == INTEGER:
            try:
                return int(value)
            except ValueError:
                raise ValueError(f"{self.field} must be an integer") from None
        if self.kind == NUMBER:
            try:
                number = Decimal(value)
            except InvalidOperation:
                raise ValueError(f"{self.field} must be a number") from None
            if not number.is_finite():
                raise ValueError(f"{self.field} must be a number")
            return number
        return value


def required(
    field: str,
    location: str,
    kind: str = TEXT,
    description: Optional[str] = None,
    example: Optional[str] = None,
) -> FieldRule:
    """Non-empty rule with the default "<field> must not be empty" message."""
    return FieldRule(
        field=field,
        location=location,
        min_length=1,
        kind=kind,
        description=description,
        example=example,
    )


# ══════════════════════════════════════════════════════════════════════════
# Rule Table
# ══════════════════════════════════════════════════════════════════════════

RULES: Dict[str, List[FieldRule]] = {
    "register_company": [
        required("companyId", BODY, description="Company ID", example="45"),
        required("companyName", BODY, description="The company name", example="Wendys"),
        required("companyCity", BODY, description="The company city", example="Charlotte"),
    ],
    "update_company": [
        required("id", PATH),
        required("companyName", BODY, description="New company name", example="Boja"),
        required("companyCity", BODY, description="New company city", example="Harrisburg"),
    ],
    "rename_company": [
        required("companyId", BODY, description="Company ID", example="45"),
        required("companyName", BODY, description="New company name", example="Starbucks"),
    ],
    "delete_company": [
        required("id", PATH),
    ],
    "get_customer": [
        required("id", PATH),
    ],
    "search_orders": [
        required("searchString", QUERY),
    ],
    "orders_above_amount": [
        required("total", QUERY, kind=NUMBER),
    ],
    "students_report": [
        required("class", QUERY),
        required("section", QUERY),
    ],
    "search_agents": [
        required("area", QUERY),
        required("commission", QUERY, kind=NUMBER),
    ],
    "get_student": [
        required("id", QUERY, kind=INTEGER),
        required("class", PATH),
        required("section", QUERY),
    ],
    "company_foods": [
        required("id", PATH),
    ],
}

# OpenAPI component names of the generated request bodies.
BODY_MODEL_NAMES: Dict[str, str] = {
    "register_company": "CompanyCreate",
    "update_company": "CompanyUpdate",
    "rename_company": "CompanyRename",
}


# ══════════════════════════════════════════════════════════════════════════
# Evaluation
# ══════════════════════════════════════════════════════════════════════════


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value)


def _check(rule: FieldRule, value: Any) -> Optional[str]:
    """Error message for `value` under `rule`, or None when it passes."""
    text = _as_text(value)
    if len(text) < rule.min_length:
        return rule.error_message
    try:
        rule.convert(text)
    except ValueError as e:
        return str(e)
    return None


def evaluate_rules(
    rules: List[FieldRule],
    path: Optional[Mapping[str, Any]] = None,
    query: Optional[Mapping[str, Any]] = None,
    body: Optional[Mapping[str, Any]] = None,
) -> List[Dict[str, Any]]:
    """
    Run every rule and return the failures, in rule order.

    Args:
        rules: Rules declared for the route.
        path/query/body: Raw values by location. Missing mappings are empty.

    Returns:
        A list of {"field", "message", "location", "value"} dicts; empty
        when every rule passed.
    """
    sources = {
        PATH: path or {},
        QUERY: query or {},
        BODY: body or {},
    }

    results = []
    for rule in rules:
        value = sources[rule.location].get(rule.field)
        results.append((rule, value, _check(rule, value)))

    return [
        {
            "field": rule.field,
            "message": message,
            "location": rule.location,
            "value": value,
        }
        for rule, value, message in results
        if message is not None
    ]


# ══════════════════════════════════════════════════════════════════════════
# Generated Request Bodies
# ══════════════════════════════════════════════════════════════════════════


class RequestBody(BaseModel):
    """
    Base of every generated body model.

    FastAPI hands non-JSON bodies over as raw bytes; form-encoded payloads
    (application/x-www-form-urlencoded) are decoded here so both encodings
    go through the same field validators.
    """

    @model_validator(mode="before")
    @classmethod
    def decode_form(cls, data: Any) -> Any:
        if isinstance(data, (bytes, bytearray)):
            return dict(QueryParams(bytes(data).decode("utf-8")))
        return data


def _body_validator(rule: FieldRule) -> Callable[[str], Any]:
    def check(value: str) -> Any:
        if len(value) < rule.min_length:
            raise PydanticCustomError("empty_field", rule.error_message)
        try:
            return rule.convert(value)
        except ValueError as e:
            raise PydanticCustomError("invalid_field", str(e)) from e

    return check


def build_body_model(name: str, rules: List[FieldRule]) -> Type[RequestBody]:
    """
    Pydantic model for the BODY rules of one route.

    Every field defaults to None and validates its default, so an absent
    field fails with the rule's own message rather than "Field required".
    """
    fields: Dict[str, Any] = {}
    for rule in rules:
        if rule.location != BODY:
            continue
        fields[rule.field] = (
            Annotated[str, BeforeValidator(_as_text), AfterValidator(_body_validator(rule))],
            Field(
                default=None,
                validate_default=True,
                description=rule.description,
                examples=[rule.example] if rule.example else None,
            ),
        )
    return create_model(name, __base__=RequestBody, **fields)


BODY_MODELS: Dict[str, Type[RequestBody]] = {
    route: build_body_model(BODY_MODEL_NAMES[route], rules)
    for route, rules in RULES.items()
    if any(rule.location == BODY for rule in rules)
}


def _parse_body(model: Type[RequestBody], payload: Mapping[str, Any]) -> RequestBody:
    """Validate `payload` against `model`, reporting failures the way FastAPI does."""
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise RequestValidationError(
            [{**error, "loc": (BODY, *error["loc"])} for error in e.errors()]
        ) from e


# ══════════════════════════════════════════════════════════════════════════
# Dependency
# ══════════════════════════════════════════════════════════════════════════


def validated(route: str) -> Callable[..., Awaitable[Dict[str, Any]]]:
    """
    Build the FastAPI dependency that enforces RULES[route].

    The dependency returns the checked values keyed by field name, already
    converted to the type each rule binds as, so the handler can pass them
    straight to its SQL template.

    Example:
        @router.post("/company")
        async def register_company(fields = Depends(validated("register_company"))):
            ...

    Raises:
        KeyError: at import time, when `route` has no rule list.
        ValidationError: at request time, when a path or query rule fails.
        RequestValidationError: at request time, when the body fails its model.
    """
    rules = RULES[route]
    outside_body = [rule for rule in rules if rule.location != BODY]
    body_model = BODY_MODELS.get(route)

    def collect(request: Request, body: Optional[RequestBody]) -> Dict[str, Any]:
        path = dict(request.path_params)
        query = dict(request.query_params)

        errors = evaluate_rules(outside_body, path=path, query=query)
        if errors:
            raise ValidationError(errors=errors, context={"route": route})

        sources = {PATH: path, QUERY: query}
        values = {
            rule.field: rule.convert(_as_text(sources[rule.location].get(rule.field)))
            for rule in outside_body
        }
        if body is not None:
            values.update(body.model_dump())
        return values

    if body_model is None:

        async def dependency(request: Request) -> Dict[str, Any]:
            return collect(request, None)

    else:

        async def dependency(
            request: Request,
            body: Optional[body_model] = Body(default=None),
        ) -> Dict[str, Any]:
            if body is None:
                body = _parse_body(body_model, {})
            return collect(request, body)

    return dependency
