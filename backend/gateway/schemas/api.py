"""
Corpdata Gateway - Request/Response Schemas
============================================

What:  Pydantic response models for the API contract that is not an entity
       row: write results, messages, error lists and the health payload.

Request bodies are not declared here; they are generated from the rule
table (gateway/validation.py BODY_MODELS) so the parser, the 422 messages
and the OpenAPI document share one declaration.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class WriteResult(BaseModel):
    """
    What:  Result descriptor of an INSERT, UPDATE or DELETE.
    Who:   Returned by the four company write routes.

    affectedRows is 0 when the id matched nothing; that is still HTTP 200.
    """

    affected_rows: int = Field(
        alias="affectedRows",
        description="Number of rows the statement changed",
    )

    model_config = {"populate_by_name": True}


class MessageResponse(BaseModel):
    """Returned with HTTP 200 by filtered searches that matched no rows."""

    message: str = Field(examples=["Could not find the looking row"])


class FieldError(BaseModel):
    """One failed validation rule."""

    field: str = Field(description="Name of the offending field", examples=["companyId"])
    message: str = Field(examples=["companyId must not be empty"])
    location: str = Field(description="Where the field was read from: path, query or body")
    value: Optional[Any] = Field(default=None, description="The value that was received")


class ValidationErrorResponse(BaseModel):
    """
    HTTP 422 body.

    Example:
        {
            "errors": [
                {"field": "companyCity", "message": "companyCity must not be empty",
                 "location": "body", "value": ""}
            ]
        }
    """

    errors: List[FieldError]


class HealthResponse(BaseModel):
    """Returned by GET /health."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
