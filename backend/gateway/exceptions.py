"""
Corpdata Gateway - Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the failure modes of a request.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return the matching HTTP response.
Who:   Raised by the validator and the query service; caught by global handlers.

Exception Hierarchy:
    GatewayError (base)
    ├── ValidationError              → 422 Unprocessable Entity, error list
    └── DatabaseError                → 500 Internal Server Error, "Error"
        ├── ConnectionAcquireError   (pool could not supply a connection)
        └── QueryError               (statement failed or timed out)

Client-visible bodies for DatabaseError are always the opaque text "Error".
The message and context are for server-side logs only.
"""

from typing import Any, Dict, List, Optional


class GatewayError(Exception):
    """
    Base exception for all gateway errors.

    Attributes:
        message:  Description of the failure
        context:  Additional debug info (logged, never returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(GatewayError):
    """
    Raised when one or more declared field rules fail.

    HTTP:    422 Unprocessable Entity
    Body:    {"errors": [{"field", "message", "location", "value"}, ...]}

    `errors` keeps the order in which the rules were declared for the route,
    so clients see failures in a stable order.
    """

    def __init__(
        self,
        errors: List[Dict[str, Any]],
        message: str = "Validation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["fields"] = [error["field"] for error in errors]
        super().__init__(message=message, context=ctx)
        self.errors = errors


class DatabaseError(GatewayError):
    """
    Raised when a database interaction fails.

    HTTP:    500 Internal Server Error with body "Error"

    Detailed error info (SQL text, driver message) is logged server-side
    only. It could reveal schema or data to a caller.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConnectionAcquireError(DatabaseError):
    """
    The pool could not supply a connection.

    When:    Database unreachable, credentials rejected, or the pool stayed
             exhausted past DB_POOL_TIMEOUT.
    Cleanup: None; no connection was handed out.
    """

    def __init__(
        self,
        message: str = "Could not acquire a database connection",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class QueryError(DatabaseError):
    """
    The database rejected or failed to execute a statement.

    When:    Syntax/constraint errors, lost connection mid-query, or the
             statement exceeded DB_QUERY_TIMEOUT.
    Cleanup: The connection is closed (invalidated), never released, since
             its session state can no longer be trusted.
    """

    def __init__(
        self,
        message: str = "Query execution failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
