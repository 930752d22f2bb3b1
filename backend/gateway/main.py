"""
Corpdata Gateway - FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance
       with the connection provider attached to app.state.
Who:   uvicorn (gateway.main:app), the CLI (python -m gateway) and tests
       (create_app(connection_provider=fake)).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌──────┐        │
    │  │  Req ID  │→│ Logging  │→│ GZip │→│ CORS │        │
    │  └──────────┘ └──────────┘ └──────┘ └──────┘        │
    │                                                     │
    │  Routes:                                            │
    │  company · customers · orders · students · agents   │
    │  foods · health · /api-docs                         │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ ValidationError→422 │ DatabaseError→500      │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, log the listen address and docs URL
    Shutdown: dispose the connection provider (close every pooled connection)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from gateway import docs
from gateway.config import Settings, settings
from gateway.database import ConnectionProvider, SQLAlchemyConnectionProvider
from gateway.exceptions import (
    ConnectionAcquireError,
    DatabaseError,
    QueryError,
    ValidationError,
)
from gateway.middleware.logging import (
    CONNECTION_FAILED,
    ERROR,
    QUERY_FAILED,
    VALIDATION_FAILED,
    RequestLoggingMiddleware,
    record_outcome,
)
from gateway.middleware.request_id import REQUEST_ID_HEADER, RequestIDFilter, RequestIDMiddleware
from gateway.routes import agents, company, customers, foods, health, orders, students

logger = logging.getLogger(__name__)

# Body of every HTTP 500; internal detail goes to the log only.
SERVER_ERROR_BODY = "Error"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = settings.log_level) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s
    Output: stdout (container runtimes capture it)

    request_id is stamped by RequestIDFilter on the handler, so every record
    (ours, uvicorn's, SQLAlchemy's) carries the id of the request it belongs to.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDFilter())

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("Corpdata Gateway starting up...")
    logger.info("Listening on port %d", app_settings.port)
    logger.info("API docs: http://%s:%d%s", app_settings.host, app_settings.port, docs.DOCS_URL)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Corpdata Gateway shutting down...")
    await app.state.connection_provider.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _field_errors(exc: RequestValidationError) -> list:
    """Translate FastAPI's error list into the gateway's {field, message} shape."""
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        errors.append(
            {
                "field": loc[-1] if loc else "",
                "message": error.get("msg", "Invalid value"),
                "location": loc[0] if loc else "",
                "value": error.get("input"),
            }
        )
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to responses.

    Handler hierarchy:
        ValidationError          → 422 {"errors": [...]}
        RequestValidationError   → 422 {"errors": [...]} (same shape)
        ConnectionAcquireError   → 500 "Error"
        QueryError               → 500 "Error"
        DatabaseError (base)     → 500 "Error"
        Exception (fallback)     → 500 "Error"

    Nothing internal (driver messages, SQL, stack traces) reaches the client.
    Each handler records its outcome for the access log line.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        """A path or query rule failed; list every failing field, nothing is queried."""
        logger.info("Validation failed for %s: %s", exc.context.get("route"), exc.context["fields"])
        record_outcome(request, VALIDATION_FAILED, exc.context["fields"])
        return JSONResponse(
            status_code=422,
            content=jsonable_encoder({"errors": exc.errors}),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Body failed its generated model (or was not parseable); same shape as above."""
        errors = _field_errors(exc)
        logger.info("Request body rejected: %s", [e["field"] for e in errors])
        record_outcome(request, VALIDATION_FAILED, [e["field"] for e in errors])
        return JSONResponse(
            status_code=422,
            content=jsonable_encoder({"errors": errors}),
        )

    @app.exception_handler(ConnectionAcquireError)
    async def handle_connection_error(request: Request, exc: ConnectionAcquireError):
        """Pool could not hand out a connection. Clients only ever see "Error"."""
        logger.error("Connection error: %s | Context: %s", exc.message, exc.context)
        record_outcome(request, CONNECTION_FAILED)
        return PlainTextResponse(SERVER_ERROR_BODY, status_code=500)

    @app.exception_handler(QueryError)
    async def handle_query_error(request: Request, exc: QueryError):
        """Statement failed or timed out; the connection was already closed, not pooled."""
        logger.error("Query error: %s | Context: %s", exc.message, exc.context)
        record_outcome(request, QUERY_FAILED)
        return PlainTextResponse(SERVER_ERROR_BODY, status_code=500)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Any other database failure, details logged server-side only."""
        logger.error("Database error: %s | Context: %s", exc.message, exc.context)
        record_outcome(request, ERROR)
        return PlainTextResponse(SERVER_ERROR_BODY, status_code=500)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Last resort: log with traceback, answer with the same bare "Error"."""
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return PlainTextResponse(SERVER_ERROR_BODY, status_code=500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    connection_provider: Optional[ConnectionProvider] = None,
    app_settings: Settings = settings,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        connection_provider: Source of pooled connections. Defaults to a
            SQLAlchemyConnectionProvider built from `app_settings`; tests pass
            a fake here.
        app_settings: Settings to run with.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title=docs.API_TITLE,
        description=docs.API_DESCRIPTION,
        version=docs.API_VERSION,
        openapi_tags=docs.OPENAPI_TAGS,
        servers=docs.SERVERS,
        docs_url=docs.DOCS_URL,
        redoc_url=docs.REDOC_URL,
        openapi_url=docs.OPENAPI_URL,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.connection_provider = (
        connection_provider or SQLAlchemyConnectionProvider.from_settings(app_settings)
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition: RequestID runs first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(company.router)
    app.include_router(customers.router)
    app.include_router(orders.router)
    app.include_router(students.router)
    app.include_router(agents.router)
    app.include_router(foods.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `gateway.main:app` to be importable
app = create_app()
