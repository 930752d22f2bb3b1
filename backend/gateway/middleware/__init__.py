# Middleware package init
"""
Corpdata Gateway - Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation id in the ContextVar, the response header and
       (through RequestIDFilter) every log record
    2. Access Log: route name and outcome recorded by the exception handlers
    3. GZip / CORS: Starlette built-ins
"""
