"""
Corpdata Gateway - Application Package Initializer
===================================================

What: Marks the `gateway` directory as a Python package.
Who:  Imported by uvicorn (gateway.main:app), the CLI (python -m gateway) and pytest.

Architecture Note:
    Every endpoint is the same three steps:

    ┌─────────────────────────────────────┐
    │      Validation (rule table)        │  ← 422 before any database work
    ├─────────────────────────────────────┤
    │      Routes (API Layer)             │  ← one SQL template per endpoint
    ├─────────────────────────────────────┤
    │      Query Service                  │  ← acquire / query / release-or-close
    ├─────────────────────────────────────┤
    │      Connection Provider            │  ← pooled async SQLAlchemy engine
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
