"""
ProjectHub Backend: Application Package
=======================================

Request-handling core of the ProjectHub project-management service.

Architecture Note:

    ┌─────────────────────────────────────┐
    │      Routes (API Layer)             │  ← HTTP concerns only
    │      + with_error_handler,          │
    │        rate_limit wrappers          │
    ├─────────────────────────────────────┤
    │      Services                       │  ← queries, ownership checks
    ├─────────────────────────────────────┤
    │      Models & Schemas (Data)        │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │      Database (Persistence)         │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

Cross-cutting modules: config, logger, exceptions, error_handler,
pagination, security, cache_headers, validators.
"""

__version__ = "1.0.0"
