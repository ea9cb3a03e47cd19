"""
ArchLens Backend - Application Package
======================================

What:  The `archlens` package: HTTP API over stored architecture analyses.
Who:   Imported by uvicorn (`archlens.main:app`), Alembic, and pytest.

Layering:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← status codes, error bodies
    ├─────────────────────────────────────┤
    │        Services (Data Access)       │  ← queries, aggregates
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

Routes never touch SQLAlchemy directly; services never build HTTP responses.
"""

__version__ = "1.0.0"
