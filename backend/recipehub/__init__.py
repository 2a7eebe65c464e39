"""
RecipeHub Backend — Application Package Initializer
=====================================================

What: The `recipehub` package: a REST backend for sharing recipes.
Who:  Imported by uvicorn (recipehub.main:app), Alembic and pytest.

Architecture Note:

    ┌─────────────────────────────────────┐
    │    Routes + auth.require (API)      │  ← HTTP concerns, access policy
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation, invariants
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    policy.py sits beside the layers: pure functions deciding who may do what,
    used by the route dependency and by services for ownership checks.
"""

__version__ = "1.0.0"
