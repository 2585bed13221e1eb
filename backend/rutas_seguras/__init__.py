"""
Rutas Seguras Backend — Application Package Initializer
=======================================================

What: Marks the `rutas_seguras` directory as a Python package.
Why:  Enables module imports like `from rutas_seguras.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns + auth dependencies
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation rules, CRUD orchestration
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Password hashing and token signing live in `security.py`, beside the
    layers rather than inside one: both routes (the authorization gate) and
    services (register/login) call into it.
"""

__version__ = "1.0.0"
