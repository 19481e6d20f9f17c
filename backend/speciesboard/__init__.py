"""
SpeciesBoard Backend — Application Package Initializer
======================================================

What: Marks the `speciesboard` directory as a Python package.
Who:  Imported by uvicorn (speciesboard.main:app), pytest, and every module
      inside the package.

Architecture Note:
    The backend follows a layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Query Logic)      │  ← Validation, SQL, row shaping
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Explicit async engine handle
    └─────────────────────────────────────┘

    Routes extract request fields and pick a status code, services own the
    presence checks and the SQL, and the database handle is constructed once
    per process and passed down through FastAPI dependencies.
"""

__version__ = "1.0.0"
