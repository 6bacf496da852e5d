"""
Rent The Moment Backend — Application Package Initializer
=========================================================

What: Marks the `rentmoment` directory as a Python package.
Why:  Enables module imports like `from rentmoment.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend keeps a layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, {success, data} envelope
    ├─────────────────────────────────────┤
    │    Services (Business Logic)        │  ← Entity CRUD, auth, uploads
    │    └── ListingService               │  ← One filter/sort/paginate protocol for every list
    ├─────────────────────────────────────┤
    │    Collections (Storage Adapter)    │  ← count / find over a single table
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Explicit Database handle, per-request sessions
    └─────────────────────────────────────┘

    Every collection endpoint (merchants, products, categories, orders, users)
    goes through ListingService instead of carrying its own skip/limit/count code.
"""

__version__ = "1.0.0"
