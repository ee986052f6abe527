"""
Postboard Backend — Application Package Initializer
===================================================

What: Marks the `app` directory as a Python package.
Who:  Used by uvicorn (`uvicorn app.main:app`) and by pytest.

Architecture Note:
    The backend is a thin layered CRUD service:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Post rules, uploads)    │  ← Validation, file coordination
    ├─────────────────────────────────────┤
    │     Models & Schemas (Data)         │  ← Post documents + Pydantic
    ├─────────────────────────────────────┤
    │   Database (MongoDB client)         │  ← pymongo async client
    └─────────────────────────────────────┘

    Image files on disk and post documents in MongoDB are two independent
    resources; only the service layer coordinates them.
"""

__version__ = "1.0.0"
