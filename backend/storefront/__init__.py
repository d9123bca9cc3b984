"""
Storefront Backend — Application Package Initializer
====================================================

What: Marks the `storefront` directory as a Python package.
Who:  Imported by uvicorn (`uvicorn storefront.main:app`) and by pytest.

Architecture Note:
    The backend keeps the same layering for both APIs (products and orders):

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Pipelines)        │  ← ingest, materialize, validate
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← document shapes + API contracts
    ├─────────────────────────────────────┤
    │      Document Store (MongoDB)       │  ← injected DocumentStore client
    └─────────────────────────────────────┘

    Routes never talk to MongoDB directly; they receive the store, the image
    materializer and the multipart ingestor through FastAPI dependencies.
"""

__version__ = "1.0.0"
