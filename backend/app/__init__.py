"""
Ulyngo Backend — Application Package
======================================

Travel-planning and map-marker API.

    ┌─────────────────────────────────────┐
    │        Routes (API Layer)           │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Business Logic)         │  ← planning, auth, catalog
    ├──────────────────┬──────────────────┤
    │ Models & Schemas │ External clients │  ← SQLAlchemy / Pydantic / httpx
    ├──────────────────┴──────────────────┤
    │   Database (Persistence)            │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
