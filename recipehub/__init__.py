"""
RecipeHub Backend — Application Package
=========================================

What: REST backend for sharing, forking, commenting on, liking and
      organizing recipes into folders.

Layering:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, input shape
    ├─────────────────────────────────────┤
    │    Services (Domain Integrity)      │  ← ownership, forks, likes, cascades
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

Services never see the HTTP request; the authenticated user id is passed
to them explicitly by the route handlers.
"""

__version__ = "1.0.0"
