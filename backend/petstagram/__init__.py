"""
Petstagram Backend — Application Package
==========================================

Layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (CRUD per entity)  │  ← Post, Like, Comment, UserAuth
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │     Database (Data Access Layer)    │  ← pool, schema setup, sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
