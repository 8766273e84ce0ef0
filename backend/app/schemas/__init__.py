"""API Schemas — Pydantic models at the HTTP boundary.

Invariants:
    - Request bodies are validated by Pydantic before reaching a route handler
    - Responses are built from core entities via from_entity(), never from ORM rows
"""
