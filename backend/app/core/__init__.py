"""Core Layer — trip/request lifecycle engine: pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Every operation validates before mutating; failures raise core/errors.py types
    - The core never logs, prints, or swallows errors

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
