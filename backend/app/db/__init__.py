"""Database Package — declarative Base and standalone session helpers.

Invariants:
    - Single async engine per process for the API (infrastructure/database.py)
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL (ADR: native async, no thread pool overhead)
"""
