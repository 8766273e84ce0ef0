"""Infrastructure Layer — database plumbing, repositories, notifier, logging.

Invariants:
    - Repositories implement the Protocols in core/repository_protocols.py
    - Rows never leave this package; callers receive core entities
    - Every SQLAlchemy failure is mapped to an ErrandError before reaching the API

Design Decisions:
    - One repository module per aggregate, mappers shared in mappers.py
"""
