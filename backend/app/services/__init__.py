"""Services Layer — imperative shell around the lifecycle core.

Invariants:
    - Load -> core decision -> guarded write -> status record -> commit -> notify
    - Repositories flush, services commit (one commit per use case)
    - Notifications are published only after the commit succeeds

Design Decisions:
    - One service per resource for locality (ADR: ExMA no god objects)
"""
