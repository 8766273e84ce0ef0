"""Errand Run Application Package — trip/request lifecycle and capacity engine.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Explicit imports only, no star exports (ADR: ExMA no convention-over-config)
"""

__version__ = "1.0.0"
