"""Error Hierarchy — typed, categorized exceptions for every lifecycle failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400/404/409) are recoverable; infrastructure errors (5xx) are critical
    - ValidationError carries ALL violations, never just the first
    - ConcurrencyError is distinct from ConflictError so callers can decide to retry
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with ErrandError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Core raises, shell translates: core functions never log or swallow errors
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity_type: str | None = None
    entity_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class ErrandError(Exception):
    """Base exception for all lifecycle engine errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "entity_type": self.context.entity_type,
                    "entity_id": self.context.entity_id,
                },
            }
        }


# ─── Domain Errors (400/404/409) ────────────────────────────────

class ValidationError(ErrandError):
    """Malformed input — carries every violated rule."""
    def __init__(self, errors: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"Validation failed: {'; '.join(errors)}",
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.errors = list(errors)

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["details"] = self.errors
        return response


class ConflictError(ErrandError):
    """Illegal state transition, exhausted capacity, or failed geofence."""
    def __init__(
        self, message: str, code: str = "CONFLICT",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class InvalidTransitionError(ConflictError):
    """Requested status is not reachable from the current status."""
    def __init__(
        self, entity_type: str, current: str, requested: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"invalid transition for {entity_type}: {current} -> {requested}",
            "INVALID_TRANSITION", context,
        )
        self.current = current
        self.requested = requested


class CapacityExhaustedError(ConflictError):
    """Trip cannot take more requests."""
    def __init__(
        self, available: int, requested: int,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Trip has {available} slot(s) available, {requested} requested",
            "CAPACITY_EXHAUSTED", context,
        )
        self.available = available
        self.requested = requested


class GeofenceError(ConflictError):
    """User's reported coordinates are outside the location tolerance."""
    def __init__(
        self, distance_km: float, tolerance_km: float,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"User is {distance_km:.3f} km from location "
            f"(tolerance {tolerance_km:.3f} km)",
            "GEOFENCE_FAILED", context,
        )
        self.distance_km = distance_km
        self.tolerance_km = tolerance_km


class NotFoundError(ErrandError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConcurrencyError(ErrandError):
    """Lost a race on an atomic capacity or status update."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(ErrandError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
