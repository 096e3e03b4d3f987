"""Domain-level exception primitives with stable machine-readable codes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class DomainError(Exception):
    """Use-case level error with stable code and HTTP mapping."""

    code: str
    http_status: int
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message


class UnauthenticatedError(DomainError):
    def __init__(self, message: str = "Not authenticated", details: dict[str, Any] | None = None) -> None:
        super().__init__(code="UNAUTHENTICATED", http_status=401, message=message, details=details)


class ForbiddenError(DomainError):
    def __init__(self, message: str = "Access denied", details: dict[str, Any] | None = None) -> None:
        super().__init__(code="FORBIDDEN", http_status=403, message=message, details=details)


class NotFoundError(DomainError):
    def __init__(self, message: str = "Not found", details: dict[str, Any] | None = None) -> None:
        super().__init__(code="NOT_FOUND", http_status=404, message=message, details=details)


class InvalidQuantityError(DomainError):
    def __init__(
        self,
        message: str = "Quantity must be a positive integer",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(code="INVALID_QUANTITY", http_status=400, message=message, details=details)


class InsufficientStockError(DomainError):
    def __init__(self, message: str = "Insufficient quantity", details: dict[str, Any] | None = None) -> None:
        super().__init__(code="INSUFFICIENT_STOCK", http_status=409, message=message, details=details)


class InvalidStateError(DomainError):
    def __init__(self, message: str = "Invalid state transition", details: dict[str, Any] | None = None) -> None:
        super().__init__(code="INVALID_STATE", http_status=409, message=message, details=details)


class ConflictError(DomainError):
    def __init__(self, message: str = "Conflict", details: dict[str, Any] | None = None) -> None:
        super().__init__(code="CONFLICT", http_status=409, message=message, details=details)


class InternalError(DomainError):
    """Storage/transaction failure. The whole operation may be retried by the caller."""

    def __init__(self, message: str = "Internal error", details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="INTERNAL",
            http_status=503,
            message=message,
            details={"retryable": True, **(details or {})},
        )


def validation_error(message: str, details: dict[str, Any] | None = None) -> DomainError:
    return DomainError(code="VALIDATION_ERROR", http_status=400, message=message, details=details)
