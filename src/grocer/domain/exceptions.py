"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and HTTP layers can catch them uniformly and display
user-friendly messages.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """Input is malformed or a business rule was violated."""


class NotFoundError(DomainException):
    """A requested entity does not exist."""


class ConflictError(DomainException):
    """A unique key is already taken."""


class ForbiddenError(DomainException):
    """The acting user may not access the requested resource."""


class InsufficientStockError(DomainException):
    """The requested quantity exceeds what the inventory can give."""

    def __init__(self, available: int, requested: int, message: str | None = None) -> None:
        self.available = available
        self.requested = requested
        super().__init__(
            message
            or f"Insufficient stock. Available: {available}, Requested: {requested}"
        )


class ReservationUnderflowError(DomainException):
    """A release would drive the reserved counter below zero."""

    def __init__(self, reserved: int, requested: int) -> None:
        self.reserved = reserved
        self.requested = requested
        super().__init__(
            f"Cannot release {requested} units, only {reserved} currently reserved"
        )


class PersistenceError(DomainException):
    """The transaction could not be committed."""


class TransientPersistenceError(PersistenceError):
    """A commit failed for a reason that may succeed on retry
    (serialization failure, deadlock, lock timeout)."""
