"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Mutation violates a time-window, already-paid or uniqueness rule."""


class ProviderError(DomainError):
    """A reasoning service failed to produce a response."""


def house_not_found(house: int | str) -> str:
    """Return message for missing house."""
    return f"House {house} not found"


def period_not_found(period_id: int) -> str:
    """Return message for missing period."""
    return f"Period with ID {period_id} not found"


def charge_not_found(charge_id: int) -> str:
    """Return message for missing charge."""
    return f"Charge with ID {charge_id} not found"


def period_not_charged(period_id: int) -> str:
    """Return message when a period has no seeded charges."""
    return f"Period {period_id} does not have charges loaded. Run seed first."


def period_outside_window(action: str, year: int, month: int, months: int) -> str:
    """Return message when a period is older than the mutation window."""
    return (
        f"Cannot {action} charges for periods more than {months} months ago. "
        f"Period: {year}-{month:02d}"
    )


def charge_already_paid(action: str, paid_amount: Decimal) -> str:
    """Return message when payments were already allocated to a charge."""
    return f"Cannot {action} a charge that already has payments allocated (paid: ${paid_amount})"
