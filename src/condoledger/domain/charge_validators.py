"""Guards for mutating charges after they have been seeded.

Each guard is pure: it raises when the mutation is not allowed and returns
otherwise. The caller performs the mutation.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from condoledger.domain.entities import ConceptType
from condoledger.domain.errors import (
    ConflictError,
    ValidationError,
    charge_already_paid,
    period_outside_window,
)
from condoledger.utils.date_parser import months_ago

logger = logging.getLogger(__name__)

# Periods older than this many months are frozen
MUTATION_WINDOW_MONTHS = 3

# Amounts closer than this are considered equal
AMOUNT_TOLERANCE = Decimal("0.01")


def _check_window(action: str, period_year: int, period_month: int, today: Optional[date]) -> None:
    period_start = date(period_year, period_month, 1)
    if period_start < months_ago(MUTATION_WINDOW_MONTHS, today):
        raise ConflictError(
            period_outside_window(action, period_year, period_month, MUTATION_WINDOW_MONTHS)
        )


def validate_adjustment(
    current_amount: Decimal,
    new_amount: Decimal,
    period_year: int,
    period_month: int,
    today: Optional[date] = None,
) -> Decimal:
    """Check that a charge may change from current_amount to new_amount.

    Returns:
        The signed difference new_amount - current_amount

    Raises:
        ValidationError: If the new amount is negative or unchanged
        ConflictError: If the period is outside the mutation window
    """
    if new_amount < 0:
        raise ValidationError(f"New amount cannot be negative: ${new_amount}")
    if abs(new_amount - current_amount) < AMOUNT_TOLERANCE:
        raise ValidationError(
            f"New amount equals the current amount (${current_amount}). No adjustment needed"
        )
    _check_window("adjust", period_year, period_month, today)

    logger.debug(
        "Adjustment allowed: $%s -> $%s for %d-%02d",
        current_amount,
        new_amount,
        period_year,
        period_month,
    )
    return new_amount - current_amount


def validate_reversal(
    charge_amount: Decimal,
    paid_amount: Decimal,
    period_year: int,
    period_month: int,
    today: Optional[date] = None,
) -> None:
    """Check that a charge may be deleted.

    Raises:
        ConflictError: If the period is outside the window or payments exist
    """
    _check_window("reverse", period_year, period_month, today)
    if paid_amount > 0:
        raise ConflictError(
            charge_already_paid("reverse", paid_amount) + ". Adjust it manually if needed"
        )
    logger.debug("Reversal allowed: $%s for %d-%02d", charge_amount, period_year, period_month)


def validate_condonation(concept_type: ConceptType, paid_amount: Decimal) -> None:
    """Check that a charge may be forgiven.

    Raises:
        ConflictError: If the charge is not a penalty or was already paid
    """
    concept = ConceptType(concept_type)
    if concept is not ConceptType.PENALTIES:
        raise ConflictError(f"Cannot condone {concept.value} charges. Only penalties can be condoned")
    if paid_amount > 0:
        raise ConflictError(charge_already_paid("condone", paid_amount))
