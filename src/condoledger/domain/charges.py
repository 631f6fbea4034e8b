"""Charge mutation domain service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from condoledger.database.base import Database
from condoledger.domain.charge_validators import (
    validate_adjustment,
    validate_condonation,
    validate_reversal,
)
from condoledger.domain.entities import (
    ChargeAdjustment,
    ChargeReversal,
    ConceptType,
    CondonationDetail,
    CondonationResult,
    HousePeriodCharge,
)
from condoledger.domain.errors import (
    ConflictError,
    DomainError,
    NotFoundError,
    charge_not_found,
    period_not_found,
)
from condoledger.utils.money import ZERO, round2

logger = logging.getLogger(__name__)


class ChargeMutationService:
    """Adjusts, reverses and condones charges once their guards pass."""

    def __init__(self, db: Database, today: Optional[date] = None):
        """Initialize charge mutation service.

        Args:
            db: Database instance
            today: Reference date for the mutation window (defaults to today)
        """
        self.db = db
        self.today = today

    def _get_charge(self, charge_id: int) -> HousePeriodCharge:
        charge = self.db.get_charge(charge_id)
        if charge is None:
            raise NotFoundError(charge_not_found(charge_id))
        return charge

    def _paid_for(self, charge: HousePeriodCharge) -> Decimal:
        return round2(
            self.db.sum_allocated_by_house_and_period(
                charge.house_id, charge.period_id, charge.concept_type
            )
        )

    def adjust_charge(self, charge_id: int, new_amount: Decimal) -> ChargeAdjustment:
        """Change the expected amount of a charge in place.

        Args:
            charge_id: Charge ID
            new_amount: New expected amount

        Returns:
            ChargeAdjustment describing the change

        Raises:
            NotFoundError: If the charge or its period doesn't exist
            ValidationError: If the amount is negative or unchanged
            ConflictError: If the period is frozen or the amount is below what was paid
        """
        charge = self._get_charge(charge_id)
        period = self.db.get_period(charge.period_id)
        if period is None:
            raise NotFoundError(period_not_found(charge.period_id))

        new_amount = round2(new_amount)
        difference = validate_adjustment(
            charge.expected_amount, new_amount, period.year, period.month, self.today
        )

        paid = self._paid_for(charge)
        if paid > 0 and new_amount < paid:
            raise ConflictError(
                f"Cannot reduce the amount below what was already paid. "
                f"Paid: ${paid}, new amount: ${new_amount}"
            )

        updated = self.db.update_charge_amount(charge_id, new_amount)
        logger.info(
            "Adjusted charge %s (%s, %s): $%s -> $%s",
            charge_id,
            charge.concept_type.value,
            period.display_name,
            charge.expected_amount,
            updated.expected_amount,
        )
        return ChargeAdjustment(
            charge_id=charge_id,
            house_id=charge.house_id,
            period_id=charge.period_id,
            concept_type=charge.concept_type,
            previous_amount=charge.expected_amount,
            new_amount=updated.expected_amount,
            difference=difference,
            paid_amount=paid,
            is_paid=paid >= updated.expected_amount,
        )

    def reverse_charge(self, charge_id: int) -> ChargeReversal:
        """Delete a charge that has no payments.

        Raises:
            NotFoundError: If the charge or its period doesn't exist
            ConflictError: If the period is frozen or payments were allocated
        """
        charge = self._get_charge(charge_id)
        period = self.db.get_period(charge.period_id)
        if period is None:
            raise NotFoundError(period_not_found(charge.period_id))

        validate_reversal(
            charge.expected_amount, self._paid_for(charge), period.year, period.month, self.today
        )
        self.db.delete_charge(charge_id)
        logger.info(
            "Reversed charge %s (%s, %s): $%s",
            charge_id,
            charge.concept_type.value,
            period.display_name,
            charge.expected_amount,
        )
        return ChargeReversal(
            charge_id=charge_id,
            house_id=charge.house_id,
            period_id=charge.period_id,
            concept_type=charge.concept_type,
            removed_amount=charge.expected_amount,
        )

    def condone_penalty(self, house_id: int, period_id: int) -> Decimal:
        """Forgive the penalty charge of a house in a period.

        Returns:
            The condoned amount

        Raises:
            NotFoundError: If the period or the penalty charge doesn't exist
            ConflictError: If the penalty was already paid
        """
        if self.db.get_period(period_id) is None:
            raise NotFoundError(period_not_found(period_id))

        penalty = next(
            (
                c
                for c in self.db.find_charges_by_house_and_period(house_id, period_id)
                if c.concept_type is ConceptType.PENALTIES
            ),
            None,
        )
        if penalty is None:
            raise NotFoundError(f"No penalty charge for house {house_id} in period {period_id}")

        validate_condonation(penalty.concept_type, self._paid_for(penalty))
        self.db.delete_charge(penalty.id)
        logger.info(
            "Condoned penalty of $%s for house %s in period %s",
            penalty.expected_amount,
            house_id,
            period_id,
        )
        return penalty.expected_amount

    def condone_penalties_for_period(
        self, period_id: int, house_ids: Optional[list[int]] = None
    ) -> CondonationResult:
        """Forgive penalties for several houses, collecting per-house failures.

        Args:
            period_id: Period ID
            house_ids: Houses to process (all houses with a penalty when empty)

        Raises:
            NotFoundError: If the period doesn't exist
        """
        if self.db.get_period(period_id) is None:
            raise NotFoundError(period_not_found(period_id))

        if not house_ids:
            house_ids = sorted(
                {
                    c.house_id
                    for c in self.db.find_charges_by_period(period_id)
                    if c.concept_type is ConceptType.PENALTIES
                }
            )

        details = []
        total = ZERO
        for house_id in house_ids:
            try:
                amount = self.condone_penalty(house_id, period_id)
            except DomainError as e:
                details.append(CondonationDetail(house_id, ZERO, False, str(e)))
                continue
            details.append(CondonationDetail(house_id, amount, True))
            total += amount

        succeeded = sum(1 for d in details if d.success)
        return CondonationResult(
            period_id=period_id,
            total_condoned=round2(total),
            condoned_count=succeeded,
            failure_count=len(details) - succeeded,
            details=tuple(details),
        )
