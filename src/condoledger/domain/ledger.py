"""Charge ledger: expected versus paid per house and period."""

from decimal import Decimal

from condoledger.database.base import Database
from condoledger.domain.entities import ChargeBalance, ConceptBalance
from condoledger.domain.errors import NotFoundError, period_not_found, period_not_charged
from condoledger.utils.money import ZERO, round2


class ChargeLedgerService:
    """Read-only balance queries over charges and allocations.

    Charges are the source of truth for what a house owes; allocations are the
    source of truth for what it paid. Nothing here writes to the database.
    """

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def total_expected(self, house_id: int, period_id: int) -> Decimal:
        """Sum of expected amounts of a house's charges in a period."""
        return round2(self.db.sum_expected_by_house_and_period(house_id, period_id))

    def total_paid(self, house_id: int, period_id: int) -> Decimal:
        """Sum of allocations made to a house in a period."""
        return round2(self.db.sum_allocated_by_house_and_period(house_id, period_id))

    def balance(self, house_id: int, period_id: int) -> Decimal:
        """Expected minus paid; negative when overpaid."""
        return self.total_expected(house_id, period_id) - self.total_paid(house_id, period_id)

    def payment_details(self, house_id: int, period_id: int) -> list[ConceptBalance]:
        """Per-concept breakdown of a house's charges in a period."""
        allocations = self.db.find_allocations_by_house_and_period(house_id, period_id)
        paid_by_concept: dict = {}
        for allocation in allocations:
            paid_by_concept[allocation.concept_type] = (
                paid_by_concept.get(allocation.concept_type, ZERO) + allocation.allocated_amount
            )

        details = []
        for charge in self.db.find_charges_by_house_and_period(house_id, period_id):
            expected = round2(charge.expected_amount)
            paid = round2(paid_by_concept.get(charge.concept_type, ZERO))
            balance = expected - paid
            details.append(
                ConceptBalance(
                    concept_type=charge.concept_type,
                    expected_amount=expected,
                    paid_amount=paid,
                    balance=balance,
                    is_paid=balance <= 0,
                )
            )
        return details

    def is_period_fully_charged(self, period_id: int) -> bool:
        """Whether charges have been seeded for the period."""
        return len(self.db.find_charges_by_period(period_id)) > 0

    def charge_balance(self, house_id: int, period_id: int) -> ChargeBalance:
        """Balance summary of a house in a period.

        Args:
            house_id: House ID
            period_id: Period ID

        Returns:
            ChargeBalance with totals and per-concept details

        Raises:
            NotFoundError: If the period doesn't exist or has no charges yet
        """
        if self.db.get_period(period_id) is None:
            raise NotFoundError(period_not_found(period_id))
        if not self.is_period_fully_charged(period_id):
            raise NotFoundError(period_not_charged(period_id))

        total_expected = self.total_expected(house_id, period_id)
        total_paid = self.total_paid(house_id, period_id)
        balance = total_expected - total_paid
        return ChargeBalance(
            house_id=house_id,
            period_id=period_id,
            total_expected=total_expected,
            total_paid=total_paid,
            balance=balance,
            is_paid=balance <= 0,
            details=tuple(self.payment_details(house_id, period_id)),
        )
