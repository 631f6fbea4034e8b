"""Payment distribution across pending maintenance periods."""

import logging
import threading
from decimal import Decimal, ROUND_FLOOR
from typing import Optional, Sequence

from condoledger.config import Settings
from condoledger.database.base import Database
from condoledger.domain.ai_distribution import AIDistributionAnalyzer, meets_confidence_threshold
from condoledger.domain.entities import (
    AIDistributionRequest,
    ConceptType,
    Confidence,
    CreditApplication,
    DistributionMethod,
    DistributionPlan,
    PaymentStatus,
    RecordAllocation,
    SuggestedAllocation,
    TransactionStatus,
    UnpaidPeriod,
)
from condoledger.domain.errors import ConflictError, NotFoundError, ValidationError, house_not_found
from condoledger.domain.unpaid_periods import UnpaidPeriodResolver
from condoledger.utils.money import ZERO, round2

logger = logging.getLogger(__name__)

# Record id of allocations paid from a house's credit balance
CREDIT_RECORD_ID = 0

# Order in which credit pays the concepts of a period
CONCEPT_ORDER = list(ConceptType)


def _plan(
    confidence: Confidence,
    allocations: list[SuggestedAllocation],
    amount: Decimal,
    reasoning: str,
) -> DistributionPlan:
    total = round2(sum((a.amount for a in allocations), ZERO))
    return DistributionPlan(
        method=DistributionMethod.DETERMINISTIC,
        confidence=confidence,
        allocations=tuple(allocations),
        total_allocated=total,
        remaining_as_credit=round2(amount - total),
        reasoning=reasoning,
    )


def distribute(
    amount: Decimal, pending_periods: Sequence[UnpaidPeriod], unit: Decimal
) -> Optional[DistributionPlan]:
    """Split a payment over pending periods, oldest first.

    Args:
        amount: Payment amount
        pending_periods: Unpaid periods ordered oldest first
        unit: Standard monthly maintenance amount

    Returns:
        A deterministic plan, or None when no rule applies (for instance a
        non-positive amount while periods are pending)
    """
    amount = round2(amount)

    if not pending_periods:
        if amount < 0:
            return None
        return _plan(
            Confidence.HIGH, [], amount, "No unpaid periods. Full amount goes to credit."
        )

    if amount <= 0:
        return None

    # Exact multiple of the monthly amount
    if amount % unit == 0:
        count = min(int(amount // unit), len(pending_periods))
        allocations = [
            SuggestedAllocation(
                period_id=p.period_id,
                concept_type=ConceptType.MAINTENANCE,
                amount=round2(min(unit, p.pending_maintenance)),
                reasoning=f"Exact maintenance payment for {p.display_name}",
            )
            for p in pending_periods[:count]
        ]
        return _plan(
            Confidence.HIGH,
            allocations,
            amount,
            f"Exact payment for {count} maintenance period(s)",
        )

    # Full periods plus a partial remainder
    if amount >= unit:
        allocations = []
        remaining = amount
        for period in pending_periods:
            if remaining <= 0:
                break
            to_allocate = round2(min(remaining, period.pending_maintenance))
            allocations.append(
                SuggestedAllocation(
                    period_id=period.period_id,
                    concept_type=ConceptType.MAINTENANCE,
                    amount=to_allocate,
                    reasoning=f"Maintenance {period.display_name}",
                )
            )
            remaining -= to_allocate
        return _plan(
            Confidence.HIGH,
            allocations,
            amount,
            f"FIFO distribution: {len(allocations)} period(s)",
        )

    # Less than one month: partial payment to the oldest period only
    oldest = pending_periods[0]
    allocation = SuggestedAllocation(
        period_id=oldest.period_id,
        concept_type=ConceptType.MAINTENANCE,
        amount=round2(min(amount, oldest.pending_maintenance)),
        reasoning=f"Partial payment for {oldest.display_name}",
    )
    return _plan(
        Confidence.MEDIUM,
        [allocation],
        amount,
        f"Partial payment applied to the oldest period: {oldest.display_name}",
    )


def manual_review_plan(amount: Decimal) -> DistributionPlan:
    """Plan returned when neither rules nor AI could decide."""
    return DistributionPlan(
        method=DistributionMethod.MANUAL_REVIEW,
        confidence=Confidence.NONE,
        allocations=(),
        total_allocated=ZERO,
        remaining_as_credit=round2(amount),
        reasoning="Could not determine the distribution automatically. Manual review required.",
        requires_manual_review=True,
    )


class DistributionService:
    """Plans payment distributions and applies accepted plans.

    The per-house lock serializes services of one process. A Database
    session is not thread-safe, so each thread needs its own service and
    Database instance.
    """

    _locks_guard = threading.Lock()
    _house_locks: dict[int, threading.Lock] = {}

    def __init__(
        self,
        db: Database,
        settings: Optional[Settings] = None,
        analyzer: Optional[AIDistributionAnalyzer] = None,
    ):
        """Initialize distribution service.

        Args:
            db: Database instance
            settings: Business settings (defaults apply when omitted)
            analyzer: AI fallback; without it undecided payments go to manual review
        """
        self.db = db
        self.settings = settings or Settings()
        self.analyzer = analyzer
        self.resolver = UnpaidPeriodResolver(db, self.settings)

    def plan_distribution(self, house_id: int, amount: Decimal) -> DistributionPlan:
        """Decide how a payment should be split for a house.

        Tries the deterministic rules, then the AI fallback, then returns a
        manual review plan. Never applies anything.

        Raises:
            NotFoundError: If the house doesn't exist
        """
        house = self.db.get_house(house_id)
        if house is None:
            raise NotFoundError(house_not_found(house_id))

        amount = round2(amount)
        pending = self.resolver.resolve_unpaid_periods(house_id)

        plan = distribute(amount, pending, self.settings.default_maintenance_amount)
        if plan is not None:
            logger.info(
                "Deterministic plan for house %s: %s allocated, %s to credit",
                house.number,
                plan.total_allocated,
                plan.remaining_as_credit,
            )
            return plan

        if self.analyzer is None:
            return manual_review_plan(amount)

        balance = self.db.get_or_create_house_balance(house_id)
        request = AIDistributionRequest(
            amount=amount,
            house_id=house_id,
            house_number=house.number,
            credit_balance=balance.credit_balance,
            total_debt=round2(sum((p.pending_maintenance for p in pending), ZERO)),
            unpaid_periods=tuple(pending),
        )
        response = self.analyzer.analyze(request)
        if response is None:
            logger.info("No AI distribution for house %s, manual review required", house.number)
            return manual_review_plan(amount)

        return DistributionPlan(
            method=DistributionMethod.AI,
            confidence=response.confidence,
            allocations=response.allocations,
            total_allocated=response.total_allocated,
            remaining_as_credit=response.remaining_as_credit,
            reasoning=response.reasoning,
            requires_manual_review=not meets_confidence_threshold(
                response.confidence, self.settings.ai_confidence_threshold
            ),
            auto_applied=False,
        )

    @classmethod
    def _lock_for(cls, house_id: int) -> threading.Lock:
        with cls._locks_guard:
            return cls._house_locks.setdefault(house_id, threading.Lock())

    def _current_pending(self, house_id: int) -> dict[tuple[int, ConceptType], tuple[Decimal, Decimal]]:
        """Map (period, concept) to (expected, pending) as stored right now."""
        current = {}
        for period in self.resolver.resolve_unpaid_periods(house_id):
            current[(period.period_id, ConceptType.MAINTENANCE)] = (
                period.expected_maintenance,
                period.pending_maintenance,
            )
        return current

    def _charge_pending(
        self, house_id: int, period_id: int, concept_type: ConceptType
    ) -> Optional[tuple[Decimal, Decimal]]:
        for charge in self.db.find_charges_by_house_and_period(house_id, period_id):
            if charge.concept_type == concept_type:
                paid = self.db.sum_allocated_by_house_and_period(house_id, period_id, concept_type)
                return charge.expected_amount, max(ZERO, charge.expected_amount - paid)
        return None

    def _load_created(
        self, house_id: int, created_ids: list[int], period_ids: set[int]
    ) -> list[RecordAllocation]:
        wanted = set(created_ids)
        created = []
        for period_id in sorted(period_ids):
            created.extend(
                a
                for a in self.db.find_allocations_by_house_and_period(house_id, period_id)
                if a.id in wanted
            )
        return sorted(created, key=lambda a: a.id)

    def apply_plan(
        self, house_id: int, record_id: int, plan: DistributionPlan
    ) -> list[RecordAllocation]:
        """Record a plan's allocations and credit for a house.

        Allocations for the same house are serialized. Pending balances are
        re-read under the lock, so a plan computed from stale balances is
        refused instead of over-allocating. All allocations and the balance
        update are written in a single transaction.

        Whole units of the remaining amount first pay down the house's debit
        balance, the rest goes to credit. The sub-unit part is carried in
        accumulated_cents.

        Raises:
            NotFoundError: If the house doesn't exist
            ConflictError: If the plan needs manual review or no longer fits
        """
        return self._apply(house_id, record_id, plan)

    def apply_transaction(
        self, house_id: int, transaction_id: int, plan: DistributionPlan
    ) -> list[RecordAllocation]:
        """Apply a plan funded by a stored bank transaction.

        The transaction id becomes the allocations' record id and the
        transaction is marked processed in the same commit.

        Raises:
            NotFoundError: If the house or transaction doesn't exist
            ConflictError: If the transaction was already processed
            ValidationError: If the plan does not add up to the deposit amount
        """
        transaction = self.db.get_bank_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(f"Bank transaction {transaction_id} not found")
        if transaction.status is not TransactionStatus.PENDING:
            raise ConflictError(
                f"Bank transaction {transaction_id} is already {transaction.status.value}"
            )
        if not transaction.is_deposit:
            raise ValidationError(f"Bank transaction {transaction_id} is not a deposit")
        planned = round2(plan.total_allocated + plan.remaining_as_credit)
        if planned != round2(transaction.amount):
            raise ValidationError(
                f"Plan distributes ${planned} but transaction {transaction_id} "
                f"deposited ${round2(transaction.amount)}"
            )
        return self._apply(house_id, transaction.id, plan, processed_transaction_id=transaction.id)

    def _apply(
        self,
        house_id: int,
        record_id: int,
        plan: DistributionPlan,
        processed_transaction_id: Optional[int] = None,
    ) -> list[RecordAllocation]:
        if self.db.get_house(house_id) is None:
            raise NotFoundError(house_not_found(house_id))
        if plan.requires_manual_review or plan.method is DistributionMethod.MANUAL_REVIEW:
            raise ConflictError("Cannot apply a plan that requires manual review")
        if plan.remaining_as_credit < 0:
            raise ValidationError(f"Remaining credit cannot be negative: {plan.remaining_as_credit}")

        with self._lock_for(house_id):
            pending = self._current_pending(house_id)

            requested: dict[tuple[int, ConceptType], Decimal] = {}
            for allocation in plan.allocations:
                key = (allocation.period_id, allocation.concept_type)
                requested[key] = requested.get(key, ZERO) + allocation.amount

            targets = {}
            for (period_id, concept_type), amount in requested.items():
                if amount <= 0:
                    raise ValidationError(
                        f"Allocation for period {period_id} must be positive, got {amount}"
                    )
                if concept_type is ConceptType.MAINTENANCE:
                    target = pending.get((period_id, concept_type))
                else:
                    target = self._charge_pending(house_id, period_id, concept_type)
                available = target[1] if target is not None else ZERO
                if amount > available:
                    raise ConflictError(
                        f"Allocation of ${amount} to period {period_id} ({concept_type.value}) "
                        f"exceeds pending balance ${available}"
                    )
                targets[(period_id, concept_type)] = target

            rows = []
            for allocation in plan.allocations:
                key = (allocation.period_id, allocation.concept_type)
                expected, available = targets[key]
                rows.append(
                    {
                        "record_id": record_id,
                        "period_id": allocation.period_id,
                        "concept_type": allocation.concept_type,
                        "allocated_amount": round2(allocation.amount),
                        "expected_amount": expected,
                        "payment_status": (
                            PaymentStatus.COMPLETE
                            if requested[key] >= available
                            else PaymentStatus.PARTIAL
                        ),
                    }
                )

            remaining = round2(plan.remaining_as_credit)
            whole = remaining.to_integral_value(rounding=ROUND_FLOOR)
            balance = self.db.get_or_create_house_balance(house_id)
            debt_payment = min(whole, balance.debit_balance)
            created_ids = self.db.record_allocations(
                house_id,
                rows,
                credit_delta=whole - debt_payment,
                debit_delta=-debt_payment,
                cents_delta=remaining - whole,
                processed_transaction_id=processed_transaction_id,
            )

        logger.info(
            "Applied record %s to house %s: %d allocation(s), %s remaining",
            record_id,
            house_id,
            len(created_ids),
            remaining,
        )
        return self._load_created(house_id, created_ids, {row["period_id"] for row in rows})

    def apply_credit_to_periods(self, house_id: int) -> CreditApplication:
        """Spend a house's credit balance on its pending charges.

        Periods are paid oldest first and, inside a period, maintenance
        before water, extraordinary fee and penalties. Credit allocations use
        record id 0.

        Raises:
            NotFoundError: If the house doesn't exist
        """
        if self.db.get_house(house_id) is None:
            raise NotFoundError(house_not_found(house_id))

        with self._lock_for(house_id):
            credit_before = self.db.get_or_create_house_balance(house_id).credit_balance
            remaining = credit_before
            rows = []
            periods = sorted(self.db.list_periods(), key=lambda p: p.sort_key)
            for period in periods:
                if remaining <= 0:
                    break
                charges = sorted(
                    self.db.find_charges_by_house_and_period(house_id, period.id),
                    key=lambda c: CONCEPT_ORDER.index(c.concept_type),
                )
                for charge in charges:
                    if remaining <= 0:
                        break
                    paid = self.db.sum_allocated_by_house_and_period(
                        house_id, period.id, charge.concept_type
                    )
                    pending = round2(charge.expected_amount - paid)
                    if pending <= 0:
                        continue
                    amount = min(remaining, pending)
                    rows.append(
                        {
                            "record_id": CREDIT_RECORD_ID,
                            "period_id": period.id,
                            "concept_type": charge.concept_type,
                            "allocated_amount": amount,
                            "expected_amount": charge.expected_amount,
                            "payment_status": (
                                PaymentStatus.COMPLETE if amount >= pending else PaymentStatus.PARTIAL
                            ),
                        }
                    )
                    remaining = round2(remaining - amount)

            applied = round2(credit_before - remaining)
            created_ids = []
            if rows:
                created_ids = self.db.record_allocations(house_id, rows, credit_delta=-applied)

        if applied > 0:
            logger.info(
                "Applied $%s of credit for house %s in %d allocation(s)",
                applied,
                house_id,
                len(created_ids),
            )
        return CreditApplication(
            house_id=house_id,
            credit_before=credit_before,
            credit_after=round2(remaining),
            total_applied=applied,
            allocations=tuple(
                self._load_created(house_id, created_ids, {row["period_id"] for row in rows})
            ),
        )
