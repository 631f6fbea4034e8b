"""Period domain service."""

import logging
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from condoledger.database.base import Database
from condoledger.domain.entities import (
    ChargeSource,
    ConceptType,
    HousePeriodCharge,
    PenaltyGeneration,
    Period,
    PeriodConfig,
)
from condoledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    period_not_found,
)
from condoledger.utils.date_parser import month_bounds
from condoledger.utils.money import ZERO, round2

logger = logging.getLogger(__name__)

MIN_DUE_DAY = 1
MAX_DUE_DAY = 28


class PeriodService:
    """Service for managing periods, their configs and seeded charges."""

    def __init__(self, db: Database):
        """Initialize period service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_config(
        self,
        default_maintenance_amount: Decimal,
        effective_from: date,
        default_water_amount: Decimal = ZERO,
        default_extraordinary_fee_amount: Decimal = ZERO,
        payment_due_day: int = 10,
        late_payment_penalty_amount: Decimal = ZERO,
        effective_until: Optional[date] = None,
    ) -> PeriodConfig:
        """Create a period config.

        An active config without an end date is closed the day before the new
        one takes effect.

        Raises:
            ValidationError: If an amount is negative, the due day is out of
                range or the effective window is inverted
        """
        amounts = {
            "maintenance": default_maintenance_amount,
            "water": default_water_amount,
            "extraordinary fee": default_extraordinary_fee_amount,
            "late payment penalty": late_payment_penalty_amount,
        }
        for name, amount in amounts.items():
            if amount < 0:
                raise ValidationError(f"Default {name} amount cannot be negative: ${amount}")
        if not MIN_DUE_DAY <= payment_due_day <= MAX_DUE_DAY:
            raise ValidationError(
                f"Payment due day must be between {MIN_DUE_DAY} and {MAX_DUE_DAY}, got {payment_due_day}"
            )
        if effective_until is not None and effective_until < effective_from:
            raise ValidationError(
                f"Effective until ({effective_until}) is before effective from ({effective_from})"
            )

        for config in self.db.list_period_configs():
            if config.is_active and config.effective_until is None and config.effective_from < effective_from:
                self.db.close_period_config(config.id, effective_from - timedelta(days=1))
                logger.info("Closed period config %s on %s", config.id, effective_from - timedelta(days=1))

        config_id = self.db.create_period_config(
            default_maintenance_amount=round2(default_maintenance_amount),
            default_water_amount=round2(default_water_amount),
            default_extraordinary_fee_amount=round2(default_extraordinary_fee_amount),
            payment_due_day=payment_due_day,
            late_payment_penalty_amount=round2(late_payment_penalty_amount),
            effective_from=effective_from,
            effective_until=effective_until,
        )
        logger.info("Created period config %s effective from %s", config_id, effective_from)
        return self.db.get_period_config(config_id)

    def list_configs(self) -> list[PeriodConfig]:
        """List configs, most recent first."""
        return self.db.list_period_configs()

    def create_period(self, year: int, month: int) -> Period:
        """Create the period for a calendar month.

        Raises:
            ValidationError: If the month is invalid
            ConflictError: If the period already exists
        """
        try:
            start_date, end_date = month_bounds(year, month)
        except ValueError as e:
            raise ValidationError(str(e))

        if self.db.get_period_by_year_month(year, month) is not None:
            raise ConflictError(f"A period already exists for {year}-{month:02d}")

        config = self.db.find_active_config_for_date(start_date)
        period_id = self.db.create_period(
            year=year,
            month=month,
            start_date=start_date,
            end_date=end_date,
            config_id=config.id if config else None,
        )
        if config is None:
            logger.warning("Period %d-%02d created without an active config", year, month)
        else:
            logger.info("Created period %d-%02d with config %s", year, month, config.id)
        return self.db.get_period(period_id)

    def ensure_period_exists(self, year: int, month: int) -> Period:
        """Return the period for a month, creating it when missing."""
        period = self.db.get_period_by_year_month(year, month)
        if period is not None:
            return period
        return self.create_period(year, month)

    def get_period(self, period_id: int) -> Period:
        """Get period by ID.

        Raises:
            NotFoundError: If the period doesn't exist
        """
        period = self.db.get_period(period_id)
        if period is None:
            raise NotFoundError(period_not_found(period_id))
        return period

    def list_periods(self) -> list[Period]:
        """List periods ordered by (year, month)."""
        return sorted(self.db.list_periods(), key=lambda p: p.sort_key)

    def update_period_concepts(
        self,
        period_id: int,
        water_active: Optional[bool] = None,
        extraordinary_fee_active: Optional[bool] = None,
    ) -> Period:
        """Turn the water and extraordinary fee concepts of a period on or off."""
        self.get_period(period_id)
        self.db.update_period_concepts(period_id, water_active, extraordinary_fee_active)
        return self.get_period(period_id)

    def _config_for(self, period: Period) -> Optional[PeriodConfig]:
        if period.config_id is not None:
            config = self.db.get_period_config(period.config_id)
            if config is not None:
                return config
        return self.db.find_active_config_for_date(period.start_date)

    def seed_charges_for_period(self, period_id: int) -> int:
        """Create the expected charges of every house for a period.

        Maintenance is always charged; water and extraordinary fee only when
        the period has them turned on. Amounts come from the house override
        when there is one, else from the config. Zero amounts are not charged.
        Houses that already have charges in the period are skipped, so
        reseeding only picks up houses added since the last seed.

        Returns:
            Number of charges created

        Raises:
            NotFoundError: If the period doesn't exist
        """
        period = self.get_period(period_id)

        config = self._config_for(period)
        if config is None:
            logger.warning("No period config for %s, skipping seed", period.display_name)
            return 0

        seeded = {c.house_id for c in self.db.find_charges_by_period(period_id)}
        houses = [h for h in self.db.list_houses() if h.id not in seeded]
        if not houses:
            logger.info("Every house already has charges in %s", period.display_name)
            return 0

        concepts = [ConceptType.MAINTENANCE]
        if period.water_active:
            concepts.append(ConceptType.WATER)
        if period.extraordinary_fee_active:
            concepts.append(ConceptType.EXTRAORDINARY_FEE)

        overrides = {
            (o.house_id, o.concept_type): o.custom_amount
            for o in self.db.find_overrides_by_period(period_id)
        }

        charges = []
        for house in houses:
            for concept in concepts:
                override = overrides.get((house.id, concept))
                if override is not None:
                    amount, source = override, ChargeSource.OVERRIDE
                else:
                    amount, source = config.default_amount(concept), ChargeSource.CONFIG
                if amount <= 0:
                    continue
                charges.append(
                    {
                        "house_id": house.id,
                        "period_id": period_id,
                        "concept_type": concept,
                        "expected_amount": round2(amount),
                        "source": source,
                    }
                )

        if charges:
            self.db.create_charges(charges)
        logger.info(
            "Seeded %d charges for %d house(s) in %s", len(charges), len(houses), period.display_name
        )
        return len(charges)

    def generate_penalties_for_period(
        self, period_id: int, today: Optional[date] = None
    ) -> PenaltyGeneration:
        """Charge the late-payment penalty to houses with unpaid maintenance.

        Applies once the config's payment due day of the period month has
        passed. A house is penalized when its maintenance charge is not fully
        paid and it has no penalty charge in the period yet.

        Args:
            period_id: Period ID
            today: Reference date (defaults to today)

        Returns:
            PenaltyGeneration listing the penalized houses

        Raises:
            NotFoundError: If the period doesn't exist
            ValidationError: If the period has no config
        """
        period = self.get_period(period_id)
        config = self._config_for(period)
        if config is None:
            raise ValidationError(f"No period config covers {period.display_name}")

        today = today or date.today()
        due_date = date(period.year, period.month, config.payment_due_day)
        penalty_amount = round2(config.late_payment_penalty_amount)
        result = PenaltyGeneration(
            period_id=period_id, due_date=due_date, penalty_amount=penalty_amount
        )
        if today <= due_date or penalty_amount <= 0:
            logger.info(
                "No penalties for %s: due %s, penalty $%s",
                period.display_name,
                due_date,
                penalty_amount,
            )
            return result

        charges_by_house: dict[int, dict[ConceptType, HousePeriodCharge]] = {}
        for charge in self.db.find_charges_by_period(period_id):
            charges_by_house.setdefault(charge.house_id, {})[charge.concept_type] = charge

        penalized = []
        already_penalized = 0
        for house_id, charges in sorted(charges_by_house.items()):
            maintenance = charges.get(ConceptType.MAINTENANCE)
            if maintenance is None:
                continue
            paid = self.db.sum_allocated_by_house_and_period(
                house_id, period_id, ConceptType.MAINTENANCE
            )
            if paid >= maintenance.expected_amount:
                continue
            if ConceptType.PENALTIES in charges:
                already_penalized += 1
                continue
            penalized.append(house_id)

        if penalized:
            self.db.create_charges(
                [
                    {
                        "house_id": house_id,
                        "period_id": period_id,
                        "concept_type": ConceptType.PENALTIES,
                        "expected_amount": penalty_amount,
                        "source": ChargeSource.CONFIG,
                    }
                    for house_id in penalized
                ]
            )
        logger.info(
            "Charged $%s penalty to %d house(s) in %s",
            penalty_amount,
            len(penalized),
            period.display_name,
        )
        return replace(
            result, penalized_house_ids=tuple(penalized), already_penalized=already_penalized
        )
