"""House domain service."""

import logging
from decimal import Decimal
from typing import Optional

from condoledger.database.base import Database
from condoledger.domain.entities import (
    OVERRIDABLE_CONCEPTS,
    ConceptType,
    House,
    HouseBalance,
    HousePeriodOverride,
)
from condoledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    house_not_found,
    period_not_found,
)
from condoledger.utils.money import round2

logger = logging.getLogger(__name__)

MIN_HOUSE_NUMBER = 1
MAX_HOUSE_NUMBER = 66


class HouseService:
    """Service for managing houses and their per-period overrides."""

    def __init__(self, db: Database):
        """Initialize house service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_house(self, number: int) -> House:
        """Register a house.

        Raises:
            ValidationError: If the number is out of range
            ConflictError: If the house already exists
        """
        if not MIN_HOUSE_NUMBER <= number <= MAX_HOUSE_NUMBER:
            raise ValidationError(
                f"House number must be between {MIN_HOUSE_NUMBER} and {MAX_HOUSE_NUMBER}, got {number}"
            )
        if self.db.get_house_by_number(number) is not None:
            raise ConflictError(f"House {number} already exists")

        house_id = self.db.create_house(number)
        logger.info("Created house %s", number)
        return self.db.get_house(house_id)

    def get_house(self, house_id: int) -> Optional[House]:
        """Get house by ID."""
        return self.db.get_house(house_id)

    def get_house_by_number(self, number: int) -> Optional[House]:
        """Get house by number."""
        return self.db.get_house_by_number(number)

    def require_house_by_number(self, number: int) -> House:
        """Get house by number.

        Raises:
            NotFoundError: If no house has that number
        """
        house = self.db.get_house_by_number(number)
        if house is None:
            raise NotFoundError(house_not_found(number))
        return house

    def list_houses(self) -> list[House]:
        """List houses ordered by number."""
        return self.db.list_houses()

    def get_balance(self, house_id: int) -> HouseBalance:
        """Credit/debit account of a house."""
        if self.db.get_house(house_id) is None:
            raise NotFoundError(house_not_found(house_id))
        return self.db.get_or_create_house_balance(house_id)

    def set_override(
        self,
        house_id: int,
        period_id: int,
        concept_type: ConceptType,
        custom_amount: Decimal,
    ) -> HousePeriodOverride:
        """Give a house a custom amount for one concept of a period.

        Only affects charges seeded afterwards; existing charges are changed
        through adjustments.

        Raises:
            NotFoundError: If the house or period doesn't exist
            ValidationError: If the concept can't be overridden or the amount is negative
        """
        if self.db.get_house(house_id) is None:
            raise NotFoundError(house_not_found(house_id))
        if self.db.get_period(period_id) is None:
            raise NotFoundError(period_not_found(period_id))

        try:
            concept = ConceptType(concept_type)
        except ValueError:
            raise ValidationError(f"Unknown concept type: {concept_type}")
        if concept not in OVERRIDABLE_CONCEPTS:
            allowed = ", ".join(c.value for c in OVERRIDABLE_CONCEPTS)
            raise ValidationError(f"Cannot override {concept.value}. Allowed concepts: {allowed}")
        if custom_amount < 0:
            raise ValidationError(f"Override amount cannot be negative: ${custom_amount}")

        override_id = self.db.set_override(house_id, period_id, concept, round2(custom_amount))
        logger.info(
            "Override for house %s in period %s: %s = $%s",
            house_id,
            period_id,
            concept.value,
            custom_amount,
        )
        return next(o for o in self.db.find_overrides_by_period(period_id) if o.id == override_id)
