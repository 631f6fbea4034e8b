"""Resolution of the periods in which a house still owes maintenance."""

import logging
from typing import Optional

from condoledger.config import Settings
from condoledger.database.base import Database
from condoledger.domain.entities import ConceptType, UnpaidPeriod
from condoledger.utils.money import ZERO, round2

logger = logging.getLogger(__name__)


class UnpaidPeriodResolver:
    """Finds pending maintenance for a house, oldest period first."""

    def __init__(self, db: Database, settings: Optional[Settings] = None):
        """Initialize resolver.

        Args:
            db: Database instance
            settings: Business settings (defaults apply when omitted)
        """
        self.db = db
        self.settings = settings or Settings()

    def resolve_unpaid_periods(self, house_id: int) -> list[UnpaidPeriod]:
        """List periods with maintenance still pending for a house.

        Periods without an active config for their start date are skipped.
        The list is capped at the configured maximum number of periods.

        Args:
            house_id: House ID

        Returns:
            Unpaid periods ordered by (year, month) ascending
        """
        limit = self.settings.max_periods_for_distribution
        periods = sorted(self.db.list_periods(), key=lambda p: p.sort_key)

        unpaid: list[UnpaidPeriod] = []
        for period in periods:
            if len(unpaid) >= limit:
                break

            config = self.db.find_active_config_for_date(period.start_date)
            if config is None:
                logger.debug("No active config for %s, skipping", period.display_name)
                continue

            expected = round2(
                self.db.get_applicable_amount(
                    house_id,
                    period.id,
                    ConceptType.MAINTENANCE,
                    config.default_maintenance_amount,
                )
            )
            paid = round2(
                self.db.sum_allocated_by_house_and_period(
                    house_id, period.id, ConceptType.MAINTENANCE
                )
            )
            pending = max(ZERO, expected - paid)
            if pending > 0:
                unpaid.append(
                    UnpaidPeriod(
                        period_id=period.id,
                        year=period.year,
                        month=period.month,
                        display_name=period.display_name,
                        expected_maintenance=expected,
                        paid_maintenance=paid,
                        pending_maintenance=round2(pending),
                    )
                )

        return unpaid
