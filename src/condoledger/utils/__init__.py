"""Utility functions for condoledger."""

from condoledger.utils.date_parser import parse_date, normalize_time, month_bounds
from condoledger.utils.amount_parser import parse_amount
from condoledger.utils.money import round2, to_decimal

__all__ = ["parse_date", "normalize_time", "month_bounds", "parse_amount", "round2", "to_decimal"]
