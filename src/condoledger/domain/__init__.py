"""Domain layer for condoledger application."""

import importlib

# Services are imported lazily to avoid circular imports with condoledger.config
_SERVICES = {
    "ChargeLedgerService": "condoledger.domain.ledger",
    "ChargeMutationService": "condoledger.domain.charges",
    "DistributionService": "condoledger.domain.distribution",
    "AIDistributionAnalyzer": "condoledger.domain.ai_distribution",
    "HouseService": "condoledger.domain.houses",
    "PeriodService": "condoledger.domain.periods",
    "StatementIngestionService": "condoledger.domain.statement_ingestion",
    "UnpaidPeriodResolver": "condoledger.domain.unpaid_periods",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
