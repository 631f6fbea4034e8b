"""Prompt template for AI-assisted payment distribution."""

from decimal import Decimal
from typing import Iterable

from condoledger.domain.entities import AIDistributionRequest, UnpaidPeriod

PAYMENT_DISTRIBUTION_PROMPT = """You are an expert in distributing payments for a condominium management system.

CONTEXT:
- A resident made a payment of {amount}
- House number: {house_number}
- Current credit balance: {credit_balance}
- Total debt: {total_debt}

UNPAID PERIODS (oldest to newest):
{unpaid_periods}

DISTRIBUTION RULES:
1. ALWAYS pay the oldest periods first (FIFO)
2. The monthly maintenance amount is typically ${unit}
3. If the payment is exactly N * ${unit}, distribute it to the N oldest periods
4. If the payment is not an exact multiple of ${unit}, cover full periods first and leave the rest as a partial payment or credit
5. Never allocate more than the pending amount of a period
6. If money is left after covering every period, report it as remaining_as_credit

STRICT JSON RESPONSE:
{
  "allocations": [
    {
      "period_id": number,
      "concept_type": "maintenance",
      "amount": number (amount allocated to this period),
      "reasoning": "short explanation"
    }
  ],
  "confidence": "high" | "medium" | "low",
  "reasoning": "overall explanation of the distribution",
  "total_allocated": number (sum of every amount),
  "remaining_as_credit": number (amount left over as credit)
}

CHECKS:
- The sum of allocations.amount plus remaining_as_credit MUST equal the payment amount
- Every period_id MUST exist in the list of unpaid periods
- Every amount MUST be > 0
- Confidence "high" = obvious distribution (exact multiple), "medium" = reasonable distribution, "low" = ambiguous

Return ONLY the JSON, without further explanation."""


def format_unpaid_periods(periods: Iterable[UnpaidPeriod]) -> str:
    """One line per unpaid period, in the order given."""
    return "\n".join(
        f"- Period {p.display_name} (ID: {p.period_id}): expected ${p.expected_maintenance}, "
        f"paid ${p.paid_maintenance}, pending ${p.pending_maintenance}"
        for p in periods
    )


def build_distribution_prompt(request: AIDistributionRequest, unit: Decimal) -> str:
    """Fill the distribution prompt for one payment."""
    # str.replace because the template contains literal JSON braces
    return (
        PAYMENT_DISTRIBUTION_PROMPT.replace("{amount}", f"${request.amount}")
        .replace("{house_number}", str(request.house_number))
        .replace("{credit_balance}", f"${request.credit_balance}")
        .replace("{total_debt}", f"${request.total_debt}")
        .replace("{unpaid_periods}", format_unpaid_periods(request.unpaid_periods))
        .replace("{unit}", str(unit))
    )
