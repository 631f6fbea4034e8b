"""AI-assisted payment distribution, used when no deterministic plan applies.

Reasoning providers are untrusted: their output goes through a
parse-with-defaults step that never raises, then through arithmetic and
referential checks. A response that fails any check is discarded and the
caller falls back to manual review.
"""

import json
import logging
import re
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from condoledger.config import Settings
from condoledger.domain.entities import (
    AIDistributionRequest,
    AIDistributionResponse,
    CONFIDENCE_LEVELS,
    ConceptType,
    Confidence,
    SuggestedAllocation,
)
from condoledger.domain.errors import ProviderError
from condoledger.reasoning.base import ReasoningService
from condoledger.reasoning.prompts import build_distribution_prompt
from condoledger.utils.money import ZERO, round2, to_decimal

logger = logging.getLogger(__name__)

# Largest gap, in currency units, tolerated between allocations plus credit and the payment
RECONCILIATION_TOLERANCE = Decimal("1")

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_MODEL_CONFIDENCES = (Confidence.HIGH, Confidence.MEDIUM, Confidence.LOW)


class ParseStatus(str, Enum):
    VALID = "valid"
    SANITIZED = "sanitized"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ParseOutcome:
    """Tagged result of reading a provider answer.

    ``response`` is None only when ``status`` is REJECTED. ``issues`` lists
    every coercion applied (for SANITIZED) or the reason for rejection.
    """

    status: ParseStatus
    response: Optional[AIDistributionResponse] = None
    issues: tuple[str, ...] = ()

    @property
    def accepted(self) -> bool:
        return self.status is not ParseStatus.REJECTED


def _load_json(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass
    match = _JSON_OBJECT.search(raw)
    if match is None:
        raise ValueError("no JSON object found")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ValueError(f"invalid JSON: {e.msg}")


def _coerce_amount(value: Any, field: str, issues: list[str]) -> Decimal:
    amount = to_decimal(value, default=None)
    if amount is None:
        issues.append(f"{field}: malformed number {value!r} read as 0")
        return ZERO
    return amount


def _coerce_period_id(value: Any, issues: list[str]) -> int:
    number = to_decimal(value, default=None)
    if number is None:
        issues.append(f"period_id: malformed value {value!r} read as 0")
        return 0
    return int(number)


def _coerce_concept(value: Any, issues: list[str]) -> ConceptType:
    if value in (None, ""):
        return ConceptType.MAINTENANCE
    try:
        return ConceptType(str(value).strip().lower())
    except ValueError:
        issues.append(f"concept_type: unknown value {value!r} read as maintenance")
        return ConceptType.MAINTENANCE


def _coerce_confidence(value: Any, issues: list[str]) -> Confidence:
    level = str(value).strip().lower()
    for confidence in _MODEL_CONFIDENCES:
        if confidence.value == level:
            return confidence
    issues.append(f"confidence: unknown value {value!r} read as low")
    return Confidence.LOW


def parse_distribution_response(raw: Any) -> ParseOutcome:
    """Read a provider answer into a response, never raising.

    Accepts a dict, or a string holding JSON (possibly wrapped in prose or a
    code fence).
    """
    if isinstance(raw, str):
        try:
            raw = _load_json(raw)
        except ValueError as e:
            return ParseOutcome(ParseStatus.REJECTED, issues=(f"Unparseable response: {e}",))
    if not isinstance(raw, dict):
        return ParseOutcome(
            ParseStatus.REJECTED,
            issues=(f"Unexpected response type: {type(raw).__name__}",),
        )

    issues: list[str] = []
    raw_allocations = raw.get("allocations")
    if not isinstance(raw_allocations, list):
        issues.append("allocations: missing or not a list, read as empty")
        raw_allocations = []

    allocations = []
    for index, item in enumerate(raw_allocations):
        if not isinstance(item, dict):
            issues.append(f"allocations[{index}]: not an object, skipped")
            continue
        allocations.append(
            SuggestedAllocation(
                period_id=_coerce_period_id(item.get("period_id"), issues),
                concept_type=_coerce_concept(item.get("concept_type"), issues),
                amount=_coerce_amount(item.get("amount"), f"allocations[{index}].amount", issues),
                reasoning=str(item.get("reasoning") or ""),
            )
        )

    response = AIDistributionResponse(
        allocations=tuple(allocations),
        confidence=_coerce_confidence(raw.get("confidence"), issues),
        reasoning=str(raw.get("reasoning") or "No explanation provided"),
        total_allocated=_coerce_amount(raw.get("total_allocated"), "total_allocated", issues),
        remaining_as_credit=_coerce_amount(
            raw.get("remaining_as_credit"), "remaining_as_credit", issues
        ),
    )
    status = ParseStatus.SANITIZED if issues else ParseStatus.VALID
    return ParseOutcome(status, response, tuple(issues))


def validate_response(
    response: AIDistributionResponse, request: AIDistributionRequest
) -> Optional[AIDistributionResponse]:
    """Check a parsed response against the request it answers.

    Returns:
        The response with totals recomputed from its allocations, or None if
        it does not reconcile, allocates more than was paid or references
        unknown periods.
    """
    recomputed = sum((a.amount for a in response.allocations), ZERO)
    if recomputed > request.amount or response.remaining_as_credit < 0:
        logger.warning(
            "AI response allocates %s with %s credit from a payment of %s",
            recomputed,
            response.remaining_as_credit,
            request.amount,
        )
        return None

    difference = abs(recomputed + response.remaining_as_credit - request.amount)
    if difference > RECONCILIATION_TOLERANCE:
        logger.warning(
            "AI response does not reconcile: %s allocated + %s credit vs %s paid (diff %s)",
            recomputed,
            response.remaining_as_credit,
            request.amount,
            difference,
        )
        return None

    valid_period_ids = {p.period_id for p in request.unpaid_periods}
    for allocation in response.allocations:
        if allocation.period_id not in valid_period_ids:
            logger.warning("AI suggested unknown period %s", allocation.period_id)
            return None
        if allocation.amount <= 0:
            logger.warning("AI suggested non-positive amount %s", allocation.amount)
            return None

    return replace(
        response,
        total_allocated=round2(recomputed),
        remaining_as_credit=round2(request.amount - recomputed),
    )


def meets_confidence_threshold(confidence: Confidence, threshold: Confidence) -> bool:
    """Whether a confidence is at or above the configured minimum."""
    return CONFIDENCE_LEVELS[confidence] >= CONFIDENCE_LEVELS[threshold]


class AIDistributionAnalyzer:
    """Asks a primary, then a secondary, reasoning service for a distribution."""

    def __init__(
        self,
        primary: Optional[ReasoningService],
        secondary: Optional[ReasoningService] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize analyzer.

        Args:
            primary: Provider tried first (None counts as a failed provider)
            secondary: Provider tried once when the primary fails
            settings: Business settings (defaults apply when omitted)
        """
        self.primary = primary
        self.secondary = secondary
        self.settings = settings or Settings()

    def analyze(self, request: AIDistributionRequest) -> Optional[AIDistributionResponse]:
        """Get a validated distribution for a payment, or None.

        None means AI distribution is disabled, both providers failed, or the
        answer did not pass validation.
        """
        if not self.settings.enable_ai_distribution:
            logger.debug("AI payment distribution disabled")
            return None

        prompt = build_distribution_prompt(request, self.settings.default_maintenance_amount)

        response = None
        for role, provider in (("primary", self.primary), ("secondary", self.secondary)):
            response = self._ask(role, provider, prompt)
            if response is not None:
                break
        if response is None:
            logger.warning(
                "No reasoning provider produced a distribution for house %s", request.house_number
            )
            return None

        return validate_response(response, request)

    def _ask(
        self, role: str, provider: Optional[ReasoningService], prompt: str
    ) -> Optional[AIDistributionResponse]:
        if provider is None:
            logger.debug("No %s reasoning provider configured", role)
            return None

        try:
            raw = provider.analyze(prompt)
        except ProviderError as e:
            logger.warning("%s provider %s failed: %s", role.capitalize(), provider.name, e)
            return None

        outcome = parse_distribution_response(raw)
        if not outcome.accepted:
            logger.warning(
                "%s provider %s returned unusable output: %s",
                role.capitalize(),
                provider.name,
                "; ".join(outcome.issues),
            )
            return None
        if outcome.status is ParseStatus.SANITIZED:
            logger.info("Sanitized %s provider output: %s", role, "; ".join(outcome.issues))
        return outcome.response
