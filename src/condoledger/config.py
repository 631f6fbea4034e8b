"""Runtime settings loaded from environment variables."""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from condoledger.domain.entities import Confidence
from condoledger.domain.errors import ValidationError

ENV_PREFIX = "CONDOLEDGER_"


@dataclass(frozen=True)
class Settings:
    """Business rules and reasoning-provider settings."""

    default_maintenance_amount: Decimal = Decimal("800")
    max_periods_for_distribution: int = 12
    enable_ai_distribution: bool = True
    ai_confidence_threshold: Confidence = Confidence.MEDIUM
    ai_timeout_seconds: float = 30.0
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    ollama_url: str = "http://localhost:11434/api/generate"
    ollama_model: str = "llama3.2:latest"


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise ValidationError(f"{name} must be a boolean, got '{value}'")


def _parse_positive_decimal(name: str, value: str) -> Decimal:
    try:
        amount = Decimal(value.strip())
    except InvalidOperation:
        raise ValidationError(f"{name} must be a number, got '{value}'")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{name} must be greater than zero, got '{value}'")
    return amount


def _parse_positive_int(name: str, value: str) -> int:
    try:
        number = int(value.strip())
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got '{value}'")
    if number <= 0:
        raise ValidationError(f"{name} must be greater than zero, got '{value}'")
    return number


def _parse_confidence(name: str, value: str) -> Confidence:
    try:
        confidence = Confidence(value.strip().lower())
    except ValueError:
        confidence = None
    if confidence is None or confidence is Confidence.NONE:
        raise ValidationError(f"{name} must be one of high, medium, low, got '{value}'")
    return confidence


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from environment variables, falling back to defaults.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Settings instance

    Raises:
        ValidationError: If a variable holds an invalid value
    """
    env = os.environ if environ is None else environ
    defaults = Settings()

    def get(key: str) -> Optional[str]:
        value = env.get(key)
        return value if value not in (None, "") else None

    maintenance = get(f"{ENV_PREFIX}MAINTENANCE_AMOUNT")
    max_periods = get(f"{ENV_PREFIX}MAX_PERIODS")
    enable_ai = get(f"{ENV_PREFIX}ENABLE_AI")
    threshold = get(f"{ENV_PREFIX}AI_CONFIDENCE_THRESHOLD")
    timeout = get(f"{ENV_PREFIX}AI_TIMEOUT")

    return Settings(
        default_maintenance_amount=(
            _parse_positive_decimal("CONDOLEDGER_MAINTENANCE_AMOUNT", maintenance)
            if maintenance is not None
            else defaults.default_maintenance_amount
        ),
        max_periods_for_distribution=(
            _parse_positive_int("CONDOLEDGER_MAX_PERIODS", max_periods)
            if max_periods is not None
            else defaults.max_periods_for_distribution
        ),
        enable_ai_distribution=(
            _parse_bool("CONDOLEDGER_ENABLE_AI", enable_ai)
            if enable_ai is not None
            else defaults.enable_ai_distribution
        ),
        ai_confidence_threshold=(
            _parse_confidence("CONDOLEDGER_AI_CONFIDENCE_THRESHOLD", threshold)
            if threshold is not None
            else defaults.ai_confidence_threshold
        ),
        ai_timeout_seconds=(
            float(_parse_positive_decimal("CONDOLEDGER_AI_TIMEOUT", timeout))
            if timeout is not None
            else defaults.ai_timeout_seconds
        ),
        anthropic_api_key=get("ANTHROPIC_API_KEY"),
        anthropic_model=get(f"{ENV_PREFIX}ANTHROPIC_MODEL") or defaults.anthropic_model,
        ollama_url=get(f"{ENV_PREFIX}OLLAMA_URL") or defaults.ollama_url,
        ollama_model=get(f"{ENV_PREFIX}OLLAMA_MODEL") or defaults.ollama_model,
    )
