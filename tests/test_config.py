"""Tests for settings loaded from the environment."""

from decimal import Decimal

import pytest

from condoledger.config import Settings, load_settings
from condoledger.domain.entities import Confidence
from condoledger.domain.errors import ValidationError


def test_defaults():
    """Test that an empty environment gives the default settings."""
    settings = load_settings({})

    assert settings == Settings()
    assert settings.default_maintenance_amount == Decimal("800")
    assert settings.max_periods_for_distribution == 12
    assert settings.enable_ai_distribution is True
    assert settings.ai_confidence_threshold is Confidence.MEDIUM
    assert settings.anthropic_api_key is None


def test_overrides():
    """Test that every variable is read."""
    settings = load_settings(
        {
            "CONDOLEDGER_MAINTENANCE_AMOUNT": "950.50",
            "CONDOLEDGER_MAX_PERIODS": "6",
            "CONDOLEDGER_ENABLE_AI": "no",
            "CONDOLEDGER_AI_CONFIDENCE_THRESHOLD": "HIGH",
            "CONDOLEDGER_AI_TIMEOUT": "5",
            "ANTHROPIC_API_KEY": "sk-test",
            "CONDOLEDGER_ANTHROPIC_MODEL": "claude-test",
            "CONDOLEDGER_OLLAMA_URL": "http://ollama:11434/api/generate",
            "CONDOLEDGER_OLLAMA_MODEL": "mistral",
        }
    )

    assert settings.default_maintenance_amount == Decimal("950.50")
    assert settings.max_periods_for_distribution == 6
    assert settings.enable_ai_distribution is False
    assert settings.ai_confidence_threshold is Confidence.HIGH
    assert settings.ai_timeout_seconds == 5.0
    assert settings.anthropic_api_key == "sk-test"
    assert settings.anthropic_model == "claude-test"
    assert settings.ollama_url == "http://ollama:11434/api/generate"
    assert settings.ollama_model == "mistral"


def test_empty_values_fall_back_to_defaults():
    settings = load_settings({"CONDOLEDGER_MAX_PERIODS": "", "ANTHROPIC_API_KEY": ""})

    assert settings.max_periods_for_distribution == 12
    assert settings.anthropic_api_key is None


def test_reads_os_environ(monkeypatch):
    monkeypatch.setenv("CONDOLEDGER_MAX_PERIODS", "3")

    assert load_settings().max_periods_for_distribution == 3


@pytest.mark.parametrize(
    "key,value",
    [
        ("CONDOLEDGER_MAINTENANCE_AMOUNT", "abc"),
        ("CONDOLEDGER_MAINTENANCE_AMOUNT", "0"),
        ("CONDOLEDGER_MAX_PERIODS", "2.5"),
        ("CONDOLEDGER_MAX_PERIODS", "-1"),
        ("CONDOLEDGER_ENABLE_AI", "sometimes"),
        ("CONDOLEDGER_AI_CONFIDENCE_THRESHOLD", "none"),
        ("CONDOLEDGER_AI_CONFIDENCE_THRESHOLD", "very high"),
        ("CONDOLEDGER_AI_TIMEOUT", "-3"),
    ],
)
def test_invalid_values(key, value):
    """Test that invalid values name the offending variable."""
    with pytest.raises(ValidationError, match=key):
        load_settings({key: value})
