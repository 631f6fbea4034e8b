"""Reasoning providers for AI-assisted payment distribution."""

import logging
from typing import Optional

from condoledger.config import Settings
from condoledger.reasoning.base import ReasoningService

logger = logging.getLogger(__name__)

__all__ = ["ReasoningService", "create_reasoning_services"]


def create_reasoning_services(
    settings: Settings,
) -> tuple[Optional[ReasoningService], Optional[ReasoningService]]:
    """Build the (primary, secondary) providers from settings.

    The Anthropic provider is only built when an API key is configured;
    a missing provider is treated as a failed one by the analyzer.
    """
    from condoledger.reasoning.anthropic_service import AnthropicReasoningService
    from condoledger.reasoning.ollama_service import OllamaReasoningService

    primary: Optional[ReasoningService] = None
    if settings.anthropic_api_key:
        primary = AnthropicReasoningService(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            timeout=settings.ai_timeout_seconds,
        )
    else:
        logger.info("ANTHROPIC_API_KEY not set, primary reasoning provider disabled")

    secondary = OllamaReasoningService(
        url=settings.ollama_url,
        model=settings.ollama_model,
        timeout=settings.ai_timeout_seconds,
    )
    return primary, secondary
