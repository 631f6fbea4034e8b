"""Anthropic Messages API reasoning provider."""

import logging
from typing import Optional

import anthropic

from condoledger.domain.errors import ProviderError
from condoledger.reasoning.base import ReasoningService

logger = logging.getLogger(__name__)


class AnthropicReasoningService(ReasoningService):
    """Primary provider backed by the Anthropic Messages API."""

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout: float = 30.0,
        max_tokens: int = 2000,
        client: Optional[anthropic.Anthropic] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.client = client or anthropic.Anthropic(api_key=api_key, timeout=timeout)

    def analyze(self, prompt: str) -> str:
        logger.debug("Sending distribution prompt to %s", self.model)
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise ProviderError(f"Anthropic request failed: {e}") from e

        if not response.content:
            raise ProviderError("Anthropic returned an empty response")
        text = getattr(response.content[0], "text", "")
        if not text:
            raise ProviderError("Anthropic returned an empty response")
        return text
