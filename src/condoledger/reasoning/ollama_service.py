"""Local Ollama reasoning provider."""

import logging

import requests

from condoledger.domain.errors import ProviderError
from condoledger.reasoning.base import ReasoningService

logger = logging.getLogger(__name__)


class OllamaReasoningService(ReasoningService):
    """Secondary provider calling a local Ollama generate endpoint."""

    name = "ollama"

    def __init__(self, url: str, model: str, timeout: float = 30.0):
        self.url = url
        self.model = model
        self.timeout = timeout

    def analyze(self, prompt: str) -> str:
        logger.debug("Sending distribution prompt to %s at %s", self.model, self.url)
        try:
            response = requests.post(
                self.url,
                json={
                    "model": self.model,
                    "prompt": prompt,
                    "stream": False,
                    # Low temperature for consistent output
                    "options": {"temperature": 0.1},
                },
                timeout=self.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            raise ProviderError("Could not connect to local LLM. Is Ollama running?") from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(f"Ollama request failed: {e}") from e

        if response.status_code != 200:
            raise ProviderError(f"Ollama returned status {response.status_code}")

        try:
            text = response.json().get("response", "")
        except ValueError as e:
            raise ProviderError("Ollama returned a non-JSON body") from e
        if not text:
            raise ProviderError("Ollama returned an empty response")
        return text
