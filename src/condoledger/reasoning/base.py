"""Abstract reasoning service interface."""

from abc import ABC, abstractmethod
from typing import Any, Union


class ReasoningService(ABC):
    """A provider that answers a text prompt with structured output."""

    name = "reasoning"

    @abstractmethod
    def analyze(self, prompt: str) -> Union[str, dict[str, Any]]:
        """Send a prompt and return the raw answer.

        Raises:
            ProviderError: If the provider could not produce an answer
        """
        pass
