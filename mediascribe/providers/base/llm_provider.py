from abc import ABC, abstractmethod
from typing import Dict, Any, List

class LLMProvider(ABC):
    """Abstract base class for chat completion providers."""

    @abstractmethod
    async def chat_completion(self, messages: List[Dict], **kwargs) -> Dict[str, Any]:
        """Generate chat completion response.

        Returns a dict with ``content`` and ``usage`` (OpenAI usage counters or None).
        """
        pass

    async def close(self):
        """Close the provider and cleanup resources."""
        pass
