from mediascribe.providers.base import LLMProvider
from loguru import logger
from mediascribe.utils.error_handler import convert_exceptions
from mediascribe.exceptions import ProviderException
from typing import Dict, Any, List
from openai import OpenAIError
from .client import create_async_client


class OpenAILLMProvider(LLMProvider):
    """OpenAI chat completion provider implementation."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.client = create_async_client(config)

    @convert_exceptions({OpenAIError: ProviderException})
    async def chat_completion(self, messages: List[Dict], **kwargs) -> Dict[str, Any]:
        """Generate chat completion using OpenAI."""
        model = kwargs.pop("model", None) or self.config.get("model", "gpt-4o-mini")
        completion_kwargs = {
            "model": model,
            "messages": messages,
            **kwargs
        }
        try:
            response = await self.client.chat.completions.create(**completion_kwargs)
        except OpenAIError as e:
            logger.error(f"OpenAI chat completion failed: {e}")
            raise

        return {
            "content": response.choices[0].message.content,
            "usage": response.usage.model_dump() if response.usage else None,
            "model": response.model,
            "finish_reason": response.choices[0].finish_reason
        }

    async def close(self):
        """Close the LLM client and cleanup resources."""
        if self.client:
            logger.info("Closing OpenAI LLM client")
            await self.client.close()
