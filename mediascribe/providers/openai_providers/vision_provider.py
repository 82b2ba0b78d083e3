import base64
from mediascribe.utils.error_handler import convert_exceptions
from mediascribe.providers.base import VisionProvider
from mediascribe.exceptions import ProviderException
from openai import OpenAIError
from loguru import logger
from typing import Dict, Any
from .client import create_async_client


class OpenAIVisionProvider(VisionProvider):
    """OpenAI Vision provider implementation."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.client = create_async_client(config)

    @convert_exceptions({OpenAIError: ProviderException})
    async def analyze_image(self, image_data: bytes, **kwargs) -> Dict[str, Any]:
        """Analyze a JPEG image using OpenAI Vision."""
        model = self.config.get("model", "gpt-4o")
        prompt = kwargs.get("prompt", "Analyze this image and describe what you see.")
        image_base64 = base64.b64encode(image_data).decode('utf-8')

        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": f"data:image/jpeg;base64,{image_base64}"
                        }
                    }
                ]
            }
        ]

        completion_kwargs = {
            "model": model,
            "messages": messages,
            "max_tokens": kwargs.get("max_tokens", 1000),
        }
        if kwargs.get("response_format"):
            completion_kwargs["response_format"] = kwargs["response_format"]

        try:
            response = await self.client.chat.completions.create(**completion_kwargs)
        except OpenAIError as e:
            logger.error(f"OpenAI Vision analysis failed: {e}")
            raise

        return {
            "analysis": response.choices[0].message.content,
            "model": response.model,
            "usage": response.usage.model_dump() if response.usage else None
        }

    async def close(self):
        """Close the vision client and cleanup resources."""
        if self.client:
            logger.info("Closing OpenAI vision client")
            await self.client.close()
