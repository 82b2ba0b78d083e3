from dataclasses import dataclass
from typing import Dict, Type
from loguru import logger

from .base import (
    LLMProvider,
    VisionProvider,
    TranscriptionProvider,
)
from .openai_providers import (
    OpenAILLMProvider,
    OpenAIVisionProvider,
    OpenAITranscriptionProvider
)
from ..exceptions import ConfigurationException
from ..config.settings import ProviderConfig


@dataclass(frozen=True)
class ProviderBundle:
    """The three provider clients a process needs.

    Built once and passed by reference into every component; never mutated.
    """
    llm: LLMProvider
    vision: VisionProvider
    transcription: TranscriptionProvider

    async def close(self):
        for provider in (self.llm, self.vision, self.transcription):
            await provider.close()


class ProviderFactory:
    """Factory class for creating provider instances."""

    _llm_providers: Dict[str, Type[LLMProvider]] = {
        'openai': OpenAILLMProvider,
    }

    _vision_providers: Dict[str, Type[VisionProvider]] = {
        'openai': OpenAIVisionProvider,
    }

    _transcription_providers: Dict[str, Type[TranscriptionProvider]] = {
        'openai': OpenAITranscriptionProvider,
    }

    @classmethod
    def _lookup(cls, registry: Dict[str, type], kind: str, provider_name: str) -> type:
        if provider_name not in registry:
            raise ConfigurationException(
                f"Unknown {kind} provider: {provider_name}. "
                f"Supported providers: {list(registry.keys())}"
            )
        return registry[provider_name]

    @classmethod
    def create_llm_provider(cls, config: ProviderConfig, provider_name: str = "openai") -> LLMProvider:
        """
        Create LLM provider instance.

        Raises:
            ConfigurationException: If provider is not supported or the API key is missing
        """
        provider_class = cls._lookup(cls._llm_providers, "LLM", provider_name)
        logger.info(f"Creating LLM provider: {provider_name} ({config.model})")
        return provider_class(config.to_provider_config(model=config.model))

    @classmethod
    def create_vision_provider(cls, config: ProviderConfig, provider_name: str = "openai") -> VisionProvider:
        """
        Create vision provider instance.

        Raises:
            ConfigurationException: If provider is not supported or the API key is missing
        """
        provider_class = cls._lookup(cls._vision_providers, "vision", provider_name)
        logger.info(f"Creating vision provider: {provider_name} ({config.vision_model})")
        return provider_class(config.to_provider_config(model=config.vision_model))

    @classmethod
    def create_transcription_provider(cls, config: ProviderConfig, provider_name: str = "openai") -> TranscriptionProvider:
        """
        Create transcription provider instance.

        Raises:
            ConfigurationException: If provider is not supported or the API key is missing
        """
        provider_class = cls._lookup(cls._transcription_providers, "transcription", provider_name)
        logger.info(f"Creating transcription provider: {provider_name} ({config.transcription_model})")
        return provider_class(config.to_provider_config(model=config.transcription_model))

    @classmethod
    def create_bundle(cls, config: ProviderConfig, provider_name: str = "openai") -> ProviderBundle:
        if not config.has_credentials:
            raise ConfigurationException(
                "Server configuration error: OpenAI API key not set",
                error_code="MISSING_API_KEY",
            )
        return ProviderBundle(
            llm=cls.create_llm_provider(config, provider_name),
            vision=cls.create_vision_provider(config, provider_name),
            transcription=cls.create_transcription_provider(config, provider_name),
        )

    @classmethod
    def get_supported_providers(cls) -> Dict[str, list]:
        """Get list of supported providers by type."""
        return {
            "llm": list(cls._llm_providers.keys()),
            "vision": list(cls._vision_providers.keys()),
            "transcription": list(cls._transcription_providers.keys()),
        }

    @classmethod
    def register_llm_provider(cls, name: str, provider_class: Type[LLMProvider]):
        """Register a new LLM provider."""
        cls._llm_providers[name] = provider_class
        logger.info(f"Registered LLM provider: {name}")

    @classmethod
    def register_vision_provider(cls, name: str, provider_class: Type[VisionProvider]):
        """Register a new vision provider."""
        cls._vision_providers[name] = provider_class
        logger.info(f"Registered vision provider: {name}")

    @classmethod
    def register_transcription_provider(cls, name: str, provider_class: Type[TranscriptionProvider]):
        """Register a new transcription provider."""
        cls._transcription_providers[name] = provider_class
        logger.info(f"Registered transcription provider: {name}")
