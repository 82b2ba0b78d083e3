from .base import LLMProvider, TranscriptionProvider, VisionProvider
from .factory import ProviderBundle, ProviderFactory

__all__ = [
    'LLMProvider',
    'TranscriptionProvider',
    'VisionProvider',
    'ProviderBundle',
    'ProviderFactory',
]
