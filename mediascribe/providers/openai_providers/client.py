from typing import Dict, Any
from openai import AsyncOpenAI
from mediascribe.exceptions import ConfigurationException, ProviderException


def create_async_client(config: Dict[str, Any]) -> AsyncOpenAI:
    """Initialize an AsyncOpenAI client from a provider config dict.

    ``timeout`` and ``max_retries`` are only passed through when configured,
    otherwise the SDK defaults apply.
    """
    api_key = config.get("api_key")
    if not api_key:
        raise ConfigurationException("OpenAI API key is required", error_code="MISSING_API_KEY")

    client_kwargs = {"api_key": api_key}
    for key in ("base_url", "timeout", "max_retries"):
        if config.get(key) is not None:
            client_kwargs[key] = config[key]

    try:
        return AsyncOpenAI(**client_kwargs)
    except Exception as e:
        raise ProviderException(f"Failed to initialize OpenAI client: {e}")
