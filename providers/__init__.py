"""
Generative-text provider implementations.
"""
from typing import Optional

import httpx

from errors import ConfigurationError
from settings import GEMINI_API_BASE, OPENAI_API_BASE
from providers.base_provider import BaseProvider
from providers.gemini_provider import GeminiProvider
from providers.openai_provider import OpenAIProvider

PROVIDERS = {
    "gemini": (GeminiProvider, GEMINI_API_BASE),
    "openai": (OpenAIProvider, OPENAI_API_BASE),
}


def create_provider(
    name: str,
    api_key: str,
    model: str,
    base_url: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BaseProvider:
    """Instantiate the configured provider

    Raises:
        ConfigurationError: For an unknown provider name
    """
    try:
        provider_cls, default_base = PROVIDERS[name.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown AI_PROVIDER '{name}'. Expected one of: {', '.join(PROVIDERS)}"
        ) from None
    return provider_cls(base_url or default_base, api_key, model, transport=transport)


__all__ = [
    'BaseProvider',
    'GeminiProvider',
    'OpenAIProvider',
    'create_provider',
]
