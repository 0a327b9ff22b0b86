from typing import Dict, Type, Optional

from .base import (
    LLMProvider,
    LLMMessage,
    LLMResponse,
    LLMProviderError,
    LLMNotConfiguredError,
)
from .anthropic import AnthropicProvider

PROVIDER_ALIAS_MAP: Dict[str, str] = {
    "claude": "anthropic",
}


def canonical_provider_name(name: str) -> str:
    """Normalize provider aliases to their canonical identifier."""

    return PROVIDER_ALIAS_MAP.get(name.lower(), name.lower())


# Registry of available LLM providers
PROVIDER_REGISTRY: Dict[str, Type[LLMProvider]] = {
    "anthropic": AnthropicProvider,
}


def get_llm_provider(
    provider_name: Optional[str] = None,
    model: Optional[str] = None,
    **kwargs,
) -> LLMProvider:
    """Instantiate the configured LLM provider.

    Raises:
        LLMNotConfiguredError: no API key for the resolved provider
        ValueError: unknown provider name
    """

    from ...config import settings  # Local import to avoid circular dependency

    resolved_provider = canonical_provider_name((provider_name or "").strip() or settings.llm_provider)
    if resolved_provider not in PROVIDER_REGISTRY:
        available = ", ".join(PROVIDER_REGISTRY.keys())
        raise ValueError(f"Unsupported provider '{resolved_provider}'. Available providers: {available}")

    api_key = settings.anthropic_api_key if resolved_provider == "anthropic" else None
    if not api_key:
        raise LLMNotConfiguredError(f"No API key configured for provider: {resolved_provider}")

    resolved_model = (model or "").strip() or settings.llm_model
    return PROVIDER_REGISTRY[resolved_provider](api_key=api_key, model=resolved_model, **kwargs)


__all__ = [
    "LLMProvider",
    "LLMMessage",
    "LLMResponse",
    "LLMProviderError",
    "LLMNotConfiguredError",
    "AnthropicProvider",
    "get_llm_provider",
    "PROVIDER_REGISTRY",
    "canonical_provider_name",
]
