"""
LLM Provider Factory - the single place that maps backend names to providers.
"""

import logging
from typing import Dict, List, Optional, Type

from ..config.settings import Settings, CREDENTIAL_KEYS, ENDPOINT_KEYS
from .base import LLMProvider, ProviderConfig
from .anthropic_provider import AnthropicProvider
from .errors import NoProviderEnabledError, UnknownProviderError
from .ollama_provider import OllamaProvider
from .openai_provider import OpenAIProvider
from .opencode_provider import OpenCodeProvider
from .openrouter_provider import OpenRouterProvider
from .router import LLMRouter

logger = logging.getLogger(__name__)

# Declaration order; also the fallback order of the router.
PROVIDER_NAMES = ("openai", "anthropic", "ollama", "openrouter", "opencode")

_PROVIDER_CLASSES: Dict[str, Type[LLMProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "ollama": OllamaProvider,
    "openrouter": OpenRouterProvider,
    "opencode": OpenCodeProvider,
}


def provider_config(config: Settings, provider_type: str) -> ProviderConfig:
    """
    Resolve the settings of one backend into a ProviderConfig.

    Raises:
        UnknownProviderError: if provider_type is not a known backend
    """
    if provider_type not in _PROVIDER_CLASSES:
        raise UnknownProviderError(provider_type)

    provider_settings = getattr(config.providers, provider_type)
    keys = config.api_keys()

    credential_key = CREDENTIAL_KEYS.get(provider_type)
    api_key: Optional[str] = keys.get(credential_key) if credential_key else None

    base_url = provider_settings.base_url
    endpoint_key = ENDPOINT_KEYS.get(provider_type)
    if not base_url and endpoint_key:
        base_url = keys.get(endpoint_key) or None

    return ProviderConfig(
        enabled=provider_settings.enabled,
        default_model=provider_settings.default_model,
        api_key=api_key or None,
        base_url=base_url,
        timeout=config.llm_timeout,
    )


def create_provider(config: Settings, provider_type: str) -> LLMProvider:
    """
    Create a provider instance wired to configuration.

    Args:
        config: Application settings
        provider_type: Backend name ("openai", "anthropic", "ollama", "openrouter", "opencode")

    Raises:
        UnknownProviderError: if provider_type is not a known backend
    """
    provider_cls = _PROVIDER_CLASSES.get(provider_type)
    if provider_cls is None:
        raise UnknownProviderError(provider_type)
    return provider_cls(provider_config(config, provider_type))


def build_router(config: Settings) -> LLMRouter:
    """
    Build the router from every backend switched on in configuration.

    The first one constructed becomes the default.

    Raises:
        NoProviderEnabledError: if no backend is switched on
    """
    providers: List[LLMProvider] = []
    for name in PROVIDER_NAMES:
        if not getattr(config.providers, name).enabled:
            continue
        provider = create_provider(config, name)
        if not provider.is_enabled():
            logger.warning(f"Provider {name} is switched on but missing its model or credential")
        providers.append(provider)

    if not providers:
        raise NoProviderEnabledError()

    logger.info(
        f"LLM router ready: providers={[p.name for p in providers]}, default={providers[0].name}"
    )
    return LLMRouter(providers, default_index=0)
