"""LLM module - one interface over several chat-completion backends."""

from .base import LLMProvider, LLMResponse, Message, ProviderConfig, Role, normalize_role
from .errors import (
    LLMError,
    ProviderError,
    ProviderDisabledError,
    ProviderTimeoutError,
    NoProviderEnabledError,
    UnknownProviderError,
)
from .openai_compatible import OpenAICompatibleProvider
from .openai_provider import OpenAIProvider
from .anthropic_provider import AnthropicProvider
from .ollama_provider import OllamaProvider
from .openrouter_provider import OpenRouterProvider
from .opencode_provider import OpenCodeProvider
from .router import LLMRouter
from .factory import PROVIDER_NAMES, create_provider, provider_config, build_router

__all__ = [
    'LLMProvider',
    'LLMResponse',
    'Message',
    'ProviderConfig',
    'Role',
    'normalize_role',
    'LLMError',
    'ProviderError',
    'ProviderDisabledError',
    'ProviderTimeoutError',
    'NoProviderEnabledError',
    'UnknownProviderError',
    'OpenAICompatibleProvider',
    'OpenAIProvider',
    'AnthropicProvider',
    'OllamaProvider',
    'OpenRouterProvider',
    'OpenCodeProvider',
    'LLMRouter',
    'PROVIDER_NAMES',
    'create_provider',
    'provider_config',
    'build_router',
]
