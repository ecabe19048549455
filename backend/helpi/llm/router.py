"""
LLM Router - picks which enabled provider answers a conversation turn.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from .base import LLMProvider, Message
from .errors import NoProviderEnabledError

logger = logging.getLogger(__name__)


class LLMRouter:
    """
    Holds the providers built at startup, in declaration order, plus the index of
    the default one. Immutable after construction.

    Fallback happens only when choosing a provider; a failed call is never
    retried on another backend.
    """

    def __init__(self, providers: Sequence[LLMProvider], default_index: Optional[int] = None):
        self._providers: Tuple[LLMProvider, ...] = tuple(providers)
        self._default_index = default_index

    @property
    def providers(self) -> Tuple[LLMProvider, ...]:
        return self._providers

    @property
    def default_index(self) -> Optional[int]:
        return self._default_index

    def get_provider(self) -> LLMProvider:
        """
        Return the default provider if it is still enabled, otherwise the first
        enabled one in declaration order.

        Raises:
            NoProviderEnabledError: nothing is enabled
        """
        idx = self._default_index
        if idx is not None and 0 <= idx < len(self._providers):
            provider = self._providers[idx]
            if provider.is_enabled():
                return provider

        for provider in self._providers:
            if provider.is_enabled():
                if idx is not None:
                    logger.warning(f"Default provider unavailable, falling back to {provider.name}")
                return provider

        raise NoProviderEnabledError()

    async def send_message(self, messages: List[Message], timeout: Optional[float] = None) -> str:
        """Send the conversation through the selected provider."""
        provider = self.get_provider()
        return await provider.send_message(messages, timeout=timeout)
