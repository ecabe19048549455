"""
LLM error types.

Every failure raised by a provider carries the provider name in its text so the
caller can attribute it, since the router may dispatch to any backend.
"""

from typing import Optional


NO_PROVIDER_ENABLED = "no LLM provider enabled"


class LLMError(Exception):
    """Base class for all LLM layer errors."""


class ProviderError(LLMError):
    """A call to a specific provider failed."""

    def __init__(self, provider: str, cause: object):
        self.provider = provider
        self.cause = cause
        super().__init__(f"{provider}: {cause}")


class ProviderDisabledError(ProviderError):
    """send_message was called on a provider that is not usable."""

    def __init__(self, provider: str):
        super().__init__(provider, "provider not enabled")


class ProviderTimeoutError(ProviderError):
    """The backend did not answer within the request timeout."""

    def __init__(self, provider: str, cause: Optional[object] = None):
        super().__init__(provider, f"request timed out ({cause})" if cause else "request timed out")


class NoProviderEnabledError(LLMError):
    """No provider is configured and usable."""

    def __init__(self):
        super().__init__(NO_PROVIDER_ENABLED)


class UnknownProviderError(LLMError, ValueError):
    """The factory was asked for a backend name it does not know."""

    def __init__(self, provider_type: str):
        self.provider_type = provider_type
        super().__init__(f"unknown provider type: {provider_type}")
