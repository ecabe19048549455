"""Configuration module."""

from .settings import (
    Settings,
    ProviderSettings,
    ProvidersSettings,
    MemorySettings,
    TelegramSettings,
    ConfigError,
    CREDENTIAL_KEYS,
    ENDPOINT_KEYS,
    validate_settings,
    settings,
)

__all__ = [
    'Settings', 'ProviderSettings', 'ProvidersSettings', 'MemorySettings',
    'TelegramSettings', 'ConfigError', 'CREDENTIAL_KEYS', 'ENDPOINT_KEYS',
    'validate_settings', 'settings',
]
