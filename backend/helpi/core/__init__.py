"""Core module - logging setup and shared helpers."""

from .logging_config import (
    setup_logging,
    LoggerAdapter,
    SecretRedactingFilter,
    filter_sensitive_data,
    truncate_large_data,
    mask_token,
)

__all__ = [
    'setup_logging', 'LoggerAdapter', 'SecretRedactingFilter',
    'filter_sensitive_data', 'truncate_large_data', 'mask_token',
]
