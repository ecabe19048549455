"""API module."""

from .telegram_webhook import router as telegram_router, ProcessedUpdates

__all__ = ['telegram_router', 'ProcessedUpdates']
