"""Bot module - authorization, command handlers and update polling."""

from .auth import WhitelistAuth, ACCESS_DENIED_TEXT
from .handlers import BotHandlers, MessageSender
from .polling import UpdatePoller

__all__ = ['WhitelistAuth', 'ACCESS_DENIED_TEXT', 'BotHandlers', 'MessageSender', 'UpdatePoller']
