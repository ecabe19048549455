"""Messaging channels."""

from .telegram import TelegramBot, TelegramAPIError, split_text, MAX_MESSAGE_LENGTH

__all__ = ['TelegramBot', 'TelegramAPIError', 'split_text', 'MAX_MESSAGE_LENGTH']
