"""
Bot Handlers - command table and conversation turn handling.

Each inbound text message loads the sender's history, appends the new turn,
asks the LLM router for a reply, appends the reply and saves the history.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Protocol

from ..core.logging_config import LoggerAdapter
from ..llm.base import Message, Role
from ..llm.errors import LLMError, NoProviderEnabledError, ProviderTimeoutError
from ..llm.router import LLMRouter
from ..storage.interface import StorageError
from ..storage.session_store import SessionStore
from .auth import WhitelistAuth, ACCESS_DENIED_TEXT

logger = logging.getLogger(__name__)


WELCOME_TEXT = (
    "Welcome to Helpi! I'm here to help you interact with AI models.\n\n"
    "Available commands:\n"
    "/start - Show this welcome message\n"
    "/help - Get detailed help\n"
    "/myid - Get your Telegram ID\n"
    "/model - Show current model info\n"
    "/clear - Clear your conversation history\n\n"
    "Just send me a message and I'll respond using the configured AI provider."
)

HELP_TEXT = """Available commands:

/start - Welcome message
/help - Show this help message
/myid - Get your Telegram user ID
/model - Display current active provider and all available providers
/clear - Clear your conversation history

How it works:
- Send me any message and I'll forward it to the AI
- Your conversation history is preserved between messages
- Use /clear to start a fresh conversation"""

NO_PROVIDER_TEXT = "No LLM provider enabled. Please check configuration."
TIMEOUT_TEXT = "Request timed out. Please try again."
BACKEND_ERROR_TEXT = "Error communicating with AI"
EMPTY_REPLY_TEXT = "Empty response from AI"
HISTORY_ERROR_TEXT = "Error loading conversation history"
CLEARED_TEXT = "Conversation history cleared."


class MessageSender(Protocol):
    """What the handlers need from a chat transport."""

    async def send_message(self, chat_id: int, text: str,
                           parse_mode: Optional[str] = None) -> Any: ...

    async def send_chat_action(self, chat_id: int, action: str = "typing") -> Any: ...


Handler = Callable[[MessageSender, Dict[str, Any]], Awaitable[None]]


class BotHandlers:
    """
    Routes parsed Telegram events to command handlers.
    Events are the dicts produced by TelegramBot.parse_update.
    """

    def __init__(self, router: LLMRouter, session_store: SessionStore,
                 allowed_users: Iterable[int], timeout: Optional[float] = None):
        self.router = router
        self.session_store = session_store
        self.auth = WhitelistAuth(allowed_users)
        self.timeout = timeout
        self.commands: Dict[str, Handler] = {
            "/start": self.start,
            "/help": self.help,
            "/myid": self.my_id,
            "/model": self.model,
            "/clear": self.clear,
        }

    async def handle_event(self, sender: MessageSender, event: Dict[str, Any]) -> None:
        """Authorize the sender, then dispatch to a command or the chat handler."""
        if event.get("type") != "message":
            return

        if not self.auth.is_authorized(event.get("user_id")):
            if event.get("chat_id"):
                await sender.send_message(event["chat_id"], ACCESS_DENIED_TEXT)
            return

        handler = self.commands.get(event.get("command") or "")
        if handler is None:
            handler = self.text_message
        await handler(sender, event)

    async def start(self, sender: MessageSender, event: Dict[str, Any]) -> None:
        await sender.send_message(event["chat_id"], WELCOME_TEXT)

    async def help(self, sender: MessageSender, event: Dict[str, Any]) -> None:
        await sender.send_message(event["chat_id"], HELP_TEXT)

    async def my_id(self, sender: MessageSender, event: Dict[str, Any]) -> None:
        await sender.send_message(
            event["chat_id"], f"Your Telegram ID: `{event['user_id']}`", parse_mode="Markdown"
        )

    async def model(self, sender: MessageSender, event: Dict[str, Any]) -> None:
        try:
            provider = self.router.get_provider()
        except NoProviderEnabledError:
            await sender.send_message(event["chat_id"], "Error: No LLM provider enabled")
            return

        available = [p.name for p in self.router.providers if p.is_enabled()]
        await sender.send_message(
            event["chat_id"],
            f"Active provider: {provider.name} ({provider.model})\n"
            f"Available providers: {', '.join(available)}",
        )

    async def clear(self, sender: MessageSender, event: Dict[str, Any]) -> None:
        try:
            await self.session_store.delete(event["user_id"])
        except StorageError as e:
            logger.error(f"Failed to clear session for user {event['user_id']}: {e}")
            await sender.send_message(event["chat_id"], f"Error clearing session: {e}")
            return
        await sender.send_message(event["chat_id"], CLEARED_TEXT)

    async def text_message(self, sender: MessageSender, event: Dict[str, Any]) -> None:
        user_id = event["user_id"]
        chat_id = event["chat_id"]
        log = LoggerAdapter(logger, {"user_id": user_id, "chat_id": chat_id})

        try:
            await sender.send_chat_action(chat_id, "typing")
        except Exception as e:
            log.debug(f"Failed to send typing indicator: {e}")

        try:
            messages = await self.session_store.get(user_id)
        except StorageError as e:
            log.error(f"Failed to load session: {e}")
            await sender.send_message(chat_id, HISTORY_ERROR_TEXT)
            return

        messages.append(Message.text(Role.USER.value, event.get("text", "")))

        try:
            response = await self.router.send_message(messages, timeout=self.timeout)
        except asyncio.CancelledError:
            log.info("Request cancelled, no reply sent")
            raise
        except NoProviderEnabledError:
            await sender.send_message(chat_id, NO_PROVIDER_TEXT)
            return
        except ProviderTimeoutError as e:
            log.warning(f"LLM request timed out: {e}")
            await sender.send_message(chat_id, TIMEOUT_TEXT)
            return
        except LLMError as e:
            log.error(f"LLM request failed: {e}")
            await sender.send_message(chat_id, BACKEND_ERROR_TEXT)
            return

        if not response:
            await sender.send_message(chat_id, EMPTY_REPLY_TEXT)
            return

        messages.append(Message.text(Role.ASSISTANT.value, response))

        try:
            await self.session_store.save(user_id, messages)
        except StorageError as e:
            log.error(f"Failed to save session: {e}")

        await sender.send_message(chat_id, response)
