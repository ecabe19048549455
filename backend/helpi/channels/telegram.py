"""
Telegram Bot API Integration.
Sends replies and typing indicators, and receives updates by long polling or webhook.
"""

import hmac
import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

# Telegram rejects longer text messages.
MAX_MESSAGE_LENGTH = 4096


class TelegramAPIError(Exception):
    """The Bot API answered with ok=false."""

    def __init__(self, method: str, description: str, error_code: Optional[int] = None):
        self.method = method
        self.description = description
        self.error_code = error_code
        super().__init__(f"telegram {method} failed: {description}")


def split_text(text: str, limit: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """
    Split text into chunks of at most ``limit`` characters, preferring line breaks.
    """
    if len(text) <= limit:
        return [text]

    chunks = []
    remaining = text
    while len(remaining) > limit:
        cut = remaining.rfind("\n", 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(remaining[:cut])
        remaining = remaining[cut:].lstrip("\n")
    if remaining:
        chunks.append(remaining)
    return chunks


class TelegramBot:
    """
    Minimal async Telegram Bot API client.
    Satisfies the MessageSender protocol used by the bot handlers.
    """

    def __init__(self, token: str, api_base_url: str = "https://api.telegram.org",
                 webhook_secret: Optional[str] = None, timeout: float = 30.0):
        """
        Initialize Telegram bot client.

        Args:
            token: Bot token from @BotFather
            api_base_url: Bot API server
            webhook_secret: Expected X-Telegram-Bot-Api-Secret-Token header value
            timeout: Default request timeout in seconds
        """
        self.token = token
        self.api_base_url = api_base_url.rstrip("/")
        self.webhook_secret = webhook_secret
        self.timeout = timeout

    def _method_url(self, method: str) -> str:
        return f"{self.api_base_url}/bot{self.token}/{method}"

    async def _call(self, method: str, payload: Dict[str, Any],
                    timeout: Optional[float] = None) -> Any:
        """Call a Bot API method and return its ``result``."""
        async with httpx.AsyncClient(timeout=timeout or self.timeout) as client:
            resp = await client.post(self._method_url(method), json=payload)

        # Error responses carry a JSON description, so check "ok" before the status
        try:
            data = resp.json()
        except ValueError:
            resp.raise_for_status()
            raise TelegramAPIError(method, f"invalid JSON response (HTTP {resp.status_code})")

        if not data.get("ok"):
            raise TelegramAPIError(
                method,
                data.get("description", f"HTTP {resp.status_code}"),
                data.get("error_code"),
            )
        return data.get("result")

    async def send_message(self, chat_id: int, text: str,
                           parse_mode: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Send a text message, split into several if it is too long.

        Args:
            chat_id: Target chat ID
            text: Message text
            parse_mode: Optional "Markdown", "MarkdownV2" or "HTML"

        Returns:
            The sent Message objects
        """
        sent = []
        for chunk in split_text(text):
            payload: Dict[str, Any] = {"chat_id": chat_id, "text": chunk}
            if parse_mode:
                payload["parse_mode"] = parse_mode
            sent.append(await self._call("sendMessage", payload))
        return sent

    async def send_chat_action(self, chat_id: int, action: str = "typing") -> bool:
        """Show a chat action such as the typing indicator."""
        return bool(await self._call("sendChatAction", {"chat_id": chat_id, "action": action}))

    async def get_updates(self, offset: Optional[int] = None,
                          timeout: int = 30) -> List[Dict[str, Any]]:
        """
        Long-poll for new updates.

        Args:
            offset: First update_id to return; earlier updates are confirmed
            timeout: Seconds the server may hold the request open
        """
        payload: Dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message", "edited_message"]}
        if offset is not None:
            payload["offset"] = offset
        # Leave the HTTP timeout some room beyond the long-poll window
        return await self._call("getUpdates", payload, timeout=timeout + 10) or []

    async def set_webhook(self, url: str, secret_token: Optional[str] = None) -> bool:
        payload: Dict[str, Any] = {"url": url}
        if secret_token:
            payload["secret_token"] = secret_token
        return bool(await self._call("setWebhook", payload))

    async def delete_webhook(self) -> bool:
        return bool(await self._call("deleteWebhook", {}))

    def verify_secret(self, header_value: Optional[str]) -> bool:
        """
        Check the webhook secret header.

        Returns:
            True if no secret is configured or the header matches
        """
        if not self.webhook_secret:
            return True
        if not header_value:
            return False
        return hmac.compare_digest(header_value, self.webhook_secret)

    @staticmethod
    def parse_update(update: Dict[str, Any]) -> Dict[str, Any]:
        """
        Flatten a raw Telegram update into a standardized event.

        Returns:
            Event dict with type ("message" or "unknown"), update_id, user_id,
            chat_id, text, and command (e.g. "/start", or None for plain text)
        """
        update_id = update.get("update_id")
        message = update.get("message") or update.get("edited_message")

        if not message or "text" not in message:
            return {"type": "unknown", "update_id": update_id, "raw": update}

        sender = message.get("from") or {}
        chat = message.get("chat") or {}
        text = message.get("text", "")

        command = None
        if text.startswith("/"):
            # "/start@MyBot args" -> "/start"
            command = text.split()[0].split("@", 1)[0].lower()

        return {
            "type": "message",
            "update_id": update_id,
            "message_id": message.get("message_id"),
            "user_id": sender.get("id", 0),
            "username": sender.get("username", ""),
            "chat_id": chat.get("id", 0),
            "text": text,
            "command": command,
        }
