"""
Unit tests for the Telegram channel integration.
"""

import pytest
from unittest.mock import patch

from helpi.channels.telegram import (
    MAX_MESSAGE_LENGTH,
    TelegramAPIError,
    TelegramBot,
    split_text,
)

from conftest import mock_http_client


def text_update(text, user_id=111, chat_id=222, update_id=1, key="message"):
    return {
        "update_id": update_id,
        key: {
            "message_id": 10,
            "from": {"id": user_id, "is_bot": False, "username": "alice"},
            "chat": {"id": chat_id, "type": "private"},
            "date": 1700000000,
            "text": text,
        },
    }


class TestTelegramBot:
    """Tests for TelegramBot client setup and webhook secret checks."""

    def test_init(self):
        bot = TelegramBot(token="123:abc", api_base_url="https://tg.example/")
        assert bot.token == "123:abc"
        assert bot._method_url("getMe") == "https://tg.example/bot123:abc/getMe"

    def test_verify_secret_not_configured(self):
        bot = TelegramBot(token="t")
        assert bot.verify_secret(None) is True
        assert bot.verify_secret("anything") is True

    def test_verify_secret(self):
        bot = TelegramBot(token="t", webhook_secret="s3cret")
        assert bot.verify_secret("s3cret") is True
        assert bot.verify_secret("wrong") is False
        assert bot.verify_secret(None) is False


class TestParseUpdate:
    """Tests for Telegram update parsing."""

    def test_text_message(self):
        event = TelegramBot.parse_update(text_update("Hello there"))
        assert event["type"] == "message"
        assert event["update_id"] == 1
        assert event["user_id"] == 111
        assert event["chat_id"] == 222
        assert event["text"] == "Hello there"
        assert event["command"] is None

    def test_command(self):
        assert TelegramBot.parse_update(text_update("/start"))["command"] == "/start"

    def test_command_with_bot_name_and_args(self):
        event = TelegramBot.parse_update(text_update("/Model@HelpiBot please"))
        assert event["command"] == "/model"

    def test_edited_message(self):
        event = TelegramBot.parse_update(text_update("fixed", key="edited_message"))
        assert event["type"] == "message"
        assert event["text"] == "fixed"

    def test_non_text_message(self):
        update = {"update_id": 5, "message": {"message_id": 1, "chat": {"id": 2}, "photo": []}}
        event = TelegramBot.parse_update(update)
        assert event["type"] == "unknown"
        assert event["update_id"] == 5

    def test_unknown_update(self):
        event = TelegramBot.parse_update({"update_id": 6, "callback_query": {}})
        assert event["type"] == "unknown"


class TestSplitText:

    def test_short_text_unchanged(self):
        assert split_text("hello") == ["hello"]

    def test_long_text_split_on_newlines(self):
        text = ("a" * 3000) + "\n" + ("b" * 3000)
        chunks = split_text(text)
        assert chunks == ["a" * 3000, "b" * 3000]

    def test_long_line_hard_split(self):
        chunks = split_text("x" * (MAX_MESSAGE_LENGTH * 2 + 10))
        assert [len(c) for c in chunks] == [MAX_MESSAGE_LENGTH, MAX_MESSAGE_LENGTH, 10]


class TestTelegramBotAPI:
    """Tests for TelegramBot API calls."""

    @pytest.mark.asyncio
    async def test_send_message(self):
        bot = TelegramBot(token="123:abc")
        mock_client, mock_instance, _ = mock_http_client({"ok": True, "result": {"message_id": 7}})

        with patch("httpx.AsyncClient", mock_client):
            result = await bot.send_message(222, "Hello", parse_mode="Markdown")

        assert result == [{"message_id": 7}]
        url = mock_instance.post.call_args.args[0]
        payload = mock_instance.post.call_args.kwargs["json"]
        assert url == "https://api.telegram.org/bot123:abc/sendMessage"
        assert payload == {"chat_id": 222, "text": "Hello", "parse_mode": "Markdown"}

    @pytest.mark.asyncio
    async def test_send_long_message_in_chunks(self):
        bot = TelegramBot(token="123:abc")
        mock_client, mock_instance, _ = mock_http_client({"ok": True, "result": {}})

        with patch("httpx.AsyncClient", mock_client):
            await bot.send_message(222, "y" * (MAX_MESSAGE_LENGTH + 1))

        assert mock_instance.post.call_count == 2

    @pytest.mark.asyncio
    async def test_send_chat_action(self):
        bot = TelegramBot(token="123:abc")
        mock_client, mock_instance, _ = mock_http_client({"ok": True, "result": True})

        with patch("httpx.AsyncClient", mock_client):
            assert await bot.send_chat_action(222) is True

        payload = mock_instance.post.call_args.kwargs["json"]
        assert payload == {"chat_id": 222, "action": "typing"}

    @pytest.mark.asyncio
    async def test_get_updates(self):
        bot = TelegramBot(token="123:abc")
        updates = [text_update("hi", update_id=10), text_update("yo", update_id=11)]
        mock_client, mock_instance, _ = mock_http_client({"ok": True, "result": updates})

        with patch("httpx.AsyncClient", mock_client):
            result = await bot.get_updates(offset=10, timeout=25)

        assert result == updates
        payload = mock_instance.post.call_args.kwargs["json"]
        assert payload["offset"] == 10
        assert payload["timeout"] == 25
        mock_client.assert_called_with(timeout=35)

    @pytest.mark.asyncio
    async def test_set_webhook(self):
        bot = TelegramBot(token="123:abc")
        mock_client, mock_instance, _ = mock_http_client({"ok": True, "result": True})

        with patch("httpx.AsyncClient", mock_client):
            assert await bot.set_webhook("https://bot.example/telegram/webhook", "s3cret") is True

        payload = mock_instance.post.call_args.kwargs["json"]
        assert payload == {"url": "https://bot.example/telegram/webhook", "secret_token": "s3cret"}

    @pytest.mark.asyncio
    async def test_api_error(self):
        bot = TelegramBot(token="123:abc")
        mock_client, _, _ = mock_http_client(
            {"ok": False, "error_code": 403, "description": "Forbidden: bot was blocked by the user"},
            status_code=403,
        )

        with patch("httpx.AsyncClient", mock_client):
            with pytest.raises(TelegramAPIError) as exc_info:
                await bot.send_message(222, "Hello")

        assert exc_info.value.error_code == 403
        assert "blocked" in str(exc_info.value)
