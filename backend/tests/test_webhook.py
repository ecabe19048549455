"""
Tests for the FastAPI application and the Telegram webhook endpoint.
"""

import logging

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from helpi.api import ProcessedUpdates, telegram_webhook
from helpi.bot.handlers import WELCOME_TEXT
from helpi.main import create_app

from conftest import make_settings


SECRET = "s3cret"


@pytest.fixture
def config(tmp_path):
    return make_settings(
        telegram={"mode": "webhook", "webhook_secret": SECRET},
        providers={"ollama": {"enabled": True, "default_model": "llama3.2"}},
        memory={"path": str(tmp_path / "sessions"), "max_messages": 10},
    )


@pytest.fixture
def client(config):
    app = create_app(config)
    with TestClient(app) as test_client:
        app.state.bot.send_message = AsyncMock()
        app.state.bot.send_chat_action = AsyncMock()
        yield test_client


def start_update(update_id=1, user_id=111):
    return {
        "update_id": update_id,
        "message": {
            "message_id": 1,
            "from": {"id": user_id},
            "chat": {"id": 222},
            "text": "/start",
        },
    }


class TestAppEndpoints:

    def test_root(self, client):
        data = client.get("/").json()
        assert data["app"] == "Helpi"
        assert data["status"] == "running"
        assert data["mode"] == "webhook"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["provider"] == "ollama"


class TestTelegramWebhook:

    def test_update_is_handled(self, client):
        response = client.post(
            "/telegram/webhook",
            json=start_update(),
            headers={telegram_webhook.SECRET_HEADER: SECRET},
        )
        assert response.status_code == 200
        assert response.json() == {"ok": True}
        client.app.state.bot.send_message.assert_awaited_once_with(222, WELCOME_TEXT)

    def test_bad_secret_rejected(self, client):
        response = client.post(
            "/telegram/webhook",
            json=start_update(),
            headers={telegram_webhook.SECRET_HEADER: "wrong"},
        )
        assert response.status_code == 403
        client.app.state.bot.send_message.assert_not_awaited()

    def test_missing_secret_rejected(self, client):
        response = client.post("/telegram/webhook", json=start_update())
        assert response.status_code == 403

    def test_duplicate_update_handled_once(self, client):
        headers = {telegram_webhook.SECRET_HEADER: SECRET}
        client.post("/telegram/webhook", json=start_update(update_id=7), headers=headers)
        client.post("/telegram/webhook", json=start_update(update_id=7), headers=headers)
        assert client.app.state.bot.send_message.await_count == 1

    def test_non_message_update_acknowledged(self, client):
        response = client.post(
            "/telegram/webhook",
            json={"update_id": 9, "callback_query": {"id": "x"}},
            headers={telegram_webhook.SECRET_HEADER: SECRET},
        )
        assert response.status_code == 200
        client.app.state.bot.send_message.assert_not_awaited()

    def test_not_started(self, config):
        app = create_app(config)
        response = TestClient(app).post("/telegram/webhook", json=start_update())
        assert response.status_code == 503


class TestProcessedUpdates:

    def test_bounded(self):
        processed = ProcessedUpdates(max_size=3)
        for update_id in range(5):
            assert processed.seen(update_id) is False
        assert len(processed) == 3
        assert processed.seen(4) is True
        assert processed.seen(0) is False

    def test_missing_update_id(self):
        processed = ProcessedUpdates()
        assert processed.seen(None) is False
        assert processed.seen(None) is False
        assert len(processed) == 0

    def test_apps_do_not_share_history(self, config):
        headers = {telegram_webhook.SECRET_HEADER: SECRET}
        sent = []
        for _ in range(2):
            app = create_app(config)
            with TestClient(app) as test_client:
                app.state.bot.send_message = AsyncMock()
                app.state.bot.send_chat_action = AsyncMock()
                test_client.post("/telegram/webhook", json=start_update(update_id=42), headers=headers)
                sent.append(app.state.bot.send_message.await_count)
        assert sent == [1, 1]


class TestStartup:

    def test_webhook_mode_without_url_warns(self, config, caplog):
        caplog.set_level(logging.WARNING, logger="helpi.main")
        with patch("helpi.main.setup_logging"):
            with TestClient(create_app(config)):
                pass
        assert any("webhook_url" in r.getMessage() and r.levelno == logging.WARNING
                   for r in caplog.records)

    def test_webhook_url_is_registered(self, config):
        config.telegram.webhook_url = "https://bot.example/telegram/webhook"
        with patch("helpi.main.TelegramBot.set_webhook", new_callable=AsyncMock) as set_webhook:
            with TestClient(create_app(config)):
                pass
        set_webhook.assert_awaited_once_with("https://bot.example/telegram/webhook", SECRET)
