"""
Shared test fixtures and configuration.
"""

import os
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:test-token-for-testing")
os.environ.setdefault("LOG_FILE_ENABLED", "false")

from pydantic_settings import SettingsConfigDict  # noqa: E402

from helpi.config import Settings  # noqa: E402
from helpi.llm.base import Message  # noqa: E402

CREDENTIAL_ENV_VARS = [
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "OPENROUTER_API_KEY",
    "OPENCODE_API_KEY",
    "OLLAMA_BASE_URL",
]


@pytest.fixture(autouse=True)
def clean_credentials(monkeypatch):
    """Keep real credentials in the environment out of the tests."""
    for name in CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class IsolatedSettings(Settings):
    """Settings without the config.yaml source."""

    model_config = SettingsConfigDict(yaml_file=None)


def make_settings(**kwargs) -> Settings:
    """Settings that ignore any .env or config.yaml in the working directory."""
    kwargs.setdefault("log_file_enabled", False)
    kwargs.setdefault("log_console_enabled", False)
    return IsolatedSettings(_env_file=None, **kwargs)


def mock_http_client(json_data=None, status_code: int = 200, side_effect=None):
    """
    Build a patched httpx.AsyncClient class whose post() returns a canned
    response (or raises side_effect).
    """
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.json.return_value = json_data
    mock_response.raise_for_status = MagicMock()

    mock_instance = AsyncMock()
    if side_effect is not None:
        mock_instance.post.side_effect = side_effect
    else:
        mock_instance.post.return_value = mock_response
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=False)

    mock_client = MagicMock(return_value=mock_instance)
    return mock_client, mock_instance, mock_response


class FakeProvider:
    """In-memory provider double with the LLMProvider surface."""

    def __init__(self, name: str, enabled: bool = True, response: str = "ok",
                 error: Optional[Exception] = None, model: str = "fake-model"):
        self.name = name
        self.enabled = enabled
        self.response = response
        self.error = error
        self.model = model
        self.calls: List[List[Message]] = []

    def is_enabled(self) -> bool:
        return self.enabled

    async def send_message(self, messages, timeout=None) -> str:
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return self.response


class FakeSender:
    """Records what the handlers send instead of calling Telegram."""

    def __init__(self):
        self.messages = []
        self.actions = []

    async def send_message(self, chat_id, text, parse_mode=None):
        self.messages.append({"chat_id": chat_id, "text": text, "parse_mode": parse_mode})
        return {"message_id": len(self.messages)}

    async def send_chat_action(self, chat_id, action="typing"):
        self.actions.append({"chat_id": chat_id, "action": action})
        return True

    @property
    def texts(self) -> List[str]:
        return [m["text"] for m in self.messages]


@pytest.fixture
def sender():
    return FakeSender()
