"""
LLM Provider Base - Abstract base for all chat-completion backends.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, List

import httpx

from .errors import ProviderError, ProviderDisabledError, ProviderTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


_KNOWN_ROLES = {r.value for r in Role}


def normalize_role(role: str) -> str:
    """Map any unrecognised role to "user"."""
    return role if role in _KNOWN_ROLES else Role.USER.value


@dataclass(frozen=True)
class Message:
    """One role-tagged turn of a conversation."""
    role: str  # "system", "user", "assistant"
    content: str

    @staticmethod
    def text(role: str, text: str) -> "Message":
        """Create a text message."""
        return Message(role=role, content=text)

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        """
        Build a message from a stored {role, content} record.

        Raises:
            ValueError: if the record does not have string role and content
        """
        if not isinstance(data, dict):
            raise ValueError(f"message record must be an object, got {type(data).__name__}")
        role = data.get("role")
        content = data.get("content")
        if not isinstance(role, str) or not isinstance(content, str):
            raise ValueError("message record needs string 'role' and 'content'")
        return cls(role=role, content=content)


@dataclass(frozen=True)
class ProviderConfig:
    """Resolved configuration for one backend."""
    enabled: bool = False
    default_model: str = ""
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT


@dataclass
class LLMResponse:
    """Response from an LLM API call."""
    content: str
    model: str = ""
    usage: Dict[str, int] = field(default_factory=dict)


class LLMProvider(ABC):
    """
    Abstract base class for LLM backends.

    Subclasses set ``name`` and ``default_base_url`` and implement
    ``_chat_completion``. Instances hold no per-call state and can be shared
    across concurrent requests.
    """

    name: str = ""
    default_base_url: str = ""
    requires_api_key: bool = True

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.model = config.default_model or ""
        self.api_key = config.api_key or ""
        self.base_url = (config.base_url or self.default_base_url).rstrip("/")
        self.timeout = config.timeout

    def is_enabled(self) -> bool:
        """True if the backend is switched on and has what it needs to be called."""
        if not self.config.enabled or not self.model:
            return False
        if self.requires_api_key and not self.api_key:
            return False
        return True

    async def send_message(self, messages: List[Message], timeout: Optional[float] = None) -> str:
        """
        Send the conversation and return the reply text.

        An empty string means the backend answered with no content; it is not an
        error.

        Raises:
            ProviderDisabledError: provider is not enabled (no request is made)
            ProviderTimeoutError: the request timed out
            ProviderError: network failure, error status or malformed response
        """
        if not self.is_enabled():
            raise ProviderDisabledError(self.name)

        start_time = time.time()
        if logger.isEnabledFor(logging.DEBUG):
            message_summary = f"{len(messages)} messages"
            if messages:
                message_summary += f", last: {messages[-1].content[:200]}"
            logger.debug(
                f"LLM API call starting: provider={self.name}, model={self.model}, {message_summary}"
            )

        deadline = timeout or self.timeout
        try:
            # httpx timeouts are per read or write; this bounds the whole exchange
            response = await asyncio.wait_for(self._chat_completion(messages, deadline), deadline)
        except asyncio.TimeoutError as e:
            self._log_failure(start_time, e)
            raise ProviderTimeoutError(self.name, f"no reply within {deadline}s") from e
        except httpx.TimeoutException as e:
            self._log_failure(start_time, e)
            raise ProviderTimeoutError(self.name, e) from e
        except httpx.HTTPStatusError as e:
            self._log_failure(start_time, e)
            raise ProviderError(
                self.name, f"API returned {e.response.status_code}: {e.response.text[:500]}"
            ) from e
        except httpx.HTTPError as e:
            self._log_failure(start_time, e)
            raise ProviderError(self.name, e) from e
        except (KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
            self._log_failure(start_time, e)
            raise ProviderError(self.name, f"malformed response: {e!r}") from e

        logger.info(
            "LLM API call completed",
            extra={"extra_fields": {
                "provider": self.name,
                "model": response.model or self.model,
                "prompt_tokens": response.usage.get("prompt_tokens", response.usage.get("input_tokens", 0)),
                "completion_tokens": response.usage.get("completion_tokens", response.usage.get("output_tokens", 0)),
                "duration_ms": round((time.time() - start_time) * 1000, 2),
            }}
        )
        return response.content

    def _log_failure(self, start_time: float, error: Exception) -> None:
        logger.error(
            f"LLM API call failed: provider={self.name}: {error}",
            exc_info=True,
            extra={"extra_fields": {
                "provider": self.name,
                "model": self.model,
                "duration_ms": round((time.time() - start_time) * 1000, 2),
                "error": str(error),
            }}
        )

    async def _post(self, url: str, payload: Dict[str, Any],
                    headers: Dict[str, str], timeout: float) -> Any:
        """POST a JSON payload and return the decoded JSON body."""
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(url, json=payload, headers=headers)
            logger.debug(f"LLM API response status: {resp.status_code}")
            resp.raise_for_status()
            return resp.json()

    @abstractmethod
    async def _chat_completion(self, messages: List[Message], timeout: float) -> LLMResponse:
        """Translate, call the backend once, and extract the reply."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r}, enabled={self.is_enabled()})"
