"""
Shared Chat Completions translation for OpenAI-compatible backends.
"""

from typing import Any, Dict, List

from .base import LLMProvider, LLMResponse, Message, normalize_role


class OpenAICompatibleProvider(LLMProvider):
    """
    Base for backends speaking the OpenAI ``/chat/completions`` dialect.
    Each message becomes one chat turn; the reply is the first choice.
    """

    extra_headers: Dict[str, str] = {}

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        headers.update(self.extra_headers)
        return headers

    def _format_messages(self, messages: List[Message]) -> List[Dict[str, Any]]:
        return [{"role": normalize_role(m.role), "content": m.content} for m in messages]

    async def _chat_completion(self, messages: List[Message], timeout: float) -> LLMResponse:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": self._format_messages(messages),
        }
        data = await self._post(f"{self.base_url}/chat/completions", payload,
                                self._get_headers(), timeout)

        choices = data.get("choices") or []
        if not choices:
            # Some prompts legitimately produce nothing.
            content = ""
        else:
            content = choices[0]["message"].get("content") or ""

        return LLMResponse(
            content=content,
            model=data.get("model") or self.model,
            usage=data.get("usage") or {},
        )
