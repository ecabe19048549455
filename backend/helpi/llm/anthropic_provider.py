"""
Anthropic Messages API provider.

Unlike the Chat Completions family, the Messages API takes the system prompt as
a dedicated top-level field and requires ``max_tokens`` on every request.
"""

from typing import Any, Dict, List, Optional, Tuple

from .base import LLMProvider, LLMResponse, Message, Role


class AnthropicProvider(LLMProvider):
    name = "anthropic"
    default_base_url = "https://api.anthropic.com/v1"

    API_VERSION = "2023-06-01"
    MAX_TOKENS = 1024

    def _get_headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.API_VERSION,
            "Content-Type": "application/json",
        }

    def _format_messages(
        self, messages: List[Message]
    ) -> Tuple[Optional[str], List[Dict[str, Any]]]:
        """
        Split a conversation into the system prompt and the turn list.

        Returns:
            (system text or None, list of {"role", "content"} turns)
        """
        system_parts: List[str] = []
        turns: List[Dict[str, Any]] = []
        for m in messages:
            if m.role == Role.SYSTEM.value:
                system_parts.append(m.content)
                continue
            role = Role.ASSISTANT.value if m.role == Role.ASSISTANT.value else Role.USER.value
            turns.append({"role": role, "content": m.content})
        system = "\n\n".join(p for p in system_parts if p) or None
        return system, turns

    async def _chat_completion(self, messages: List[Message], timeout: float) -> LLMResponse:
        system, turns = self._format_messages(messages)
        payload: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.MAX_TOKENS,
            "messages": turns,
        }
        if system:
            payload["system"] = system

        data = await self._post(f"{self.base_url}/messages", payload,
                                self._get_headers(), timeout)

        # A reply may be split across several text blocks.
        content = ""
        for block in data.get("content") or []:
            if block.get("type") == "text":
                content += block.get("text", "")

        return LLMResponse(
            content=content,
            model=data.get("model") or self.model,
            usage=data.get("usage") or {},
        )
