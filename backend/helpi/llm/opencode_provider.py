"""OpenCode Zen provider - OpenAI-compatible model gateway."""

from .openai_compatible import OpenAICompatibleProvider


class OpenCodeProvider(OpenAICompatibleProvider):
    name = "opencode"
    default_base_url = "https://opencode.ai/zen/v1"
