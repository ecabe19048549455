"""OpenRouter provider - OpenAI-compatible model aggregator."""

from .openai_compatible import OpenAICompatibleProvider


class OpenRouterProvider(OpenAICompatibleProvider):
    name = "openrouter"
    default_base_url = "https://openrouter.ai/api/v1"
    # App attribution shown on openrouter.ai
    extra_headers = {
        "HTTP-Referer": "https://github.com/jrswab/helpi",
        "X-Title": "Helpi",
    }
