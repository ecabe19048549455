"""
Ollama provider - a local inference server with an OpenAI-compatible API.
"""

from .base import ProviderConfig
from .openai_compatible import OpenAICompatibleProvider

# Ollama ignores the credential but the Authorization header must be present.
PLACEHOLDER_API_KEY = "ollama"


class OllamaProvider(OpenAICompatibleProvider):
    name = "ollama"
    default_base_url = "http://localhost:11434/v1"
    requires_api_key = False

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.api_key = PLACEHOLDER_API_KEY
