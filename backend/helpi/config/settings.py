"""
Configuration Settings.

Values come from (highest precedence first) init arguments, environment
variables, a ``.env`` file and ``config.yaml``. Nested keys use ``__`` in the
environment, e.g. ``PROVIDERS__OPENAI__ENABLED=true``.
"""

from typing import Dict, List, Optional, Tuple, Type

from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)


class ConfigError(Exception):
    """Invalid or incomplete configuration."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}" if field else message)


class ProviderSettings(BaseModel):
    """Per-backend switch and model."""
    enabled: bool = False
    default_model: str = ""
    base_url: Optional[str] = None  # uses provider default if not set


class ProvidersSettings(BaseModel):
    openai: ProviderSettings = ProviderSettings()
    anthropic: ProviderSettings = ProviderSettings()
    ollama: ProviderSettings = ProviderSettings()
    openrouter: ProviderSettings = ProviderSettings()
    opencode: ProviderSettings = ProviderSettings()


class MemorySettings(BaseModel):
    path: str = "./data/sessions"
    max_messages: int = 50


class TelegramSettings(BaseModel):
    token: str = ""
    mode: str = "polling"  # "polling" or "webhook"
    webhook_url: Optional[str] = None
    webhook_secret: Optional[str] = None
    api_base_url: str = "https://api.telegram.org"
    poll_timeout: int = 30


class Settings(BaseSettings):
    """Application settings."""

    # App info
    app_name: str = "Helpi"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Telegram
    telegram: TelegramSettings = TelegramSettings()
    telegram_bot_token: Optional[str] = None  # overrides telegram.token
    allowed_users: List[int] = []

    # LLM providers
    providers: ProvidersSettings = ProvidersSettings()
    llm_timeout: float = 120.0

    # Credentials and endpoints, normally from .env
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    openrouter_api_key: Optional[str] = None
    opencode_api_key: Optional[str] = None
    ollama_base_url: Optional[str] = None

    # Conversation history
    memory: MemorySettings = MemorySettings()

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/helpi.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console
    log_api_requests: bool = True  # Log all webhook requests/responses

    model_config = SettingsConfigDict(
        env_file=".env",
        yaml_file="config.yaml",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def bot_token(self) -> str:
        return (self.telegram_bot_token or self.telegram.token or "").strip()

    def api_keys(self) -> Dict[str, str]:
        """Credential and endpoint values keyed by their recognised names."""
        return {
            "OPENAI_API_KEY": self.openai_api_key or "",
            "ANTHROPIC_API_KEY": self.anthropic_api_key or "",
            "OPENROUTER_API_KEY": self.openrouter_api_key or "",
            "OPENCODE_API_KEY": self.opencode_api_key or "",
            "OLLAMA_BASE_URL": self.ollama_base_url or "",
        }


# Backend name -> recognised credential key. Local backends need none.
CREDENTIAL_KEYS: Dict[str, Optional[str]] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "ollama": None,
    "openrouter": "OPENROUTER_API_KEY",
    "opencode": "OPENCODE_API_KEY",
}

# Backend name -> recognised endpoint key.
ENDPOINT_KEYS: Dict[str, str] = {
    "ollama": "OLLAMA_BASE_URL",
}

TELEGRAM_MODES = ("polling", "webhook")


def validate_settings(config: Settings) -> None:
    """
    Check the loaded settings before the application starts.

    Raises:
        ConfigError: on the first problem found
    """
    if not config.bot_token:
        raise ConfigError("telegram.token", "is required and cannot be empty")

    if config.telegram.mode not in TELEGRAM_MODES:
        raise ConfigError("telegram.mode", f"must be one of {', '.join(TELEGRAM_MODES)}")

    for user_id in config.allowed_users:
        if user_id <= 0:
            raise ConfigError("allowed_users", "each user ID must be a positive integer")

    keys = config.api_keys()
    for name, credential_key in CREDENTIAL_KEYS.items():
        provider: ProviderSettings = getattr(config.providers, name)
        if not provider.enabled:
            continue
        if not provider.default_model:
            raise ConfigError(f"providers.{name}.default_model", "is required when provider is enabled")
        if credential_key and not keys[credential_key]:
            raise ConfigError(credential_key, f"is required when {name} provider is enabled")

    if config.memory.max_messages < 1:
        raise ConfigError("memory.max_messages", "must be >= 1")


settings = Settings()
