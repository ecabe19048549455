"""
Logging setup for the Helpi bot.

Console records get colored level names, the optional log file is rotating
and JSON structured. Secrets such as the bot token (which Telegram puts in
every request URL) are masked before any handler sees them.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

SENSITIVE_KEYS = ('password', 'token', 'secret', 'authorization', 'api_key', 'api-key')
FILTERED = "***FILTERED***"

# Chatty third-party loggers, capped at WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class ColoredFormatter(logging.Formatter):
    """Console formatter with ANSI colored level names."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy: the file handler formats the same record
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname:8s}{self.RESET}"
        return super().format(record)


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with extra_fields merged in."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "extra_fields", None) or {})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class SecretRedactingFilter(logging.Filter):
    """Replaces known secret strings in log messages with their masked form."""

    def __init__(self, secrets: Iterable[Optional[str]]):
        super().__init__()
        self.secrets = sorted({s for s in secrets if s}, key=len, reverse=True)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        redacted = message
        for secret in self.secrets:
            redacted = redacted.replace(secret, mask_token(secret))
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(path: str, level: int, json_format: bool) -> logging.Handler:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding='utf-8',
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _secrets(config: Any) -> List[Optional[str]]:
    """Every configured secret that could end up in a log line."""
    values = [config.bot_token, config.telegram.webhook_secret]
    values.extend(v for k, v in config.api_keys().items() if k.endswith("_API_KEY"))
    return values


def setup_logging(config: Any) -> None:
    """
    Configure the root logger from settings.

    Args:
        config: Settings with the log_* fields
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    level = getattr(logging, config.log_level.upper(), logging.INFO)
    root_logger.setLevel(level)

    handlers = []
    if config.log_console_enabled:
        handlers.append(_console_handler(level))
    if config.log_file_enabled:
        handlers.append(_file_handler(config.log_file_path, level, config.log_json_format))

    redactor = SecretRedactingFilter(_secrets(config))
    for handler in handlers:
        handler.addFilter(redactor)
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(
        f"Logging initialized: level={config.log_level.upper()}, "
        f"console={config.log_console_enabled}, file={config.log_file_enabled}"
    )


class LoggerAdapter(logging.LoggerAdapter):
    """
    Attaches fixed context (user_id, chat_id, ...) to every record as extra_fields.

    Usage:
        log = LoggerAdapter(logging.getLogger(__name__), {"user_id": 123})
        log.info("Message received")
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.setdefault('extra', {})
        extra['extra_fields'] = {**self.extra, **extra.get('extra_fields', {})}
        return msg, kwargs


def filter_sensitive_data(data: Any, sensitive_keys: Iterable[str] = SENSITIVE_KEYS) -> Any:
    """
    Recursively replace values whose key looks like a credential.

    Returns:
        A copy of data with sensitive values replaced by "***FILTERED***"
    """
    if isinstance(data, dict):
        return {
            key: FILTERED if any(s in str(key).lower() for s in sensitive_keys)
            else filter_sensitive_data(value, sensitive_keys)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [filter_sensitive_data(item, sensitive_keys) for item in data]
    return data


def truncate_large_data(data: str, max_length: int = 5000) -> str:
    if len(data) <= max_length:
        return data
    return data[:max_length] + f"... (truncated, total length: {len(data)})"


def mask_token(token: Optional[str]) -> str:
    """Show only the ends of a secret, e.g. "12345...vwxyz"."""
    if not token or len(token) <= 10:
        return "****"
    return f"{token[:5]}...{token[-5:]}"
