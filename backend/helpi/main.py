"""
Helpi - Telegram to LLM gateway (FastAPI application).
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request

from .api import telegram_router, ProcessedUpdates
from .bot import BotHandlers, UpdatePoller
from .channels.telegram import TelegramBot
from .config import Settings, settings, validate_settings
from .core.logging_config import setup_logging, mask_token
from .llm import build_router, NoProviderEnabledError
from .middleware import RequestLoggingMiddleware
from .storage import SessionStore

# Logger will be initialized after setup_logging() is called
logger = logging.getLogger(__name__)


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Build the application for the given settings (defaults to the loaded ones)."""
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        setup_logging(config)
        validate_settings(config)

        llm_router = build_router(config)
        session_store = SessionStore.open(config.memory.path, config.memory.max_messages)
        bot = TelegramBot(
            token=config.bot_token,
            api_base_url=config.telegram.api_base_url,
            webhook_secret=config.telegram.webhook_secret,
        )
        handlers = BotHandlers(llm_router, session_store, config.allowed_users,
                               timeout=config.llm_timeout)

        app.state.router = llm_router
        app.state.session_store = session_store
        app.state.bot = bot
        app.state.handlers = handlers
        app.state.processed_updates = ProcessedUpdates()

        logger.info(f"Starting {config.app_name} v{config.app_version}")
        logger.info(f"Bot token: {mask_token(config.bot_token)}")
        logger.info(f"Allowed users count: {len(config.allowed_users)}")
        logger.info(f"Session path: {config.memory.path}")

        poller = None
        if config.telegram.mode == "polling":
            poller = UpdatePoller(bot, handlers, poll_timeout=config.telegram.poll_timeout)
            poller.start()
        elif config.telegram.webhook_url:
            await bot.set_webhook(config.telegram.webhook_url, config.telegram.webhook_secret)
            logger.info(f"Webhook registered: {config.telegram.webhook_url}")
        else:
            logger.warning(
                "Webhook mode without telegram.webhook_url: no webhook registered, "
                "updates arrive only if one was set outside this process"
            )

        yield

        # Shutdown
        logger.info("Shutting down bot...")
        if poller is not None:
            await poller.stop()

    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        description="Telegram bot gateway to interchangeable LLM providers",
        lifespan=lifespan,
    )

    if config.log_api_requests:
        app.add_middleware(RequestLoggingMiddleware)

    app.include_router(telegram_router)

    @app.get("/")
    async def root():
        return {
            "app": config.app_name,
            "version": config.app_version,
            "status": "running",
            "mode": config.telegram.mode,
        }

    @app.get("/health")
    async def health_check(request: Request):
        try:
            provider = request.app.state.router.get_provider().name
        except NoProviderEnabledError:
            provider = None
        return {
            "status": "healthy" if provider else "degraded",
            "provider": provider,
            "version": config.app_version,
        }

    return app


app = create_app()


def run() -> None:
    """Console entry point."""
    import uvicorn
    uvicorn.run(
        "helpi.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
