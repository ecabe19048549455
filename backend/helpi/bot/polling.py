"""
Long-polling loop: fetches updates and handles each one in its own task.
"""

import asyncio
import logging
from typing import Optional, Set

from ..channels.telegram import TelegramBot
from .handlers import BotHandlers

logger = logging.getLogger(__name__)


class UpdatePoller:
    """
    Pulls updates with getUpdates and dispatches them concurrently, so one
    slow LLM call does not hold up other users.
    """

    def __init__(self, bot: TelegramBot, handlers: BotHandlers,
                 poll_timeout: int = 30, retry_delay: float = 5.0):
        self.bot = bot
        self.handlers = handlers
        self.poll_timeout = poll_timeout
        self.retry_delay = retry_delay
        self.offset: Optional[int] = None
        self._task: Optional[asyncio.Task] = None
        self._update_tasks: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self.run(), name="telegram-poller")

    async def stop(self) -> None:
        """Cancel the polling loop and any updates still being handled."""
        tasks = list(self._update_tasks)
        if self._task is not None:
            tasks.append(self._task)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._task = None
        logger.info("Polling stopped")

    async def run(self) -> None:
        logger.info("Starting polling...")
        while True:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Polling failed, retrying in {self.retry_delay}s: {e}")
                await asyncio.sleep(self.retry_delay)

    async def poll_once(self) -> int:
        """Fetch one batch of updates and dispatch them. Returns the batch size."""
        updates = await self.bot.get_updates(offset=self.offset, timeout=self.poll_timeout)
        for update in updates:
            self.offset = update["update_id"] + 1
            event = self.bot.parse_update(update)
            task = asyncio.create_task(self._handle(event))
            self._update_tasks.add(task)
            task.add_done_callback(self._update_tasks.discard)
        return len(updates)

    async def _handle(self, event) -> None:
        try:
            await self.handlers.handle_event(self.bot, event)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"Error handling update {event.get('update_id')}")
