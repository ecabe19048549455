"""
Telegram Webhook API - receives updates pushed by Telegram.
"""

import logging
from collections import deque

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/telegram", tags=["telegram"])

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

MAX_PROCESSED_UPDATES = 1000


class ProcessedUpdates:
    """
    Recently seen update ids, oldest evicted first.
    Telegram redelivers updates it thinks were not received.
    """

    def __init__(self, max_size: int = MAX_PROCESSED_UPDATES):
        self.max_size = max_size
        self._ids: set = set()
        self._order: deque = deque()

    def __len__(self) -> int:
        return len(self._ids)

    def seen(self, update_id) -> bool:
        """Record update_id and report whether it was seen before."""
        if update_id is None:
            return False
        if update_id in self._ids:
            return True
        self._ids.add(update_id)
        self._order.append(update_id)
        while len(self._order) > self.max_size:
            self._ids.discard(self._order.popleft())
        return False


@router.post("/webhook")
async def telegram_webhook(request: Request, background_tasks: BackgroundTasks):
    """
    Handle an incoming Telegram update.
    The reply is produced in the background so Telegram gets a quick 200.
    """
    bot = getattr(request.app.state, "bot", None)
    handlers = getattr(request.app.state, "handlers", None)
    processed = getattr(request.app.state, "processed_updates", None)
    if bot is None or handlers is None or processed is None:
        raise HTTPException(status_code=503, detail="Telegram bot not configured")

    if not bot.verify_secret(request.headers.get(SECRET_HEADER)):
        raise HTTPException(status_code=403, detail="Invalid secret token")

    body = await request.json()
    event = bot.parse_update(body)

    if processed.seen(event.get("update_id")):
        logger.debug(f"Skipping duplicate update {event.get('update_id')}")
        return {"ok": True}

    if event["type"] == "message":
        background_tasks.add_task(_handle_event, handlers, bot, event)

    return {"ok": True}


async def _handle_event(handlers, bot, event) -> None:
    try:
        await handlers.handle_event(bot, event)
    except Exception:
        logger.exception(f"Error processing Telegram update {event.get('update_id')}")
