"""
Session Store - per-user conversation history, one JSON file per user.
"""

import json
import logging
from typing import List, Optional

from ..llm.base import Message
from .interface import StorageInterface, StorageError
from .local_storage import LocalStorage
from .locks import AsyncRWLock

logger = logging.getLogger(__name__)

DEFAULT_SESSION_PATH = "./data/sessions"
DEFAULT_MAX_MESSAGES = 50


class SessionStore:
    """
    Persists each user's ordered message list as ``<user_id>.json``.

    Only full-replace saves and deletes mutate state. A save keeps at most
    ``max_messages`` messages, dropping the oldest first. All reads share the
    lock; a save or delete holds it exclusively for the whole store.
    """

    def __init__(self, storage: StorageInterface, max_messages: int = DEFAULT_MAX_MESSAGES):
        if max_messages < 1:
            raise ValueError(f"max_messages must be >= 1, got {max_messages}")
        self.storage = storage
        self.max_messages = max_messages
        self._lock = AsyncRWLock()

    @classmethod
    def open(cls, path: Optional[str] = "", max_messages: Optional[int] = 0) -> "SessionStore":
        """
        Open a store rooted at ``path``, creating the directory if needed.

        Empty path and zero bound fall back to the defaults.

        Raises:
            StorageError: if the directory cannot be created or written
            ValueError: if max_messages is negative
        """
        path = path or DEFAULT_SESSION_PATH
        max_messages = max_messages or DEFAULT_MAX_MESSAGES
        store = cls(LocalStorage(path), max_messages)
        logger.info(f"Session store opened: path={path}, max_messages={max_messages}")
        return store

    @staticmethod
    def _session_path(user_id: int) -> str:
        return f"{int(user_id)}.json"

    async def get(self, user_id: int) -> List[Message]:
        """
        Load a user's history. A user without a session has an empty history.

        Raises:
            StorageError: if the file cannot be read or is corrupt
        """
        path = self._session_path(user_id)
        async with self._lock.read():
            content = await self.storage.load(path)

        if content is None:
            return []

        try:
            records = json.loads(content.decode("utf-8"))
            if not isinstance(records, list):
                raise ValueError(f"expected a list of messages, got {type(records).__name__}")
            return [Message.from_dict(r) for r in records]
        except ValueError as e:
            # UnicodeDecodeError and JSONDecodeError are both ValueErrors.
            raise StorageError("parse session", path, e) from e

    async def save(self, user_id: int, messages: List[Message]) -> None:
        """
        Replace a user's history, keeping only the newest ``max_messages``.

        Raises:
            StorageError: if the write fails
        """
        if len(messages) > self.max_messages:
            messages = messages[-self.max_messages:]

        content = json.dumps([m.to_dict() for m in messages], indent=2, ensure_ascii=False)
        path = self._session_path(user_id)
        async with self._lock.write():
            await self.storage.save(path, content)

    async def delete(self, user_id: int) -> None:
        """
        Remove a user's history. Deleting a missing session succeeds.

        Raises:
            StorageError: if an existing file cannot be removed
        """
        path = self._session_path(user_id)
        async with self._lock.write():
            removed = await self.storage.delete(path)
        if removed:
            logger.info(f"Session deleted for user {user_id}")
