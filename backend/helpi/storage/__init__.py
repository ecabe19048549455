"""Storage module - file persistence and the per-user session store."""

from .interface import StorageInterface, StorageError
from .local_storage import LocalStorage
from .locks import AsyncRWLock
from .session_store import SessionStore, DEFAULT_SESSION_PATH, DEFAULT_MAX_MESSAGES

__all__ = [
    'StorageInterface', 'StorageError', 'LocalStorage', 'AsyncRWLock',
    'SessionStore', 'DEFAULT_SESSION_PATH', 'DEFAULT_MAX_MESSAGES',
]
