"""
Storage Interface - Abstract base class for all storage implementations.
"""

from abc import ABC, abstractmethod
from typing import Optional


class StorageError(Exception):
    """A storage operation failed."""

    def __init__(self, operation: str, path: str, cause: object):
        self.operation = operation
        self.path = path
        self.cause = cause
        super().__init__(f"failed to {operation} {path}: {cause}")


class StorageInterface(ABC):
    """
    Contract for file-like persistence keyed by relative path.
    Failures raise StorageError; a missing file is reported by return value.
    """

    @abstractmethod
    async def save(self, path: str, content: bytes | str) -> None:
        """
        Save content to the specified path, replacing anything already there.

        Args:
            path: Relative path where content should be saved (e.g., "12345.json")
            content: Content to save (bytes or str)

        Raises:
            StorageError: if the write fails
        """

    @abstractmethod
    async def load(self, path: str) -> Optional[bytes]:
        """
        Load content from the specified path.

        Returns:
            Optional[bytes]: File content, or None if the file doesn't exist

        Raises:
            StorageError: if the file exists but cannot be read
        """

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if a file exists at the specified path."""

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete the file at the specified path.

        Returns:
            bool: True if a file was removed, False if there was none

        Raises:
            StorageError: if the file exists but cannot be removed
        """
