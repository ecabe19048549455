"""
Local Filesystem Storage Implementation.
"""

import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from .interface import StorageInterface, StorageError


class LocalStorage(StorageInterface):
    """
    Stores files under a base directory on the local filesystem.
    Writes go to a temporary sibling and are renamed into place, so a reader
    never sees a half-written file.
    """

    def __init__(self, base_dir: str = "./data"):
        """
        Initialize local storage, creating the base directory if needed.

        Raises:
            StorageError: if the directory cannot be created or is not writable
        """
        self.base_dir = Path(base_dir).resolve()
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError("create directory", str(self.base_dir), e) from e
        if not self.base_dir.is_dir() or not os.access(self.base_dir, os.W_OK):
            raise StorageError("open directory", str(self.base_dir), "not a writable directory")

    def _get_full_path(self, path: str) -> Path:
        """Convert relative path to full absolute path within base directory."""
        full_path = (self.base_dir / path).resolve()

        # Security check: ensure path is within base_dir
        if full_path != self.base_dir and self.base_dir not in full_path.parents:
            raise ValueError(f"Invalid path: {path} - path traversal detected")

        return full_path

    async def save(self, path: str, content: bytes | str) -> None:
        full_path = self._get_full_path(path)
        tmp_path = full_path.with_name(f".{full_path.name}.{uuid.uuid4().hex}.tmp")
        data = content.encode("utf-8") if isinstance(content, str) else content
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
            await aiofiles.os.replace(tmp_path, full_path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageError("write", path, e) from e

    async def load(self, path: str) -> Optional[bytes]:
        full_path = self._get_full_path(path)
        try:
            async with aiofiles.open(full_path, "rb") as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError("read", path, e) from e

    async def exists(self, path: str) -> bool:
        return self._get_full_path(path).exists()

    async def delete(self, path: str) -> bool:
        full_path = self._get_full_path(path)
        try:
            await aiofiles.os.remove(full_path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError("delete", path, e) from e
        return True
