"""
Key/Value Store Tool - Confidential and general-purpose storage

Two stores back the application:
- SecretStore: credentials, attempt counters, lockout timestamps, session marker
- GeneralStore: user records, notifications, drafts, flags

Both expose the same async get/set/delete contract. Implementations raise
StorageError on any backend failure; callers decide whether a failure is
recoverable.

Usage:
    from src.tools.key_value_store import JsonFileStore, MemoryStore

    secrets = JsonFileStore(Path("data/secure_store.json"), private=True)
    await secrets.set("current_user", "jane@example.com")
"""

import asyncio
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a store cannot read or write a value"""

    def __init__(self, operation: str, key: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.key = key
        self.cause = cause
        super().__init__(f"Storage {operation} failed for key '{key}'")


class KeyValueStore(ABC):
    """Async string key/value store"""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent"""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value"""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key. Deleting an absent key is not an error"""


class SecretStore(KeyValueStore):
    """Confidential store.

    Values are kept as given. Credentials are plaintext at this boundary;
    a hashing layer belongs in a SecretStore implementation, not in callers.
    """


class GeneralStore(KeyValueStore):
    """General-purpose store for structured records serialized as JSON"""


class MemoryStore(SecretStore, GeneralStore):
    """In-process store. Contents are lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    async def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    async def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        """Copy of the current contents"""
        with self._lock:
            return dict(self._data)


class JsonFileStore(SecretStore, GeneralStore):
    """Store persisted as a single JSON object on disk.

    Every write rewrites the file through a temp file and os.replace, so a
    crash mid-write leaves the previous contents intact. With private=True
    the file is created with mode 0600.
    """

    def __init__(self, path: Path, private: bool = False):
        self.path = Path(path)
        self.private = private
        self._lock = threading.Lock()

    def _read_all(self, key: str) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError("read", key, e) from e
        if not isinstance(data, dict):
            raise StorageError("read", key)
        return data

    def _write_all(self, data: Dict[str, str], key: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(data, f)
                if self.private:
                    os.chmod(tmp_path, 0o600)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageError("write", key, e) from e

    def _get_sync(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read_all(key).get(key)
        return None if value is None else str(value)

    def _set_sync(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all(key)
            data[key] = value
            self._write_all(data, key)

    def _delete_sync(self, key: str) -> None:
        with self._lock:
            data = self._read_all(key)
            if key not in data:
                return
            del data[key]
            self._write_all(data, key)

    # File I/O runs off the event loop
    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get_sync, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set_sync, key, value)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete_sync, key)
