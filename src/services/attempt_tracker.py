"""
Failed login attempt tracking.

Counters and lockout timestamps live in the confidential store, keyed by the
sanitized identity. Reads never raise: a storage failure reads as "no
attempts" / "no lockout" so a broken store cannot lock the owner out.
"""

import logging
from typing import Optional

from src.services.identity_keys import failed_attempts_key, lockout_time_key
from src.tools.key_value_store import SecretStore, StorageError

logger = logging.getLogger(__name__)


class AttemptTracker:
    """Per-account failure counter backed by a SecretStore"""

    def __init__(self, store: SecretStore):
        self.store = store

    async def get_failed_count(self, account: str) -> int:
        try:
            value = await self.store.get(failed_attempts_key(account))
        except StorageError as e:
            logger.debug(f"Could not read failed attempts for {account}: {e}")
            return 0
        if not value:
            return 0
        try:
            return max(0, int(value))
        except ValueError:
            logger.debug(f"Ignoring unparsable failed attempt count for {account}")
            return 0

    async def increment(self, account: str) -> int:
        """Record one more failure and return the new count"""
        count = await self.get_failed_count(account) + 1
        await self.store.set(failed_attempts_key(account), str(count))
        return count

    async def reset(self, account: str) -> None:
        """Clear the counter and any lockout timestamp"""
        await self.store.delete(failed_attempts_key(account))
        await self.store.delete(lockout_time_key(account))

    async def get_lockout_until(self, account: str) -> Optional[int]:
        """Lockout expiry in epoch milliseconds, or None"""
        try:
            value = await self.store.get(lockout_time_key(account))
        except StorageError as e:
            logger.debug(f"Could not read lockout time for {account}: {e}")
            return None
        if not value:
            return None
        try:
            return int(value)
        except ValueError:
            logger.debug(f"Ignoring unparsable lockout time for {account}")
            return None

    async def set_lockout_until(self, account: str, until_ms: int) -> None:
        await self.store.set(lockout_time_key(account), str(until_ms))
