"""
Session handle for the single local account.

The "current user" marker is an explicit object owned by the login guard
rather than ambient state. It is persisted in the confidential store so an
open session survives a restart, and closed on logout.
"""

import logging
from typing import Optional

from src.tools.key_value_store import SecretStore, StorageError

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "current_user"


class SessionManager:
    """Open/close/read the current session marker"""

    def __init__(self, store: SecretStore):
        self.store = store

    async def open(self, identity: str) -> None:
        await self.store.set(CURRENT_USER_KEY, identity)
        logger.info("Session opened")

    async def close(self) -> None:
        """Idempotent: closing without an open session is fine."""
        await self.store.delete(CURRENT_USER_KEY)
        logger.info("Session closed")

    async def current_identity(self) -> Optional[str]:
        try:
            identity = await self.store.get(CURRENT_USER_KEY)
        except StorageError as e:
            logger.debug(f"Could not read session marker: {e}")
            return None
        return identity or None

    async def is_active(self) -> bool:
        return await self.current_identity() is not None
