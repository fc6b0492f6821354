"""
User record repository.

All user records are kept as one JSON array under USER_DATA_KEY in the
general store and matched by exact email (the record key).
"""

import json
import logging
from typing import List, Optional

from pydantic import ValidationError

from src.models.account import User
from src.models.results import StorageWriteFailed
from src.services.identity_keys import record_key
from src.tools.key_value_store import GeneralStore, StorageError

logger = logging.getLogger(__name__)

USER_DATA_KEY = "user_data"


class UserRepository:

    def __init__(self, store: GeneralStore):
        self.store = store

    async def _load_raw(self) -> list:
        raw = await self.store.get(USER_DATA_KEY)
        if not raw:
            return []
        users = json.loads(raw)
        return users if isinstance(users, list) else []

    async def list_users(self) -> List[User]:
        """Stored users in insertion order. Unreadable data reads as empty."""
        try:
            raw_users = await self._load_raw()
        except (StorageError, ValueError) as e:
            logger.debug(f"Could not read user records: {e}")
            return []

        users = []
        for item in raw_users:
            try:
                users.append(User.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed user record: {e.error_count()} error(s)")
        return users

    async def get(self, email: str) -> Optional[User]:
        key = record_key(email)
        for user in await self.list_users():
            if user.email == key:
                return user
        return None

    async def first(self) -> Optional[User]:
        """The first stored record, or None if it is absent or malformed.

        Later records are never substituted for a malformed first one.
        """
        try:
            raw_users = await self._load_raw()
        except (StorageError, ValueError) as e:
            logger.debug(f"Could not read user records: {e}")
            return None
        if not raw_users:
            return None
        try:
            return User.model_validate(raw_users[0])
        except ValidationError as e:
            logger.warning(f"First user record is malformed: {e.error_count()} error(s)")
            return None

    async def save(self, user: User) -> None:
        """Replace the record with the same email, or append a new one."""
        try:
            try:
                raw_users = await self._load_raw()
            except ValueError:
                logger.warning("Existing user data is not valid JSON, starting a new collection")
                raw_users = []

            record = user.model_dump()
            for index, existing in enumerate(raw_users):
                if isinstance(existing, dict) and existing.get('email') == user.email:
                    raw_users[index] = record
                    break
            else:
                raw_users.append(record)

            await self.store.set(USER_DATA_KEY, json.dumps(raw_users))
        except StorageError as e:
            logger.error(f"Failed to save user data: {e}")
            raise StorageWriteFailed("user data") from e
