"""
Registration draft storage.

Keeps the registration wizard's progress between app launches so the owner
can resume where they left off.
"""

import json
import logging
from typing import Optional

from pydantic import ValidationError

from src.models.account import PartialRegistration
from src.models.results import StorageWriteFailed
from src.tools.key_value_store import GeneralStore, StorageError

logger = logging.getLogger(__name__)

PARTIAL_REGISTRATION_KEY = "partial_registration"


class RegistrationDraftService:

    def __init__(self, store: GeneralStore):
        self.store = store

    async def save_partial(self, draft: PartialRegistration) -> None:
        try:
            await self.store.set(PARTIAL_REGISTRATION_KEY, draft.model_dump_json())
        except StorageError as e:
            logger.error(f"Failed to save partial registration data: {e}")
            raise StorageWriteFailed("partial registration data") from e

    async def get_partial(self) -> Optional[PartialRegistration]:
        try:
            data = await self.store.get(PARTIAL_REGISTRATION_KEY)
            return PartialRegistration.model_validate(json.loads(data)) if data else None
        except (StorageError, ValueError, ValidationError) as e:
            logger.debug(f"Could not read partial registration data: {e}")
            return None

    async def clear_partial(self) -> None:
        try:
            await self.store.delete(PARTIAL_REGISTRATION_KEY)
        except StorageError as e:
            logger.warning(f"Could not clear partial registration data: {e}")
