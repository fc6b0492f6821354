"""
Engagement notification feed.

A short, newest-first list of prompts ("a friend joined", "keep your streak")
kept in the general store. The feed is best-effort: read failures show an
empty feed and write failures are logged.
"""

import json
import logging
import random
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ValidationError

from src.tools.key_value_store import GeneralStore, StorageError

logger = logging.getLogger(__name__)

NOTIFICATIONS_KEY = "engagement_notifications"
MAX_NOTIFICATIONS = 10

CATEGORIES = ("friend_joined", "post_missed", "achievement_unlocked", "streak_reminder")


class Notification(BaseModel):
    id: str
    category: str
    message: str
    created_at: datetime
    read: bool = False


def daily_prompt_message(category: str, rng: random.Random) -> str:
    if category == "friend_joined":
        return f"{rng.randint(1, 5)} friends from your contacts joined today!"
    if category == "post_missed":
        return f"You missed {rng.randint(2, 9)} posts in communities you're interested in!"
    if category == "achievement_unlocked":
        return "New achievements unlocked! Check your profile to see what you earned."
    return "Keep your login streak going! Daily check-ins earn bonus points!"


class NotificationService:
    """Capped most-recent-first notification list"""

    def __init__(self, store: GeneralStore, max_items: int = MAX_NOTIFICATIONS):
        self.store = store
        self.max_items = max_items

    async def list(self) -> List[Notification]:
        try:
            stored = await self.store.get(NOTIFICATIONS_KEY)
            if not stored:
                return []
            items = json.loads(stored)
            return [Notification.model_validate(item) for item in items]
        except (StorageError, ValueError, TypeError, ValidationError) as e:
            logger.error(f"Error loading notifications: {e}")
            return []

    async def _save(self, items: List[Notification]) -> None:
        payload = json.dumps([item.model_dump(mode='json') for item in items])
        await self.store.set(NOTIFICATIONS_KEY, payload)

    async def add(self, category: str, message: str) -> Optional[Notification]:
        """Prepend a notification and drop anything beyond the cap."""
        notification = Notification(
            id=uuid.uuid4().hex,
            category=category,
            message=message,
            created_at=datetime.now(),
        )
        items = [notification] + await self.list()
        try:
            await self._save(items[:self.max_items])
        except StorageError as e:
            logger.error(f"Error adding notification: {e}")
            return None
        return notification

    async def mark_read(self, notification_id: str) -> bool:
        """Flag one notification as read. Returns False when it is not found."""
        items = await self.list()
        found = False
        for item in items:
            if item.id == notification_id:
                item.read = True
                found = True
        if not found:
            return False
        try:
            await self._save(items)
        except StorageError as e:
            logger.error(f"Error marking notification read: {e}")
            return False
        return True

    async def unread_count(self) -> int:
        return sum(1 for item in await self.list() if not item.read)

    async def generate_daily_prompt(self, rng: Optional[random.Random] = None) -> Optional[Notification]:
        """Add one randomly chosen engagement prompt."""
        rng = rng or random.Random()
        category = rng.choice(CATEGORIES)
        return await self.add(category, daily_prompt_message(category, rng))
