"""
Notifications API Routes

Endpoints for the engagement feed:
- List notifications (newest first) with unread count
- Mark as read
- Generate the daily prompt
"""

import logging
from fastapi import APIRouter, Depends, HTTPException

from src.api.dependencies import get_current_user, get_notification_service
from src.models.account import User
from src.services.notification_service import NotificationService
from src.utils.response_models import success_response

logger = logging.getLogger(__name__)

notifications_router = APIRouter(prefix="/api/v1/notifications", tags=["Notifications"])


# ==================== Endpoints ====================

@notifications_router.get("")
async def list_notifications(
    user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service)
):
    """List notifications for the current user, newest first."""
    items = await notifications.list()
    return {
        "success": True,
        "data": [item.model_dump(mode='json') for item in items],
        "count": len(items),
        "unread_count": sum(1 for item in items if not item.read),
    }


@notifications_router.post("/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service)
):
    if not await notifications.mark_read(notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return success_response(message="Notification marked as read")


@notifications_router.post("/generate")
async def generate_daily_prompt(
    user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service)
):
    """Add one engagement prompt to the feed."""
    notification = await notifications.generate_daily_prompt()
    if notification is None:
        raise HTTPException(status_code=500, detail="Could not save notification")
    return success_response(data=notification.model_dump(mode='json'))
