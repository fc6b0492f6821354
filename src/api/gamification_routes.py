"""
Engagement API Routes

Endpoints for the progress card: points, rank, streak bonus, badges and
next milestone, plus community figures.
"""

import logging
from fastapi import APIRouter, Depends, Query

from src.api.dependencies import AppServices, get_current_user, get_services
from src.models.account import User
from src.services import gamification_service
from src.utils.response_models import success_response

logger = logging.getLogger(__name__)

engagement_router = APIRouter(prefix="/api/v1/engagement", tags=["Engagement"])


# ==================== Endpoints ====================

@engagement_router.get("/summary")
async def get_summary(user: User = Depends(get_current_user)):
    """Progress card for the logged-in user."""
    return success_response(data=gamification_service.build_summary(user))


@engagement_router.get("/rank")
async def get_rank(points: int = Query(..., ge=0)):
    """Rank title and next milestone for an arbitrary point total."""
    milestone = gamification_service.get_next_milestone(points)
    return success_response(data={
        "points": points,
        "formatted_points": gamification_service.format_points(points),
        "rank_title": gamification_service.get_rank_title(points),
        "next_milestone": milestone._asdict(),
    })


@engagement_router.get("/streak-bonus")
async def get_streak_bonus(streak: int = Query(..., ge=0)):
    return success_response(data={
        "streak": streak,
        "multiplier": gamification_service.get_streak_bonus(streak),
        "daily_points_preview": gamification_service.get_daily_points_preview(streak),
    })


@engagement_router.get("/global")
async def get_global_stats(services: AppServices = Depends(get_services)):
    stats = await gamification_service.get_global_stats(services.general_store)
    return success_response(data=stats)
