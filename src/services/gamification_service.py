"""
Engagement scoring.

update_login_stats() recomputes streak, points and badges for one successful
login. The lookups below it (rank, next milestone, streak bonus, point
formatting) are pure, table-driven helpers for display.

Usage:
    from src.services.gamification_service import update_login_stats, get_rank_title

    user = update_login_stats(user)
    print(get_rank_title(user.points))
"""

import json
import logging
import math
from datetime import datetime, timedelta
from typing import Dict, Any, List, NamedTuple, Optional, Tuple

from src.models.account import User, today_string
from src.tools.key_value_store import GeneralStore, StorageError

logger = logging.getLogger(__name__)

MAX_DAILY_POINTS = 50
POINTS_PER_STREAK_DAY = 5
POINT_COLLECTOR_THRESHOLD = 500

STREAK_BADGES: Dict[int, str] = {
    3: "Streaker",
    7: "Week Warrior",
    30: "Month Master",
    100: "Century Club",
}

FIRST_LOGIN_BADGE = "First Login"

LOGIN_MILESTONE_BADGES: Dict[int, str] = {
    5: "Regular User",
    25: "Dedicated Member",
    100: "Power User",
}

POINT_COLLECTOR_BADGE = "Point Collector"

# Highest threshold <= points wins
RANK_TITLES: List[Tuple[int, str]] = [
    (10000, "🏆 Legend"),
    (5000, "🌟 Veteran"),
    (2500, "⭐ Contributor"),
    (1000, "🔥 Active Member"),
    (500, "✨ Enrolled"),
    (0, "🌱 Newcomer"),
]

MILESTONES: List[Tuple[int, str]] = [
    (500, "Enrolled Badge"),
    (1000, "Active Member Badge"),
    (2500, "Contributor Badge"),
    (5000, "Veteran Badge"),
    (10000, "Legend Badge"),
]

FINAL_REWARD = "Ultimate Achievement"

STREAK_BONUSES: List[Tuple[int, float]] = [
    (100, 3.0),
    (30, 2.5),
    (7, 2.0),
    (3, 1.5),
]

GLOBAL_STATS_KEY = "global_engagement"

DEMO_GLOBAL_STATS: Dict[str, Any] = {
    "total_users": 12547,
    "active_users_today": 847,
    "recent_posts": 156,
    "trending_topics": ["#TechTalk", "#WeekendPlans", "#NewMusic"],
}


class Milestone(NamedTuple):
    milestone: int
    remaining: int
    reward: str


def _award(badges: List[str], badge: str) -> None:
    if badge not in badges:
        badges.append(badge)


def daily_points(streak: int) -> int:
    return min(MAX_DAILY_POINTS, streak * POINTS_PER_STREAK_DAY)


def update_login_stats(user: User, now: Optional[datetime] = None) -> User:
    """
    Apply one successful login to a user record.

    Returns an updated copy; the input record is not modified. A second
    login on the same calendar day keeps the streak but still counts the
    login and grants daily points.

    Args:
        user: Current user record
        now: Login time (defaults to the local clock)

    Returns:
        Updated user record
    """
    now = now or datetime.now()
    today = today_string(now)
    yesterday = today_string(now - timedelta(days=1))

    badges = list(user.badges or [])
    total_logins = user.total_logins + 1
    streak = user.login_streak

    if user.last_login_date == yesterday:
        streak += 1
        badge = STREAK_BADGES.get(streak)
        if badge:
            _award(badges, badge)
    elif user.last_login_date != today:
        streak = 1

    points = user.points + daily_points(streak)

    if total_logins == 1:
        _award(badges, FIRST_LOGIN_BADGE)

    milestone_badge = LOGIN_MILESTONE_BADGES.get(total_logins)
    if milestone_badge:
        _award(badges, milestone_badge)

    if points >= POINT_COLLECTOR_THRESHOLD:
        _award(badges, POINT_COLLECTOR_BADGE)

    logger.debug(
        "Login stats updated",
        extra={"streak": streak, "total_logins": total_logins, "points": points},
    )

    return user.model_copy(update={
        "total_logins": total_logins,
        "login_streak": streak,
        "points": points,
        "badges": badges,
        "last_login_date": today,
    })


# ==================== Display Lookups ====================

def get_rank_title(points: int) -> str:
    for threshold, title in RANK_TITLES:
        if points >= threshold:
            return title
    return RANK_TITLES[-1][1]


def get_next_milestone(points: int) -> Milestone:
    """First milestone above points, or the final one once all are passed."""
    for threshold, reward in MILESTONES:
        if points < threshold:
            return Milestone(threshold, threshold - points, reward)
    return Milestone(MILESTONES[-1][0], 0, FINAL_REWARD)


def get_streak_bonus(streak: int) -> float:
    for threshold, bonus in STREAK_BONUSES:
        if streak >= threshold:
            return bonus
    return 1.0


def format_points(points: int) -> str:
    return f"{int(round(points)):,}"


def get_daily_points_preview(streak: int) -> int:
    """Daily points shown on the home card. Display only; never credited."""
    return math.floor(daily_points(streak) * get_streak_bonus(streak))


def build_summary(user: User) -> Dict[str, Any]:
    """Everything the progress card shows for one user"""
    milestone = get_next_milestone(user.points)
    return {
        "points": user.points,
        "formatted_points": format_points(user.points),
        "rank_title": get_rank_title(user.points),
        "login_streak": user.login_streak,
        "total_logins": user.total_logins,
        "streak_bonus": get_streak_bonus(user.login_streak),
        "daily_points_preview": get_daily_points_preview(user.login_streak),
        "badges": list(user.badges),
        "next_milestone": milestone._asdict(),
    }


async def get_global_stats(store: GeneralStore) -> Dict[str, Any]:
    """Community figures, from the store when present, else demo data."""
    try:
        stored = await store.get(GLOBAL_STATS_KEY)
        if stored:
            data = json.loads(stored)
            if isinstance(data, dict):
                return data
    except (StorageError, ValueError) as e:
        logger.debug(f"Could not read global stats: {e}")

    return {**DEMO_GLOBAL_STATS, "last_updated": datetime.now().isoformat()}
