"""
Engagement Scoring Tests

Tests for streak, points and badge updates and the display lookups.
"""

import json
from datetime import datetime

import pytest
from freezegun import freeze_time

from src.services.gamification_service import (
    DEMO_GLOBAL_STATS,
    FINAL_REWARD,
    GLOBAL_STATS_KEY,
    build_summary,
    daily_points,
    format_points,
    get_daily_points_preview,
    get_global_stats,
    get_next_milestone,
    get_rank_title,
    get_streak_bonus,
    update_login_stats,
)
from src.tools.key_value_store import MemoryStore
from tests.fixtures.account_fixtures import FailingStore, make_user

NOW = datetime(2024, 3, 10, 9, 30)


class TestUpdateLoginStats:
    """Tests for update_login_stats()."""

    def test_consecutive_day_extends_streak(self):
        """A login the day after the last one extends the streak and awards Streaker at 3."""
        user = make_user(login_streak=2, total_logins=10, points=200, badges=[],
                         last_login_date="2024-03-09")

        updated = update_login_stats(user, now=NOW)

        assert updated.login_streak == 3
        assert updated.total_logins == 11
        assert updated.points == 215
        assert updated.badges == ["Streaker"]
        assert updated.last_login_date == "2024-03-10"

    def test_gap_resets_streak(self):
        user = make_user(login_streak=6, total_logins=4, points=495, badges=[],
                         last_login_date="2024-03-01")

        updated = update_login_stats(user, now=NOW)

        assert updated.login_streak == 1
        assert updated.total_logins == 5
        assert updated.points == 500
        assert updated.badges == ["Regular User", "Point Collector"]

    def test_same_day_keeps_streak_but_counts_login(self):
        user = make_user(login_streak=4, total_logins=7, points=300, badges=[],
                         last_login_date="2024-03-10")

        updated = update_login_stats(user, now=NOW)

        assert updated.login_streak == 4
        assert updated.total_logins == 8
        assert updated.points == 320

    def test_first_ever_login(self):
        user = make_user(login_streak=0, total_logins=0, points=0, badges=[],
                         last_login_date="")

        updated = update_login_stats(user, now=NOW)

        assert updated.login_streak == 1
        assert updated.total_logins == 1
        assert updated.points == 5
        assert updated.badges == ["First Login"]

    def test_daily_points_capped(self):
        user = make_user(login_streak=20, total_logins=50, points=1000,
                         last_login_date="2024-03-09")

        updated = update_login_stats(user, now=NOW)

        assert updated.login_streak == 21
        assert updated.points == 1050

    @pytest.mark.parametrize("streak,badge", [
        (7, "Week Warrior"),
        (30, "Month Master"),
        (100, "Century Club"),
    ])
    def test_streak_badges(self, streak, badge):
        user = make_user(login_streak=streak - 1, total_logins=200, points=0, badges=[],
                         last_login_date="2024-03-09")

        updated = update_login_stats(user, now=NOW)

        assert badge in updated.badges

    @pytest.mark.parametrize("logins,badge", [
        (25, "Dedicated Member"),
        (100, "Power User"),
    ])
    def test_login_milestone_badges(self, logins, badge):
        user = make_user(total_logins=logins - 1, points=0, badges=[],
                         last_login_date="2024-03-10")

        updated = update_login_stats(user, now=NOW)

        assert badge in updated.badges

    def test_badge_awarded_once(self):
        user = make_user(points=900, badges=["First Steps", "Point Collector"],
                         last_login_date="2024-03-10")

        updated = update_login_stats(user, now=NOW)

        assert updated.badges.count("Point Collector") == 1
        assert updated.badges[0] == "First Steps"

    def test_input_not_modified(self):
        user = make_user(points=100, badges=[], last_login_date="2024-03-09")

        update_login_stats(user, now=NOW)

        assert user.points == 100
        assert user.badges == []

    def test_other_fields_preserved(self):
        user = make_user(last_login_date="2024-03-09")

        updated = update_login_stats(user, now=NOW)

        assert updated.email == user.email
        assert updated.first_name == user.first_name
        assert updated.created_at == user.created_at

    @freeze_time("2024-06-02 08:00:00")
    def test_defaults_to_local_clock(self):
        user = make_user(login_streak=1, last_login_date="2024-06-01")

        updated = update_login_stats(user)

        assert updated.last_login_date == "2024-06-02"
        assert updated.login_streak == 2


class TestDisplayLookups:

    @pytest.mark.parametrize("points,title", [
        (0, "🌱 Newcomer"),
        (499, "🌱 Newcomer"),
        (500, "✨ Enrolled"),
        (999, "✨ Enrolled"),
        (1000, "🔥 Active Member"),
        (2500, "⭐ Contributor"),
        (5000, "🌟 Veteran"),
        (9999, "🌟 Veteran"),
        (10000, "🏆 Legend"),
        (250000, "🏆 Legend"),
    ])
    def test_rank_title(self, points, title):
        assert get_rank_title(points) == title

    def test_next_milestone(self):
        milestone = get_next_milestone(750)

        assert milestone.milestone == 1000
        assert milestone.remaining == 250
        assert milestone.reward == "Active Member Badge"

    def test_milestone_boundary_moves_on(self):
        assert get_next_milestone(500).milestone == 1000
        assert get_next_milestone(0).remaining == 500

    def test_all_milestones_passed(self):
        milestone = get_next_milestone(12000)

        assert milestone.milestone == 10000
        assert milestone.remaining == 0
        assert milestone.reward == FINAL_REWARD

    @pytest.mark.parametrize("streak,bonus", [
        (0, 1.0),
        (2, 1.0),
        (3, 1.5),
        (6, 1.5),
        (7, 2.0),
        (30, 2.5),
        (99, 2.5),
        (100, 3.0),
    ])
    def test_streak_bonus(self, streak, bonus):
        assert get_streak_bonus(streak) == bonus

    def test_format_points(self):
        assert format_points(1000) == "1,000"
        assert format_points(0) == "0"
        assert format_points(1234567) == "1,234,567"

    def test_daily_points(self):
        assert daily_points(1) == 5
        assert daily_points(10) == 50
        assert daily_points(40) == 50

    def test_daily_points_preview(self):
        assert get_daily_points_preview(3) == 22
        assert get_daily_points_preview(7) == 70
        assert get_daily_points_preview(1) == 5

    def test_build_summary(self):
        user = make_user(points=1200, login_streak=7, total_logins=12)

        summary = build_summary(user)

        assert summary["formatted_points"] == "1,200"
        assert summary["rank_title"] == "🔥 Active Member"
        assert summary["streak_bonus"] == 2.0
        assert summary["daily_points_preview"] == 70
        assert summary["next_milestone"] == {
            "milestone": 2500,
            "remaining": 1300,
            "reward": "Contributor Badge",
        }


class TestGlobalStats:

    @pytest.mark.asyncio
    async def test_demo_data_when_absent(self):
        stats = await get_global_stats(MemoryStore())

        assert stats["total_users"] == DEMO_GLOBAL_STATS["total_users"]
        assert "last_updated" in stats

    @pytest.mark.asyncio
    async def test_stored_stats_win(self):
        stored = {"total_users": 3, "active_users_today": 1}
        store = MemoryStore({GLOBAL_STATS_KEY: json.dumps(stored)})

        assert await get_global_stats(store) == stored

    @pytest.mark.asyncio
    async def test_unreadable_store_falls_back(self):
        stats = await get_global_stats(FailingStore(fail_reads=True))

        assert stats["trending_topics"] == DEMO_GLOBAL_STATS["trending_topics"]
