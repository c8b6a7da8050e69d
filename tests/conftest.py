"""Shared pytest fixtures for all feedrank tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from feedrank.models import (
    CategoryEngagement,
    InteractionCounts,
    InteractionFlags,
    UserInteraction,
    UserProfile,
    VideoCandidate,
)
from feedrank.timestamps import format_timestamp


NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def days_ago(days: float) -> str:
    return format_timestamp(NOW - timedelta(days=days))


def make_interaction(
    video_id: str,
    category: str,
    watch: float = 50,
    timestamp: str = "2024-05-20T10:00:00Z",
    user_id: str = "u1",
    liked: bool = False,
    commented: bool = False,
    shared: bool = False,
) -> UserInteraction:
    return UserInteraction(
        user_id=user_id,
        video_id=video_id,
        timestamp=timestamp,
        watch_percentage=watch,
        category=category,
        interactions=InteractionFlags(liked=liked, commented=commented, shared=shared),
    )


# ---------------------------------------------------------------------------
# Video fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def video_music() -> VideoCandidate:
    return VideoCandidate("v_mus", "music", days_ago(5), likes_count=10, comments_count=2)


@pytest.fixture
def video_gaming() -> VideoCandidate:
    return VideoCandidate("v_gam", "gaming", days_ago(2), likes_count=40, comments_count=20)


@pytest.fixture
def video_cooking() -> VideoCandidate:
    return VideoCandidate("v_coo", "cooking", days_ago(60), likes_count=1, comments_count=0)


@pytest.fixture
def sample_videos(video_music, video_gaming, video_cooking) -> list[VideoCandidate]:
    return [video_music, video_gaming, video_cooking]


# ---------------------------------------------------------------------------
# User profile fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def empty_profile() -> UserProfile:
    """A brand-new user with no history (cold-start case)."""
    return UserProfile(user_id="u_new")


@pytest.fixture
def music_profile() -> UserProfile:
    """A user who spends 80% of their watch time on music."""
    return UserProfile(
        user_id="u_mus",
        total_watch_time=1000.0,
        category_preferences={
            "music": CategoryEngagement(
                category="music",
                watch_time=800.0,
                completion_rate=90.0,
                interactions=InteractionCounts(likes=5, comments=1, shares=0),
                last_interacted="2024-05-30T09:00:00Z",
            ),
            "gaming": CategoryEngagement(
                category="gaming",
                watch_time=200.0,
                completion_rate=40.0,
                interactions=InteractionCounts(likes=0, comments=0, shares=0),
                last_interacted="2024-05-29T21:00:00Z",
            ),
        },
        active_hours={9: 3, 21: 1},
        last_updated="2024-06-01T11:00:00.000Z",
    )
