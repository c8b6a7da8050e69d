"""Video scorer: weighted composite score and match reasons per candidate."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

import numpy as np

from feedrank.models import (
    CategoryEngagement,
    ScoreBreakdown,
    UserProfile,
    VideoCandidate,
    VideoScore,
)
from feedrank.timestamps import as_utc, parse_timestamp, utc_now

logger = logging.getLogger(__name__)

# Sub-score weights (total = 100)
WEIGHT_CATEGORY_MATCH = 35
WEIGHT_COMPLETION_RATE = 25
WEIGHT_INTERACTION = 20
WEIGHT_TIME_DECAY = 10
WEIGHT_ENGAGEMENT_RATIO = 10

NEUTRAL_COMPLETION_SCORE = 50.0
NEUTRAL_TIME_DECAY_SCORE = 50.0

_INTERACTION_CAP = 30.0      # weighted interactions that map to a full score
_ENGAGEMENT_CAP = 50.0       # likes + comments that map to a full score
_FRESH_DAYS = 30.0
_DECAY_PER_DAY = 2.0
_SECONDS_PER_DAY = 24 * 60 * 60

# Match reasons, in reporting order
REASON_CATEGORY = "Based on your watching history"
REASON_COMPLETION = "You often watch videos like this"
REASON_INTERACTION = "Similar to videos you've engaged with"
REASON_RECENT = "Recently uploaded"
REASON_POPULAR = "Popular with other users"

_REASON_THRESHOLD = 70.0
_RECENT_THRESHOLD = 90.0


# ---------------------------------------------------------------------------
# Sub-scores
# ---------------------------------------------------------------------------


def category_match_score(video: VideoCandidate, profile: UserProfile) -> float:
    """Share of the user's total watch time spent in the video's category.

    Returns 0 when the category is unseen or the profile has no watch time.
    """
    engagement = _engagement_for(video, profile)
    if engagement is None or profile.total_watch_time <= 0:
        return 0.0
    return _clamp(engagement.watch_time / profile.total_watch_time * 100.0)


def completion_score(video: VideoCandidate, profile: UserProfile) -> float:
    """The category's completion rate, or a neutral 50 if unseen."""
    engagement = _engagement_for(video, profile)
    if engagement is None:
        return NEUTRAL_COMPLETION_SCORE
    return _clamp(engagement.completion_rate)


def interaction_score(video: VideoCandidate, profile: UserProfile) -> float:
    """Weighted likes (×1), comments (×2) and shares (×3) in the category.

    Normalised so that 30 weighted interactions give the maximum of 100.
    """
    engagement = _engagement_for(video, profile)
    if engagement is None:
        return 0.0
    counts = engagement.interactions
    weighted = counts.likes * 1 + counts.comments * 2 + counts.shares * 3
    return _clamp(min(weighted / _INTERACTION_CAP * 100.0, 100.0))


def time_decay_score(video: VideoCandidate, now: datetime) -> float:
    """Freshness of the upload.

    Videos up to 30 days old score 100; older videos lose 2 points per day
    down to 0.  Videos without a usable timestamp score a neutral 50.
    """
    if not video.timestamp:
        return NEUTRAL_TIME_DECAY_SCORE
    try:
        uploaded = parse_timestamp(video.timestamp)
    except ValueError:
        logger.debug(
            "Video %r has unparsable timestamp %r; using neutral decay.",
            video.id,
            video.timestamp,
        )
        return NEUTRAL_TIME_DECAY_SCORE

    days_old = (as_utc(now) - uploaded).total_seconds() / _SECONDS_PER_DAY
    if days_old <= _FRESH_DAYS:
        return 100.0
    return max(0.0, 100.0 - (days_old - _FRESH_DAYS) * _DECAY_PER_DAY)


def engagement_score(video: VideoCandidate) -> float:
    """Global engagement on the video itself, independent of the viewer."""
    total = max(video.likes_count, 0) + max(video.comments_count, 0)
    return min(total / _ENGAGEMENT_CAP * 100.0, 100.0)


def match_reasons(breakdown: ScoreBreakdown) -> list[str]:
    """Return the human-readable reasons that apply to *breakdown*.

    Reasons are always listed in the same fixed order, never by magnitude.
    """
    reasons: list[str] = []
    if breakdown.category_match > _REASON_THRESHOLD:
        reasons.append(REASON_CATEGORY)
    if breakdown.completion_rate > _REASON_THRESHOLD:
        reasons.append(REASON_COMPLETION)
    if breakdown.interaction > _REASON_THRESHOLD:
        reasons.append(REASON_INTERACTION)
    if breakdown.time_decay > _RECENT_THRESHOLD:
        reasons.append(REASON_RECENT)
    if breakdown.engagement_ratio > _REASON_THRESHOLD:
        reasons.append(REASON_POPULAR)
    return reasons


def weighted_total(breakdown: ScoreBreakdown) -> float:
    """Combine the five sub-scores into the final [0, 100] score."""
    return (
        breakdown.category_match * WEIGHT_CATEGORY_MATCH
        + breakdown.completion_rate * WEIGHT_COMPLETION_RATE
        + breakdown.interaction * WEIGHT_INTERACTION
        + breakdown.time_decay * WEIGHT_TIME_DECAY
        + breakdown.engagement_ratio * WEIGHT_ENGAGEMENT_RATIO
    ) / 100.0


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def score_video(
    video: VideoCandidate,
    profile: UserProfile | None,
    now: datetime | None = None,
) -> VideoScore:
    """Score a single candidate against *profile*.

    Args:
        video: The candidate to score.
        profile: The viewer's profile.  ``None`` is scored as an empty profile.
        now: Reference time for upload age.  Defaults to the current UTC time.

    Returns:
        A :class:`~feedrank.models.VideoScore` with the final score, the
        matching reasons and the sub-score breakdown.

    Raises:
        TypeError: If *video* or *profile* has the wrong type.
    """
    if not isinstance(video, VideoCandidate):
        raise TypeError(f"Expected VideoCandidate, got {type(video).__name__}")
    profile = _coerce_profile(profile)
    return _score(video, profile, as_utc(now or utc_now()))


def score_all(
    videos: Sequence[VideoCandidate],
    profile: UserProfile | None,
    now: datetime | None = None,
) -> list[VideoScore]:
    """Score every candidate and return them best-first.

    Sorting is stable: candidates with equal scores keep their input order.
    Either every candidate is scored or an exception is raised before any
    scoring happens.

    Args:
        videos: The candidate pool.
        profile: The viewer's profile.  ``None`` is scored as an empty profile.
        now: Reference time for upload age, captured once for the whole call.

    Returns:
        List of :class:`~feedrank.models.VideoScore`, descending by score.

    Raises:
        TypeError: If *videos* is ``None`` or contains a non-candidate, or if
            *profile* has the wrong type.
    """
    if videos is None:
        raise TypeError("videos must be a sequence of VideoCandidate, got None")
    candidates = list(videos)
    for video in candidates:
        if not isinstance(video, VideoCandidate):
            raise TypeError(f"Expected VideoCandidate, got {type(video).__name__}")
    profile = _coerce_profile(profile)
    now = as_utc(now or utc_now())

    scored = [_score(video, profile, now) for video in candidates]
    if not scored:
        return []
    totals = np.fromiter((s.score for s in scored), dtype=np.float64, count=len(scored))
    order = np.argsort(-totals, kind="stable")
    return [scored[i] for i in order]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _score(video: VideoCandidate, profile: UserProfile, now: datetime) -> VideoScore:
    breakdown = ScoreBreakdown(
        category_match=category_match_score(video, profile),
        completion_rate=completion_score(video, profile),
        interaction=interaction_score(video, profile),
        time_decay=time_decay_score(video, now),
        engagement_ratio=engagement_score(video),
    )
    return VideoScore(
        video=video,
        score=weighted_total(breakdown),
        match_reasons=match_reasons(breakdown),
        breakdown=breakdown,
    )


def _engagement_for(
    video: VideoCandidate, profile: UserProfile
) -> CategoryEngagement | None:
    return profile.category_preferences.get(video.category)


def _coerce_profile(profile: UserProfile | None) -> UserProfile:
    if profile is None:
        return UserProfile(user_id="")
    if not isinstance(profile, UserProfile):
        raise TypeError(f"Expected UserProfile, got {type(profile).__name__}")
    return profile


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 100.0)
