"""Core domain dataclasses shared across all feedrank modules."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class InteractionType(str, Enum):
    """Which engagement flag an interaction update targets."""

    LIKED = "liked"
    COMMENTED = "commented"
    SHARED = "shared"


class CompletionPolicy(str, Enum):
    """How a category's completion rate is folded from watch percentages.

    ``CUMULATIVE`` is the true mean over every record in the category.
    ``PAIRWISE`` averages the previous rate with the newest sample, which
    matches the behaviour of the original client application.
    """

    CUMULATIVE = "cumulative"
    PAIRWISE = "pairwise"


@dataclass
class InteractionFlags:
    """Boolean engagement flags recorded for one user × video pair."""

    liked: bool = False
    commented: bool = False
    shared: bool = False


@dataclass
class UserInteraction:
    """A single user's engagement with a single video.

    There is at most one record per (user, video); it is created when the
    video first becomes visible and updated in place afterwards.

    Attributes:
        user_id: The viewing user.
        video_id: The video that was viewed.
        timestamp: ISO-8601 creation time of the record.
        watch_percentage: Share of the video watched, clamped to [0, 100].
        category: The video's category at the time of the interaction.
        interactions: Like / comment / share flags.
        last_updated: ISO-8601 time of the most recent update, if any.
    """

    user_id: str
    video_id: str
    timestamp: str
    watch_percentage: float
    category: str
    interactions: InteractionFlags = field(default_factory=InteractionFlags)
    last_updated: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.watch_percentage, bool) or not isinstance(
            self.watch_percentage, (int, float)
        ):
            raise TypeError(
                f"watch_percentage must be a number, got {self.watch_percentage!r}"
            )
        if math.isnan(self.watch_percentage):
            raise ValueError("watch_percentage must not be NaN")
        self.watch_percentage = min(max(float(self.watch_percentage), 0.0), 100.0)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> UserInteraction:
        """Build an interaction from a stored document (camelCase keys)."""
        flags = record.get("interactions") or {}
        return cls(
            user_id=record["userId"],
            video_id=record["videoId"],
            timestamp=record.get("timestamp", ""),
            watch_percentage=record.get("watchPercentage", 0),
            category=record.get("category", ""),
            interactions=InteractionFlags(
                liked=bool(flags.get("liked", False)),
                commented=bool(flags.get("commented", False)),
                shared=bool(flags.get("shared", False)),
            ),
            last_updated=record.get("lastUpdated"),
        )


@dataclass
class InteractionCounts:
    """Number of interactions in a category that had each flag set."""

    likes: int = 0
    comments: int = 0
    shares: int = 0


@dataclass
class CategoryEngagement:
    """Aggregated engagement of one user with one category.

    Attributes:
        category: Category name.
        watch_time: Accumulated watch time in seconds (always ``>= 0``).
        completion_rate: Average watch percentage in [0, 100].
        interactions: Like / comment / share counts.
        last_interacted: Latest interaction timestamp seen for the category.
    """

    category: str
    watch_time: float = 0.0
    completion_rate: float = 0.0
    interactions: InteractionCounts = field(default_factory=InteractionCounts)
    last_interacted: str = ""


@dataclass
class UserProfile:
    """Preference model for a single user, rebuilt from the full history.

    A profile is never patched incrementally; every aggregation produces a
    new instance that replaces the previous one wholesale.

    Attributes:
        user_id: Unique identifier for the user.
        total_watch_time: Sum of ``watch_time`` over all categories.
        category_preferences: Engagement per observed category.
        active_hours: Interaction count per UTC hour of day (0–23).
        last_updated: ISO-8601 time the profile was aggregated.
        last_active: ISO-8601 time of the user's most recent activity.
    """

    user_id: str
    total_watch_time: float = 0.0
    category_preferences: dict[str, CategoryEngagement] = field(default_factory=dict)
    active_hours: dict[int, int] = field(default_factory=dict)
    last_updated: str = ""
    last_active: str = ""


@dataclass
class VideoCandidate:
    """A video eligible for ranking.

    Attributes:
        id: Unique identifier for the video.
        category: Category tag.
        timestamp: ISO-8601 upload time; ``None`` when unknown.
        likes_count: Total likes from all users.
        comments_count: Total comments from all users.
        name: Display title.
        uploader_name: Display name of the uploader.
    """

    id: str
    category: str
    timestamp: str | None = None
    likes_count: int = 0
    comments_count: int = 0
    name: str = ""
    uploader_name: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> VideoCandidate:
        """Build a candidate from a catalogue document.

        ``likes`` and ``comments`` may be stored either as counts or as lists
        of individual entries.
        """
        return cls(
            id=record["id"],
            category=record.get("category", ""),
            timestamp=record.get("timestamp") or None,
            likes_count=_count(record.get("likes")),
            comments_count=_count(record.get("comments")),
            name=record.get("name", ""),
            uploader_name=record.get("uploaderName", ""),
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    """The five normalised sub-scores (each in [0, 100]) behind a score."""

    category_match: float
    completion_rate: float
    interaction: float
    time_decay: float
    engagement_ratio: float


@dataclass
class VideoScore:
    """A candidate video with its personalised score and explanations."""

    video: VideoCandidate
    score: float
    match_reasons: list[str] = field(default_factory=list)
    breakdown: ScoreBreakdown | None = None


@dataclass(frozen=True)
class SkippedInteraction:
    """An interaction record dropped during aggregation, and why."""

    video_id: str
    reason: str


@dataclass
class AggregationResult:
    """The profile produced by an aggregation run plus any skipped records."""

    profile: UserProfile
    skipped: list[SkippedInteraction] = field(default_factory=list)


def _count(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, (list, tuple)):
        return len(value)
    return int(value)
