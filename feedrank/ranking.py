"""Pagination over ranked candidates and an explicit, caller-owned cache."""

from __future__ import annotations

import logging
import threading
from dataclasses import astuple
from datetime import datetime
from typing import Any, Sequence

from feedrank.models import UserProfile, VideoCandidate, VideoScore
from feedrank.scoring import score_all
from feedrank.timestamps import as_utc, utc_now

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10

CacheKey = tuple[str, str, str, tuple[tuple[Any, ...], ...]]


class RankingCache:
    """Full rankings keyed by profile version, reference time and candidates.

    A new profile aggregation changes ``last_updated``, a different *now*
    changes upload ages, and a reloaded catalogue with new like or comment
    counts changes the candidate fields, so any of them misses the cache.
    The cache is an ordinary object owned by the caller; nothing in this
    package keeps ranking state at module level.

    Args:
        max_entries: Oldest entries are evicted beyond this size.
    """

    def __init__(self, max_entries: int = 256) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries!r}")
        self._max_entries = max_entries
        self._lock = threading.Lock()
        self._entries: dict[CacheKey, list[VideoScore]] = {}

    @staticmethod
    def key_for(
        profile: UserProfile, videos: Sequence[VideoCandidate], now: datetime
    ) -> CacheKey:
        return (
            profile.user_id,
            profile.last_updated,
            as_utc(now).isoformat(),
            tuple(astuple(v) for v in videos),
        )

    def get(self, key: CacheKey) -> list[VideoScore] | None:
        with self._lock:
            ranked = self._entries.get(key)
            return list(ranked) if ranked is not None else None

    def put(self, key: CacheKey, ranked: list[VideoScore]) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = list(ranked)
            while len(self._entries) > self._max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]

    def invalidate_user(self, user_id: str) -> None:
        """Drop every cached ranking for *user_id*."""
        with self._lock:
            for key in [k for k in self._entries if k[0] == user_id]:
                del self._entries[key]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def rank_videos(
    videos: Sequence[VideoCandidate],
    profile: UserProfile | None,
    now: datetime | None = None,
    cache: RankingCache | None = None,
) -> list[VideoScore]:
    """Return the full ranking for *profile*, consulting *cache* if given."""
    if cache is None or not isinstance(profile, UserProfile) or videos is None:
        return score_all(videos, profile, now)

    candidates = list(videos)
    if not all(isinstance(v, VideoCandidate) for v in candidates):
        return score_all(candidates, profile, now)
    now = as_utc(now or utc_now())
    key = RankingCache.key_for(profile, candidates, now)
    cached = cache.get(key)
    if cached is not None:
        logger.debug("Ranking cache hit for user %r.", profile.user_id)
        return cached
    ranked = score_all(candidates, profile, now)
    cache.put(key, ranked)
    return ranked


def get_personalized_videos(
    videos: Sequence[VideoCandidate],
    profile: UserProfile | None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
    now: datetime | None = None,
    cache: RankingCache | None = None,
) -> list[VideoScore]:
    """Return one page of the personalised ranking.

    Equivalent to ``score_all(videos, profile)[offset:offset + limit]``.
    Repeated calls with identical inputs return identical pages.

    Args:
        videos: The candidate pool.
        profile: The viewer's profile.
        limit: Page size.
        offset: Number of ranked videos to skip.
        now: Reference time for upload age.
        cache: Optional :class:`RankingCache` to reuse full rankings.

    Returns:
        Up to *limit* :class:`~feedrank.models.VideoScore` objects.

    Raises:
        ValueError: If *limit* or *offset* is negative.
    """
    if limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit!r}")
    if offset < 0:
        raise ValueError(f"offset must be non-negative, got {offset!r}")
    ranked = rank_videos(videos, profile, now=now, cache=cache)
    return ranked[offset:offset + limit]
