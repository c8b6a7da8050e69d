"""Feed service: answers "For You" page requests for a signed-in user."""

from __future__ import annotations

import logging
import time
from datetime import datetime

from feedrank.catalogue import VideoCatalogue
from feedrank.models import VideoScore
from feedrank.profiles import ProfileService
from feedrank.ranking import DEFAULT_LIMIT, RankingCache, get_personalized_videos
from feedrank.timestamps import utc_now

logger = logging.getLogger(__name__)

_RANKING_WARN_THRESHOLD_MS = 200.0


class FeedService:
    """Combines the catalogue, the viewer's profile and the ranker.

    Each request reads the current candidate pool from the
    :class:`~feedrank.catalogue.VideoCatalogue`, the viewer's profile from
    the :class:`~feedrank.profiles.ProfileService`, and returns one page of
    the ranked feed.  Full rankings are reused through *cache* until the
    profile is re-aggregated, the candidates change or the reference minute
    rolls over.

    Args:
        catalogue: Source of candidate videos.
        profile_service: Source of user profiles.
        cache: Optional :class:`~feedrank.ranking.RankingCache`.
        warn_threshold_ms: Rankings slower than this are logged as warnings.
    """

    def __init__(
        self,
        catalogue: VideoCatalogue,
        profile_service: ProfileService,
        cache: RankingCache | None = None,
        warn_threshold_ms: float = _RANKING_WARN_THRESHOLD_MS,
    ) -> None:
        self._catalogue = catalogue
        self._profiles = profile_service
        self._cache = cache
        self._warn_threshold_ms = warn_threshold_ms

    def get_personalized_videos(
        self,
        user_id: str,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
        now: datetime | None = None,
    ) -> list[VideoScore]:
        """Return one page of the personalised feed for *user_id*.

        Args:
            user_id: The viewer. Must be non-empty.
            limit: Page size.
            offset: Number of ranked videos to skip.
            now: Reference time for upload age. Defaults to the current UTC
                time truncated to the minute, so cached rankings are reused
                within a minute.

        Returns:
            Up to *limit* scored videos, best-first.

        Raises:
            ValueError: If *user_id* is empty or *limit*/*offset* is negative.
        """
        if not user_id:
            raise ValueError("user_id must be non-empty")

        profile = self._profiles.get_profile(user_id)
        videos = self._catalogue.get_all_videos()

        start_ms = time.monotonic() * 1000
        page = get_personalized_videos(
            videos,
            profile,
            limit=limit,
            offset=offset,
            now=now or _current_minute(),
            cache=self._cache,
        )
        elapsed_ms = time.monotonic() * 1000 - start_ms
        if elapsed_ms > self._warn_threshold_ms:
            logger.warning(
                "Ranking %d videos for user=%r took %.1fms",
                len(videos),
                user_id,
                elapsed_ms,
            )
        else:
            logger.debug(
                "Ranking %d videos for user=%r took %.1fms",
                len(videos),
                user_id,
                elapsed_ms,
            )
        return page

    def refresh_user(self, user_id: str) -> None:
        """Re-aggregate *user_id*'s profile and drop their cached rankings."""
        self._profiles.refresh_profile(user_id)
        if self._cache is not None:
            self._cache.invalidate_user(user_id)


def _current_minute() -> datetime:
    return utc_now().replace(second=0, microsecond=0)
