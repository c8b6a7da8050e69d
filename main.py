"""Entry point: wires all components and logs a ranked feed for each user."""

from __future__ import annotations

import logging

import config
import sample_data
from feedrank.catalogue import VideoCatalogue
from feedrank.feed import FeedService
from feedrank.interaction_store import InteractionStore
from feedrank.models import CompletionPolicy, UserInteraction, VideoCandidate
from feedrank.profiles import ProfileService
from feedrank.ranking import RankingCache

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_feed_service(
    videos: list[VideoCandidate],
    interactions: list[UserInteraction],
) -> tuple[FeedService, InteractionStore]:
    """Construct the feed service with all dependencies wired.

    Args:
        videos: The candidate pool served by the catalogue.
        interactions: Interaction history used to seed the store.

    Returns:
        The :class:`~feedrank.feed.FeedService` and the seeded
        :class:`~feedrank.interaction_store.InteractionStore`.
    """
    store = InteractionStore(watch_step=config.WATCH_PERCENTAGE_STEP)
    store.load(interactions)

    catalogue = VideoCatalogue(loader=lambda: videos)
    catalogue.refresh()

    profile_service = ProfileService(
        store,
        policy=CompletionPolicy(config.COMPLETION_POLICY),
        duration_seconds=config.ASSUMED_VIDEO_DURATION_SECONDS,
    )
    feed = FeedService(
        catalogue=catalogue,
        profile_service=profile_service,
        cache=RankingCache(max_entries=config.RANKING_CACHE_MAX_ENTRIES),
        warn_threshold_ms=config.RANKING_WARN_THRESHOLD_MS,
    )
    return feed, store


def main() -> None:
    """Load data, rank the catalogue for every known user and log the results.

    Data comes from ``config.FEED_DATA_PATH`` when set, otherwise from
    :mod:`sample_data`.
    """
    if config.FEED_DATA_PATH:
        logger.info("Loading feed data from %s", config.FEED_DATA_PATH)
        videos, interactions = sample_data.load_data_file(config.FEED_DATA_PATH)
    else:
        logger.info("Using bundled sample data.")
        videos = sample_data.load_videos()
        interactions = sample_data.load_interactions()

    feed, store = build_feed_service(videos, interactions)
    logger.info(
        "Loaded %d videos and %d interactions.", len(videos), len(interactions)
    )

    for user_id in store.get_user_ids():
        page = feed.get_personalized_videos(user_id, limit=config.FEED_PAGE_SIZE)
        logger.info("For You feed for %r:", user_id)
        for rank, scored in enumerate(page, start=1):
            reasons = "; ".join(scored.match_reasons) or "-"
            logger.info(
                "  %2d. %-8s %-10s %6.2f  %s",
                rank,
                scored.video.id,
                scored.video.category,
                scored.score,
                reasons,
            )


if __name__ == "__main__":
    main()
