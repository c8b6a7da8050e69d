"""Video catalogue: loads and caches the candidate pool."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable

from feedrank.models import VideoCandidate

logger = logging.getLogger(__name__)

VideoLoader = Callable[[], Iterable[VideoCandidate]]


class VideoCatalogue:
    """Holds the candidate videos returned by a loader callable.

    The pool is replaced only by an explicit :meth:`refresh`, so every feed
    request between two refreshes ranks the same candidates.  Loader order
    is preserved, since it is the tie-break order of the ranking.

    Args:
        loader: Zero-argument callable returning the current candidates.
    """

    def __init__(self, loader: VideoLoader) -> None:
        self._loader = loader
        self._lock = threading.RLock()
        self._videos: dict[str, VideoCandidate] = {}

    def refresh(self) -> bool:
        """Reload the pool from the loader.

        A loader error or a non-candidate item leaves the current pool in
        place.  Duplicate IDs keep their first position and their last value.

        Returns:
            ``True`` if the pool was replaced.
        """
        try:
            loaded = list(self._loader())
        except Exception:
            logger.exception(
                "Video loader failed; keeping existing %d videos.", len(self._videos)
            )
            return False

        pool: dict[str, VideoCandidate] = {}
        for video in loaded:
            if not isinstance(video, VideoCandidate):
                logger.error(
                    "Video loader returned %s, expected VideoCandidate; "
                    "keeping existing %d videos.",
                    type(video).__name__,
                    len(self._videos),
                )
                return False
            pool[video.id] = video
        with self._lock:
            self._videos = pool
        logger.info("Video catalogue refreshed: %d videos loaded.", len(pool))
        return True

    def get_all_videos(self) -> list[VideoCandidate]:
        """Snapshot of the pool in loader order; empty before the first refresh."""
        with self._lock:
            return list(self._videos.values())
