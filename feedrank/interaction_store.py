"""Interaction store: one engagement record per user × video, kept in memory."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Iterable

from feedrank.models import InteractionFlags, InteractionType, UserInteraction
from feedrank.timestamps import format_timestamp, utc_now

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "uncategorized"
WATCH_PERCENTAGE_STEP = 5


class InteractionStore:
    """Thread-safe in-memory store of :class:`~feedrank.models.UserInteraction`.

    Records are keyed by the ``(user_id, video_id)`` pair.  A record is
    created the first time a video becomes visible to a user and is updated
    in place afterwards; the store never deletes records.

    Watch-percentage updates are throttled: only rounded values that are a
    multiple of *watch_step* are written, which keeps the write rate low
    while a video plays.

    Args:
        watch_step: Granularity (in percent) of persisted watch percentages.
    """

    def __init__(self, watch_step: int = WATCH_PERCENTAGE_STEP) -> None:
        if watch_step < 1:
            raise ValueError(f"watch_step must be positive, got {watch_step!r}")
        self._watch_step = watch_step
        self._lock = threading.RLock()
        self._records: dict[tuple[str, str], UserInteraction] = {}

    # ------------------------------------------------------------------
    # Bulk access
    # ------------------------------------------------------------------

    def load(self, interactions: Iterable[UserInteraction]) -> None:
        """Insert or replace records, e.g. when seeding from a stored snapshot."""
        loaded = 0
        with self._lock:
            for interaction in interactions:
                key = _record_key(interaction.user_id, interaction.video_id)
                self._records[key] = interaction
                loaded += 1
        logger.info("Loaded %d interaction records.", loaded)

    def get_user_interactions(self, user_id: str) -> list[UserInteraction]:
        """Return a snapshot of every record belonging to *user_id*."""
        with self._lock:
            return [r for r in self._records.values() if r.user_id == user_id]

    def get_all_interactions(self) -> list[UserInteraction]:
        with self._lock:
            return list(self._records.values())

    def get_user_ids(self) -> list[str]:
        """Return the sorted IDs of all users with at least one record."""
        with self._lock:
            return sorted({r.user_id for r in self._records.values()})

    def get_interaction(self, user_id: str, video_id: str) -> UserInteraction | None:
        with self._lock:
            return self._records.get(_record_key(user_id, video_id))

    # ------------------------------------------------------------------
    # Event recording
    # ------------------------------------------------------------------

    def initialize_interaction(
        self,
        user_id: str,
        video_id: str,
        category: str,
        timestamp: datetime | None = None,
    ) -> UserInteraction:
        """Return the record for this pair, creating an empty one if needed.

        A new record starts at 0% watched with every flag cleared and the
        video's current *category* stamped on it.

        Raises:
            ValueError: If *user_id* or *video_id* is empty.
        """
        key = _checked_key(user_id, video_id)
        with self._lock:
            existing = self._records.get(key)
            if existing is not None:
                return existing
            record = UserInteraction(
                user_id=user_id,
                video_id=video_id,
                timestamp=format_timestamp(timestamp or utc_now()),
                watch_percentage=0,
                category=category or DEFAULT_CATEGORY,
                interactions=InteractionFlags(),
            )
            self._records[key] = record
        logger.debug("Initialized interaction for user=%r video=%r", user_id, video_id)
        return record

    def update_watch_percentage(
        self,
        user_id: str,
        video_id: str,
        percentage: float,
        timestamp: datetime | None = None,
    ) -> bool:
        """Record how much of the video the user has watched.

        The percentage is rounded and clamped to [0, 100]; values that are
        not a multiple of the configured step are ignored.

        Returns:
            ``True`` if the record was written, ``False`` if throttled.

        Raises:
            ValueError: If *user_id* or *video_id* is empty.
        """
        key = _checked_key(user_id, video_id)
        rounded = min(max(int(round(percentage)), 0), 100)
        if rounded % self._watch_step != 0:
            return False
        with self._lock:
            record = self._records.get(key) or self.initialize_interaction(
                user_id, video_id, DEFAULT_CATEGORY, timestamp
            )
            record.watch_percentage = float(rounded)
            record.last_updated = format_timestamp(timestamp or utc_now())
        return True

    def update_interaction(
        self,
        user_id: str,
        video_id: str,
        interaction_type: InteractionType | str,
        value: bool,
        timestamp: datetime | None = None,
    ) -> UserInteraction:
        """Set a single like / comment / share flag on the record.

        Raises:
            ValueError: If *user_id* or *video_id* is empty, or
                *interaction_type* is not a known flag.
        """
        key = _checked_key(user_id, video_id)
        flag = InteractionType(interaction_type)
        with self._lock:
            record = self._records.get(key) or self.initialize_interaction(
                user_id, video_id, DEFAULT_CATEGORY, timestamp
            )
            setattr(record.interactions, flag.value, bool(value))
            record.last_updated = format_timestamp(timestamp or utc_now())
        logger.debug(
            "Updated %s for user=%r video=%r: %s", flag.value, user_id, video_id, value
        )
        return record


def _record_key(user_id: str, video_id: str) -> tuple[str, str]:
    return (user_id, video_id)


def _checked_key(user_id: str, video_id: str) -> tuple[str, str]:
    if not user_id:
        raise ValueError("user_id must be non-empty")
    if not video_id:
        raise ValueError("video_id must be non-empty")
    return _record_key(user_id, video_id)
