"""Profile service: builds and caches user profiles."""

from __future__ import annotations

import logging
import threading
from datetime import datetime

from feedrank.aggregator import ASSUMED_VIDEO_DURATION_SECONDS, aggregate_with_report
from feedrank.interaction_store import InteractionStore
from feedrank.models import CompletionPolicy, UserProfile

logger = logging.getLogger(__name__)


class ProfileService:
    """Keeps one :class:`~feedrank.models.UserProfile` per user.

    Profiles are always rebuilt from the user's full interaction history in
    the :class:`~feedrank.interaction_store.InteractionStore` and replace the
    previous profile wholesale.  Reads are served from the in-memory copy
    until :meth:`refresh_profile` is called.

    All public methods are thread-safe.

    Args:
        store: Source of interaction records.
        policy: Completion-rate policy passed to the aggregator.
        duration_seconds: Assumed video length passed to the aggregator.
    """

    def __init__(
        self,
        store: InteractionStore,
        policy: CompletionPolicy = CompletionPolicy.CUMULATIVE,
        duration_seconds: float = ASSUMED_VIDEO_DURATION_SECONDS,
    ) -> None:
        self._store = store
        self._policy = CompletionPolicy(policy)
        self._duration_seconds = duration_seconds
        self._lock = threading.RLock()
        self._profiles: dict[str, UserProfile] = {}

    def get_profile(self, user_id: str) -> UserProfile:
        """Return the cached profile for *user_id*, aggregating it on first use.

        Raises:
            ValueError: If *user_id* is empty.
        """
        if not user_id:
            raise ValueError("user_id must be non-empty")
        with self._lock:
            profile = self._profiles.get(user_id)
        if profile is not None:
            return profile
        return self.refresh_profile(user_id)

    def refresh_profile(self, user_id: str, now: datetime | None = None) -> UserProfile:
        """Re-aggregate the full history of *user_id* and replace its profile.

        Raises:
            ValueError: If *user_id* is empty.
        """
        if not user_id:
            raise ValueError("user_id must be non-empty")
        result = aggregate_with_report(
            self._store.get_user_interactions(user_id),
            user_id=user_id,
            policy=self._policy,
            duration_seconds=self._duration_seconds,
            now=now,
        )
        if result.skipped:
            logger.warning(
                "Profile for user %r built with %d malformed interactions skipped.",
                user_id,
                len(result.skipped),
            )
        with self._lock:
            self._profiles[user_id] = result.profile
        return result.profile
