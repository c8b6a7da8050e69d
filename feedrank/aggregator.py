"""Interaction aggregator: folds a user's interaction history into a profile."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from feedrank.models import (
    AggregationResult,
    CategoryEngagement,
    CompletionPolicy,
    SkippedInteraction,
    UserInteraction,
    UserProfile,
)
from feedrank.timestamps import format_timestamp, parse_timestamp, utc_now

logger = logging.getLogger(__name__)

# Watch percentages are converted to seconds against a fixed video length
ASSUMED_VIDEO_DURATION_SECONDS = 300.0


def aggregate(
    interactions: Iterable[UserInteraction],
    user_id: str | None = None,
    policy: CompletionPolicy = CompletionPolicy.CUMULATIVE,
    duration_seconds: float = ASSUMED_VIDEO_DURATION_SECONDS,
    now: datetime | None = None,
) -> UserProfile:
    """Build a :class:`~feedrank.models.UserProfile` from *interactions*.

    Shorthand for :func:`aggregate_with_report` that drops the skip report
    (skipped records are still logged).
    """
    return aggregate_with_report(
        interactions,
        user_id=user_id,
        policy=policy,
        duration_seconds=duration_seconds,
        now=now,
    ).profile


def aggregate_with_report(
    interactions: Iterable[UserInteraction],
    user_id: str | None = None,
    policy: CompletionPolicy = CompletionPolicy.CUMULATIVE,
    duration_seconds: float = ASSUMED_VIDEO_DURATION_SECONDS,
    now: datetime | None = None,
) -> AggregationResult:
    """Fold the full interaction history of one user into a fresh profile.

    The caller is responsible for passing only records that belong to the
    user; no filtering by ``user_id`` happens here.  Records are deduplicated
    by (user, video), keeping the most recent (ties broken by
    ``last_updated`` and then by the record contents), and folded in
    chronological order so the result does not depend on input order.

    Per record:

    * the UTC hour of its timestamp is counted in ``active_hours``;
    * ``watch_percentage / 100 * duration_seconds`` is added to the
      category's watch time;
    * the category completion rate is updated according to *policy*;
    * each set flag increments the matching like / comment / share count;
    * ``last_interacted`` tracks the latest timestamp in the category.

    Args:
        interactions: All interaction records for the user.
        user_id: The profile's user ID.  Defaults to the first record's user,
            or ``""`` for an empty history.
        policy: Completion-rate folding policy.
        duration_seconds: Assumed length of every video, in seconds.
        now: Aggregation time stamped into ``last_updated``.  Defaults to
            the current UTC time.

    Returns:
        An :class:`~feedrank.models.AggregationResult` holding the profile
        and every record skipped because its timestamp could not be parsed.

    Raises:
        TypeError: If *interactions* is ``None`` or contains anything other
            than :class:`~feedrank.models.UserInteraction` instances.
    """
    if interactions is None:
        raise TypeError("interactions must be an iterable of UserInteraction")
    records = list(interactions)
    for record in records:
        if not isinstance(record, UserInteraction):
            raise TypeError(
                f"Expected UserInteraction, got {type(record).__name__}"
            )

    policy = CompletionPolicy(policy)
    if user_id is None:
        user_id = records[0].user_id if records else ""

    skipped: list[SkippedInteraction] = []
    latest: dict[tuple[str, str], tuple[datetime, UserInteraction]] = {}
    for record in records:
        try:
            ts = parse_timestamp(record.timestamp)
        except ValueError:
            logger.warning(
                "Skipping interaction for user=%r video=%r: malformed timestamp %r",
                record.user_id,
                record.video_id,
                record.timestamp,
            )
            skipped.append(
                SkippedInteraction(
                    video_id=record.video_id,
                    reason=f"malformed timestamp {record.timestamp!r}",
                )
            )
            continue
        key = (record.user_id, record.video_id)
        if key not in latest or _recency(ts, record) > _recency(*latest[key]):
            latest[key] = (ts, record)

    ordered = sorted(latest.values(), key=lambda item: (item[0], item[1].video_id))

    categories: dict[str, CategoryEngagement] = {}
    sample_counts: dict[str, int] = {}
    newest_in_category: dict[str, datetime] = {}
    active_hours: dict[int, int] = {}
    last_active = ""

    for ts, record in ordered:
        active_hours[ts.hour] = active_hours.get(ts.hour, 0) + 1

        bucket = categories.get(record.category)
        if bucket is None:
            bucket = CategoryEngagement(
                category=record.category, last_interacted=record.timestamp
            )
            categories[record.category] = bucket
            newest_in_category[record.category] = ts

        bucket.watch_time += record.watch_percentage / 100.0 * duration_seconds

        count = sample_counts.get(record.category, 0) + 1
        sample_counts[record.category] = count
        bucket.completion_rate = _fold_completion(
            bucket.completion_rate, record.watch_percentage, count, policy
        )

        flags = record.interactions
        if flags.liked:
            bucket.interactions.likes += 1
        if flags.commented:
            bucket.interactions.comments += 1
        if flags.shared:
            bucket.interactions.shares += 1

        if ts > newest_in_category[record.category]:
            newest_in_category[record.category] = ts
            bucket.last_interacted = record.timestamp

        # records are visited in chronological order
        last_active = record.timestamp

    profile = UserProfile(
        user_id=user_id,
        total_watch_time=sum(c.watch_time for c in categories.values()),
        category_preferences=categories,
        active_hours=active_hours,
        last_updated=format_timestamp(now or utc_now()),
        last_active=last_active,
    )
    logger.debug(
        "Aggregated %d interactions for user %r into %d categories (%d skipped).",
        len(ordered),
        user_id,
        len(categories),
        len(skipped),
    )
    return AggregationResult(profile=profile, skipped=skipped)


def _fold_completion(
    current: float, sample: float, count: int, policy: CompletionPolicy
) -> float:
    """Return the category completion rate after folding in *sample*.

    *count* is the number of samples seen so far, including *sample*.
    """
    if policy is CompletionPolicy.PAIRWISE:
        # a zero rate counts as "no previous value"
        if current > 0:
            return (current + sample) / 2.0
        return sample
    return current + (sample - current) / count


def _recency(ts: datetime, record: UserInteraction) -> tuple:
    """Total order used to pick one record among duplicates of a (user, video)."""
    try:
        updated = parse_timestamp(record.last_updated) if record.last_updated else ts
    except ValueError:
        updated = ts
    flags = record.interactions
    return (
        ts,
        updated,
        record.watch_percentage,
        flags.liked,
        flags.commented,
        flags.shared,
        record.category,
    )
