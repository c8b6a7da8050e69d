"""Bundled sample catalogue and interaction history for local runs.

Records use the same field names as the stored documents, so a JSON data
file (see ``config.FEED_DATA_PATH``) can be a drop-in replacement.
"""

from __future__ import annotations

import json
from typing import Any

from feedrank.models import UserInteraction, VideoCandidate

# ---------------------------------------------------------------------------
# Static video catalogue: 12 videos, 5 categories
# ---------------------------------------------------------------------------

SAMPLE_VIDEOS: list[dict[str, Any]] = [
    # Music (3)
    {"id": "mus_001", "name": "Lo-fi Morning Set", "uploaderName": "beatsbyjo",
     "category": "music", "timestamp": "2026-10-10T08:00:00Z", "likes": 42, "comments": 11},
    {"id": "mus_002", "name": "Street Piano Cover", "uploaderName": "keys4all",
     "category": "music", "timestamp": "2026-07-01T18:30:00Z", "likes": 9, "comments": 2},
    {"id": "mus_003", "name": "Drum Fill Breakdown", "uploaderName": "snareday",
     "category": "music", "timestamp": None, "likes": 3, "comments": 0},
    # Gaming (3)
    {"id": "gam_001", "name": "Speedrun Any% WR", "uploaderName": "framePerfect",
     "category": "gaming", "timestamp": "2026-10-15T21:00:00Z", "likes": 60, "comments": 25},
    {"id": "gam_002", "name": "Cozy Farm Day 100", "uploaderName": "pixelfarmer",
     "category": "gaming", "timestamp": "2026-09-02T12:00:00Z", "likes": 14, "comments": 4},
    {"id": "gam_003", "name": "Boss Rush No Hit", "uploaderName": "framePerfect",
     "category": "gaming", "timestamp": "2026-05-20T16:45:00Z", "likes": 22, "comments": 7},
    # Cooking (2)
    {"id": "coo_001", "name": "Five Minute Ramen", "uploaderName": "wokstar",
     "category": "cooking", "timestamp": "2026-10-01T11:00:00Z", "likes": 18, "comments": 6},
    {"id": "coo_002", "name": "Sourdough Basics", "uploaderName": "crumbshot",
     "category": "cooking", "timestamp": "2026-08-14T09:15:00Z", "likes": 5, "comments": 1},
    # Sports (2)
    {"id": "spo_001", "name": "Trick Shot Compilation", "uploaderName": "netsonly",
     "category": "sports", "timestamp": "2026-10-18T19:00:00Z", "likes": 31, "comments": 9},
    {"id": "spo_002", "name": "Marathon Pacing Tips", "uploaderName": "mile26",
     "category": "sports", "timestamp": "2026-06-11T06:00:00Z", "likes": 4, "comments": 3},
    # Comedy (2)
    {"id": "com_001", "name": "Office Pranks Part 3", "uploaderName": "deskjokes",
     "category": "comedy", "timestamp": "2026-10-12T17:20:00Z", "likes": 55, "comments": 30},
    {"id": "com_002", "name": "Cat vs Cucumber", "uploaderName": "whiskers",
     "category": "comedy", "timestamp": "2026-09-25T13:05:00Z", "likes": 12, "comments": 2},
]

# ---------------------------------------------------------------------------
# Interaction history for three users
# ---------------------------------------------------------------------------


def _interaction(
    user_id: str,
    video_id: str,
    timestamp: str,
    watch: int,
    category: str,
    liked: bool = False,
    commented: bool = False,
    shared: bool = False,
) -> dict[str, Any]:
    return {
        "userId": user_id,
        "videoId": video_id,
        "timestamp": timestamp,
        "watchPercentage": watch,
        "category": category,
        "interactions": {"liked": liked, "commented": commented, "shared": shared},
    }


SAMPLE_INTERACTIONS: list[dict[str, Any]] = [
    # alice: music fan, watches in the morning
    _interaction("alice", "mus_001", "2026-10-11T07:10:00Z", 100, "music", liked=True, shared=True),
    _interaction("alice", "mus_002", "2026-10-12T07:40:00Z", 85, "music", liked=True),
    _interaction("alice", "coo_001", "2026-10-13T08:05:00Z", 40, "cooking"),
    _interaction("alice", "gam_002", "2026-10-14T22:30:00Z", 10, "gaming"),
    # bob: gamer who comments a lot, late at night
    _interaction("bob", "gam_001", "2026-10-16T23:00:00Z", 95, "gaming", liked=True, commented=True),
    _interaction("bob", "gam_003", "2026-10-17T00:15:00Z", 100, "gaming", commented=True),
    _interaction("bob", "com_001", "2026-10-17T00:40:00Z", 60, "comedy", liked=True),
    _interaction("bob", "spo_001", "2026-10-18T23:50:00Z", 20, "sports"),
    # carol: one malformed record, otherwise sports
    _interaction("carol", "spo_002", "2026-10-02T06:30:00Z", 90, "sports", liked=True),
    _interaction("carol", "spo_001", "not-a-date", 50, "sports"),
]


def load_videos(records: list[dict[str, Any]] | None = None) -> list[VideoCandidate]:
    if records is None:
        records = SAMPLE_VIDEOS
    return [VideoCandidate.from_record(r) for r in records]


def load_interactions(
    records: list[dict[str, Any]] | None = None,
) -> list[UserInteraction]:
    if records is None:
        records = SAMPLE_INTERACTIONS
    return [UserInteraction.from_record(r) for r in records]


def load_data_file(path: str) -> tuple[list[VideoCandidate], list[UserInteraction]]:
    """Read a JSON file with ``videos`` and ``interactions`` arrays."""
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    return (
        [VideoCandidate.from_record(r) for r in data.get("videos", [])],
        [UserInteraction.from_record(r) for r in data.get("interactions", [])],
    )
