"""Application configuration driven by environment variables.

All settings have sensible defaults for local development.
"""

import os

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# ---------------------------------------------------------------------------
# Interaction aggregation
# ---------------------------------------------------------------------------

# Every video is assumed to be this long when converting watch percentage
# into seconds of watch time.
ASSUMED_VIDEO_DURATION_SECONDS: float = float(
    os.getenv("ASSUMED_VIDEO_DURATION_SECONDS", "300")
)

# "cumulative" (true mean) or "pairwise" (average of previous rate and newest
# sample, as the original client computed it).
COMPLETION_POLICY: str = os.getenv("COMPLETION_POLICY", "cumulative")

# Watch percentages are only written when they land on a multiple of this.
WATCH_PERCENTAGE_STEP: int = int(os.getenv("WATCH_PERCENTAGE_STEP", "5"))

# ---------------------------------------------------------------------------
# Feed
# ---------------------------------------------------------------------------

FEED_PAGE_SIZE: int = int(os.getenv("FEED_PAGE_SIZE", "10"))
RANKING_CACHE_MAX_ENTRIES: int = int(os.getenv("RANKING_CACHE_MAX_ENTRIES", "256"))

# Rankings slower than this are logged as warnings.
RANKING_WARN_THRESHOLD_MS: float = float(os.getenv("RANKING_WARN_THRESHOLD_MS", "200"))

# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------

# JSON file with "videos" and "interactions" arrays.  Empty means use the
# bundled sample data.
FEED_DATA_PATH: str = os.getenv("FEED_DATA_PATH", "")
