"""Global constants package for trendme.

PACKAGE STRUCTURE:
-----------------
- limits.py   : Timeouts, retry budgets, cache windows, grid shapes

USAGE EXAMPLES:
--------------
    from trendme.constants import TEXT_TIMEOUT_MS, CHECKPOINT_STALE_MS
"""

from .limits import (
    BACKOFF_MULTIPLIER,
    BATCH_TIMEOUT_MS,
    CHECKPOINT_PREFIX,
    CHECKPOINT_STALE_MS,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_TEXT_MODEL,
    IMAGE_RETRIES,
    IMAGE_TIMEOUT_MS,
    INITIAL_RETRY_DELAY_MS,
    NEWS_BATCH_SIZE,
    NEWS_CACHE_READ_LIMIT,
    NEWS_IN_PROGRESS_TIMEOUT_MS,
    NEWS_REFRESH_WINDOW_MS,
    NEWS_RETRIES,
    PERSONA_RETRIES,
    POPULARITY_TIE_WINDOW,
    SEARCH_TIMEOUT_MS,
    SUBTOPIC_COUNT,
    SUBTOPIC_RETRIES,
    TEXT_RETRIES,
    TEXT_TIMEOUT_MS,
    TREND_COUNT,
    TREND_RETRIES,
    VISUAL_OPTION_COUNT,
)

__all__ = [
    "BACKOFF_MULTIPLIER",
    "BATCH_TIMEOUT_MS",
    "CHECKPOINT_PREFIX",
    "CHECKPOINT_STALE_MS",
    "DEFAULT_IMAGE_MODEL",
    "DEFAULT_TEXT_MODEL",
    "IMAGE_RETRIES",
    "IMAGE_TIMEOUT_MS",
    "INITIAL_RETRY_DELAY_MS",
    "NEWS_BATCH_SIZE",
    "NEWS_CACHE_READ_LIMIT",
    "NEWS_IN_PROGRESS_TIMEOUT_MS",
    "NEWS_REFRESH_WINDOW_MS",
    "NEWS_RETRIES",
    "PERSONA_RETRIES",
    "POPULARITY_TIE_WINDOW",
    "SEARCH_TIMEOUT_MS",
    "SUBTOPIC_COUNT",
    "SUBTOPIC_RETRIES",
    "TEXT_RETRIES",
    "TEXT_TIMEOUT_MS",
    "TREND_COUNT",
    "TREND_RETRIES",
    "VISUAL_OPTION_COUNT",
]
