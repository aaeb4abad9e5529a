"""Limit constants for trendme.

This module contains all limits and constraints:
- Generation timeouts and retry budgets
- News cache windows
- Checkpoint staleness

MODIFICATION GUIDE:
------------------
- *_TIMEOUT_MS: Upper bound for a single remote call, in milliseconds
- *_RETRIES: Total attempts (not extra attempts) for an operation
- NEWS_* windows: Shared across every client reading the same niche
"""

from typing import Final

# =============================================================================
# GENERATION MODELS
# =============================================================================

DEFAULT_TEXT_MODEL: Final[str] = "gemini-3-flash-preview"
"""Model used for structured text generation."""

DEFAULT_IMAGE_MODEL: Final[str] = "gemini-2.5-flash-image"
"""Model used for composite grid images."""


# =============================================================================
# TIMEOUTS
# =============================================================================

TEXT_TIMEOUT_MS: Final[int] = 30_000
"""Plain text generation (persona, sub-topics, knowledge-only content)."""

SEARCH_TIMEOUT_MS: Final[int] = 45_000
"""Search-grounded content generation."""

BATCH_TIMEOUT_MS: Final[int] = 60_000
"""Search-grounded batch news discovery."""

IMAGE_TIMEOUT_MS: Final[int] = 90_000
"""Composite image generation."""


# =============================================================================
# RETRY SETTINGS
# =============================================================================

INITIAL_RETRY_DELAY_MS: Final[int] = 1000
"""Delay before the second attempt."""

BACKOFF_MULTIPLIER: Final[float] = 2.0
"""Growth factor applied to the delay after each failed attempt."""

TEXT_RETRIES: Final[int] = 3
"""Attempts for post content generation."""

PERSONA_RETRIES: Final[int] = 3
"""Attempts for persona generation."""

SUBTOPIC_RETRIES: Final[int] = 2
"""Attempts for sub-topic suggestions."""

TREND_RETRIES: Final[int] = 2
"""Attempts per strategy for trend discovery."""

NEWS_RETRIES: Final[int] = 2
"""Attempts per strategy for batch news discovery."""

IMAGE_RETRIES: Final[int] = 2
"""Attempts for composite image generation."""


# =============================================================================
# NEWS CACHE
# =============================================================================

NEWS_REFRESH_WINDOW_MS: Final[int] = 60 * 60 * 1000
"""A completed fetch younger than this forces cache-only reads."""

NEWS_IN_PROGRESS_TIMEOUT_MS: Final[int] = 2 * 60 * 1000
"""An in-progress fetch older than this is assumed dead."""

NEWS_BATCH_SIZE: Final[int] = 6
"""Articles requested per discovery call."""

NEWS_CACHE_READ_LIMIT: Final[int] = 50
"""Maximum cached articles read back per niche."""

POPULARITY_TIE_WINDOW: Final[int] = 10
"""Relevance scores within this distance are ordered by recency instead."""


# =============================================================================
# CONTENT SHAPES
# =============================================================================

TREND_COUNT: Final[int] = 3
"""Trend signals requested per discovery call."""

SUBTOPIC_COUNT: Final[int] = 5
"""Sub-topic suggestions returned per niche."""

VISUAL_OPTION_COUNT: Final[int] = 4
"""Avatar visual options offered per persona."""


# =============================================================================
# CHECKPOINTS
# =============================================================================

CHECKPOINT_PREFIX: Final[str] = "trendme_operation_"
"""Key prefix for locally persisted checkpoints."""

CHECKPOINT_STALE_MS: Final[int] = 60 * 60 * 1000
"""Checkpoints older than this are treated as absent."""
