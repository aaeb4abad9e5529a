"""Data models for cached news discovery."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from ..utils import now_ms


class UsageRef(BaseModel):
    """A post that was generated from an article."""

    post_id: str
    user_id: str
    influencer_id: str


class NewsArticle(BaseModel):
    """A discovered article cached per niche, shared by every user."""

    id: str
    niche: str
    headline: str
    summary: str
    full_context: str = ""
    source_url: str | None = None
    relevance_score: int = 0
    fetched_at: int = Field(default_factory=now_ms)
    usage_count: int = 0
    used_by_posts: list[UsageRef] = Field(default_factory=list)

    def used_by(self, user_id: str) -> bool:
        """Check whether any post of this user was built from the article."""
        return any(ref.user_id == user_id for ref in self.used_by_posts)


class FetchStatus(str, Enum):
    """Status of the last discovery call for a niche."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class NewsFetchMetadata(BaseModel):
    """Per-niche fetch record, shared by every client.

    ``lease_id`` identifies the caller that owns an in-progress fetch.
    """

    niche: str
    last_fetch_at: int
    status: FetchStatus
    article_count: int = 0
    lease_id: str | None = None


class NewsFilter(str, Enum):
    """Article list views."""

    ALL = "all"
    UNUSED = "unused"
    POPULAR = "popular"
