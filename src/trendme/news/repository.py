"""Niche-scoped news cache and fetch metadata.

Collections (shared by every user):
    news/{niche_slug}/articles
    news_metadata          (one document per niche slug)
"""

from __future__ import annotations

import logging
import re
from functools import cmp_to_key
from typing import Any

from ..constants import limits
from ..storage.base import DocumentStore, WriteOp
from .models import NewsArticle, NewsFetchMetadata, NewsFilter, UsageRef

_logger = logging.getLogger("news")

METADATA_COLLECTION = "news_metadata"
_MARK_USED_ATTEMPTS = 5


def niche_slug(niche: str) -> str:
    """Stable document key for a niche ("Sustainable Fashion" -> "sustainable-fashion")."""
    slug = re.sub(r"[^a-z0-9]+", "-", niche.lower()).strip("-")
    return slug or "general"


def articles_path(niche: str) -> str:
    return f"news/{niche_slug(niche)}/articles"


def _compare_relevance(a: NewsArticle, b: NewsArticle) -> int:
    score_diff = b.relevance_score - a.relevance_score
    if abs(score_diff) > limits.POPULARITY_TIE_WINDOW:
        return score_diff
    return b.fetched_at - a.fetched_at


def filter_articles(
    articles: list[NewsArticle],
    view: NewsFilter = NewsFilter.ALL,
    user_id: str | None = None,
) -> list[NewsArticle]:
    """Apply a list view.

    ``all`` orders by relevance, treating scores within the tie window as
    equal and ordering those by recency. ``unused`` hides articles this user
    already posted from. ``popular`` keeps used articles, most used first.
    """
    if view is NewsFilter.UNUSED:
        return [a for a in articles if not (user_id and a.used_by(user_id))]
    if view is NewsFilter.POPULAR:
        return sorted((a for a in articles if a.usage_count > 0), key=lambda a: a.usage_count, reverse=True)
    return sorted(articles, key=cmp_to_key(_compare_relevance))


class NewsRepository:
    """Reads and writes cached articles and per-niche fetch metadata."""

    def __init__(self, store: DocumentStore):
        self.store = store

    # =========================================================================
    # Metadata
    # =========================================================================

    async def get_metadata_raw(self, niche: str) -> dict[str, Any] | None:
        return await self.store.get(METADATA_COLLECTION, niche_slug(niche))

    async def get_metadata(self, niche: str) -> NewsFetchMetadata | None:
        data = await self.get_metadata_raw(niche)
        return NewsFetchMetadata.model_validate(data) if data else None

    async def swap_metadata(
        self,
        niche: str,
        expected: dict[str, Any] | None,
        metadata: NewsFetchMetadata,
    ) -> bool:
        """Conditionally replace the niche's metadata document."""
        return await self.store.compare_and_set(
            METADATA_COLLECTION,
            niche_slug(niche),
            expected,
            metadata.model_dump(mode="json"),
        )

    async def get_last_fetch_time(self, niche: str) -> int | None:
        metadata = await self.get_metadata(niche)
        return metadata.last_fetch_at if metadata else None

    # =========================================================================
    # Articles
    # =========================================================================

    async def cached_articles(self, niche: str, limit: int = limits.NEWS_CACHE_READ_LIMIT) -> list[NewsArticle]:
        """Most recently fetched articles first."""
        documents = await self.store.query(
            articles_path(niche), order_by="fetched_at", descending=True, limit=limit
        )
        return [NewsArticle.model_validate(doc) for doc in documents]

    async def save_articles(self, niche: str, articles: list[NewsArticle]) -> None:
        path = articles_path(niche)
        await self.store.batch_write([
            WriteOp("set", path, article.id, article.model_dump(mode="json")) for article in articles
        ])
        _logger.info(f"NICHE:{niche} | ARTICLES_SAVED | count:{len(articles)}")

    async def get_article(self, niche: str, article_id: str) -> NewsArticle | None:
        data = await self.store.get(articles_path(niche), article_id)
        return NewsArticle.model_validate(data) if data else None

    async def list_articles(
        self,
        niche: str,
        view: NewsFilter = NewsFilter.ALL,
        user_id: str | None = None,
    ) -> list[NewsArticle]:
        return filter_articles(await self.cached_articles(niche), view, user_id)

    async def mark_article_used(
        self,
        niche: str,
        article_id: str,
        post_id: str,
        user_id: str,
        influencer_id: str,
    ) -> bool:
        """Append a usage reference and bump the usage count.

        Idempotent per post id. Concurrent writers are serialized with
        compare-and-set on the usage count.

        Returns:
            True if a new reference was recorded.
        """
        path = articles_path(niche)
        for _ in range(_MARK_USED_ATTEMPTS):
            data = await self.store.get(path, article_id)
            if data is None:
                _logger.warning(f"NICHE:{niche} | MARK_USED_MISSING | article:{article_id}")
                return False
            article = NewsArticle.model_validate(data)
            if any(ref.post_id == post_id for ref in article.used_by_posts):
                return False

            updated = article.model_copy(update={
                "usage_count": article.usage_count + 1,
                "used_by_posts": [
                    *article.used_by_posts,
                    UsageRef(post_id=post_id, user_id=user_id, influencer_id=influencer_id),
                ],
            })
            if await self.store.compare_and_set(
                path,
                article_id,
                {"usage_count": article.usage_count},
                updated.model_dump(mode="json"),
            ):
                _logger.info(
                    f"NICHE:{niche} | MARK_USED | article:{article_id} | post:{post_id} | "
                    f"count:{updated.usage_count}"
                )
                return True

        _logger.warning(f"NICHE:{niche} | MARK_USED_CONTENDED | article:{article_id} | post:{post_id}")
        return False

    async def has_user_used_article(self, niche: str, article_id: str, user_id: str) -> bool:
        article = await self.get_article(niche, article_id)
        return bool(article and article.used_by(user_id))
