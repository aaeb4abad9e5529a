"""Batch news discovery for a niche.

Search-grounded discovery runs first; a knowledge-only prompt is used once
it exhausts its retries. Every article gets a fresh id, a zero usage count
and an empty usage list.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from ..providers.config import NewsSettings, RetrySettings, TimeoutSettings
from ..providers.errors import GenerationError, ParsingError
from ..providers.generation import GenerationService, TextRequest, TextResponse
from ..providers.parsing import as_records, as_score, as_text, require_json
from ..providers.retry import AttemptCallback, retry_with_backoff, with_fallback, with_timeout
from ..utils import generate_id, now_ms
from .models import NewsArticle

_logger = logging.getLogger("news")

T = TypeVar("T")

NEWS_SEARCH_PROMPT = """Find the {count} most important real-world news stories from the last 48 hours for the "{niche}" niche.

For each story return:
- headline: the story headline, max 14 words
- summary: 1-2 sentence summary
- fullContext: 3-5 paragraphs covering what happened, who is involved, and why it matters to a {niche} audience
- sourceUrl: the article URL, if known
- relevanceScore: 0-100

RETURN RAW JSON ARRAY ONLY. No markdown."""

NEWS_FALLBACK_PROMPT = """Generate {count} realistic, timely story ideas that a "{niche}" news desk would cover this week.
Prefer ongoing developments and evergreen angles over invented breaking events.

For each story return headline, summary, fullContext (3-5 paragraphs) and relevanceScore (0-100).

RETURN RAW JSON ARRAY ONLY."""


class NewsDiscovery:
    """Discovers a batch of articles for a niche."""

    def __init__(
        self,
        service: GenerationService,
        retry: RetrySettings | None = None,
        timeouts: TimeoutSettings | None = None,
        settings: NewsSettings | None = None,
        on_attempt: AttemptCallback = None,
    ):
        self.service = service
        self.retry = retry or RetrySettings()
        self.timeouts = timeouts or TimeoutSettings()
        self.settings = settings or NewsSettings()
        self._on_attempt = on_attempt

    async def _call(
        self,
        request: TextRequest,
        parse: Callable[[TextResponse], T],
        name: str,
        timeout_ms: int,
    ) -> T:
        async def attempt() -> T:
            response = await with_timeout(self.service.generate_text(request), timeout_ms, name)
            return parse(response)

        return await retry_with_backoff(
            attempt,
            name=name,
            max_attempts=self.retry.news_attempts,
            initial_delay_ms=self.retry.initial_delay_ms,
            multiplier=self.retry.multiplier,
            on_attempt=self._on_attempt,
        )

    @staticmethod
    def _build_articles(
        niche: str,
        response: TextResponse,
        operation: str,
        default_score: int,
    ) -> list[NewsArticle]:
        items = as_records(require_json(response.text, (list, dict), operation))
        # Grounding chunks are per response, not per item
        grounded = response.source_urls[0] if response.source_urls else None
        fetched_at = now_ms()
        articles: list[NewsArticle] = []
        for item in items:
            headline = as_text(item.get("headline"))
            summary = as_text(item.get("summary"))
            if not headline and not summary:
                continue
            articles.append(NewsArticle(
                id=generate_id("article"),
                niche=niche,
                headline=headline or "News Update",
                summary=summary,
                full_context=as_text(item.get("fullContext")) or summary,
                source_url=as_text(item.get("sourceUrl")) or grounded,
                relevance_score=as_score(item.get("relevanceScore"), default_score),
                fetched_at=fetched_at,
            ))
        return articles

    async def discover(self, niche: str) -> list[NewsArticle]:
        """Discover fresh articles.

        Raises:
            GenerationError: Both strategies failed.
        """
        name = "discover_news"
        count = self.settings.batch_size

        def parse_search(response: TextResponse) -> list[NewsArticle]:
            articles = self._build_articles(niche, response, f"{name} (search)", 80)
            if not articles:
                raise GenerationError("No articles returned from search", f"{name} (search)")
            return articles

        def parse_fallback(response: TextResponse) -> list[NewsArticle]:
            articles = self._build_articles(niche, response, f"{name} (fallback)", 70)
            if not articles:
                raise ParsingError(f"{name} (fallback)", detail="empty article list")
            return articles

        def search() -> Awaitable[list[NewsArticle]]:
            return self._call(
                TextRequest(
                    prompt=NEWS_SEARCH_PROMPT.format(count=count, niche=niche),
                    task="news",
                    use_search=True,
                ),
                parse_search,
                f"{name} (search)",
                self.timeouts.batch_ms,
            )

        def fallback() -> Awaitable[list[NewsArticle]]:
            return self._call(
                TextRequest(
                    prompt=NEWS_FALLBACK_PROMPT.format(count=count, niche=niche),
                    task="news",
                    json_output=True,
                ),
                parse_fallback,
                f"{name} (fallback)",
                self.timeouts.text_ms,
            )

        articles = await with_fallback(search, fallback, name=name)
        _logger.info(f"NICHE:{niche} | DISCOVERED | count:{len(articles)}")
        return articles
