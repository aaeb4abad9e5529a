"""Globally rate-limited cache-or-fetch gate for news discovery.

One metadata document per niche, shared by every client, decides whether a
caller may run discovery or must read the cache:

    no record                      -> fetch
    completed, younger than 1h     -> cache only
    completed, 1h or older         -> fetch
    in_progress, younger than 2m   -> cache only (someone else is fetching)
    in_progress, 2m or older       -> fetch (the other fetch is presumed dead)
    failed                         -> fetch
    allow_retry                    -> fetch

Taking the fetch is a compare-and-set on the metadata document that writes
``in_progress`` with a fresh lease id, so two callers that read the same
record cannot both win. The 2 minute expiry of an in-progress lease is a
liveness assumption; nothing confirms the other fetch actually died.

Usage:
    gate = NewsCacheGate(NewsRepository(store), NewsDiscovery(service))
    articles = await gate.fetch_news("sustainable fashion")
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

from ..providers.config import NewsSettings
from ..providers.errors import GenerationError
from ..utils import generate_id, now_ms
from .discovery import NewsDiscovery
from .models import FetchStatus, NewsArticle, NewsFetchMetadata
from .repository import NewsRepository

_logger = logging.getLogger("news")

_FORCED_LEASE_ATTEMPTS = 3


class GateDecision(str, Enum):
    """Outcome of the cache-or-fetch decision."""

    FETCH = "fetch"
    CACHE_ONLY = "cache_only"
    WAIT_FOR_OTHER = "wait_for_other"


def decide(
    metadata: NewsFetchMetadata | None,
    now: int,
    settings: NewsSettings,
    allow_retry: bool = False,
) -> GateDecision:
    """Pure state machine over the niche's metadata record."""
    if allow_retry or metadata is None:
        return GateDecision.FETCH

    age = now - metadata.last_fetch_at
    if metadata.status is FetchStatus.COMPLETED:
        return GateDecision.CACHE_ONLY if age < settings.refresh_window_ms else GateDecision.FETCH
    if metadata.status is FetchStatus.IN_PROGRESS:
        return GateDecision.WAIT_FOR_OTHER if age < settings.in_progress_timeout_ms else GateDecision.FETCH
    return GateDecision.FETCH


class NewsCacheGate:
    """Serves cached articles or runs at most one discovery per niche."""

    def __init__(
        self,
        repository: NewsRepository,
        discovery: NewsDiscovery,
        settings: NewsSettings | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        """Initialize the gate.

        Args:
            repository: Article cache and metadata access.
            discovery: Remote discovery used on a fresh fetch.
            settings: Refresh and in-progress windows.
            clock: Epoch millisecond clock (tests inject a fixed one).
        """
        self.repository = repository
        self.discovery = discovery
        self.settings = settings or NewsSettings()
        self._clock = clock

    async def fetch_news(self, niche: str, allow_retry: bool = False) -> list[NewsArticle]:
        """Return articles for a niche, fetching only when the gate allows.

        Args:
            niche: Niche to read.
            allow_retry: Force a fresh fetch (user initiated retry).

        Raises:
            GenerationError: Discovery failed and there is no cache to fall back to.
        """
        raw = await self.repository.get_metadata_raw(niche)
        metadata = NewsFetchMetadata.model_validate(raw) if raw else None
        decision = decide(metadata, self._clock(), self.settings, allow_retry)
        _logger.info(
            f"NICHE:{niche} | GATE | decision:{decision.value} | "
            f"status:{metadata.status.value if metadata else 'none'} | retry:{allow_retry}"
        )

        if decision is not GateDecision.FETCH:
            return await self.repository.cached_articles(niche, self.settings.cache_read_limit)

        lease_id = await self._acquire_lease(niche, raw, metadata, forced=allow_retry)
        if lease_id is None:
            _logger.info(f"NICHE:{niche} | LEASE_LOST | serving cache")
            return await self.repository.cached_articles(niche, self.settings.cache_read_limit)

        try:
            articles = await self.discovery.discover(niche)
        except GenerationError as e:
            await self._release(niche, lease_id, FetchStatus.FAILED, 0)
            stale = await self.repository.cached_articles(niche, self.settings.cache_read_limit)
            if stale:
                _logger.warning(
                    f"NICHE:{niche} | FETCH_FAILED | serving stale cache:{len(stale)} | error:{e}"
                )
                return stale
            _logger.error(f"NICHE:{niche} | FETCH_FAILED | no cache | error:{e}")
            raise

        await self.repository.save_articles(niche, articles)
        await self._release(niche, lease_id, FetchStatus.COMPLETED, len(articles))
        return await self.repository.cached_articles(niche, self.settings.cache_read_limit)

    async def _acquire_lease(
        self,
        niche: str,
        raw: dict[str, Any] | None,
        metadata: NewsFetchMetadata | None,
        forced: bool,
    ) -> str | None:
        """Swap the observed record for an in-progress lease.

        A forced acquisition re-reads and retries when another writer got in
        between; an unforced one gives up on the first conflict.
        """
        lease_id = generate_id("lease")
        attempts = _FORCED_LEASE_ATTEMPTS if forced else 1
        for _ in range(attempts):
            lease = NewsFetchMetadata(
                niche=niche,
                last_fetch_at=self._clock(),
                status=FetchStatus.IN_PROGRESS,
                article_count=metadata.article_count if metadata else 0,
                lease_id=lease_id,
            )
            if await self.repository.swap_metadata(niche, raw, lease):
                _logger.info(f"NICHE:{niche} | LEASE_ACQUIRED | lease:{lease_id}")
                return lease_id
            raw = await self.repository.get_metadata_raw(niche)
            metadata = NewsFetchMetadata.model_validate(raw) if raw else None
        return None

    async def _release(self, niche: str, lease_id: str, status: FetchStatus, count: int) -> None:
        released = await self.repository.swap_metadata(
            niche,
            {"lease_id": lease_id},
            NewsFetchMetadata(
                niche=niche,
                last_fetch_at=self._clock(),
                status=status,
                article_count=count,
                lease_id=None,
            ),
        )
        if released:
            _logger.info(f"NICHE:{niche} | LEASE_RELEASED | status:{status.value} | count:{count}")
        else:
            _logger.warning(f"NICHE:{niche} | LEASE_EXPIRED | lease:{lease_id} | status:{status.value}")
