"""Tests for the news cache-or-fetch gate."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from trendme.news import (
    FetchStatus,
    GateDecision,
    NewsArticle,
    NewsCacheGate,
    NewsFetchMetadata,
    NewsRepository,
    decide,
)
from trendme.providers.errors import NetworkError

MINUTE = 60 * 1000
NICHE = "sustainable fashion"


def make_article(article_id: str, fetched_at: int, score: int = 80) -> NewsArticle:
    return NewsArticle(
        id=article_id,
        niche=NICHE,
        headline=f"Headline {article_id}",
        summary="Summary",
        relevance_score=score,
        fetched_at=fetched_at,
    )


@pytest.fixture
def repository(store):
    return NewsRepository(store)


@pytest.fixture
def discovery(clock):
    discovery = MagicMock()
    discovery.discover = AsyncMock(return_value=[make_article("fresh_1", clock()), make_article("fresh_2", clock())])
    return discovery


@pytest.fixture
def gate(repository, discovery, news_settings, clock):
    return NewsCacheGate(repository, discovery, news_settings, clock=clock)


async def seed(repository, clock, status: FetchStatus, age_ms: int, cached: int = 1):
    await repository.save_articles(
        NICHE, [make_article(f"cached_{i}", clock() - age_ms) for i in range(cached)]
    )
    await repository.swap_metadata(
        NICHE,
        None,
        NewsFetchMetadata(niche=NICHE, last_fetch_at=clock() - age_ms, status=status, article_count=cached),
    )


class TestDecide:
    """Tests for the pure decision function."""

    @pytest.mark.parametrize("status,age,expected", [
        (FetchStatus.COMPLETED, 10 * MINUTE, GateDecision.CACHE_ONLY),
        (FetchStatus.COMPLETED, 90 * MINUTE, GateDecision.FETCH),
        (FetchStatus.IN_PROGRESS, 1 * MINUTE, GateDecision.WAIT_FOR_OTHER),
        (FetchStatus.IN_PROGRESS, 3 * MINUTE, GateDecision.FETCH),
        (FetchStatus.FAILED, 1 * MINUTE, GateDecision.FETCH),
    ])
    def test_state_table(self, news_settings, status, age, expected):
        metadata = NewsFetchMetadata(niche=NICHE, last_fetch_at=0, status=status)
        assert decide(metadata, age, news_settings) is expected

    def test_no_record_fetches(self, news_settings):
        assert decide(None, 0, news_settings) is GateDecision.FETCH

    def test_retry_overrides(self, news_settings):
        metadata = NewsFetchMetadata(niche=NICHE, last_fetch_at=0, status=FetchStatus.COMPLETED)
        assert decide(metadata, 1, news_settings, allow_retry=True) is GateDecision.FETCH


class TestFetchNews:
    """Tests for fetch_news."""

    @pytest.mark.asyncio
    async def test_recent_fetch_serves_cache(self, gate, repository, discovery, clock):
        await seed(repository, clock, FetchStatus.COMPLETED, 10 * MINUTE, cached=2)

        articles = await gate.fetch_news(NICHE)

        discovery.discover.assert_not_awaited()
        assert {a.id for a in articles} == {"cached_0", "cached_1"}

    @pytest.mark.asyncio
    async def test_old_fetch_discovers_once(self, gate, repository, discovery, clock):
        await seed(repository, clock, FetchStatus.COMPLETED, 90 * MINUTE)

        articles = await gate.fetch_news(NICHE)

        assert discovery.discover.await_count == 1
        assert {"fresh_1", "fresh_2"} <= {a.id for a in articles}
        metadata = await repository.get_metadata(NICHE)
        assert metadata.status is FetchStatus.COMPLETED
        assert metadata.article_count == 2
        assert metadata.last_fetch_at == clock()
        assert metadata.lease_id is None

    @pytest.mark.asyncio
    async def test_no_record_discovers(self, gate, discovery):
        articles = await gate.fetch_news(NICHE)
        assert discovery.discover.await_count == 1
        assert len(articles) == 2

    @pytest.mark.asyncio
    async def test_in_progress_elsewhere_serves_cache(self, gate, repository, discovery, clock):
        await seed(repository, clock, FetchStatus.IN_PROGRESS, 1 * MINUTE)
        await gate.fetch_news(NICHE)
        discovery.discover.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dead_in_progress_is_taken_over(self, gate, repository, discovery, clock):
        await seed(repository, clock, FetchStatus.IN_PROGRESS, 3 * MINUTE)
        await gate.fetch_news(NICHE)
        assert discovery.discover.await_count == 1

    @pytest.mark.asyncio
    async def test_allow_retry_forces_fetch(self, gate, repository, discovery, clock):
        await seed(repository, clock, FetchStatus.COMPLETED, 1 * MINUTE)
        await gate.fetch_news(NICHE, allow_retry=True)
        assert discovery.discover.await_count == 1

    @pytest.mark.asyncio
    async def test_failure_serves_stale_cache(self, gate, repository, discovery, clock):
        await seed(repository, clock, FetchStatus.COMPLETED, 90 * MINUTE, cached=3)
        discovery.discover.side_effect = NetworkError("discover_news")

        articles = await gate.fetch_news(NICHE)

        assert len(articles) == 3
        assert (await repository.get_metadata(NICHE)).status is FetchStatus.FAILED

    @pytest.mark.asyncio
    async def test_failure_without_cache_raises(self, gate, repository, discovery):
        discovery.discover.side_effect = NetworkError("discover_news")

        with pytest.raises(NetworkError):
            await gate.fetch_news(NICHE)
        assert (await repository.get_metadata(NICHE)).status is FetchStatus.FAILED

    @pytest.mark.asyncio
    async def test_failed_status_refetches(self, gate, repository, discovery, clock):
        await seed(repository, clock, FetchStatus.FAILED, 1 * MINUTE)
        await gate.fetch_news(NICHE)
        assert discovery.discover.await_count == 1

    @pytest.mark.asyncio
    async def test_lost_lease_serves_cache(self, gate, repository, discovery, clock):
        await seed(repository, clock, FetchStatus.COMPLETED, 90 * MINUTE)
        original_get = repository.get_metadata_raw

        async def racing_get(niche):
            raw = await original_get(niche)
            # Another client takes the lease between our read and our swap
            await repository.store.set(
                "news_metadata",
                "sustainable-fashion",
                {**raw, "status": "in_progress", "lease_id": "lease_other", "last_fetch_at": clock()},
            )
            return raw

        repository.get_metadata_raw = racing_get

        await gate.fetch_news(NICHE)

        discovery.discover.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_callers_fetch_once(self, repository, discovery, news_settings, clock):
        gates = [NewsCacheGate(repository, discovery, news_settings, clock=clock) for _ in range(3)]
        for g in gates:
            await g.fetch_news(NICHE)
        assert discovery.discover.await_count == 1
