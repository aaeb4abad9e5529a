"""News CLI commands - cached breaking news, live trends and sub-topics."""

from __future__ import annotations

import asyncio
from typing import Optional

import typer

from ...content import TrendSignal
from ...news import NewsArticle, NewsFilter, filter_articles
from ..core import Failure, Result, Success, build_services, console, failure_from, print_error
from .display import show_articles_table, show_sub_topics, show_trends_table


def news(
    niche: str = typer.Argument(..., help="Niche to read news for"),
    retry: bool = typer.Option(False, "--retry", help="Refetch now unless another fetch is running"),
    view: NewsFilter = typer.Option(NewsFilter.ALL, "--filter", "-f", help="List view"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="User id for the unused view"),
) -> None:
    """Show cached news for a niche, fetching when the cache is stale."""
    result = asyncio.run(_fetch_news(niche, retry))
    if isinstance(result, Failure):
        print_error(result.error, result.details)
        raise typer.Exit(1)
    show_articles_table(console, niche, filter_articles(result.value, view, user), view)


def trends(
    niche: str = typer.Argument(..., help="Niche to search"),
    focus: Optional[str] = typer.Option(None, "--focus", help="Narrow the search to a sub-topic"),
) -> None:
    """Discover live trending stories for a niche."""
    result = asyncio.run(_discover_trends(niche, focus))
    if isinstance(result, Failure):
        print_error(result.error, result.details)
        raise typer.Exit(1)
    show_trends_table(console, focus or niche, result.value)


def subtopics(
    niche: str = typer.Argument(..., help="Niche to suggest focus ideas for"),
) -> None:
    """Suggest focused sub-topics for a niche."""
    services = build_services()
    show_sub_topics(console, niche, asyncio.run(services.content.generate_sub_topics(niche)))


async def _fetch_news(niche: str, allow_retry: bool) -> Result[list[NewsArticle]]:
    services = build_services()
    try:
        with console.status(f"Checking news for {niche}..."):
            return Success(await services.news_gate.fetch_news(niche, allow_retry=allow_retry))
    except Exception as e:
        return failure_from(e)


async def _discover_trends(niche: str, focus: str | None) -> Result[list[TrendSignal]]:
    services = build_services()
    try:
        with console.status(f"Searching trends for {focus or niche}..."):
            return Success(await services.content.discover_trends(niche, focus))
    except Exception as e:
        return failure_from(e)
