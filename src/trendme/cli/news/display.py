"""Display functions for news commands - pure functions for Rich output."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from ...content import TrendSignal
from ...news import NewsArticle, NewsFilter
from ...utils import format_age


def show_articles_table(console: Console, niche: str, articles: list[NewsArticle], view: NewsFilter) -> None:
    if not articles:
        console.print(f"[yellow]No {view.value} articles for {niche}.[/yellow]")
        return

    table = Table(title=f"News: {niche} ({view.value})")
    table.add_column("ID", style="cyan")
    table.add_column("Headline", style="white")
    table.add_column("Score", style="yellow", justify="right")
    table.add_column("Used", style="magenta", justify="right")
    table.add_column("Fetched", style="dim")

    for article in articles:
        table.add_row(
            article.id,
            article.headline[:60],
            str(article.relevance_score),
            str(article.usage_count),
            format_age(article.fetched_at),
        )

    console.print(table)
    console.print("\nPost about one with [cyan]trendme create-post INFLUENCER_ID --user USER --article ID[/cyan]")


def show_trends_table(console: Console, niche: str, trends: list[TrendSignal]) -> None:
    table = Table(title=f"Trending: {niche}")
    table.add_column("Headline", style="white")
    table.add_column("Summary", style="dim")
    table.add_column("Score", style="yellow", justify="right")
    table.add_column("Source", style="cyan")

    for trend in trends:
        table.add_row(trend.headline, trend.summary[:80], str(trend.relevance_score), trend.source_url or "")

    console.print(table)


def show_sub_topics(console: Console, niche: str, topics: list[str]) -> None:
    console.print(f"[bold]Focus ideas for {niche}:[/bold]")
    for topic in topics:
        console.print(f"  - [cyan]{topic}[/cyan]")
