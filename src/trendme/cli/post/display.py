"""Display functions for post commands - pure functions for Rich output."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ...checkpoints import PostCheckpoint
from ...content import GridType, Influencer, Post
from ...news import NewsArticle
from ...utils import format_age


def show_post_config(
    console: Console,
    influencer: Influencer,
    grid_type: GridType,
    article: NewsArticle | None,
) -> None:
    console.print(Panel(
        f"Creating a grid post for [cyan]{influencer.name}[/cyan]\n"
        f"Niche: [green]{influencer.niche}[/green]\n"
        f"Grid: [yellow]{grid_type.value}[/yellow]\n"
        f"Story: [yellow]{article.headline if article else 'Auto-discovered trend'}[/yellow]",
        title="Grid Post Creation",
    ))


def show_pending_notice(console: Console, pending: PostCheckpoint) -> None:
    topic = pending.content.topic if pending.content else "topic not generated yet"
    console.print(
        f"[yellow]Found a pending post saved {format_age(pending.updated_at or pending.timestamp)}: "
        f"{topic} (next step: {pending.step.value}).[/yellow]"
    )


def show_post_result(console: Console, post: Post) -> None:
    """Display a published post."""
    sources = "\n".join(f"  - {url}" for url in post.grounding_urls[:5]) or "  (none)"
    console.print(Panel(
        f"[bold green]Post published![/bold green]\n\n"
        f"[bold]Topic:[/] {post.topic}\n"
        f"[bold]Caption:[/] {post.caption}\n"
        f"[bold]Hashtags:[/] {' '.join(post.hashtags)}\n"
        f"[bold]Panels:[/] {len(post.images)}\n"
        f"[bold]Sources:[/]\n{sources}",
        title=f"Complete ({post.id})",
        border_style="green",
    ))


def show_posts_table(console: Console, posts: list[Post]) -> None:
    if not posts:
        console.print("[yellow]No posts found.[/yellow]")
        return

    table = Table(title="Posts")
    table.add_column("ID", style="cyan")
    table.add_column("Topic", style="white")
    table.add_column("Grid", style="yellow")
    table.add_column("Created", style="dim")

    for post in posts:
        table.add_row(post.id, post.topic[:40], post.grid_type.value, format_age(post.timestamp))

    console.print(table)
