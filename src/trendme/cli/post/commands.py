"""Post CLI commands - thin wrappers around the post pipeline."""

from __future__ import annotations

import asyncio
from typing import Optional

import typer

from ...content import GridType, Influencer, Post
from ...news import NewsArticle
from ..core import (
    Failure,
    PipelineProgressDisplay,
    Result,
    Success,
    build_services,
    confirm_resume,
    console,
    failure_from,
    print_error,
    print_info,
    print_resume_hint,
)
from ..persona.commands import resume_persona
from ..persona.display import show_persona_options
from .display import show_pending_notice, show_post_config, show_post_result, show_posts_table


def create_post(
    influencer_id: str = typer.Argument(..., help="Influencer to post as"),
    user: str = typer.Option(..., "--user", "-u", help="Owning user id"),
    grid: GridType = typer.Option(GridType.GRID_2X2, "--grid", "-g", help="Grid layout"),
    article: Optional[str] = typer.Option(None, "--article", "-a", help="Cached news article id to post about"),
    fresh: bool = typer.Option(False, "--fresh", help="Discard a pending post without asking"),
) -> None:
    """Create a grid post: content, images, upload.

    A pending post for the influencer is resumed when confirmed; it is only
    discarded with --fresh.
    """
    result = asyncio.run(_create(user, influencer_id, grid, article, fresh))
    if isinstance(result, Failure):
        print_error(result.error, result.details)
        print_resume_hint(user, influencer_id)
        raise typer.Exit(1)
    show_post_result(console, result.value)


def resume(
    user: str = typer.Option(..., "--user", "-u", help="Owning user id"),
    influencer: Optional[str] = typer.Option(
        None, "--influencer", help="Resume this influencer's post; omit to resume the user's persona"
    ),
) -> None:
    """Continue an interrupted post or persona from its last checkpoint."""
    if influencer:
        result = asyncio.run(_resume_post(influencer))
        if isinstance(result, Failure):
            print_error(result.error, result.details)
            raise typer.Exit(1)
        show_post_result(console, result.value)
        return

    persona_result = asyncio.run(resume_persona(user))
    if isinstance(persona_result, Failure):
        print_error(persona_result.error, persona_result.details)
        raise typer.Exit(1)
    show_persona_options(console, persona_result.value, [])


def list_posts(
    influencer_id: str = typer.Argument(..., help="Influencer whose posts to list"),
    user: str = typer.Option(..., "--user", "-u", help="Owning user id"),
) -> None:
    """List an influencer's posts, newest first."""
    services = build_services()
    show_posts_table(console, asyncio.run(services.posts.list_for_influencer(user, influencer_id)))


async def _create(
    user_id: str,
    influencer_id: str,
    grid_type: GridType,
    article_id: str | None,
    fresh: bool = False,
) -> Result[Post]:
    display = PipelineProgressDisplay(console)
    services = build_services(progress_callback=display.handle)

    influencer: Influencer | None = await services.influencers.get(user_id, influencer_id)
    if influencer is None:
        return Failure(f"Influencer not found: {influencer_id}", {"user": user_id})

    article: NewsArticle | None = None
    if article_id:
        article = await services.news_repository.get_article(influencer.niche, article_id)
        if article is None:
            return Failure(f"Article not found: {article_id}", {"niche": influencer.niche})
        if await services.news_repository.has_user_used_article(influencer.niche, article_id, user_id):
            print_info("You already posted about this article.")

    pending = services.posts_pipeline.pending(influencer_id)
    if pending is not None:
        show_pending_notice(console, pending)
        if not fresh:
            if not confirm_resume("post"):
                return Failure("Pending post kept", {"hint": "pass --fresh to discard it and start over"})
            try:
                return Success(await services.posts_pipeline.resume(influencer_id))
            except Exception as e:
                return failure_from(e)

    show_post_config(console, influencer, grid_type, article)
    try:
        return Success(await services.posts_pipeline.create(influencer, grid_type, source=article))
    except Exception as e:
        return failure_from(e)


async def _resume_post(influencer_id: str) -> Result[Post]:
    display = PipelineProgressDisplay(console)
    services = build_services(progress_callback=display.handle)
    try:
        return Success(await services.posts_pipeline.resume(influencer_id))
    except Exception as e:
        return failure_from(e)
