"""Persona CLI commands - thin wrappers around the persona pipeline."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from ...checkpoints import PersonaCheckpoint
from ...content import Influencer
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
    print_resume_hint,
)
from .display import (
    show_influencer,
    show_influencers_table,
    show_pending_persona,
    show_persona_config,
    show_persona_options,
)


def create_persona(
    niche: str = typer.Argument(..., help="Niche the influencer posts about"),
    user: str = typer.Option(..., "--user", "-u", help="Owning user id"),
    previews: Optional[Path] = typer.Option(None, "--previews", help="Directory to write avatar previews to"),
    fresh: bool = typer.Option(False, "--fresh", help="Discard a pending persona without asking"),
) -> None:
    """Generate a persona and avatar options for a niche."""
    result = asyncio.run(_run_persona(niche, user, fresh))
    if isinstance(result, Failure):
        print_error(result.error, result.details)
        print_resume_hint(user)
        raise typer.Exit(1)

    show_persona_options(console, result.value, _write_previews(result.value, previews))


def confirm_persona(
    user: str = typer.Option(..., "--user", "-u", help="Owning user id"),
    index: int = typer.Option(..., "--index", "-i", help="Chosen avatar option"),
) -> None:
    """Save the pending persona with the chosen avatar as an influencer."""
    result = asyncio.run(_confirm(user, index))
    if isinstance(result, Failure):
        print_error(result.error, result.details)
        raise typer.Exit(1)
    show_influencer(console, result.value)


def list_influencers(
    user: str = typer.Option(..., "--user", "-u", help="Owning user id"),
) -> None:
    """List a user's influencers, newest first."""
    services = build_services()
    show_influencers_table(console, asyncio.run(services.influencers.list(user)))


async def _run_persona(niche: str, user_id: str, fresh: bool = False) -> Result[PersonaCheckpoint]:
    display = PipelineProgressDisplay(console)
    services = build_services(progress_callback=display.handle)

    pending = services.persona_pipeline.pending(user_id)
    if pending is not None:
        show_pending_persona(console, pending)
        if not fresh:
            if not confirm_resume("persona"):
                return Failure("Pending persona kept", {"hint": "pass --fresh to discard it and start over"})
            try:
                return Success(await services.persona_pipeline.resume(user_id))
            except Exception as e:
                return failure_from(e)

    show_persona_config(console, niche, user_id)
    try:
        return Success(await services.persona_pipeline.create(user_id, niche))
    except Exception as e:
        return failure_from(e)


async def resume_persona(user_id: str) -> Result[PersonaCheckpoint]:
    display = PipelineProgressDisplay(console)
    services = build_services(progress_callback=display.handle)
    try:
        return Success(await services.persona_pipeline.resume(user_id))
    except Exception as e:
        return failure_from(e)


async def _confirm(user_id: str, index: int) -> Result[Influencer]:
    services = build_services()
    try:
        return Success(await services.persona_pipeline.confirm(user_id, index))
    except (LookupError, ValueError) as e:
        return Failure(str(e))
    except Exception as e:
        return failure_from(e)


def _write_previews(state: PersonaCheckpoint, directory: Path | None) -> list[Path]:
    if directory is None or not state.avatar_images:
        return []
    directory.mkdir(parents=True, exist_ok=True)
    paths = []
    for image in sorted(state.avatar_images, key=lambda img: img.index):
        path = directory / f"avatar_{image.index}.{image.extension}"
        path.write_bytes(image.data)
        paths.append(path)
    return paths
