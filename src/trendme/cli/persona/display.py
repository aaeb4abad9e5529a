"""Display functions for persona commands - pure functions for Rich output."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ...checkpoints import PersonaCheckpoint
from ...content import Influencer
from ...utils import format_age


def show_persona_config(console: Console, niche: str, user_id: str) -> None:
    console.print(Panel(
        f"Creating a persona for [cyan]{niche}[/cyan]\n"
        f"User: [yellow]{user_id}[/yellow]",
        title="Persona Creation",
    ))


def show_pending_persona(console: Console, pending: PersonaCheckpoint) -> None:
    name = pending.persona.name if pending.persona else "persona not generated yet"
    console.print(
        f"[yellow]Found a pending persona for {pending.niche} saved "
        f"{format_age(pending.updated_at or pending.timestamp)}: {name} (step: {pending.step.value}).[/yellow]"
    )


def show_persona_options(console: Console, state: PersonaCheckpoint, previews: list[Path]) -> None:
    """Display the generated persona and its avatar options."""
    persona = state.persona
    if persona is None:
        return

    console.print(Panel(
        f"[bold]{persona.name}[/bold]\n\n"
        f"{persona.bio}\n\n"
        f"[dim]Personality:[/dim] {persona.personality}",
        title="Persona",
        border_style="green",
    ))

    table = Table(title="Avatar Options")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Visual Style", style="white")
    table.add_column("Preview", style="dim")

    for index, option in enumerate(persona.visual_options):
        panel = next((img for img in state.avatar_images or [] if img.index == index), None)
        preview = str(previews[index]) if index < len(previews) else ""
        if panel is not None and panel.placeholder:
            preview = "placeholder"
        table.add_row(str(index), option, preview)

    console.print(table)
    console.print(
        f"\nPick one with [cyan]trendme confirm-persona --user {state.user_id} --index N[/cyan]"
    )


def show_influencer(console: Console, influencer: Influencer) -> None:
    console.print(Panel(
        f"[bold green]Influencer created![/bold green]\n\n"
        f"[bold]Name:[/] {influencer.name}\n"
        f"[bold]ID:[/] {influencer.id}\n"
        f"[bold]Niche:[/] {influencer.niche}\n"
        f"[bold]Style:[/] {influencer.visual_style}\n"
        f"[bold]Avatar:[/] {influencer.avatar_url}",
        title="Complete",
        border_style="green",
    ))


def show_influencers_table(console: Console, influencers: list[Influencer]) -> None:
    if not influencers:
        console.print("[yellow]No influencers found.[/yellow]")
        return

    table = Table(title="Influencers")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Niche", style="yellow")
    table.add_column("Style", style="dim")

    for influencer in influencers:
        table.add_row(influencer.id, influencer.name, influencer.niche, influencer.visual_style[:50])

    console.print(table)
