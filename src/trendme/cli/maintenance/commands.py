"""Checkpoint maintenance commands."""

from __future__ import annotations

import typer
from rich.table import Table

from ...checkpoints import PostCheckpoint
from ...utils import format_age
from ..core import build_services, console, print_error, print_success


def checkpoints(
    clear: tuple[str, str] = typer.Option(
        (None, None), "--clear", help="Discard one checkpoint: KIND OWNER_ID (kind is post or persona)"
    ),
    cleanup: bool = typer.Option(False, "--cleanup", help="Delete every expired checkpoint"),
) -> None:
    """List live checkpoints, or clear them."""
    store = build_services().checkpoints

    if clear[0]:
        kind, owner_id = clear
        if kind not in ("post", "persona"):
            print_error(f"Unknown checkpoint kind: {kind}")
            raise typer.Exit(1)
        store.clear(kind, owner_id)
        print_success(f"Cleared {kind} checkpoint for {owner_id}")
        return

    if cleanup:
        print_success(f"Removed {store.cleanup_expired()} expired checkpoint(s)")
        return

    live = store.list_all()
    if not live:
        console.print("[yellow]No pending checkpoints.[/yellow]")
        return

    table = Table(title="Pending Checkpoints")
    table.add_column("Kind", style="cyan")
    table.add_column("Owner", style="white")
    table.add_column("Next Step", style="yellow")
    table.add_column("Started", style="dim")
    table.add_column("Saved", style="dim")

    for checkpoint in live:
        owner = checkpoint.influencer_name if isinstance(checkpoint, PostCheckpoint) else checkpoint.niche
        table.add_row(
            checkpoint.kind,
            f"{checkpoint.owner_id} ({owner})",
            checkpoint.step_name,
            format_age(checkpoint.timestamp),
            format_age(checkpoint.updated_at or checkpoint.timestamp),
        )

    console.print(table)
