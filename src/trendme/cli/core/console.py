"""Rich console singleton for CLI output."""

import sys

import typer
from rich.console import Console

# Windows cp1252 consoles cannot draw Unicode box characters
_safe_box = sys.platform == "win32"

# Global console instance - used across all CLI modules
console = Console(safe_box=_safe_box)


def print_error(message: str, details: dict | None = None) -> None:
    """Print an error message.

    Args:
        message: Error message
        details: Optional details dict (error kind, failed operation, ...)
    """
    console.print(f"[red]Error: {message}[/red]")
    if details:
        for key, value in details.items():
            console.print(f"  [dim]{key}:[/dim] [yellow]{value}[/yellow]")


def print_warning(message: str) -> None:
    """Print a warning message.

    Args:
        message: Warning message
    """
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_success(message: str) -> None:
    console.print(f"[green]{message}[/green]")


def print_info(message: str) -> None:
    console.print(f"[cyan]{message}[/cyan]")


def print_resume_hint(user_id: str, influencer_id: str | None = None) -> None:
    """Point at the command that continues an interrupted run.

    Args:
        user_id: Owning user id
        influencer_id: Influencer of an interrupted post; None for a persona
    """
    command = f"trendme resume --user {user_id}"
    if influencer_id:
        command += f" --influencer {influencer_id}"
    console.print(f"[dim]Run [cyan]{command}[/cyan] to continue from the last step.[/dim]")


def confirm_resume(what: str) -> bool:
    """Ask whether to continue pending work instead of starting over.

    Args:
        what: Short description of the pending work ("post", "persona")

    Returns:
        True to resume, False to discard and start fresh.
    """
    return typer.confirm(f"Resume the pending {what}?", default=True)
