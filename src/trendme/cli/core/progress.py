"""Pipeline progress display for CLI."""

from __future__ import annotations

from rich.console import Console

from ...pipeline.progress import PipelineProgress


class PipelineProgressDisplay:
    """Prints one line per step change, retry and final status.

    Usage:
        display = PipelineProgressDisplay(console)
        services = build_services(progress_callback=display.handle)
    """

    def __init__(self, console: Console):
        self.console = console
        self._last: tuple[str | None, str, int] | None = None

    async def handle(self, progress: PipelineProgress) -> None:
        marker = (progress.step, progress.status, progress.attempt)
        if marker == self._last:
            return
        self._last = marker

        prefix = f"[{progress.step_number}/{progress.total_steps}]" if progress.step_number else "[-]"
        if progress.resumed_from and progress.status == "starting":
            self.console.print(f"[cyan]>>> {progress.message}[/cyan]")
        elif progress.status == "running":
            self.console.print(f"  {prefix} {progress.message}")
        elif progress.status == "retrying":
            self.console.print(f"  {prefix} [yellow]{progress.message}[/yellow]")
        elif progress.status == "failed":
            self.console.print(f"  {prefix} [red]Failed at {progress.step}: {progress.error}[/red]")
        elif progress.status == "done":
            self.console.print("  [green]Done[/green]")
