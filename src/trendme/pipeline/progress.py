"""Progress tracking and reporting for pipeline runs."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Literal

from pydantic import BaseModel

_logger = logging.getLogger("pipeline")


class PipelineProgress(BaseModel):
    """Snapshot of a run, delivered to the progress callback."""

    run_id: str
    pipeline: str
    status: Literal["starting", "running", "retrying", "done", "failed"] = "starting"
    step: str | None = None
    step_number: int = 0
    total_steps: int = 0
    message: str = ""
    attempt: int = 0
    error: str | None = None
    resumed_from: str | None = None


# Type for progress callback
ProgressCallback = Callable[[PipelineProgress], Awaitable[None]]

STEP_MESSAGES: dict[str, str] = {
    "content": "Writing the story and caption...",
    "images": "Generating the image grid...",
    "upload": "Uploading images and saving the post...",
    "persona": "Creating the persona...",
    "visuals": "Generating avatar options...",
}


class ProgressManager:
    """Tracks a run's current step and forwards snapshots to a callback.

    Usage:
        manager = ProgressManager("post", run_id, total_steps=3, callback=show)
        await manager.start_step("content", 1)
        await manager.complete()
    """

    def __init__(
        self,
        pipeline: str,
        run_id: str,
        total_steps: int,
        callback: ProgressCallback | None = None,
    ):
        self.callback = callback
        self._progress = PipelineProgress(run_id=run_id, pipeline=pipeline, total_steps=total_steps)

    @property
    def progress(self) -> PipelineProgress:
        return self._progress

    async def update(self, **kwargs: Any) -> None:
        self._progress = self._progress.model_copy(update=kwargs)
        if self.callback:
            await self.callback(self._progress)

    async def resumed(self, step: str) -> None:
        _logger.info(f"RUN:{self._progress.run_id} | RESUME | step:{step}")
        await self.update(resumed_from=step, message=f"Resuming from {step}...")

    async def start_step(self, step: str, number: int) -> None:
        _logger.info(f"RUN:{self._progress.run_id} | STEP_START | step:{step}")
        await self.update(
            status="running",
            step=step,
            step_number=number,
            attempt=1,
            message=STEP_MESSAGES.get(step, f"Running {step}..."),
        )

    async def complete_step(self, step: str) -> None:
        _logger.info(f"RUN:{self._progress.run_id} | STEP_DONE | step:{step}")

    async def on_attempt(self, event: dict[str, Any]) -> None:
        """Attempt callback for the retry engine."""
        if event.get("type") == "attempt_failed" and event.get("will_retry"):
            await self.update(
                status="retrying",
                attempt=event["attempt"] + 1,
                message=f"Retrying ({event['attempt'] + 1}/{event['max_attempts']})...",
            )

    async def complete(self) -> None:
        _logger.info(f"RUN:{self._progress.run_id} | DONE")
        await self.update(status="done", message="Done")

    async def fail(self, error: BaseException) -> None:
        _logger.error(f"RUN:{self._progress.run_id} | FAILED | step:{self._progress.step} | error:{error}")
        await self.update(status="failed", error=str(error), message=str(error))
