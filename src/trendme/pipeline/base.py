"""Generic checkpointed multi-step pipeline.

A pipeline is an ordered list of named steps. Each step maps the run state
(a checkpoint model) to a new state. After every step except the last, the
state is saved with ``step`` set to the next step, so a crash between steps
always leaves a checkpoint saying "everything before this step is done".
A run started from a loaded checkpoint continues at its ``step``.

Each run takes an epoch for its checkpoint key. Starting another run for
the same key supersedes it: the older run may no longer save or clear the
checkpoint, so a late result from an abandoned call cannot overwrite newer
progress.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from ..checkpoints.models import PersonaCheckpoint, PostCheckpoint
from ..checkpoints.store import CheckpointStore
from ..utils import generate_id
from .progress import ProgressCallback, ProgressManager

_logger = logging.getLogger("pipeline")

S = TypeVar("S", PostCheckpoint, PersonaCheckpoint)


class RunSupersededError(RuntimeError):
    """A newer run for the same checkpoint key started."""

    def __init__(self, key: tuple[str, str], epoch: int):
        super().__init__(f"Run for {key[0]}:{key[1]} (epoch {epoch}) was superseded by a newer run")
        self.key = key
        self.epoch = epoch


class EpochRegistry:
    """Monotonic run counter per checkpoint key."""

    def __init__(self) -> None:
        self._epochs: dict[tuple[str, str], int] = {}

    def begin(self, key: tuple[str, str]) -> int:
        epoch = self._epochs.get(key, 0) + 1
        self._epochs[key] = epoch
        return epoch

    def is_current(self, key: tuple[str, str], epoch: int) -> bool:
        return self._epochs.get(key) == epoch


# Shared by every pipeline in the process
default_epochs = EpochRegistry()


@dataclass(frozen=True)
class PipelineStep(Generic[S]):
    """A named step from state to new state."""

    name: str
    run: Callable[[S, ProgressManager], Awaitable[S]]


class CheckpointedPipeline(Generic[S]):
    """Runs steps in order with save-per-step and clear-on-success."""

    def __init__(
        self,
        name: str,
        steps: list[PipelineStep[S]],
        store: CheckpointStore,
        epochs: EpochRegistry | None = None,
        keep_final: bool = False,
        progress_callback: ProgressCallback | None = None,
    ):
        """Initialize the pipeline.

        Args:
            name: Pipeline name, also the checkpoint kind.
            steps: Ordered steps; names must match the checkpoint's step values.
            store: Checkpoint store.
            epochs: Run registry; defaults to the process-wide one.
            keep_final: Save the final state instead of clearing it (the
                result still awaits a user decision).
            progress_callback: Optional callback for progress snapshots.
        """
        self.name = name
        self.steps = steps
        self.store = store
        self.epochs = epochs or default_epochs
        self.keep_final = keep_final
        self.progress_callback = progress_callback

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self.steps]

    def _guard(self, key: tuple[str, str], epoch: int) -> None:
        if not self.epochs.is_current(key, epoch):
            _logger.warning(f"PIPELINE:{self.name} | SUPERSEDED | owner:{key[1]} | epoch:{epoch}")
            raise RunSupersededError(key, epoch)

    async def run(self, state: S) -> S:
        """Run from ``state.step`` to the end.

        On failure the last saved checkpoint is left in place.

        Returns:
            The final state.
        """
        key = (self.name, state.owner_id)
        epoch = self.epochs.begin(key)
        start = self.step_names.index(state.step_name)
        manager = ProgressManager(
            self.name,
            generate_id("run"),
            total_steps=len(self.steps),
            callback=self.progress_callback,
        )
        if start > 0:
            await manager.resumed(state.step_name)

        try:
            for index in range(start, len(self.steps)):
                step = self.steps[index]
                await manager.start_step(step.name, index + 1)
                state = await step.run(state, manager)
                self._guard(key, epoch)
                await manager.complete_step(step.name)

                if index + 1 < len(self.steps):
                    next_step = type(state.step)(self.steps[index + 1].name)
                    state = state.model_copy(update={"step": next_step})
                    self.store.save(state)

            self._guard(key, epoch)
            if self.keep_final:
                self.store.save(state)
            else:
                self.store.clear(self.name, state.owner_id)
        except RunSupersededError:
            raise
        except Exception as e:
            await manager.fail(e)
            raise

        await manager.complete()
        return state
