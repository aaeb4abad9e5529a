"""Resumable pipeline checkpoints."""

from .models import (
    GenerationCheckpoint,
    PersonaCheckpoint,
    PersonaStep,
    PostCheckpoint,
    PostStep,
    checkpoint_adapter,
)
from .store import CheckpointStore

__all__ = [
    "GenerationCheckpoint",
    "PersonaCheckpoint",
    "PersonaStep",
    "PostCheckpoint",
    "PostStep",
    "checkpoint_adapter",
    "CheckpointStore",
]
