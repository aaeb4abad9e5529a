"""Resumable generation pipelines."""

from .base import CheckpointedPipeline, EpochRegistry, PipelineStep, RunSupersededError
from .persona import PersonaPipeline
from .post import PostPipeline
from .progress import PipelineProgress, ProgressManager

__all__ = [
    "CheckpointedPipeline",
    "EpochRegistry",
    "PipelineStep",
    "RunSupersededError",
    "PersonaPipeline",
    "PostPipeline",
    "PipelineProgress",
    "ProgressManager",
]
