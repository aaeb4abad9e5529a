"""Persona creation pipeline: persona -> visuals, then a confirm step.

The run ends with the persona and its avatar options saved in the
checkpoint; ``confirm`` turns the chosen option into an Influencer.
"""

from __future__ import annotations

import logging

from ..checkpoints.models import PersonaCheckpoint, PersonaStep
from ..checkpoints.store import CheckpointStore
from ..content import prompts
from ..content.generator import ContentGenerator
from ..content.models import GridType, Influencer
from ..images.generator import ImageGridGenerator
from ..storage.base import BlobStore
from ..storage.repositories import InfluencerRepository
from ..utils import generate_id, now_ms
from .base import CheckpointedPipeline, EpochRegistry, PipelineStep
from .progress import ProgressCallback, ProgressManager

_logger = logging.getLogger("pipeline")

KIND = "persona"


class PersonaPipeline:
    """Creates a persona with avatar options, resumable per user."""

    def __init__(
        self,
        content: ContentGenerator,
        images: ImageGridGenerator,
        blobs: BlobStore,
        influencers: InfluencerRepository,
        checkpoints: CheckpointStore,
        epochs: EpochRegistry | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        self.content = content
        self.images = images
        self.blobs = blobs
        self.influencers = influencers
        self.checkpoints = checkpoints
        self.pipeline: CheckpointedPipeline[PersonaCheckpoint] = CheckpointedPipeline(
            KIND,
            [
                PipelineStep(PersonaStep.PERSONA.value, self._generate_persona),
                PipelineStep(PersonaStep.VISUALS.value, self._generate_visuals),
            ],
            checkpoints,
            epochs=epochs,
            keep_final=True,
            progress_callback=progress_callback,
        )

    def pending(self, user_id: str) -> PersonaCheckpoint | None:
        checkpoint = self.checkpoints.load(KIND, user_id)
        return checkpoint if isinstance(checkpoint, PersonaCheckpoint) else None

    def discard(self, user_id: str) -> None:
        self.checkpoints.clear(KIND, user_id)

    async def create(self, user_id: str, niche: str) -> PersonaCheckpoint:
        """Start a fresh run, discarding any pending checkpoint."""
        self.discard(user_id)
        _logger.info(f"PIPELINE:{KIND} | CREATE | user:{user_id} | niche:{niche}")
        return await self.pipeline.run(PersonaCheckpoint(user_id=user_id, niche=niche))

    async def resume(self, user_id: str) -> PersonaCheckpoint:
        """Continue from the pending checkpoint.

        Raises:
            LookupError: No live checkpoint for the user.
        """
        state = self.pending(user_id)
        if state is None:
            raise LookupError(f"No pending persona for user {user_id}")
        _logger.info(f"PIPELINE:{KIND} | RESUME | user:{user_id} | step:{state.step.value}")
        return await self.pipeline.run(state)

    async def confirm(self, user_id: str, visual_index: int) -> Influencer:
        """Upload the chosen avatar, save the influencer, clear the checkpoint.

        Raises:
            LookupError: No pending persona with avatar options.
            ValueError: ``visual_index`` is out of range.
        """
        state = self.pending(user_id)
        if state is None or state.persona is None or not state.avatar_images:
            raise LookupError(f"No persona awaiting confirmation for user {user_id}")
        if not 0 <= visual_index < len(state.avatar_images):
            raise ValueError(f"Visual index must be between 0 and {len(state.avatar_images) - 1}")

        state = state.model_copy(update={"selected_visual_index": visual_index})
        self.checkpoints.save(state)

        avatar = next(img for img in state.avatar_images if img.index == visual_index)
        avatar_url = await self.blobs.upload(
            avatar.data,
            f"avatars/{user_id}/{now_ms()}_{visual_index}.{avatar.extension}",
            avatar.mime_type,
        )

        persona = state.persona
        influencer = Influencer(
            id=generate_id("influencer"),
            user_id=user_id,
            name=persona.name,
            niche=state.niche,
            bio=persona.bio,
            personality=persona.personality,
            visual_style=persona.visual_options[visual_index % len(persona.visual_options)],
            avatar_url=avatar_url,
        )
        await self.influencers.save(influencer)
        self.checkpoints.clear(KIND, user_id)
        _logger.info(f"PIPELINE:{KIND} | CONFIRMED | user:{user_id} | influencer:{influencer.id}")
        return influencer

    # =========================================================================
    # Steps
    # =========================================================================

    async def _generate_persona(self, state: PersonaCheckpoint, progress: ProgressManager) -> PersonaCheckpoint:
        persona = await self.content.generate_persona(state.niche, on_attempt=progress.on_attempt)
        return state.model_copy(update={"persona": persona})

    async def _generate_visuals(self, state: PersonaCheckpoint, progress: ProgressManager) -> PersonaCheckpoint:
        if state.persona is None:
            raise ValueError("Checkpoint at visuals step has no persona")
        if state.avatar_images:
            return state

        avatar_prompts = [
            prompts.AVATAR_PROMPT.format(name=state.persona.name, style=option)
            for option in state.persona.visual_options
        ]
        panels = await self.images.generate_from_prompts(
            avatar_prompts, GridType.GRID_2X2, on_attempt=progress.on_attempt
        )
        return state.model_copy(update={"avatar_images": panels})
