"""Checkpoint records for the two resumable pipelines.

``step`` names the next step to run. It only moves forward:
content -> images -> upload for posts, persona -> visuals for personas.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from ..content.models import GeneratedTrend, GridType, PanelImage, Persona, Post, TrendSignal
from ..news.models import NewsArticle
from ..utils import now_ms


class PostStep(str, Enum):
    CONTENT = "content"
    IMAGES = "images"
    UPLOAD = "upload"


class PersonaStep(str, Enum):
    PERSONA = "persona"
    VISUALS = "visuals"


STEP_ORDER: dict[str, list[str]] = {
    "post": [step.value for step in PostStep],
    "persona": [step.value for step in PersonaStep],
}


class PostCheckpoint(BaseModel):
    """Progress of one post creation, keyed by influencer."""

    kind: Literal["post"] = "post"
    user_id: str
    influencer_id: str
    influencer_name: str
    personality: str = ""
    visual_style: str = ""
    niche: str = ""
    timestamp: int = Field(default_factory=now_ms)
    # Last save; staleness runs from here
    updated_at: int | None = None
    step: PostStep = PostStep.CONTENT
    grid_type: GridType = GridType.GRID_2X2
    content: GeneratedTrend | None = None
    images: list[PanelImage] | None = None
    source_trend: TrendSignal | None = None
    source_article: NewsArticle | None = None
    # Set by the upload step; the checkpoint is cleared right after.
    post: Post | None = None

    @property
    def owner_id(self) -> str:
        return self.influencer_id

    @property
    def step_name(self) -> str:
        return self.step.value


class PersonaCheckpoint(BaseModel):
    """Progress of one persona creation, keyed by user."""

    kind: Literal["persona"] = "persona"
    user_id: str
    niche: str
    timestamp: int = Field(default_factory=now_ms)
    # Last save; staleness runs from here
    updated_at: int | None = None
    step: PersonaStep = PersonaStep.PERSONA
    persona: Persona | None = None
    avatar_images: list[PanelImage] | None = None
    selected_visual_index: int | None = None

    @property
    def owner_id(self) -> str:
        return self.user_id

    @property
    def step_name(self) -> str:
        return self.step.value


GenerationCheckpoint = Annotated[
    Union[PostCheckpoint, PersonaCheckpoint],
    Field(discriminator="kind"),
]

checkpoint_adapter: TypeAdapter[PostCheckpoint | PersonaCheckpoint] = TypeAdapter(GenerationCheckpoint)


def step_index(kind: str, step: str) -> int:
    """Position of a step in its pipeline's order."""
    return STEP_ORDER[kind].index(step)
