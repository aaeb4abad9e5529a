"""Data models for content generation."""

from __future__ import annotations

import base64
from enum import Enum

from pydantic import BaseModel, Field

from ..utils import now_ms


class GridType(str, Enum):
    """Panel layout of a post's image grid."""

    GRID_2X2 = "2x2"
    GRID_3X3 = "3x3"

    @property
    def rows(self) -> int:
        return 2 if self is GridType.GRID_2X2 else 3

    @property
    def cols(self) -> int:
        return self.rows

    @property
    def panel_count(self) -> int:
        return self.rows * self.cols


class InfluencerIdentity(BaseModel):
    """The voice and look content is generated for."""

    name: str
    personality: str = ""
    visual_style: str = ""


class GeneratedTrend(BaseModel):
    """Normalized post content.

    ``slide_descriptions`` always holds exactly one beat per grid panel.
    """

    topic: str
    summary: str
    caption: str
    hashtags: list[str] = Field(default_factory=list)
    story_narrative: str
    visual_mood: str
    color_palette: str
    slide_descriptions: list[str]
    source_urls: list[str] = Field(default_factory=list)


class TrendSignal(BaseModel):
    """A trending story discovered for a niche."""

    id: str
    headline: str
    summary: str
    context: str = ""
    relevance_score: int = 0
    source_url: str | None = None
    discovered_at: int = Field(default_factory=now_ms)


class Persona(BaseModel):
    """Generated influencer persona awaiting avatar selection."""

    name: str
    bio: str
    personality: str
    visual_options: list[str] = Field(default_factory=list)


class GridImageContext(BaseModel):
    """Narrative context for a story-driven image grid."""

    topic: str
    summary: str = ""
    niche: str = ""
    influencer_name: str
    personality: str = ""
    visual_style: str = ""
    story_narrative: str
    visual_mood: str
    color_palette: str
    slide_descriptions: list[str]

    @classmethod
    def from_trend(
        cls,
        trend: GeneratedTrend,
        identity: InfluencerIdentity,
        niche: str = "",
    ) -> GridImageContext:
        """Build the image context from generated post content."""
        return cls(
            topic=trend.topic,
            summary=trend.summary,
            niche=niche,
            influencer_name=identity.name,
            personality=identity.personality,
            visual_style=identity.visual_style,
            story_narrative=trend.story_narrative,
            visual_mood=trend.visual_mood,
            color_palette=trend.color_palette,
            slide_descriptions=trend.slide_descriptions,
        )


class PanelImage(BaseModel):
    """One grid panel, base64 encoded so it can live in a checkpoint."""

    index: int
    data_b64: str
    mime_type: str = "image/png"
    width: int
    height: int
    placeholder: bool = False

    @property
    def data(self) -> bytes:
        return base64.b64decode(self.data_b64)

    @property
    def extension(self) -> str:
        return "jpg" if self.mime_type == "image/jpeg" else self.mime_type.split("/")[-1]

    @classmethod
    def from_bytes(
        cls,
        index: int,
        data: bytes,
        width: int,
        height: int,
        mime_type: str = "image/png",
        placeholder: bool = False,
    ) -> PanelImage:
        return cls(
            index=index,
            data_b64=base64.b64encode(data).decode("ascii"),
            mime_type=mime_type,
            width=width,
            height=height,
            placeholder=placeholder,
        )


class Influencer(BaseModel):
    """A persisted virtual influencer."""

    id: str
    user_id: str
    name: str
    niche: str
    bio: str = ""
    personality: str = ""
    visual_style: str = ""
    avatar_url: str = ""
    created_at: int = Field(default_factory=now_ms)

    def identity(self) -> InfluencerIdentity:
        return InfluencerIdentity(
            name=self.name,
            personality=self.personality,
            visual_style=self.visual_style,
        )


class Post(BaseModel):
    """A published grid post."""

    id: str
    user_id: str
    influencer_id: str
    timestamp: int = Field(default_factory=now_ms)
    topic: str
    caption: str
    hashtags: list[str] = Field(default_factory=list)
    grid_type: GridType
    images: list[str] = Field(default_factory=list)
    grounding_urls: list[str] = Field(default_factory=list)
    source_article_id: str | None = None
