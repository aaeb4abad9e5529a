"""Content generation: post content, personas, sub-topics and trends."""

from .generator import ContentGenerator, normalize_trend_content
from .models import (
    GeneratedTrend,
    GridImageContext,
    GridType,
    Influencer,
    InfluencerIdentity,
    PanelImage,
    Persona,
    Post,
    TrendSignal,
)

__all__ = [
    "ContentGenerator",
    "normalize_trend_content",
    "GeneratedTrend",
    "GridImageContext",
    "GridType",
    "Influencer",
    "InfluencerIdentity",
    "PanelImage",
    "Persona",
    "Post",
    "TrendSignal",
]
