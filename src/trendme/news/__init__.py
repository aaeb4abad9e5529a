"""News discovery behind a shared cache gate."""

from .models import FetchStatus, NewsArticle, NewsFetchMetadata, NewsFilter, UsageRef
from .repository import NewsRepository, filter_articles, niche_slug
from .discovery import NewsDiscovery
from .cache_gate import GateDecision, NewsCacheGate, decide

__all__ = [
    "FetchStatus",
    "NewsArticle",
    "NewsFetchMetadata",
    "NewsFilter",
    "UsageRef",
    "NewsRepository",
    "filter_articles",
    "niche_slug",
    "NewsDiscovery",
    "GateDecision",
    "NewsCacheGate",
    "decide",
]
