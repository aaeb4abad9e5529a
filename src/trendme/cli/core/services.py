"""Wires the configured stores, generators and pipelines together.

Usage:
    services = build_services()
    post = await services.posts_pipeline.create(influencer)
"""

from __future__ import annotations

from dataclasses import dataclass

from ...checkpoints import CheckpointStore
from ...content import ContentGenerator
from ...images import ImageGridGenerator
from ...news import NewsCacheGate, NewsDiscovery, NewsRepository
from ...pipeline import PersonaPipeline, PostPipeline
from ...pipeline.progress import ProgressCallback
from ...providers import TrendmeConfig, get_generation_service, load_config
from ...storage import (
    BlobStore,
    InfluencerRepository,
    JsonDocumentStore,
    PostRepository,
    create_blob_store,
)


@dataclass
class Services:
    """Everything a command needs, built from one config."""

    config: TrendmeConfig
    content: ContentGenerator
    images: ImageGridGenerator
    blobs: BlobStore
    influencers: InfluencerRepository
    posts: PostRepository
    news_repository: NewsRepository
    news_gate: NewsCacheGate
    checkpoints: CheckpointStore
    persona_pipeline: PersonaPipeline
    posts_pipeline: PostPipeline


def build_services(
    config: TrendmeConfig | None = None,
    progress_callback: ProgressCallback | None = None,
) -> Services:
    """Build the service graph from configuration.

    Args:
        config: Configuration; loaded from the default location if omitted.
        progress_callback: Optional callback receiving pipeline progress.
    """
    config = config or load_config()
    service = get_generation_service(config)

    store = JsonDocumentStore(config.storage.data_dir)
    blobs = create_blob_store(config.storage)
    influencers = InfluencerRepository(store)
    posts = PostRepository(store)
    news_repository = NewsRepository(store)
    checkpoints = CheckpointStore(
        config.checkpoints.state_dir,
        stale_after_ms=config.checkpoints.stale_after_ms,
    )

    content = ContentGenerator(service, config.retry, config.timeouts)
    images = ImageGridGenerator(service, config.retry, config.timeouts, config.images)
    discovery = NewsDiscovery(service, config.retry, config.timeouts, config.news)

    return Services(
        config=config,
        content=content,
        images=images,
        blobs=blobs,
        influencers=influencers,
        posts=posts,
        news_repository=news_repository,
        news_gate=NewsCacheGate(news_repository, discovery, config.news),
        checkpoints=checkpoints,
        persona_pipeline=PersonaPipeline(
            content, images, blobs, influencers, checkpoints, progress_callback=progress_callback
        ),
        posts_pipeline=PostPipeline(
            content, images, blobs, posts, news_repository, checkpoints, progress_callback=progress_callback
        ),
    )
