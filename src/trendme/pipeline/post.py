"""Post creation pipeline: content -> images -> upload.

Usage:
    pipeline = PostPipeline(content, images, blobs, posts, news, checkpoints)
    pending = pipeline.pending(influencer.id)
    post = await (pipeline.resume(influencer.id) if pending else pipeline.create(influencer))
"""

from __future__ import annotations

import asyncio
import logging

from ..checkpoints.models import PostCheckpoint, PostStep
from ..checkpoints.store import CheckpointStore
from ..content.generator import ContentGenerator
from ..content.models import GridImageContext, GridType, Influencer, InfluencerIdentity, Post, TrendSignal
from ..images.generator import ImageGridGenerator
from ..news.models import NewsArticle
from ..news.repository import NewsRepository
from ..storage.base import BlobStore
from ..storage.repositories import PostRepository
from .base import CheckpointedPipeline, EpochRegistry, PipelineStep
from .progress import ProgressCallback, ProgressManager

_logger = logging.getLogger("pipeline")

KIND = "post"


def _identity(state: PostCheckpoint) -> InfluencerIdentity:
    return InfluencerIdentity(
        name=state.influencer_name,
        personality=state.personality,
        visual_style=state.visual_style,
    )


class PostPipeline:
    """Creates a grid post for an influencer, resumable per influencer."""

    def __init__(
        self,
        content: ContentGenerator,
        images: ImageGridGenerator,
        blobs: BlobStore,
        posts: PostRepository,
        news: NewsRepository,
        checkpoints: CheckpointStore,
        epochs: EpochRegistry | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        self.content = content
        self.images = images
        self.blobs = blobs
        self.posts = posts
        self.news = news
        self.checkpoints = checkpoints
        self.pipeline: CheckpointedPipeline[PostCheckpoint] = CheckpointedPipeline(
            KIND,
            [
                PipelineStep(PostStep.CONTENT.value, self._generate_content),
                PipelineStep(PostStep.IMAGES.value, self._generate_images),
                PipelineStep(PostStep.UPLOAD.value, self._upload),
            ],
            checkpoints,
            epochs=epochs,
            progress_callback=progress_callback,
        )

    def pending(self, influencer_id: str) -> PostCheckpoint | None:
        """Live checkpoint for the influencer, if a run can be resumed."""
        checkpoint = self.checkpoints.load(KIND, influencer_id)
        return checkpoint if isinstance(checkpoint, PostCheckpoint) else None

    def discard(self, influencer_id: str) -> None:
        self.checkpoints.clear(KIND, influencer_id)

    async def create(
        self,
        influencer: Influencer,
        grid_type: GridType = GridType.GRID_2X2,
        source: TrendSignal | NewsArticle | None = None,
    ) -> Post:
        """Start a fresh run, discarding any pending checkpoint."""
        self.discard(influencer.id)
        state = PostCheckpoint(
            user_id=influencer.user_id,
            influencer_id=influencer.id,
            influencer_name=influencer.name,
            personality=influencer.personality,
            visual_style=influencer.visual_style,
            niche=influencer.niche,
            grid_type=grid_type,
            source_trend=source if isinstance(source, TrendSignal) else None,
            source_article=source if isinstance(source, NewsArticle) else None,
        )
        _logger.info(
            f"PIPELINE:{KIND} | CREATE | influencer:{influencer.id} | grid:{grid_type.value} | "
            f"source:{source.id if source else 'none'}"
        )
        return await self._finish(await self.pipeline.run(state))

    async def resume(self, influencer_id: str) -> Post:
        """Continue from the pending checkpoint.

        Raises:
            LookupError: No live checkpoint for the influencer.
        """
        state = self.pending(influencer_id)
        if state is None:
            raise LookupError(f"No pending post for influencer {influencer_id}")
        _logger.info(f"PIPELINE:{KIND} | RESUME | influencer:{influencer_id} | step:{state.step.value}")
        return await self._finish(await self.pipeline.run(state))

    @staticmethod
    async def _finish(state: PostCheckpoint) -> Post:
        if state.post is None:
            raise RuntimeError("Upload step finished without a post")
        return state.post

    # =========================================================================
    # Steps
    # =========================================================================

    async def _generate_content(self, state: PostCheckpoint, progress: ProgressManager) -> PostCheckpoint:
        trend = await self.content.generate_trend_post_content(
            niche=state.niche,
            identity=_identity(state),
            grid_type=state.grid_type,
            specific_trend=state.source_article or state.source_trend,
            on_attempt=progress.on_attempt,
        )
        return state.model_copy(update={"content": trend})

    async def _generate_images(self, state: PostCheckpoint, progress: ProgressManager) -> PostCheckpoint:
        if state.content is None:
            raise ValueError("Checkpoint at images step has no content")
        context = GridImageContext.from_trend(state.content, _identity(state), state.niche)
        panels = await self.images.generate_story_grid(context, state.grid_type, on_attempt=progress.on_attempt)
        return state.model_copy(update={"images": panels})

    async def _upload(self, state: PostCheckpoint, progress: ProgressManager) -> PostCheckpoint:
        """Upload panels in parallel, then save the post and record article usage.

        Post id and blob paths derive from the checkpoint, so a retried upload
        overwrites rather than duplicates.
        """
        if state.content is None or not state.images:
            raise ValueError("Checkpoint at upload step has no content or images")

        post_id = f"post_{state.influencer_id}_{state.timestamp}"
        folder = f"users/{state.user_id}/posts/{state.influencer_id}"
        urls = await asyncio.gather(*(
            self.blobs.upload(panel.data, f"{folder}/{post_id}_{panel.index}.{panel.extension}", panel.mime_type)
            for panel in sorted(state.images, key=lambda p: p.index)
        ))

        post = Post(
            id=post_id,
            user_id=state.user_id,
            influencer_id=state.influencer_id,
            topic=state.content.topic,
            caption=state.content.caption,
            hashtags=state.content.hashtags,
            grid_type=state.grid_type,
            images=list(urls),
            grounding_urls=state.content.source_urls,
            source_article_id=state.source_article.id if state.source_article else None,
        )
        await self.posts.save(post)

        if state.source_article is not None:
            await self.news.mark_article_used(
                state.source_article.niche,
                state.source_article.id,
                post.id,
                state.user_id,
                state.influencer_id,
            )
        return state.model_copy(update={"post": post})
