"""Owner-scoped repositories for influencers and posts.

Collections:
    users/{user_id}/influencers
    users/{user_id}/posts
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from ..content.models import Influencer, Post
from .base import DocumentStore, Unsubscribe

_logger = logging.getLogger("storage")


def influencers_path(user_id: str) -> str:
    return f"users/{user_id}/influencers"


def posts_path(user_id: str) -> str:
    return f"users/{user_id}/posts"


class InfluencerRepository:
    """Influencers of one user at a time, newest first."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def save(self, influencer: Influencer) -> None:
        await self.store.set(
            influencers_path(influencer.user_id),
            influencer.id,
            influencer.model_dump(mode="json"),
        )
        _logger.info(f"INFLUENCER_SAVED | user:{influencer.user_id} | id:{influencer.id}")

    async def get(self, user_id: str, influencer_id: str) -> Influencer | None:
        data = await self.store.get(influencers_path(user_id), influencer_id)
        return Influencer.model_validate(data) if data else None

    async def list(self, user_id: str) -> list[Influencer]:
        documents = await self.store.query(influencers_path(user_id))
        influencers = [Influencer.model_validate(doc) for doc in documents]
        return sorted(influencers, key=lambda i: i.created_at, reverse=True)

    async def delete(self, user_id: str, influencer_id: str) -> None:
        await self.store.delete(influencers_path(user_id), influencer_id)

    async def subscribe(
        self,
        user_id: str,
        callback: Callable[[list[Influencer]], Awaitable[None]],
    ) -> Unsubscribe:
        """Receive the user's influencers, newest first, on every change."""

        async def on_snapshot(documents: list[dict]) -> None:
            influencers = [Influencer.model_validate(doc) for doc in documents]
            await callback(sorted(influencers, key=lambda i: i.created_at, reverse=True))

        return await self.store.subscribe(influencers_path(user_id), on_snapshot)


class PostRepository:
    """Posts of one user, filtered by influencer and sorted newest first."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def save(self, post: Post) -> None:
        await self.store.set(posts_path(post.user_id), post.id, post.model_dump(mode="json"))
        _logger.info(
            f"POST_SAVED | user:{post.user_id} | influencer:{post.influencer_id} | id:{post.id}"
        )

    async def list_for_influencer(self, user_id: str, influencer_id: str) -> list[Post]:
        # Ordered client-side
        documents = await self.store.query(
            posts_path(user_id), where=[("influencer_id", "==", influencer_id)]
        )
        posts = [Post.model_validate(doc) for doc in documents]
        return sorted(posts, key=lambda p: p.timestamp, reverse=True)

    async def delete(self, user_id: str, post_id: str) -> None:
        await self.store.delete(posts_path(user_id), post_id)
        _logger.info(f"POST_DELETED | user:{user_id} | id:{post_id}")

    async def subscribe(
        self,
        user_id: str,
        influencer_id: str,
        callback: Callable[[list[Post]], Awaitable[None]],
    ) -> Unsubscribe:
        """Receive an influencer's posts, newest first, on every change."""

        async def on_snapshot(documents: list[dict]) -> None:
            posts = [Post.model_validate(doc) for doc in documents]
            await callback(sorted(posts, key=lambda p: p.timestamp, reverse=True))

        return await self.store.subscribe(
            posts_path(user_id),
            on_snapshot,
            where=[("influencer_id", "==", influencer_id)],
        )
