"""Tests for JsonDocumentStore and the owner-scoped repositories."""

import json
from unittest.mock import patch

import pytest
from filelock import FileLock, Timeout

from trendme.content.models import GridType, Influencer, Post
from trendme.storage import InfluencerRepository, JsonDocumentStore, LocalBlobStore, PostRepository, WriteOp


class TestDocumentStore:
    """Tests for the JSON document store."""

    @pytest.mark.asyncio
    async def test_set_get_delete(self, store):
        await store.set("users/u1/posts", "p1", {"topic": "a"})
        assert await store.get("users/u1/posts", "p1") == {"topic": "a"}

        await store.delete("users/u1/posts", "p1")
        assert await store.get("users/u1/posts", "p1") is None

    @pytest.mark.asyncio
    async def test_collection_file_layout(self, store):
        await store.set("news/vinyl/articles", "a1", {"headline": "h"})
        path = store.data_dir / "news" / "vinyl" / "articles.json"
        assert json.loads(path.read_text(encoding="utf-8")) == {"a1": {"headline": "h"}}

    @pytest.mark.asyncio
    async def test_merge(self, store):
        await store.set("c", "d", {"a": 1, "b": 2})
        await store.set("c", "d", {"b": 3}, merge=True)
        assert await store.get("c", "d") == {"a": 1, "b": 3}

    @pytest.mark.asyncio
    async def test_query_where_order_limit(self, store):
        for i, owner in enumerate(["x", "y", "x", "x"]):
            await store.set("c", f"d{i}", {"owner": owner, "ts": i})

        result = await store.query("c", where=[("owner", "==", "x")], order_by="ts", descending=True, limit=2)

        assert [doc["ts"] for doc in result] == [3, 2]

    @pytest.mark.asyncio
    async def test_batch_write(self, store):
        await store.set("c", "gone", {"v": 0})
        await store.batch_write([
            WriteOp("set", "c", "a", {"v": 1}),
            WriteOp("set", "other", "b", {"v": 2}),
            WriteOp("delete", "c", "gone"),
        ])
        assert await store.get("c", "a") == {"v": 1}
        assert await store.get("other", "b") == {"v": 2}
        assert await store.get("c", "gone") is None

    @pytest.mark.asyncio
    async def test_compare_and_set(self, store):
        assert await store.compare_and_set("meta", "n", None, {"lease": "a"})
        assert not await store.compare_and_set("meta", "n", None, {"lease": "b"})
        assert not await store.compare_and_set("meta", "n", {"lease": "b"}, {"lease": "c"})
        assert await store.compare_and_set("meta", "n", {"lease": "a"}, {"lease": "c"})
        assert await store.get("meta", "n") == {"lease": "c"}

    @pytest.mark.asyncio
    async def test_compare_and_set_across_store_instances(self, tmp_path):
        first = JsonDocumentStore(tmp_path / "shared")
        second = JsonDocumentStore(tmp_path / "shared")

        assert await first.compare_and_set("news_metadata", "vinyl", None, {"lease_id": "a"})
        assert not await second.compare_and_set("news_metadata", "vinyl", None, {"lease_id": "b"})
        assert await second.get("news_metadata", "vinyl") == {"lease_id": "a"}

    @pytest.mark.asyncio
    async def test_compare_and_set_holds_collection_file_lock(self, store):
        lock_file = store.data_dir / "news_metadata.json.lock"
        reads = []
        read = store._read

        def read_under_lock(collection):
            with pytest.raises(Timeout):
                FileLock(str(lock_file)).acquire(timeout=0)
            reads.append(collection)
            return read(collection)

        with patch.object(store, "_read", side_effect=read_under_lock):
            assert await store.compare_and_set("news_metadata", "vinyl", None, {"lease_id": "a"})

        assert reads == ["news_metadata"]

    @pytest.mark.asyncio
    async def test_held_collection_lock_times_out(self, tmp_path):
        store = JsonDocumentStore(tmp_path / "data", lock_timeout=0.05)
        held = FileLock(str(tmp_path / "data" / "news_metadata.json.lock"))
        held.acquire()
        try:
            with pytest.raises(Timeout):
                await store.compare_and_set("news_metadata", "vinyl", None, {"lease_id": "a"})
        finally:
            held.release()

        assert await store.compare_and_set("news_metadata", "vinyl", None, {"lease_id": "a"})

    @pytest.mark.asyncio
    async def test_subscribe_gets_initial_and_updates(self, store):
        snapshots = []

        async def on_snapshot(documents):
            snapshots.append(sorted(doc["v"] for doc in documents))

        unsubscribe = await store.subscribe("c", on_snapshot, where=[("v", ">", 0)])
        await store.set("c", "a", {"v": 1})
        await store.set("c", "b", {"v": 0})
        unsubscribe()
        await store.set("c", "c", {"v": 5})

        assert snapshots == [[], [1], [1]]

    def test_rejects_path_traversal(self, store):
        with pytest.raises(ValueError):
            store._collection_file("../escape")


class TestRepositories:
    """Tests for influencer and post repositories."""

    @pytest.mark.asyncio
    async def test_influencers_newest_first(self, store):
        repository = InfluencerRepository(store)
        for i in range(3):
            await repository.save(Influencer(id=f"i{i}", user_id="u1", name=f"N{i}", niche="x", created_at=i))

        assert [i.id for i in await repository.list("u1")] == ["i2", "i1", "i0"]
        assert await repository.list("u2") == []

    @pytest.mark.asyncio
    async def test_posts_filtered_by_influencer(self, store):
        repository = PostRepository(store)
        for i, owner in enumerate(["a", "b", "a"]):
            await repository.save(Post(
                id=f"p{i}", user_id="u1", influencer_id=owner, timestamp=i,
                topic="t", caption="c", grid_type=GridType.GRID_2X2,
            ))

        assert [p.id for p in await repository.list_for_influencer("u1", "a")] == ["p2", "p0"]

        await repository.delete("u1", "p2")
        assert [p.id for p in await repository.list_for_influencer("u1", "a")] == ["p0"]

    @pytest.mark.asyncio
    async def test_post_subscription(self, store):
        repository = PostRepository(store)
        seen = []

        async def on_posts(posts):
            seen.append([p.id for p in posts])

        await repository.subscribe("u1", "a", on_posts)
        await repository.save(Post(
            id="p1", user_id="u1", influencer_id="a", topic="t", caption="c", grid_type=GridType.GRID_3X3,
        ))

        assert seen == [[], ["p1"]]


class TestLocalBlobStore:
    """Tests for LocalBlobStore."""

    @pytest.mark.asyncio
    async def test_upload_writes_file(self, tmp_path):
        blobs = LocalBlobStore(tmp_path / "blobs")
        url = await blobs.upload(b"data", "users/u1/posts/p_0.png")

        assert url.startswith("file://")
        assert (tmp_path / "blobs" / "users" / "u1" / "posts" / "p_0.png").read_bytes() == b"data"

    @pytest.mark.asyncio
    async def test_rejects_escaping_paths(self, tmp_path):
        with pytest.raises(ValueError):
            await LocalBlobStore(tmp_path).upload(b"x", "../outside.png")
