"""Tests for the persona pipeline and confirmation."""

import pytest

from trendme.checkpoints import PersonaCheckpoint, PersonaStep
from trendme.content import ContentGenerator
from trendme.content.models import Persona
from trendme.images import ImageGridGenerator
from trendme.pipeline import EpochRegistry, PersonaPipeline
from trendme.storage import InfluencerRepository

PERSONA = {
    "name": "Juno Park",
    "bio": "Crate digger",
    "personality": "nerdy and warm",
    "visualOptions": ["Retro", "Minimal", "Grunge", "Preppy"],
}


@pytest.fixture
def pipeline(mock_service, fast_retry, timeouts, image_settings, store, blobs, checkpoint_store):
    return PersonaPipeline(
        content=ContentGenerator(mock_service, fast_retry, timeouts),
        images=ImageGridGenerator(mock_service, fast_retry, timeouts, image_settings),
        blobs=blobs,
        influencers=InfluencerRepository(store),
        checkpoints=checkpoint_store,
        epochs=EpochRegistry(),
    )


@pytest.fixture
def scripted_service(mock_service, text_response, image_response):
    mock_service.generate_text.return_value = text_response(PERSONA)
    mock_service.generate_image.return_value = image_response(2, 2)
    return mock_service


class TestCreatePersona:
    """Tests for create and resume."""

    @pytest.mark.asyncio
    async def test_run_keeps_result_for_confirmation(self, pipeline, scripted_service, checkpoint_store):
        state = await pipeline.create("user_1", "vinyl records")

        assert state.step is PersonaStep.VISUALS
        assert state.persona.name == "Juno Park"
        assert len(state.avatar_images) == 4
        loaded = checkpoint_store.load("persona", "user_1")
        assert loaded.model_dump(exclude={"updated_at"}) == state.model_dump(exclude={"updated_at"})

    @pytest.mark.asyncio
    async def test_avatar_prompts_use_each_option(self, pipeline, scripted_service):
        await pipeline.create("user_1", "vinyl records")

        prompt = scripted_service.generate_image.await_args.args[0].prompt
        for option in PERSONA["visualOptions"]:
            assert option in prompt

    @pytest.mark.asyncio
    async def test_resume_at_visuals_skips_persona(self, pipeline, mock_service, image_response, checkpoint_store, clock):
        mock_service.generate_image.return_value = image_response(2, 2)
        checkpoint_store.save(PersonaCheckpoint(
            user_id="user_1",
            niche="vinyl records",
            timestamp=clock(),
            step=PersonaStep.VISUALS,
            persona=Persona(name="Juno", bio="b", personality="p", visual_options=["A", "B", "C", "D"]),
        ))

        state = await pipeline.resume("user_1")

        mock_service.generate_text.assert_not_awaited()
        assert len(state.avatar_images) == 4


class TestConfirmPersona:
    """Tests for confirm."""

    @pytest.mark.asyncio
    async def test_confirm_creates_influencer(self, pipeline, scripted_service, store, checkpoint_store, tmp_path):
        await pipeline.create("user_1", "vinyl records")

        influencer = await pipeline.confirm("user_1", 2)

        assert influencer.name == "Juno Park"
        assert influencer.niche == "vinyl records"
        assert influencer.visual_style == "Grunge"
        assert influencer.id.startswith("influencer_")
        assert influencer.avatar_url.startswith("file://")
        assert any((tmp_path / "blobs" / "avatars" / "user_1").iterdir())
        assert [i.id for i in await InfluencerRepository(store).list("user_1")] == [influencer.id]
        assert checkpoint_store.load("persona", "user_1") is None

    @pytest.mark.asyncio
    async def test_confirm_rejects_bad_index(self, pipeline, scripted_service, checkpoint_store):
        await pipeline.create("user_1", "vinyl records")

        with pytest.raises(ValueError):
            await pipeline.confirm("user_1", 7)
        assert checkpoint_store.load("persona", "user_1") is not None

    @pytest.mark.asyncio
    async def test_confirm_without_pending(self, pipeline):
        with pytest.raises(LookupError):
            await pipeline.confirm("user_1", 0)
