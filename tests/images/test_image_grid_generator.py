"""Tests for ImageGridGenerator retries and degradation."""

import asyncio

import pytest

from trendme.content.models import GridImageContext, GridType
from trendme.images import ImageGridGenerator
from trendme.providers.config import ImageSettings, TimeoutSettings
from trendme.providers.errors import GenerationTimeoutError
from trendme.providers.generation import ImageResponse, InlineImage


@pytest.fixture
def context():
    return GridImageContext(
        topic="Mushroom leather",
        niche="sustainable fashion",
        influencer_name="Mara Vale",
        story_narrative="From lab to runway",
        visual_mood="moody",
        color_palette="earth",
        slide_descriptions=["one", "two", "three", "four"],
    )


@pytest.fixture
def generator(mock_service, fast_retry, timeouts, image_settings):
    return ImageGridGenerator(mock_service, fast_retry, timeouts, image_settings)


class TestStoryGrid:
    """Tests for generate_story_grid."""

    @pytest.mark.asyncio
    async def test_returns_exact_panel_count(self, generator, mock_service, image_response, context):
        mock_service.generate_image.return_value = image_response(2, 2)

        panels = await generator.generate_story_grid(context, GridType.GRID_2X2)

        assert len(panels) == 4
        assert not any(p.placeholder for p in panels)
        prompt = mock_service.generate_image.await_args.args[0].prompt
        assert "Slide 1 [OPENING]: one" in prompt
        assert "Slide 4 [CLOSING]: four" in prompt

    @pytest.mark.asyncio
    async def test_empty_response_degrades_to_placeholders(self, generator, mock_service, context):
        mock_service.generate_image.return_value = ImageResponse(images=[], text="Sorry, no image.")

        panels = await generator.generate_story_grid(context, GridType.GRID_3X3)

        assert len(panels) == 9
        assert all(p.placeholder for p in panels)
        # Parsing failures are terminal, so only one attempt
        assert mock_service.generate_image.await_count == 1

    @pytest.mark.asyncio
    async def test_unreadable_image_degrades(self, generator, mock_service, context):
        mock_service.generate_image.return_value = ImageResponse(images=[InlineImage(data=b"not an image")])
        panels = await generator.generate_story_grid(context, GridType.GRID_2X2)
        assert all(p.placeholder for p in panels)

    @pytest.mark.asyncio
    async def test_network_failures_retry_then_degrade(self, generator, mock_service, context):
        mock_service.generate_image.side_effect = ConnectionError("down")
        panels = await generator.generate_story_grid(context, GridType.GRID_2X2)
        assert all(p.placeholder for p in panels)
        assert mock_service.generate_image.await_count == 2

    @pytest.mark.asyncio
    async def test_timeout_propagates(self, mock_service, fast_retry, context):
        async def slow(request):
            await asyncio.sleep(5)

        mock_service.generate_image.side_effect = slow
        generator = ImageGridGenerator(mock_service, fast_retry, TimeoutSettings(image_ms=20))

        with pytest.raises(GenerationTimeoutError):
            await generator.generate_story_grid(context, GridType.GRID_2X2)
        assert mock_service.generate_image.await_count == 2

    @pytest.mark.asyncio
    async def test_timeout_degrades_when_not_propagated(self, mock_service, fast_retry, context):
        async def slow(request):
            await asyncio.sleep(5)

        mock_service.generate_image.side_effect = slow
        generator = ImageGridGenerator(
            mock_service,
            fast_retry,
            TimeoutSettings(image_ms=20),
            ImageSettings(propagate_kinds=[], placeholder_size=32),
        )

        panels = await generator.generate_story_grid(context, GridType.GRID_2X2)
        assert all(p.placeholder for p in panels)


class TestPanelPrompts:
    """Tests for generate_from_prompts."""

    @pytest.mark.asyncio
    async def test_one_prompt_per_panel(self, generator, mock_service, image_response):
        mock_service.generate_image.return_value = image_response(2, 2)

        panels = await generator.generate_from_prompts(["a", "b", "c", "d", "extra"], GridType.GRID_2X2)

        assert len(panels) == 4
        prompt = mock_service.generate_image.await_args.args[0].prompt
        assert "Panel 4: d" in prompt
        assert "extra" not in prompt
