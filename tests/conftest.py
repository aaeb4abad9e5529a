"""Shared test fixtures and configuration.

Provides a mocked generation service, fast retry settings and temporary
stores. Generation mocks are AsyncMocks so tests can script
``side_effect`` sequences of responses and exceptions.
"""

from __future__ import annotations

import json
from io import BytesIO
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from trendme.checkpoints import CheckpointStore
from trendme.content.models import Influencer
from trendme.providers.config import ImageSettings, NewsSettings, RetrySettings, TimeoutSettings
from trendme.providers.generation import ImageResponse, InlineImage, TextResponse
from trendme.storage import JsonDocumentStore, LocalBlobStore

CELL_COLORS = [
    (255, 0, 0), (0, 255, 0), (0, 0, 255),
    (255, 255, 0), (255, 0, 255), (0, 255, 255),
    (128, 0, 0), (0, 128, 0), (0, 0, 128),
]


class FakeClock:
    """Settable epoch millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def cell_colors() -> list[tuple[int, int, int]]:
    return list(CELL_COLORS)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mock_service() -> MagicMock:
    """Create a mock GenerationService.

    Returns:
        MagicMock with AsyncMock generate_text and generate_image.
    """
    service = MagicMock()
    service.generate_text = AsyncMock()
    service.generate_image = AsyncMock()
    return service


@pytest.fixture
def text_response() -> Callable[..., TextResponse]:
    """Factory for JSON text responses.

    Usage:
        mock_service.generate_text.return_value = text_response({"name": "Mara"})
    """
    def _make(data: Any, source_urls: list[str] | None = None) -> TextResponse:
        text = data if isinstance(data, str) else json.dumps(data)
        return TextResponse(text=text, source_urls=source_urls or [])

    return _make


@pytest.fixture
def composite_png() -> Callable[[int, int], bytes]:
    """Factory for a composite image whose cells are filled with distinct colors."""
    def _make(rows: int, cols: int, width: int = 600, height: int = 600) -> bytes:
        image = Image.new("RGB", (width, height))
        cell_w, cell_h = width // cols, height // rows
        for row in range(rows):
            for col in range(cols):
                color = CELL_COLORS[row * cols + col]
                image.paste(color, (col * cell_w, row * cell_h, (col + 1) * cell_w, (row + 1) * cell_h))
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    return _make


@pytest.fixture
def image_response(composite_png) -> Callable[[int, int], ImageResponse]:
    def _make(rows: int, cols: int) -> ImageResponse:
        return ImageResponse(images=[InlineImage(data=composite_png(rows, cols), mime_type="image/png")])

    return _make


@pytest.fixture
def fast_retry() -> RetrySettings:
    """Retry settings with no backoff delay."""
    return RetrySettings(initial_delay_ms=0)


@pytest.fixture
def timeouts() -> TimeoutSettings:
    return TimeoutSettings()


@pytest.fixture
def image_settings() -> ImageSettings:
    return ImageSettings(placeholder_size=64)


@pytest.fixture
def news_settings() -> NewsSettings:
    return NewsSettings()


@pytest.fixture
def store(tmp_path: Path) -> JsonDocumentStore:
    return JsonDocumentStore(tmp_path / "data")


@pytest.fixture
def blobs(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "blobs")


@pytest.fixture
def checkpoint_store(tmp_path: Path, clock: FakeClock) -> CheckpointStore:
    return CheckpointStore(tmp_path / "checkpoints", clock=clock)


@pytest.fixture
def influencer() -> Influencer:
    return Influencer(
        id="influencer_abc",
        user_id="user_1",
        name="Mara Vale",
        niche="sustainable fashion",
        bio="Thrift queen",
        personality="witty and warm",
        visual_style="Boho chic look, wavy hair, warm tones",
    )


@pytest.fixture
def post_content() -> dict[str, Any]:
    """Model output for a 2x2 post."""
    return {
        "topic": "Mushroom leather hits the runway",
        "summary": "Designers swap hides for mycelium.",
        "caption": "ok but the jacket is literally grown",
        "hashtags": ["#mycelium", "#slowfashion"],
        "storyNarrative": "From lab to runway.",
        "visualMood": "moody studio light",
        "colorPalette": "earth brown, bone, moss",
        "slideDescriptions": [
            "Mara squints at a petri dish",
            "Close-up of fungal threads",
            "Mara tries on the jacket",
            "Runway walk, phone in hand",
        ],
    }
