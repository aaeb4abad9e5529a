"""Image grid generation.

One request asks for a single square composite holding every panel; the
composite is then sliced locally. When the retry budget runs out the grid
degrades to placeholder panels, except for error kinds configured to
propagate (timeouts by default, so a retained checkpoint can be retried).

Usage:
    grids = ImageGridGenerator(service)
    panels = await grids.generate_story_grid(context, GridType.GRID_3X3)
"""

from __future__ import annotations

import logging

from PIL import UnidentifiedImageError

from ..content import prompts
from ..content.models import GridImageContext, GridType, PanelImage
from ..providers.config import ImageSettings, RetrySettings, TimeoutSettings
from ..providers.errors import GenerationError, ParsingError
from ..providers.generation import GenerationService, ImageRequest
from ..providers.retry import AttemptCallback, retry_with_backoff, with_timeout
from .grid import placeholder_panels, split_grid

_logger = logging.getLogger("ai_calls")


class ImageGridGenerator:
    """Produces exactly ``rows x cols`` panel images per request."""

    def __init__(
        self,
        service: GenerationService,
        retry: RetrySettings | None = None,
        timeouts: TimeoutSettings | None = None,
        settings: ImageSettings | None = None,
        on_attempt: AttemptCallback = None,
    ):
        self.service = service
        self.retry = retry or RetrySettings()
        self.timeouts = timeouts or TimeoutSettings()
        self.settings = settings or ImageSettings()
        self._on_attempt = on_attempt

    async def generate_from_prompts(
        self,
        panel_prompts: list[str],
        grid_type: GridType,
        on_attempt: AttemptCallback = None,
    ) -> list[PanelImage]:
        """Generate a grid where each prompt describes one panel (avatars)."""
        prompt = prompts.build_panel_grid_prompt(panel_prompts[:grid_type.panel_count], grid_type)
        return await self._generate(prompt, grid_type, "generate_grid_from_prompts", on_attempt)

    async def generate_story_grid(
        self,
        context: GridImageContext,
        grid_type: GridType,
        on_attempt: AttemptCallback = None,
    ) -> list[PanelImage]:
        """Generate a story grid from narrative context and ordered beats."""
        prompt = prompts.build_story_grid_prompt(context, grid_type)
        return await self._generate(prompt, grid_type, "generate_story_grid", on_attempt)

    async def _generate(
        self,
        prompt: str,
        grid_type: GridType,
        name: str,
        on_attempt: AttemptCallback = None,
    ) -> list[PanelImage]:
        rows, cols = grid_type.rows, grid_type.cols

        async def attempt() -> list[PanelImage]:
            response = await with_timeout(
                self.service.generate_image(ImageRequest(prompt=prompt, task=name)),
                self.timeouts.image_ms,
                name,
            )
            if not response.images:
                raise ParsingError(name, detail="no image data in response")
            try:
                return split_grid(response.images[0].data, rows, cols)
            except (UnidentifiedImageError, OSError) as e:
                raise ParsingError(name, e, detail="unreadable image payload") from e

        try:
            panels = await retry_with_backoff(
                attempt,
                name=name,
                max_attempts=self.retry.image_attempts,
                initial_delay_ms=self.retry.initial_delay_ms,
                multiplier=self.retry.multiplier,
                on_attempt=on_attempt or self._on_attempt,
            )
        except GenerationError as e:
            if e.kind.value in self.settings.propagate_kinds:
                _logger.error(f"OP:{name} | FAILED | kind:{e.kind.value} | error:{e}")
                raise
            _logger.error(
                f"OP:{name} | PLACEHOLDERS | kind:{e.kind.value} | panels:{grid_type.panel_count} | error:{e}"
            )
            return placeholder_panels(grid_type.panel_count, self.settings.placeholder_size)

        _logger.info(f"OP:{name} | OK | grid:{grid_type.value} | panels:{len(panels)}")
        return panels
