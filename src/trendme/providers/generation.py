"""Generation service interface and the Gemini adapter.

The rest of the package talks to the generation service only through
``GenerationService``: text requests (optionally grounded in live search and
optionally constrained to JSON) and image requests returning inline payloads.

Usage:
    service = get_generation_service()
    response = await service.generate_text(
        TextRequest(prompt="...", use_search=True, task="trend_content")
    )
    print(response.text, response.source_urls)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Protocol

from google import genai
from google.genai import types

from .config import GenerationSettings, TrendmeConfig, load_config

_logger = logging.getLogger("ai_calls")

# Type for AI event callback
AIEventCallback = Callable[[dict[str, Any]], Awaitable[None]] | None


@dataclass(frozen=True)
class TextRequest:
    """A text generation request."""

    prompt: str
    task: str = "text"
    use_search: bool = False
    json_output: bool = False
    response_schema: dict[str, Any] | None = None
    system: str | None = None


@dataclass(frozen=True)
class TextResponse:
    """Generated text plus grounding sources, if any."""

    text: str
    source_urls: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ImageRequest:
    """An image generation request."""

    prompt: str
    task: str = "image"
    aspect_ratio: str = "1:1"


@dataclass(frozen=True)
class InlineImage:
    """Binary image payload returned inline."""

    data: bytes
    mime_type: str = "image/png"


@dataclass(frozen=True)
class ImageResponse:
    """All inline images found in a response, in order."""

    images: list[InlineImage] = field(default_factory=list)
    text: str = ""


class GenerationService(Protocol):
    """Interface of the generation service."""

    async def generate_text(self, request: TextRequest) -> TextResponse: ...

    async def generate_image(self, request: ImageRequest) -> ImageResponse: ...


class GeminiGenerationService:
    """GenerationService backed by the google-genai SDK.

    Errors from the SDK are not caught here; they are classified by the
    retry engine one level up.
    """

    def __init__(
        self,
        settings: GenerationSettings | None = None,
        client: Any | None = None,
        event_callback: AIEventCallback = None,
    ):
        """Initialize the service.

        Args:
            settings: Generation settings. If None, loads from default config file.
            client: Pre-built ``genai.Client`` (tests inject a mock).
            event_callback: Optional callback for AI events (for progress tracking).
        """
        self.settings = settings or load_config().generation
        self._client = client
        self._event_callback = event_callback
        self._total_calls = 0

    def _get_client(self) -> Any:
        """Lazy-create the genai client."""
        if self._client is None:
            self._client = genai.Client(api_key=self.settings.get_api_key())
        return self._client

    async def _emit_event(self, event: dict[str, Any]) -> None:
        """Emit an AI event if callback is set."""
        if self._event_callback:
            await self._event_callback(event)

    async def generate_text(self, request: TextRequest) -> TextResponse:
        """Generate text, optionally grounded and JSON constrained."""
        model_id = self.settings.text_model
        config_kwargs: dict[str, Any] = {}
        if request.system:
            config_kwargs["system_instruction"] = request.system
        if request.use_search:
            config_kwargs["tools"] = [types.Tool(google_search=types.GoogleSearch())]
        elif request.json_output:
            # Search grounding cannot be combined with a JSON mime type.
            config_kwargs["response_mime_type"] = "application/json"
            if request.response_schema:
                config_kwargs["response_schema"] = request.response_schema

        _logger.info(
            f"AI_REQUEST | model:{model_id} | task:{request.task} | search:{request.use_search}\n"
            f"--- PROMPT ---\n{request.prompt}\n"
            f"--- END REQUEST ---"
        )
        await self._emit_event({
            "type": "text_call",
            "model": model_id,
            "task": request.task,
            "prompt_preview": request.prompt[:200],
        })

        start_time = time.time()
        response = await self._get_client().aio.models.generate_content(
            model=model_id,
            contents=request.prompt,
            config=types.GenerateContentConfig(**config_kwargs),
        )
        duration = time.time() - start_time
        self._total_calls += 1

        text = response.text or ""
        source_urls = extract_grounding_urls(response)

        _logger.info(
            f"AI_RESPONSE | model:{model_id} | task:{request.task} | duration:{duration:.2f}s | "
            f"sources:{len(source_urls)}\n"
            f"--- RESPONSE ---\n{text}\n"
            f"--- END RESPONSE ---"
        )
        await self._emit_event({
            "type": "text_response",
            "model": model_id,
            "task": request.task,
            "duration_seconds": duration,
            "total_calls": self._total_calls,
        })
        return TextResponse(text=text, source_urls=source_urls)

    async def generate_image(self, request: ImageRequest) -> ImageResponse:
        """Generate an image and collect every inline payload."""
        model_id = self.settings.image_model
        _logger.info(
            f"AI_IMAGE_REQUEST | model:{model_id} | task:{request.task} | "
            f"aspect:{request.aspect_ratio} | prompt_len:{len(request.prompt)}"
        )
        await self._emit_event({
            "type": "image_call",
            "model": model_id,
            "task": request.task,
            "prompt_preview": request.prompt[:200],
        })

        start_time = time.time()
        response = await self._get_client().aio.models.generate_content(
            model=model_id,
            contents=request.prompt,
            config=types.GenerateContentConfig(
                response_modalities=["TEXT", "IMAGE"],
                image_config=types.ImageConfig(aspect_ratio=request.aspect_ratio),
            ),
        )
        duration = time.time() - start_time
        self._total_calls += 1

        images: list[InlineImage] = []
        texts: list[str] = []
        for candidate in response.candidates or []:
            content = getattr(candidate, "content", None)
            for part in getattr(content, "parts", None) or []:
                inline = getattr(part, "inline_data", None)
                if inline is not None and inline.data:
                    images.append(InlineImage(inline.data, inline.mime_type or "image/png"))
                elif getattr(part, "text", None):
                    texts.append(part.text)

        _logger.info(
            f"AI_IMAGE_RESPONSE | model:{model_id} | task:{request.task} | "
            f"duration:{duration:.2f}s | images:{len(images)}"
        )
        await self._emit_event({
            "type": "image_response",
            "model": model_id,
            "task": request.task,
            "duration_seconds": duration,
            "images": len(images),
        })
        return ImageResponse(images=images, text="\n".join(texts))


def extract_grounding_urls(response: Any) -> list[str]:
    """Collect web URIs from the first candidate's grounding metadata."""
    urls: list[str] = []
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return urls
    metadata = getattr(candidates[0], "grounding_metadata", None)
    for chunk in getattr(metadata, "grounding_chunks", None) or []:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None) if web else None
        if uri and uri not in urls:
            urls.append(uri)
    return urls


# Singleton instance
_default_service: GeminiGenerationService | None = None


def get_generation_service(config: TrendmeConfig | None = None) -> GeminiGenerationService:
    """Get the default generation service instance."""
    global _default_service
    if _default_service is None or config is not None:
        _default_service = GeminiGenerationService(config.generation if config else None)
    return _default_service
