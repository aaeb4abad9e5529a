"""Structured content generation: posts, personas, sub-topics, trends.

Every remote call goes through ``with_timeout`` inside ``retry_with_backoff``.
Model output is parsed with the tolerant parser and then normalized, so
callers never see a partially filled object.

Usage:
    generator = ContentGenerator(service)
    trend = await generator.generate_trend_post_content(
        niche="sustainable fashion",
        identity=InfluencerIdentity(name="Mara", personality="witty"),
        grid_type=GridType.GRID_2X2,
    )
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, TypeVar

from ..constants import limits
from ..news.models import NewsArticle
from ..providers.config import RetrySettings, TimeoutSettings
from ..providers.errors import GenerationError, ParsingError
from ..providers.generation import GenerationService, TextRequest, TextResponse
from ..providers.parsing import as_records, as_score, as_strings, as_text, require_json
from ..providers.retry import AttemptCallback, retry_with_backoff, with_fallback, with_timeout
from ..utils import now_ms
from . import prompts
from .models import GeneratedTrend, GridType, InfluencerIdentity, Persona, TrendSignal

_logger = logging.getLogger("ai_calls")

T = TypeVar("T")

DEFAULT_VISUAL_OPTIONS = [
    "Natural look, brown hair, soft lighting",
    "Edgy look, dyed hair, street fashion",
    "Professional look, clean cut, glasses",
    "Boho chic look, wavy hair, warm tones",
]
DEFAULT_NARRATIVE = "A visual story exploring {topic} through the lens of {name}."
DEFAULT_MOOD = "raw documentary feel with warm natural tones"
DEFAULT_PALETTE = "warm amber, soft white, deep charcoal, muted sage"
DEFAULT_CAPTION = "just posting about {topic}..."

TrendSource = TrendSignal | NewsArticle


def trend_context(trend: TrendSource) -> str:
    """Long-form context of a trend or article, falling back to its summary."""
    if isinstance(trend, NewsArticle):
        return trend.full_context or trend.summary
    return trend.context or trend.summary


def normalize_trend_content(
    data: dict[str, Any],
    *,
    identity: InfluencerIdentity,
    grid_type: GridType,
    specific_trend: TrendSource | None = None,
    grounding_urls: list[str] | None = None,
) -> GeneratedTrend:
    """Fill every missing field and fit the beats to the grid.

    Args:
        data: Parsed model output (camelCase keys).
        identity: Influencer the post is for.
        grid_type: Target grid; its panel count fixes the number of beats.
        specific_trend: Pre-selected trend or article, if any.
        grounding_urls: Search grounding URLs from the response.

    Returns:
        A GeneratedTrend with exactly ``grid_type.panel_count`` beats.
    """
    panel_count = grid_type.panel_count
    topic = as_text(data.get("topic")) or (specific_trend.headline if specific_trend else "") or "Update"
    name = identity.name

    beats = as_strings(data.get("slideDescriptions"))
    if not beats:
        beats = prompts.fallback_beats(topic, name)
    beats = beats[:panel_count]
    while len(beats) < panel_count:
        beats.append(prompts.padding_beat(topic, name))

    source_urls: list[str] = []
    if specific_trend and specific_trend.source_url:
        source_urls.append(specific_trend.source_url)
    for url in grounding_urls or []:
        if url not in source_urls:
            source_urls.append(url)

    return GeneratedTrend(
        topic=topic,
        summary=as_text(data.get("summary")) or (specific_trend.summary if specific_trend else ""),
        caption=as_text(data.get("caption")) or DEFAULT_CAPTION.format(topic=topic),
        hashtags=as_strings(data.get("hashtags")),
        story_narrative=as_text(data.get("storyNarrative")) or DEFAULT_NARRATIVE.format(topic=topic, name=name),
        visual_mood=as_text(data.get("visualMood")) or DEFAULT_MOOD,
        color_palette=as_text(data.get("colorPalette")) or DEFAULT_PALETTE,
        slide_descriptions=beats,
        source_urls=source_urls,
    )


def fallback_sub_topics(niche: str) -> list[str]:
    return [f"{niche} news", f"{niche} trends", f"New in {niche}", f"{niche} tips", f"Future of {niche}"]


class ContentGenerator:
    """Generates post content, personas, sub-topics and trend signals."""

    def __init__(
        self,
        service: GenerationService,
        retry: RetrySettings | None = None,
        timeouts: TimeoutSettings | None = None,
        on_attempt: AttemptCallback = None,
    ):
        """Initialize the generator.

        Args:
            service: Generation service used for every call.
            retry: Backoff settings and attempt budgets.
            timeouts: Per-call deadlines.
            on_attempt: Optional async callback receiving retry attempt events.
        """
        self.service = service
        self.retry = retry or RetrySettings()
        self.timeouts = timeouts or TimeoutSettings()
        self._on_attempt = on_attempt

    async def _call(
        self,
        request: TextRequest,
        parse: Callable[[TextResponse], T],
        *,
        name: str,
        timeout_ms: int,
        attempts: int,
        on_attempt: AttemptCallback = None,
    ) -> T:
        """Issue one text request under the timeout and retry policy."""

        async def attempt() -> T:
            response = await with_timeout(self.service.generate_text(request), timeout_ms, name)
            return parse(response)

        return await retry_with_backoff(
            attempt,
            name=name,
            max_attempts=attempts,
            initial_delay_ms=self.retry.initial_delay_ms,
            multiplier=self.retry.multiplier,
            on_attempt=on_attempt or self._on_attempt,
        )

    # =========================================================================
    # Post content
    # =========================================================================

    async def generate_trend_post_content(
        self,
        niche: str,
        identity: InfluencerIdentity,
        grid_type: GridType,
        specific_trend: TrendSource | None = None,
        on_attempt: AttemptCallback = None,
    ) -> GeneratedTrend:
        """Generate normalized post content for a niche or a chosen trend.

        Without a trend, a search-grounded attempt runs first and a
        knowledge-only attempt runs when it exhausts its retries. With a
        trend, grounding is skipped and only the knowledge-only path runs.

        Raises:
            GenerationError: Every strategy failed.
        """
        name = "generate_trend_post_content"
        if specific_trend is not None:
            topic_context = prompts.TREND_TOPIC_CONTEXT.format(
                headline=specific_trend.headline,
                context=trend_context(specific_trend),
                summary=specific_trend.summary,
            )
        else:
            topic_context = prompts.OPEN_TOPIC_CONTEXT.format(niche=niche)

        prompt = prompts.POST_CONTENT_PROMPT.format(
            topic_context=topic_context,
            name=identity.name,
            personality=identity.personality or "genuine",
            niche=niche,
            visual_style=identity.visual_style or "natural",
            panel_count=grid_type.panel_count,
        )
        _logger.info(
            f"OP:{name} | START | niche:{niche} | grid:{grid_type.value} | "
            f"trend:{specific_trend.id if specific_trend else 'none'}"
        )

        def parse(response: TextResponse) -> GeneratedTrend:
            data = require_json(response.text, dict, name)
            return normalize_trend_content(
                data,
                identity=identity,
                grid_type=grid_type,
                specific_trend=specific_trend,
                grounding_urls=response.source_urls,
            )

        def knowledge_only() -> Awaitable[GeneratedTrend]:
            return self._call(
                TextRequest(
                    prompt=prompt,
                    task="post_content",
                    json_output=True,
                    response_schema=prompts.POST_CONTENT_SCHEMA,
                ),
                parse,
                name=f"{name} (knowledge)",
                timeout_ms=self.timeouts.text_ms,
                attempts=self.retry.content_attempts,
                on_attempt=on_attempt,
            )

        if specific_trend is not None:
            return await knowledge_only()

        def search_grounded() -> Awaitable[GeneratedTrend]:
            return self._call(
                TextRequest(prompt=prompt, task="post_content", use_search=True),
                parse,
                name=f"{name} (search)",
                timeout_ms=self.timeouts.search_ms,
                attempts=self.retry.content_attempts,
                on_attempt=on_attempt,
            )

        return await with_fallback(search_grounded, knowledge_only, name=name)

    # =========================================================================
    # Persona
    # =========================================================================

    async def generate_persona(self, niche: str, on_attempt: AttemptCallback = None) -> Persona:
        """Generate a persona with exactly four visual options.

        Raises:
            GenerationError: Retries exhausted or the response had no name.
        """
        name = "generate_persona"

        def parse(response: TextResponse) -> Persona:
            data = require_json(response.text, dict, name)
            persona_name = as_text(data.get("name"))
            if not persona_name:
                raise ParsingError(name, detail="persona without a name")

            options = as_strings(data.get("visualOptions")) or list(DEFAULT_VISUAL_OPTIONS)
            count = limits.VISUAL_OPTION_COUNT
            padded = [options[i % len(options)] for i in range(count)]

            return Persona(
                name=persona_name,
                bio=as_text(data.get("bio")),
                personality=as_text(data.get("personality")),
                visual_options=padded,
            )

        prompt = prompts.PERSONA_PROMPT.format(niche=niche, count=limits.VISUAL_OPTION_COUNT)
        return await self._call(
            TextRequest(
                prompt=prompt,
                task="persona",
                json_output=True,
                response_schema=prompts.PERSONA_SCHEMA,
            ),
            parse,
            name=name,
            timeout_ms=self.timeouts.text_ms,
            attempts=self.retry.persona_attempts,
            on_attempt=on_attempt,
        )

    # =========================================================================
    # Sub-topics
    # =========================================================================

    async def generate_sub_topics(self, niche: str) -> list[str]:
        """Suggest focused sub-topics. Never raises; falls back to a fixed list."""
        name = "generate_sub_topics"

        def parse(response: TextResponse) -> list[str]:
            topics = as_strings(require_json(response.text, list, name))
            if not topics:
                raise ParsingError(name, detail="empty topic list")
            return topics[:limits.SUBTOPIC_COUNT]

        prompt = prompts.SUBTOPICS_PROMPT.format(niche=niche, count=limits.SUBTOPIC_COUNT)
        try:
            return await self._call(
                TextRequest(
                    prompt=prompt,
                    task="sub_topics",
                    json_output=True,
                    response_schema=prompts.SUBTOPICS_SCHEMA,
                ),
                parse,
                name=name,
                timeout_ms=self.timeouts.text_ms,
                attempts=self.retry.subtopic_attempts,
            )
        except GenerationError as e:
            _logger.warning(f"OP:{name} | FALLBACK | niche:{niche} | error:{e}")
            return fallback_sub_topics(niche)

    # =========================================================================
    # Trend discovery
    # =========================================================================

    async def discover_trends(self, niche: str, focus: str | None = None) -> list[TrendSignal]:
        """Discover trending stories, search-grounded first.

        Raises:
            GenerationError: Both strategies failed.
        """
        name = "discover_trends"
        search_term = f"{focus} ({niche})" if focus else niche

        def parse_search(response: TextResponse) -> list[TrendSignal]:
            items = as_records(require_json(response.text, (list, dict), f"{name} (search)"))
            if not items:
                raise GenerationError("No trends returned from search", f"{name} (search)")
            stamp = now_ms()
            source_url = response.source_urls[0] if response.source_urls else None
            return [
                TrendSignal(
                    id=f"trend-live-{stamp}-{i}",
                    headline=as_text(item.get("headline")) or "News Update",
                    summary=as_text(item.get("summary")),
                    context=as_text(item.get("context")) or as_text(item.get("summary")),
                    relevance_score=as_score(item.get("relevanceScore"), 80),
                    source_url=source_url,
                )
                for i, item in enumerate(items)
            ]

        def parse_fallback(response: TextResponse) -> list[TrendSignal]:
            items = as_records(require_json(response.text, (list, dict), f"{name} (fallback)"))
            if not items:
                raise ParsingError(f"{name} (fallback)", detail="empty trends array")
            stamp = now_ms()
            return [
                TrendSignal(
                    id=f"trend-fallback-{stamp}-{i}",
                    headline=as_text(item.get("headline")) or "Trending Topic",
                    summary=as_text(item.get("summary")),
                    context=as_text(item.get("context")),
                    relevance_score=as_score(item.get("relevanceScore"), 70),
                )
                for i, item in enumerate(items)
            ]

        def search() -> Awaitable[list[TrendSignal]]:
            prompt = prompts.TRENDS_SEARCH_PROMPT.format(count=limits.TREND_COUNT, search_term=search_term)
            return self._call(
                TextRequest(prompt=prompt, task="trends", use_search=True),
                parse_search,
                name=f"{name} (search)",
                timeout_ms=self.timeouts.search_ms,
                attempts=self.retry.trend_attempts,
            )

        def fallback() -> Awaitable[list[TrendSignal]]:
            prompt = prompts.TRENDS_FALLBACK_PROMPT.format(count=limits.TREND_COUNT, topic=focus or niche)
            return self._call(
                TextRequest(prompt=prompt, task="trends", json_output=True),
                parse_fallback,
                name=f"{name} (fallback)",
                timeout_ms=self.timeouts.text_ms,
                attempts=self.retry.trend_attempts,
            )

        return await with_fallback(search, fallback, name=name)
