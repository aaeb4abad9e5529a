"""Prompt templates for text and image generation.

Templates are plain ``str.format`` strings. Literal JSON braces are doubled.
"""

from __future__ import annotations

from .models import GridImageContext, GridType


# =============================================================================
# PERSONA
# =============================================================================

PERSONA_PROMPT = """Create a hyper-realistic, human-like persona for a social media influencer in the "{niche}" niche.

Return a JSON object with:
- name: A realistic name (suitable for the niche).
- bio: A short, engaging Instagram bio (max 150 chars).
- personality: Key personality traits.
- visualOptions: An array of exactly {count} DISTINCT physical descriptions.
  * They must represent DIFFERENT people (vary ethnicity, hair color/style, facial features).
  * Each description must be detailed enough for an image generator (e.g., "Asian woman with purple streak bob", "Latino man with curly fade and glasses").
  * All must fit the generated name."""

PERSONA_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "name": {"type": "STRING"},
        "bio": {"type": "STRING"},
        "personality": {"type": "STRING"},
        "visualOptions": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
}

AVATAR_PROMPT = (
    "Hyper-realistic close-up headshot of a real person ({name}), social media influencer "
    "profile picture. {style}. Detailed skin texture, visible pores, natural eye contact, "
    "soft window lighting, shot on Sony A7R IV 85mm f/1.8 lens, authentic look."
)


# =============================================================================
# SUB-TOPICS AND TRENDS
# =============================================================================

SUBTOPICS_PROMPT = """Generate {count} specific, high-traffic sub-topics or search keywords related to "{niche}" that are likely to have recent news or trending content right now.
Avoid generic terms. Be specific (e.g., instead of "Fashion", use "Sustainable fabrics" or "Met Gala" or "Thrifting trends").

RETURN RAW JSON ARRAY OF STRINGS ONLY."""

SUBTOPICS_SCHEMA = {"type": "ARRAY", "items": {"type": "STRING"}}

TRENDS_SEARCH_PROMPT = """Find {count} specific, real-world news stories from the last 7 days related to "{search_term}".

RETURN RAW JSON ONLY. No markdown.
Format:
[ {{ "headline": "...", "summary": "...", "context": "...", "relevanceScore": 85 }} ]"""

TRENDS_FALLBACK_PROMPT = """Generate {count} realistic trending topics or content ideas for a "{topic}" influencer.
Focus on evergreen topics or general current events.

RETURN RAW JSON ONLY.
Format: [ {{ "headline": "...", "summary": "...", "context": "...", "relevanceScore": 70 }} ]"""


# =============================================================================
# POST CONTENT
# =============================================================================

TREND_TOPIC_CONTEXT = """TOPIC TO COVER: {headline}
CONTEXT: {context}
SOURCE SUMMARY: {summary}

You must create a post specifically about this topic. Do not invent a new topic."""

OPEN_TOPIC_CONTEXT = """Find a currently trending topic or news event related to the "{niche}" industry."""

POST_CONTENT_PROMPT = """{topic_context}

You are a creative director planning an Instagram carousel for {name}, a {personality} influencer in the {niche} space. Their look: {visual_style}.

Think like a magazine editor, NOT an AI prompt engineer.

1. CAPTION: Write a natural, human-sounding caption (lowercase, minimal emojis, authentic voice that sounds like a real person talking to friends, not a brand).

2. STORY NARRATIVE: Write a rich 2-3 sentence creative brief describing the VISUAL STORY ARC of this carousel. What emotional journey does the viewer go on? What's the visual throughline?

3. VISUAL MOOD: Describe the overall aesthetic in editorial terms (e.g., "late afternoon golden hour documentary", "lo-fi film grain with pops of neon"). Avoid generic "clean and modern."

4. COLOR PALETTE: Describe 3-4 specific colors that unify the carousel.

5. SLIDE DESCRIPTIONS: For each of the {panel_count} slides, write a STORY BEAT: what role does this slide play in the narrative? Mix personal moments, data/insight cards, emotional hooks, context/proof and a closing payoff. Describe INTENT and CONTENT, not a mechanical prompt.

Return JSON with keys: topic, summary, caption, hashtags, storyNarrative, visualMood, colorPalette, slideDescriptions."""

POST_CONTENT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "topic": {"type": "STRING"},
        "summary": {"type": "STRING"},
        "caption": {"type": "STRING"},
        "hashtags": {"type": "ARRAY", "items": {"type": "STRING"}},
        "storyNarrative": {"type": "STRING"},
        "visualMood": {"type": "STRING"},
        "colorPalette": {"type": "STRING"},
        "slideDescriptions": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
}


def fallback_beats(topic: str, name: str) -> list[str]:
    """Ordered narrative beats used when the model returns none."""
    return [
        f"Opening hook: bold visual or statement about {topic} that stops the scroll",
        f"{name} in their element, candid and unposed, connecting the topic to their personal world",
        "Key insight or data point presented with editorial typography",
        "The emotional core: why this matters, shown through a personal lens",
        "Deeper context: behind the scenes or real-world evidence",
        "A provocative question or contrarian take to spark engagement",
        "Visual proof or example that makes the abstract concrete",
        "Community voice: quotes, DMs, or crowd reactions",
        "Closing CTA: personal sign-off with personality",
    ]


def padding_beat(topic: str, name: str) -> str:
    return f"Additional perspective on {topic} from {name}'s point of view"


# =============================================================================
# IMAGE GRIDS
# =============================================================================

PANEL_GRID_PROMPT = """Create a single {grid} grid collage image containing {panel_count} distinct panels.
The grid MUST have clear, thin white separation lines between panels.

Panels:
{panels}

Each panel must be photorealistic. Maintain consistency across all panels."""

STORY_GRID_PROMPT = """You are an elite creative director shooting an Instagram carousel for {name}, a {personality} voice in {niche}.

THE STORY: {topic}
{summary}

CREATIVE BRIEF:
{story_narrative}

VISUAL DIRECTION:
- Mood: {visual_mood}
- Color palette: {color_palette}
- The influencer: {visual_style}

YOUR TASK: Create a single {grid} grid image ({panel_count} panels separated by thin white lines) that tells this story as a cohesive visual narrative. It is a STORY told in {panel_count} frames, not a collection of random images.

STORY BEATS (each panel):
{beats}

CRITICAL CREATIVE RULES:
1. VISUAL VARIETY: each panel must feel like a different camera angle or medium.
   * Mix close-ups (face, hands, details) with wide environmental shots
   * Mix real photography panels with typography or text-card panels
   * Vary perspective: overhead flat-lay, eye-level candid, low-angle dramatic

2. ANTI-SAMENESS RULES:
   * NO two adjacent panels use the same visual technique
   * NO uniform lighting: mix golden hour, harsh flash, soft window light, ring light
   * Text panels use DIFFERENT typography styles (serif editorial, bold sans, handwritten)
   * Photo panels vary between posed editorial and caught-off-guard candid

3. COHESION WITHOUT UNIFORMITY:
   * The color palette ({color_palette}) is the thread that connects everything
   * Consistent identity of {name} across photo panels ({visual_style})
   * The emotional arc builds; not every panel at the same intensity

4. MAKE IT FEEL HUMAN:
   * Imperfect crops, slightly off-center compositions, film grain on photos
   * Text cards look designed but not corporate

Generate the grid image now. Photorealistic for photo panels, editorial design for text panels. NOT illustration, NOT 3d render, NOT cartoon."""


def panel_position(index: int, total: int) -> str:
    """Position label of a beat inside the story arc."""
    if index == 0:
        return "OPENING"
    if index == total - 1:
        return "CLOSING"
    return f"MIDDLE (beat {index})"


def build_panel_grid_prompt(prompts: list[str], grid_type: GridType) -> str:
    panels = "\n".join(f"Panel {i + 1}: {p}" for i, p in enumerate(prompts))
    return PANEL_GRID_PROMPT.format(
        grid=grid_type.value,
        panel_count=grid_type.panel_count,
        panels=panels,
    )


def build_story_grid_prompt(context: GridImageContext, grid_type: GridType) -> str:
    """Compose the rich-context grid prompt with labelled story beats."""
    total = grid_type.panel_count
    beats = "\n".join(
        f"  Slide {i + 1} [{panel_position(i, total)}]: {desc}"
        for i, desc in enumerate(context.slide_descriptions[:total])
    )
    return STORY_GRID_PROMPT.format(
        name=context.influencer_name,
        personality=context.personality or "distinctive",
        niche=context.niche or context.topic,
        topic=context.topic,
        summary=context.summary,
        story_narrative=context.story_narrative,
        visual_mood=context.visual_mood,
        color_palette=context.color_palette,
        visual_style=context.visual_style or "as established",
        grid=grid_type.value,
        panel_count=total,
        beats=beats,
    )
