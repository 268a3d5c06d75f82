"""Protocols for the text and image service clients."""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

from sportify.models.briefing import BriefingDraft

IMAGE_PROMPT_CHARS = 250

IMAGE_STYLE_TEMPLATE = (
    "Epic, cinematic, vibrant, dynamic digital painting representing the following "
    'sports news: "{excerpt}...". Abstract and energetic style, capturing the motion '
    "and emotion of sports. A masterpiece, hyper-detailed, trending on ArtStation. "
    "No text or words in the image. Focus on dynamic shapes, dramatic lighting, "
    "and evocative team colors."
)

_WHITESPACE = re.compile(r"\s+")


@runtime_checkable
class BriefingBackend(Protocol):
    """Interface for the hosted text-generation service."""

    name: str

    async def fetch_briefing(self, prompt: str) -> BriefingDraft:
        """Generate Markdown text and grounding sources for a prompt."""
        ...


@runtime_checkable
class ImageBackend(Protocol):
    """Interface for the image service; returns a URL or a data URI."""

    name: str

    async def fetch_image(self, briefing_text: str) -> str:
        """Return a displayable image reference for a briefing."""
        ...


def derive_image_prompt(briefing_text: str, limit: int = IMAGE_PROMPT_CHARS) -> str:
    """Collapse whitespace, cap the excerpt and wrap it in the style directive."""
    excerpt = _WHITESPACE.sub(" ", briefing_text).strip()[:limit]
    return IMAGE_STYLE_TEMPLATE.format(excerpt=excerpt)
