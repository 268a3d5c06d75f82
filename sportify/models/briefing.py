"""Briefing data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from sportify.errors import ValidationError

UNTITLED_SOURCE = "Untitled Source"


@dataclass(frozen=True)
class Source:
    """A grounding citation attached to generated text."""

    uri: str
    title: str = UNTITLED_SOURCE

    def __post_init__(self) -> None:
        if not self.title:
            object.__setattr__(self, "title", UNTITLED_SOURCE)


@dataclass(frozen=True)
class BriefingRequest:
    """Either a set of topics or a free-text query, never neither."""

    topics: tuple[str, ...] = ()
    query: str | None = None

    @classmethod
    def from_inputs(
        cls, topics: Iterable[str] = (), query: str | None = None
    ) -> BriefingRequest:
        """Validate raw user input. A non-blank query takes precedence."""
        query = (query or "").strip()
        if query:
            return cls(topics=(), query=query)

        cleaned = tuple(t.strip() for t in topics if t and t.strip())
        if not cleaned:
            raise ValidationError()
        return cls(topics=cleaned, query=None)


@dataclass(frozen=True)
class BriefingDraft:
    """Generated text and its sources, before an image is attached."""

    text: str
    sources: tuple[Source, ...] = ()


@dataclass(frozen=True)
class BriefingResult:
    """A complete briefing: Markdown text, grounding sources and an image."""

    text: str
    image_ref: str
    sources: tuple[Source, ...] = field(default_factory=tuple)
