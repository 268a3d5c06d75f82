"""Prompt builder — turns topics or a free-text query into an instruction."""

from __future__ import annotations

from typing import Sequence

from sportify.errors import ValidationError

DEEP_DIVE_PROMPT = """\
Generate a detailed and engaging sports news briefing for the topic: "{query}". \
Structure your response clearly using Markdown. You MUST use headings (##), \
subheadings (###), and bullet points (*) to organize the information. \
Do not just use bold text for headings. Make it look like a professional sports \
report with clear sections.\
"""

SURVEY_PROMPT = """\
Generate an exciting, up-to-date sports news briefing for these sports: {topics}. \
Structure your response clearly using Markdown. You MUST use a main heading '##' \
for each sport. Under each sport, use subheadings '###' for different news items \
and bullet points '*' for details. Do not use bold text as a substitute for \
headings. Ensure the output is well-structured and easy to read, like a \
professional sports article.\
"""


def build_prompt(topics: Sequence[str] = (), query: str | None = None) -> str:
    """Build the deep-dive prompt for a query, else the multi-topic survey."""
    query = (query or "").strip()
    if query:
        return DEEP_DIVE_PROMPT.format(query=query)

    if not topics:
        raise ValidationError()
    return SURVEY_PROMPT.format(topics=", ".join(topics))
