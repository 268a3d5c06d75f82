"""Gemini briefing backend — generateContent with Google Search grounding."""

from __future__ import annotations

import logging

import httpx

from sportify.config import settings
from sportify.errors import CredentialError, EmptyContentError, classify_service_error
from sportify.models.briefing import BriefingDraft, Source

logger = logging.getLogger(__name__)

OPERATION = "sports briefing"


class GeminiBriefingClient:
    """Briefing backend using the Gemini API with web-search augmentation."""

    name: str = "Gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        api_base: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.google_api_key
        self.model = model or settings.text_model
        self.api_base = (api_base or settings.api_base).rstrip("/")
        self.timeout = timeout or settings.request_timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.api_base}/models/{self.model}:generateContent"

    async def fetch_briefing(self, prompt: str) -> BriefingDraft:
        """Generate a briefing and collect its grounding sources."""
        if not self.api_key:
            raise CredentialError()

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.url,
                    headers={
                        "Content-Type": "application/json",
                        "x-goog-api-key": self.api_key,
                    },
                    json={
                        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                        "tools": [{"google_search": {}}],
                    },
                )
                response.raise_for_status()
            data = response.json()
        except Exception as exc:
            raise classify_service_error(exc, OPERATION) from exc

        candidate = (data.get("candidates") or [{}])[0]
        text = self._extract_text(candidate)
        if not text.strip():
            raise EmptyContentError(
                "Failed to generate a briefing. The AI model returned no content."
            )

        sources = self._extract_sources(candidate)
        logger.info(
            "Gemini briefing generated (%d chars, %d sources)", len(text), len(sources)
        )
        return BriefingDraft(text=text, sources=sources)

    def _extract_text(self, candidate: dict) -> str:
        parts = (candidate.get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))

    def _extract_sources(self, candidate: dict) -> tuple[Source, ...]:
        """Keep web chunks only, in the order the service returned them."""
        metadata = candidate.get("groundingMetadata") or {}
        sources: list[Source] = []
        for chunk in metadata.get("groundingChunks") or []:
            web = chunk.get("web") if isinstance(chunk, dict) else None
            if not web or not web.get("uri"):
                continue
            sources.append(Source(uri=web["uri"], title=web.get("title") or ""))
        return tuple(sources)
