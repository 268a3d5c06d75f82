"""Imagen image backend — Gemini API predict endpoint, base64 payload."""

from __future__ import annotations

import base64
import binascii
import logging

import httpx

from sportify.backends.base import derive_image_prompt
from sportify.config import settings
from sportify.errors import CredentialError, EmptyContentError, classify_service_error

logger = logging.getLogger(__name__)

OPERATION = "image"


class ImagenImageClient:
    """Image backend that asks Imagen for exactly one image."""

    name: str = "Imagen"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        api_base: str | None = None,
        aspect_ratio: str | None = None,
        mime_type: str | None = None,
        prompt_chars: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.google_api_key
        self.model = model or settings.image_model
        self.api_base = (api_base or settings.api_base).rstrip("/")
        self.aspect_ratio = aspect_ratio or settings.image_aspect_ratio
        self.mime_type = mime_type or settings.image_mime_type
        self.prompt_chars = prompt_chars or settings.image_prompt_chars
        self.timeout = timeout or settings.request_timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.api_base}/models/{self.model}:predict"

    async def fetch_image(self, briefing_text: str) -> str:
        """Generate one image and return it as a data URI."""
        if not self.api_key:
            raise CredentialError()

        prompt = derive_image_prompt(briefing_text, self.prompt_chars)
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
                        "instances": [{"prompt": prompt}],
                        "parameters": {
                            "sampleCount": 1,
                            "aspectRatio": self.aspect_ratio,
                            "outputOptions": {"mimeType": self.mime_type},
                        },
                    },
                )
                response.raise_for_status()
            data = response.json()
        except Exception as exc:
            raise classify_service_error(exc, OPERATION) from exc

        predictions = [
            p for p in data.get("predictions") or [] if p.get("bytesBase64Encoded")
        ]
        if not predictions:
            raise EmptyContentError(
                "Failed to generate an image. The AI model returned no images."
            )

        first = predictions[0]
        encoded = first["bytesBase64Encoded"]
        try:
            image_bytes = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise EmptyContentError(
                "Failed to generate an image. The image payload could not be decoded."
            ) from exc

        mime_type = first.get("mimeType") or self.mime_type
        logger.info("Imagen image generated (%d bytes, %s)", len(image_bytes), mime_type)
        return f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"
