"""Fetch image bytes for a URL or data URI so they can be composited."""

from __future__ import annotations

import base64
import binascii
import logging

import httpx

from sportify.config import settings

logger = logging.getLogger(__name__)


class ImageLoadError(Exception):
    """The referenced image could not be loaded."""


async def load_image_bytes(
    image_ref: str,
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bytes:
    """Resolve an image reference to raw bytes."""
    if image_ref.startswith("data:"):
        return _decode_data_uri(image_ref)

    try:
        async with httpx.AsyncClient(
            timeout=timeout or settings.request_timeout,
            transport=transport,
            follow_redirects=True,
        ) as client:
            response = await client.get(image_ref)
            response.raise_for_status()
    except httpx.HTTPError as exc:
        raise ImageLoadError(f"Failed to load image: {exc}") from exc

    return response.content


def _decode_data_uri(image_ref: str) -> bytes:
    header, _, payload = image_ref.partition(",")
    if not payload or not header.endswith(";base64"):
        raise ImageLoadError("Unsupported data URI")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageLoadError("Malformed base64 image payload") from exc
