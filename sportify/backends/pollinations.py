"""Pollinations image backend — composes a render URL, no network call."""

from __future__ import annotations

import logging
import random
from urllib.parse import quote, urlencode

from sportify.backends.base import derive_image_prompt
from sportify.config import settings

logger = logging.getLogger(__name__)

POLLINATIONS_URL = "https://image.pollinations.ai/prompt/"
DEFAULT_MODEL = "flux"
MAX_SEED = 1_000_000


class PollinationsImageClient:
    """Image backend that defers rendering to whoever loads the URL."""

    name: str = "Pollinations"

    def __init__(
        self,
        width: int | None = None,
        height: int | None = None,
        model: str = DEFAULT_MODEL,
        prompt_chars: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.width = width or settings.image_width
        self.height = height or settings.image_height
        self.model = model
        self.prompt_chars = prompt_chars or settings.image_prompt_chars
        self._rng = rng or random.Random()

    async def fetch_image(self, briefing_text: str) -> str:
        """Return the image URL; a fresh seed gives a new image every time."""
        prompt = derive_image_prompt(briefing_text, self.prompt_chars)
        seed = self._rng.randrange(MAX_SEED)
        query = urlencode(
            {
                "model": self.model,
                "width": self.width,
                "height": self.height,
                "seed": seed,
            }
        )
        url = f"{POLLINATIONS_URL}{quote(prompt, safe='')}?{query}"

        logger.debug("Pollinations image URL composed (seed=%d)", seed)
        return url
