"""Image compositor — crops the watermark band and cover-fits into a rectangle.

The geometry mirrors CSS ``object-fit: cover``: the cropped source is scaled
so it fills the target completely while keeping its aspect ratio, and the
overflowing axis is centered.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

logger = logging.getLogger(__name__)

WATERMARK_BAND = 85
FALLBACK_BACKGROUND = "#374151"
FALLBACK_TEXT_COLOR = "white"
FALLBACK_LABEL = "Image could not be loaded"
FALLBACK_FONT_SIZE = 16
CLEAR = (0, 0, 0, 0)


@dataclass(frozen=True)
class Placement:
    """Where the scaled source lands on the target, in target pixels."""

    dx: float
    dy: float
    width: float
    height: float


def crop_box(width: int, height: int, band: int = WATERMARK_BAND) -> tuple[int, int, int, int] | None:
    """Source box without the bottom band, or None when nothing would remain."""
    remaining = height - band
    if remaining <= 0 or width <= 0:
        return None
    return (0, 0, width, remaining)


def cover_fit(src_width: float, src_height: float, target_width: float, target_height: float) -> Placement:
    """Scale and center a source so it covers the target rectangle."""
    source_ratio = src_width / src_height
    target_ratio = target_width / target_height

    if source_ratio > target_ratio:
        # Wider than the target: match heights, center horizontally
        height = target_height
        width = height * source_ratio
        return Placement(dx=(target_width - width) / 2, dy=0.0, width=width, height=height)

    # Taller (or equal): match widths, center vertically
    width = target_width
    height = width / source_ratio
    return Placement(dx=0.0, dy=(target_height - height) / 2, width=width, height=height)


def visible_box(
    placement: Placement,
    src_width: int,
    src_height: int,
    target_width: int,
    target_height: int,
) -> tuple[float, float, float, float]:
    """Source region that lands inside the target once placed."""
    scale = placement.width / src_width
    left = max(0.0, -placement.dx / scale)
    top = max(0.0, -placement.dy / scale)
    right = min(float(src_width), left + target_width / scale)
    bottom = min(float(src_height), top + target_height / scale)
    return (left, top, right, bottom)


def compose(
    image: Image.Image,
    target_width: int,
    target_height: int,
    band: int = WATERMARK_BAND,
) -> Image.Image:
    """Paint the cropped, scaled and centered image onto a cleared canvas."""
    canvas = Image.new("RGBA", (target_width, target_height), CLEAR)

    box = crop_box(image.width, image.height, band)
    if box is None:
        logger.error(
            "Image height %d is too small to crop a %dpx band", image.height, band
        )
        return canvas

    cropped = image.crop(box).convert("RGBA")
    placement = cover_fit(cropped.width, cropped.height, target_width, target_height)

    # Resample only the visible part of the source, straight to the target size.
    visible = visible_box(placement, cropped.width, cropped.height, target_width, target_height)
    scaled = cropped.resize((target_width, target_height), resample=Image.LANCZOS, box=visible)
    canvas.paste(scaled, (0, 0))
    return canvas


def compose_fallback(target_width: int, target_height: int) -> Image.Image:
    """Flat background with a centered 'could not load' label."""
    canvas = Image.new("RGBA", (target_width, target_height), FALLBACK_BACKGROUND)
    draw = ImageDraw.Draw(canvas)
    try:
        font = ImageFont.load_default(size=FALLBACK_FONT_SIZE)
    except TypeError:
        font = ImageFont.load_default()
    left, top, right, bottom = draw.textbbox((0, 0), FALLBACK_LABEL, font=font)
    x = (target_width - (right - left)) / 2 - left
    y = (target_height - (bottom - top)) / 2 - top
    draw.text((x, y), FALLBACK_LABEL, fill=FALLBACK_TEXT_COLOR, font=font)
    return canvas


def render(
    data: bytes | None,
    target_width: int,
    target_height: int,
    band: int = WATERMARK_BAND,
) -> Image.Image:
    """Decode image bytes and compose them, or paint the fallback."""
    if not data:
        logger.error("No image data to render")
        return compose_fallback(target_width, target_height)

    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        logger.error("Failed to load image for cropping: %s", exc)
        return compose_fallback(target_width, target_height)

    return compose(image, target_width, target_height, band)


def to_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()
