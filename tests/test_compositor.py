import io

import pytest
from PIL import Image

from sportify.orchestrator import compositor


def test_crop_box_removes_watermark_band():
    assert compositor.crop_box(640, 445, 85) == (0, 0, 640, 360)
    assert compositor.crop_box(640, 86, 85) == (0, 0, 640, 1)


@pytest.mark.parametrize("height", [0, 50, 85])
def test_crop_box_too_small(height):
    assert compositor.crop_box(640, height, 85) is None


def test_cover_fit_wide_source():
    placement = compositor.cover_fit(200, 100, 100, 100)
    assert placement == compositor.Placement(dx=-50.0, dy=0.0, width=200.0, height=100.0)


def test_cover_fit_tall_source():
    placement = compositor.cover_fit(100, 200, 200, 100)
    assert placement == compositor.Placement(dx=0.0, dy=-150.0, width=200.0, height=400.0)


@pytest.mark.parametrize(
    "src,target",
    [
        ((2560, 1355), (1024, 384)),
        ((2560, 1355), (320, 256)),
        ((1024, 939), (800, 800)),
        ((300, 1200), (1200, 300)),
        ((1201, 7), (3, 997)),
    ],
)
def test_cover_fit_always_covers_and_centers(src, target):
    placement = compositor.cover_fit(*src, *target)
    tw, th = target
    assert placement.dx <= 0 and placement.dy <= 0
    assert placement.dx + placement.width >= tw - 1e-6
    assert placement.dy + placement.height >= th - 1e-6
    assert placement.dx == pytest.approx((tw - placement.width) / 2)
    assert placement.dy == pytest.approx((th - placement.height) / 2)
    assert placement.width / placement.height == pytest.approx(src[0] / src[1])


def _banded_image(width, height, band):
    image = Image.new("RGB", (width, height), "red")
    image.paste(Image.new("RGB", (width, band), "blue"), (0, height - band))
    return image


@pytest.mark.parametrize("target", [(1024, 384), (300, 600), (97, 97)])
def test_compose_fills_target_without_watermark(target):
    image = _banded_image(640, 360 + 85, 85)

    canvas = compositor.compose(image, *target, band=85)

    assert canvas.size == target
    assert canvas.getchannel("A").getextrema() == (255, 255)
    assert canvas.getchannel("B").getextrema()[1] < 128


def test_compose_too_small_leaves_canvas_clear():
    canvas = compositor.compose(Image.new("RGB", (100, 50), "red"), 200, 100, band=85)

    assert canvas.size == (200, 100)
    assert canvas.getchannel("A").getextrema() == (0, 0)


def test_fallback_has_background_and_label():
    canvas = compositor.compose_fallback(400, 200)

    assert canvas.size == (400, 200)
    assert canvas.getpixel((0, 0)) == (0x37, 0x41, 0x51, 255)
    assert canvas.convert("L").getextrema()[1] > 200


@pytest.mark.parametrize("data", [None, b"", b"definitely not an image"])
def test_render_falls_back_on_bad_data(data):
    canvas = compositor.render(data, 320, 180)
    assert canvas.getpixel((0, 0)) == (0x37, 0x41, 0x51, 255)


def test_render_round_trips_to_png():
    buf = io.BytesIO()
    _banded_image(640, 445, 85).save(buf, format="PNG")

    png = compositor.to_png(compositor.render(buf.getvalue(), 320, 180))

    assert png.startswith(b"\x89PNG")
    assert Image.open(io.BytesIO(png)).size == (320, 180)


def test_visible_box_wide_source():
    placement = compositor.cover_fit(200, 100, 100, 100)
    assert compositor.visible_box(placement, 200, 100, 100, 100) == (50.0, 0.0, 150.0, 100.0)


def test_visible_box_tall_source():
    placement = compositor.cover_fit(100, 200, 200, 100)
    assert compositor.visible_box(placement, 100, 200, 200, 100) == (0.0, 75.0, 100.0, 125.0)


def test_compose_extreme_aspect_resamples_at_target_size(monkeypatch):
    sizes = []
    original_resize = Image.Image.resize

    def recording_resize(self, size, *args, **kwargs):
        sizes.append(tuple(size))
        return original_resize(self, size, *args, **kwargs)

    monkeypatch.setattr(Image.Image, "resize", recording_resize)

    # 5px left after the band: a full cover-fit scale would be ~196k px wide
    canvas = compositor.compose(Image.new("RGB", (2560, 90), "red"), 1024, 384, band=85)

    assert sizes
    assert all(w <= 1024 and h <= 384 for w, h in sizes)
    assert canvas.size == (1024, 384)
    assert canvas.getchannel("A").getextrema() == (255, 255)
