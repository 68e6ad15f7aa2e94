"""Tests for photo decoding, cover fit and the gradient/overlay painters."""

from io import BytesIO

import pytest
from PIL import Image

from exceptions import BackgroundDecodeError
from image_templates.background import (
    cover_source_box,
    decode_background,
    paint_cover,
    paint_depth,
    paint_gradient,
    paint_wash,
)

CANVAS = (1200, 630)


def blank_canvas():
    return Image.new("RGBA", CANVAS, (0, 0, 0, 255))


def close_to(pixel, color, tolerance=2):
    return all(abs(a - b) <= tolerance for a, b in zip(pixel[:3], color[:3]))


# --- decode ---------------------------------------------------------------

def test_decode_returns_rgba(make_photo):
    img = decode_background(make_photo((40, 20), (1, 2, 3), "JPEG"))
    assert img.mode == "RGBA"
    assert img.size == (40, 20)


@pytest.mark.parametrize("data", [b"", b"not an image at all", b"\x89PNG\r\n\x1a\n garbage"])
def test_decode_rejects_bad_bytes(data):
    with pytest.raises(BackgroundDecodeError):
        decode_background(data)


def test_decode_rejects_truncated_png():
    noise = Image.effect_noise((128, 128), 80).convert("RGB")
    buffer = BytesIO()
    noise.save(buffer, format="PNG")
    data = buffer.getvalue()

    with pytest.raises(BackgroundDecodeError):
        decode_background(data[: len(data) // 2])


# --- cover fit --------------------------------------------------------------

@pytest.mark.parametrize("src,expected", [
    ((600, 315), (0, 0, 600, 315)),
    ((1200, 630), (0, 0, 1200, 630)),
    ((400, 400), (0, 95, 400, 305)),
    ((100, 400), (0, 173.75, 100, 226.25)),
    ((2400, 630), (600, 0, 1800, 630)),
])
def test_cover_source_box(src, expected):
    assert cover_source_box(src, CANVAS) == pytest.approx(expected)


@pytest.mark.parametrize("src", [(3000, 200), (200, 3000), (1201, 631), (7, 13), (1199, 629), (4, 4000)])
def test_cover_source_box_stays_inside_source(src):
    left, top, right, bottom = cover_source_box(src, CANVAS)
    assert 0 <= left < right <= src[0]
    assert 0 <= top < bottom <= src[1]
    # one axis is used in full, the box keeps the canvas aspect ratio
    assert right - left == pytest.approx(src[0]) or bottom - top == pytest.approx(src[1])
    assert (right - left) / (bottom - top) == pytest.approx(CANVAS[0] / CANVAS[1])


@pytest.mark.parametrize("src", [(300, 100), (100, 300), (64, 64), (2400, 1260)])
def test_paint_cover_fills_whole_canvas(src):
    canvas = paint_cover(blank_canvas(), Image.new("RGB", src, (10, 200, 30)))

    assert canvas.size == CANVAS
    for point in [(0, 0), (1199, 0), (0, 629), (1199, 629), (600, 315)]:
        assert close_to(canvas.getpixel(point), (10, 200, 30))


def test_paint_cover_extreme_strip():
    # 4x4000 strip: top red, bottom blue; the visible slice is the middle
    photo = Image.new("RGB", (4, 4000), (255, 0, 0))
    photo.paste((0, 0, 255), (0, 2000, 4, 4000))
    photo.paste((10, 200, 30), (0, 1990, 4, 2010))

    canvas = paint_cover(blank_canvas(), photo)

    assert canvas.size == CANVAS
    for point in [(0, 0), (1199, 0), (0, 629), (1199, 629), (600, 315)]:
        assert close_to(canvas.getpixel(point), (10, 200, 30))


def test_paint_cover_centres_and_crops():
    # Wide photo: left half red, right half blue. Cover crops the sides evenly.
    photo = Image.new("RGB", (400, 100), (255, 0, 0))
    photo.paste((0, 0, 255), (200, 0, 400, 100))

    canvas = paint_cover(blank_canvas(), photo)

    assert close_to(canvas.getpixel((10, 315)), (255, 0, 0))
    assert close_to(canvas.getpixel((1190, 315)), (0, 0, 255))


# --- gradient and overlays ------------------------------------------------

def test_gradient_corners_match_first_and_last_stop():
    stops = [(26, 26, 46), (22, 33, 62), (15, 52, 96)]
    canvas = paint_gradient(blank_canvas(), stops)

    assert close_to(canvas.getpixel((0, 0)), stops[0], tolerance=1)
    assert close_to(canvas.getpixel((1199, 629)), stops[-1], tolerance=1)


def test_gradient_middle_hits_middle_stop():
    stops = [(0, 0, 0), (128, 128, 128), (255, 255, 255)]
    canvas = paint_gradient(blank_canvas(), stops)
    assert close_to(canvas.getpixel((600, 315)), (128, 128, 128), tolerance=3)


def test_two_stop_gradient():
    canvas = paint_gradient(blank_canvas(), [(255, 0, 0), (0, 0, 255)])
    assert close_to(canvas.getpixel((0, 0)), (255, 0, 0), tolerance=1)
    assert close_to(canvas.getpixel((1199, 629)), (0, 0, 255), tolerance=1)


def test_gradient_is_opaque():
    canvas = paint_gradient(Image.new("RGBA", CANVAS, (0, 0, 0, 0)), [(1, 2, 3), (4, 5, 6)])
    assert canvas.getextrema()[3] == (255, 255)


def test_wash_blends_color():
    canvas = Image.new("RGBA", CANVAS, (0, 0, 0, 255))
    paint_wash(canvas, (200, 100, 0), 0.5)
    assert close_to(canvas.getpixel((10, 10)), (100, 50, 0))


def test_zero_opacity_wash_is_noop():
    canvas = Image.new("RGBA", CANVAS, (40, 40, 40, 255))
    paint_wash(canvas, (255, 255, 255), 0.0)
    assert canvas.getpixel((10, 10)) == (40, 40, 40, 255)


def test_depth_darkens_edges_not_middle():
    canvas = Image.new("RGBA", CANVAS, (200, 200, 200, 255))
    paint_depth(canvas, 0.5)

    top = canvas.getpixel((600, 0))[0]
    middle = canvas.getpixel((600, 315))[0]
    bottom = canvas.getpixel((600, 629))[0]

    assert middle >= 198
    assert top < middle and bottom < middle
    assert abs(top - bottom) <= 2
