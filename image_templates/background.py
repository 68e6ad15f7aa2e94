"""
Background layers: uploaded photo (cover fit) or diagonal gradient,
plus the optional color wash and vertical depth gradient.
"""

import logging
from io import BytesIO
from typing import Sequence, Tuple

from PIL import Image, ImageChops, ImageOps

from exceptions import BackgroundDecodeError

logger = logging.getLogger(__name__)


def decode_background(data: bytes) -> Image.Image:
    """Fully decode uploaded bytes into an RGBA bitmap or raise BackgroundDecodeError."""
    if not data:
        raise BackgroundDecodeError("Background image is empty")
    try:
        img = Image.open(BytesIO(data))
        img.load()
        img = ImageOps.exif_transpose(img)
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise BackgroundDecodeError(f"Could not decode background image: {e}") from e
    logger.debug(f"Decoded background {img.format} {img.size} {img.mode}")
    return img.convert('RGBA')


def cover_source_box(src_size: Tuple[int, int], canvas_size: Tuple[int, int]):
    """
    Region of the source that stays visible when it is scaled to cover the
    canvas and centred.

    Returns (left, top, right, bottom) in source pixels; the box has the
    canvas aspect ratio and overflow is cropped evenly from both sides.
    """
    src_w, src_h = src_size
    width, height = canvas_size
    scale = max(width / src_w, height / src_h)
    box_w = min(src_w, width / scale)
    box_h = min(src_h, height / scale)
    left = (src_w - box_w) / 2
    top = (src_h - box_h) / 2
    return (left, top, left + box_w, top + box_h)


def paint_cover(canvas: Image.Image, photo: Image.Image) -> Image.Image:
    """Draw photo scaled to cover the canvas, centred, cropping overflow."""
    box = cover_source_box(photo.size, canvas.size)
    # only the visible region is resampled, straight to canvas size
    visible = photo.convert('RGBA').resize(canvas.size, Image.Resampling.LANCZOS, box=box)
    canvas.alpha_composite(visible)
    return canvas


def _gradient_lut(stops: Sequence[Tuple[int, int, int]], channel: int):
    """256-entry lookup mapping gradient position to one channel value."""
    segments = len(stops) - 1
    lut = []
    for i in range(256):
        t = i / 255
        index = min(int(t * segments), segments - 1)
        local = t * segments - index
        start, end = stops[index][channel], stops[index + 1][channel]
        lut.append(int(round(start + (end - start) * local)))
    return lut


def paint_gradient(canvas: Image.Image, stops: Sequence[Tuple[int, int, int]]) -> Image.Image:
    """
    Fill the canvas with a linear gradient from (0, 0) to (width, height).

    Stops are evenly spaced; the top-left pixel gets the first stop and the
    bottom-right pixel the last.
    """
    if len(stops) < 2:
        stops = list(stops) * 2
    width, height = canvas.size

    # Position along the diagonal is x*W + y*H, normalised so the far corner is 1
    span = (width - 1) * width + (height - 1) * height or 1
    ramp_x = Image.new('L', (width, 1))
    ramp_x.putdata([round(255 * x * width / span) for x in range(width)])
    ramp_y = Image.new('L', (1, height))
    ramp_y.putdata([round(255 * y * height / span) for y in range(height)])
    position = ImageChops.add(
        ramp_x.resize((width, height), Image.Resampling.NEAREST),
        ramp_y.resize((width, height), Image.Resampling.NEAREST),
    )

    bands = [position.point(_gradient_lut(stops, c)) for c in range(3)]
    gradient = Image.merge('RGB', bands).convert('RGBA')
    canvas.paste(gradient, (0, 0))
    return canvas


def paint_wash(canvas: Image.Image, color: Tuple[int, int, int], opacity: float) -> Image.Image:
    """Flat semi-transparent color over the whole canvas."""
    alpha = int(round(255 * opacity))
    if alpha:
        canvas.alpha_composite(Image.new('RGBA', canvas.size, tuple(color) + (alpha,)))
    return canvas


def paint_depth(canvas: Image.Image, opacity: float) -> Image.Image:
    """Vertical black gradient: strongest at top and bottom edges, clear in the middle."""
    width, height = canvas.size
    peak = 255 * opacity
    middle = (height - 1) / 2 or 1
    column = Image.new('L', (1, height))
    column.putdata([int(round(peak * abs(y - middle) / middle)) for y in range(height)])

    shade = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
    shade.putalpha(column.resize((width, height), Image.Resampling.NEAREST))
    canvas.alpha_composite(shade)
    return canvas
