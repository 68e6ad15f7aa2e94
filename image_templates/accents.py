"""
Decorative marks: faint diagonal dot texture and two corner accent lines.
"""

from PIL import Image, ImageDraw

DOT_GRID = 30
DOT_RADIUS = 2
DOT_COLOR = (255, 255, 255, 5)  # white at 2%
ACCENT_LINE_ALPHA = 77  # 30%
ACCENT_LINE_LENGTH = 100
ACCENT_LINE_INSET = 50


def dot_positions(width, height):
    """Grid points where (x + y) is a multiple of twice the grid step."""
    return [
        (x, y)
        for x in range(0, width, DOT_GRID)
        for y in range(0, height, DOT_GRID)
        if (x + y) % (DOT_GRID * 2) == 0
    ]


def paint_dot_pattern(canvas: Image.Image) -> Image.Image:
    overlay = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    for x, y in dot_positions(*canvas.size):
        draw.ellipse([x - DOT_RADIUS, y - DOT_RADIUS, x + DOT_RADIUS, y + DOT_RADIUS], fill=DOT_COLOR)
    canvas.alpha_composite(overlay)
    return canvas


def paint_corner_accents(canvas: Image.Image, accent) -> Image.Image:
    """Short lines near the top-left and bottom-right corners."""
    width, height = canvas.size
    color = tuple(accent[:3]) + (ACCENT_LINE_ALPHA,)
    overlay = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    inset, length = ACCENT_LINE_INSET, ACCENT_LINE_LENGTH
    draw.line([(inset, inset), (inset + length, inset)], fill=color, width=2)
    draw.line([(width - inset - length, height - inset), (width - inset, height - inset)], fill=color, width=2)

    canvas.alpha_composite(overlay)
    return canvas
