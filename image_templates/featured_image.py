"""
Featured image generator for blog headers.
One parameterised pipeline renders the classic, banner and tinted variants
on a fixed 1200x630 canvas.
"""

import logging
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, ImageChops, ImageDraw, ImageFilter

from config import Config, IMAGE_HEIGHT, IMAGE_WIDTH
from image_templates.accents import paint_corner_accents, paint_dot_pattern
from image_templates.background import (
    decode_background,
    paint_cover,
    paint_depth,
    paint_gradient,
    paint_wash,
)
from image_templates.fonts import FontLoader
from models import GenerationRequest, RenderedImage, StyleConfig, TextLayout, Variant
from text_utils import (
    HEADLINE_MARGIN,
    baselines,
    first_baseline,
    headline_font_size,
    line_height_for,
    wrap_text,
)

logger = logging.getLogger(__name__)

SHADOW_OFFSET = 3
SHADOW_COLOR = (0, 0, 0, 128)
GLOW_BLUR = 15
GLOW_ALPHA = 0.5
STROKE_ALPHA = 0.6
CATEGORY_TRACKING = 4
CATEGORY_OFFSET = 40
TITLE_OFFSET = 80
TITLE_MIN_SIZE = 24
TITLE_SIZE_STEP = 4


class FeaturedImageGenerator:
    """Generates featured images from a GenerationRequest."""

    def __init__(self, fonts: Optional[FontLoader] = None):
        self.width = IMAGE_WIDTH
        self.height = IMAGE_HEIGHT
        self.fonts = fonts or FontLoader()

        self.font_headline_family = Config.FONT_HEADLINE_FAMILY
        self.font_title_family = Config.FONT_TITLE_FAMILY
        self.font_category_family = Config.FONT_CATEGORY_FAMILY
        self.font_title_size = Config.FONT_TITLE_SIZE
        self.font_category_size = Config.FONT_CATEGORY_SIZE

    def new_canvas(self) -> Image.Image:
        return Image.new('RGBA', (self.width, self.height), (0, 0, 0, 255))

    # -- background -------------------------------------------------------

    def paint_background(self, canvas, variant: Variant, style: StyleConfig, photo=None):
        """Photo or gradient base, then the variant's overlays."""
        if photo is not None:
            # Transparent regions of the photo fall back to the primary color
            canvas.paste(tuple(style.bg_primary) + (255,), (0, 0, self.width, self.height))
            paint_cover(canvas, photo)
        else:
            paint_gradient(canvas, style.gradient_stops)

        if variant is Variant.TINTED:
            paint_wash(canvas, style.overlay_color, style.overlay_opacity)
            paint_depth(canvas, style.depth_opacity)

        if style.accents:
            paint_dot_pattern(canvas)
            paint_corner_accents(canvas, style.accent_color)
        return canvas

    # -- centred headline -------------------------------------------------

    def layout_headline(self, text: str) -> Tuple[TextLayout, object]:
        font_size = headline_font_size(text)
        font = self.fonts.get(self.font_headline_family, font_size, 'bold', 'sans')
        lines = wrap_text(text, font, self.width - 2 * HEADLINE_MARGIN)
        line_height = line_height_for(font_size)
        layout = TextLayout(
            lines=lines,
            font_size=font_size,
            line_height=line_height,
            first_baseline=first_baseline(len(lines), line_height, self.height),
        )
        return layout, font

    def draw_headline(self, canvas, layout: TextLayout, font, style: StyleConfig):
        """Shadow, fill and glow passes for every line, in that z-order."""
        center_x = self.width / 2
        positions = baselines(len(layout.lines), layout.line_height, self.height)

        shadow = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
        shadow_draw = ImageDraw.Draw(shadow)
        for line, y in zip(layout.lines, positions):
            shadow_draw.text((center_x + SHADOW_OFFSET, y + SHADOW_OFFSET), line,
                             fill=SHADOW_COLOR, font=font, anchor='mm')
        canvas.alpha_composite(shadow)

        draw = ImageDraw.Draw(canvas)
        for line, y in zip(layout.lines, positions):
            draw.text((center_x, y), line, fill=tuple(style.text_color) + (255,), font=font, anchor='mm')

        self.draw_glow(canvas, [((center_x, y), line) for line, y in zip(layout.lines, positions)],
                       font, style.accent_color)
        return canvas

    def draw_glow(self, canvas, placed_lines, font, accent):
        """Outline-only stroke of the text, over a blurred halo of the same outline."""
        outer = Image.new('L', canvas.size, 0)
        inner = Image.new('L', canvas.size, 0)
        outer_draw = ImageDraw.Draw(outer)
        inner_draw = ImageDraw.Draw(inner)
        for position, line in placed_lines:
            outer_draw.text(position, line, fill=255, font=font, anchor='mm', stroke_width=1, stroke_fill=255)
            inner_draw.text(position, line, fill=255, font=font, anchor='mm')
        ring = ImageChops.subtract(outer, inner)

        accent = tuple(accent[:3])
        halo = Image.new('RGBA', canvas.size, accent + (0,))
        halo.putalpha(ring.point(lambda v: int(v * GLOW_ALPHA)))
        canvas.alpha_composite(halo.filter(ImageFilter.GaussianBlur(GLOW_BLUR)))

        stroke = Image.new('RGBA', canvas.size, accent + (0,))
        stroke.putalpha(ring.point(lambda v: int(v * STROKE_ALPHA)))
        canvas.alpha_composite(stroke)
        return canvas

    # -- banner -----------------------------------------------------------

    def draw_tracked_text(self, draw, xy, text, font, fill, tracking):
        """Draw text one character at a time with extra letter spacing."""
        x, y = xy
        for char in text:
            draw.text((x, y), char, fill=fill, font=font, anchor='lm')
            x += font.getlength(char) + tracking
        return x

    def layout_banner_title(self, text: str, style: StyleConfig) -> Tuple[TextLayout, object, float]:
        """
        Wrap the title and pick its size so every line lands inside the banner.

        The size steps down from the configured title size to TITLE_MIN_SIZE
        until the block fits below the title offset. If it still does not
        fit, the banner grows upward (never past the top of the canvas).
        Returns (layout, font, banner_top).
        """
        max_width = self.width - 2 * style.banner_padding
        room = style.banner_height - TITLE_OFFSET

        smallest = min(self.font_title_size, TITLE_MIN_SIZE)
        for size in range(self.font_title_size, smallest - 1, -TITLE_SIZE_STEP):
            font = self.fonts.get(self.font_title_family, size, 'bold', 'serif')
            lines = wrap_text(text, font, max_width)
            line_height = line_height_for(size)
            if len(lines) * line_height <= room:
                break

        banner_height = max(style.banner_height, TITLE_OFFSET + len(lines) * line_height)
        top = max(0, self.height - banner_height)
        if size != self.font_title_size or top != self.height - style.banner_height:
            logger.debug(f"Banner title fitted: {len(lines)} lines at {size}px, banner top {top}")

        layout = TextLayout(lines=lines, font_size=size, line_height=line_height,
                            first_baseline=top + TITLE_OFFSET + line_height / 2)
        return layout, font, top

    def draw_banner(self, canvas, request: GenerationRequest, style: StyleConfig) -> TextLayout:
        """Semi-transparent box along the bottom with category label and serif title."""
        layout, font_title, top = self.layout_banner_title(request.text, style)
        padding = style.banner_padding

        box = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
        ImageDraw.Draw(box).rectangle(
            [0, top, self.width, self.height],
            fill=tuple(style.banner_color) + (int(round(255 * style.banner_opacity)),),
        )
        canvas.alpha_composite(box)

        draw = ImageDraw.Draw(canvas)
        category = request.category.strip()
        if category:
            font_category = self.fonts.get(self.font_category_family, self.font_category_size, 'semibold', 'sans')
            self.draw_tracked_text(draw, (padding, top + CATEGORY_OFFSET), category.upper(), font_category,
                                   tuple(style.category_color) + (255,), CATEGORY_TRACKING)

        positions = [layout.first_baseline + i * layout.line_height for i in range(len(layout.lines))]

        shadow = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
        shadow_draw = ImageDraw.Draw(shadow)
        for line, y in zip(layout.lines, positions):
            shadow_draw.text((padding + SHADOW_OFFSET, y + SHADOW_OFFSET), line,
                             fill=SHADOW_COLOR, font=font_title, anchor='lm')
        canvas.alpha_composite(shadow)

        draw = ImageDraw.Draw(canvas)
        for line, y in zip(layout.lines, positions):
            draw.text((padding, y), line, fill=tuple(style.title_color) + (255,), font=font_title, anchor='lm')

        return layout

    # -- export -----------------------------------------------------------

    def export_png(self, canvas, layout: Optional[TextLayout] = None) -> RenderedImage:
        """Serialize the finished canvas as lossless PNG."""
        output = BytesIO()
        canvas.save(output, format='PNG')
        return RenderedImage(data=output.getvalue(), width=canvas.width, height=canvas.height, layout=layout)

    def generate_featured_image(self, request: GenerationRequest) -> RenderedImage:
        """
        Run the whole pipeline for one request.

        Args:
            request: text, optional category and background bytes, variant and style

        Returns:
            RenderedImage holding the PNG bytes

        Raises:
            ValidationError: required text is missing
            BackgroundDecodeError: background bytes could not be decoded
        """
        request.validate()
        variant = Variant.parse(request.variant)
        style = request.style
        logger.info(f"Generating {variant.value} image: {request.text[:45]}")

        photo = decode_background(request.background) if request.background is not None else None

        canvas = self.new_canvas()
        self.paint_background(canvas, variant, style, photo)

        if variant is Variant.BANNER:
            layout = self.draw_banner(canvas, request, style)
        else:
            layout, font = self.layout_headline(request.text)
            self.draw_headline(canvas, layout, font, style)

        return self.export_png(canvas, layout)
