"""
Value types passed through the featured image pipeline.
"""

import base64
import time
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from io import BytesIO
from typing import List, Optional, Tuple

from PIL import ImageColor

from config import Config
from exceptions import ValidationError

RGB = Tuple[int, int, int]


class Variant(str, Enum):
    """Which set of layers the renderer paints."""
    CLASSIC = "classic"
    BANNER = "banner"
    TINTED = "tinted"

    @classmethod
    def parse(cls, value) -> "Variant":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(v.value for v in cls)
            raise ValidationError(f"Unknown variant '{value}'. Choose one of: {names}")


def to_rgb(value) -> RGB:
    """Resolve a color given as a tuple, 'r,g,b' or any Pillow color string."""
    if isinstance(value, (tuple, list)):
        if len(value) < 3:
            raise ValidationError(f"Invalid color: {value!r}")
        return tuple(max(0, min(255, int(c))) for c in value[:3])
    text = str(value).strip()
    try:
        if ',' in text and not text.lower().startswith(('rgb', 'hsl', 'hsv')):
            parts = [int(p.strip()) for p in text.split(',')]
            return to_rgb(parts)
        return ImageColor.getrgb(text)[:3]
    except ValueError:
        raise ValidationError(f"Invalid color: {value!r}")


def clamp_opacity(value) -> float:
    try:
        opacity = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid opacity: {value!r}")
    return min(1.0, max(0.0, opacity))


COLOR_FIELDS = (
    'bg_primary', 'bg_secondary', 'bg_tertiary', 'overlay_color', 'accent_color',
    'text_color', 'banner_color', 'category_color', 'title_color',
)
OPACITY_FIELDS = ('overlay_opacity', 'depth_opacity', 'banner_opacity')


@dataclass(frozen=True)
class StyleConfig:
    """Colors and opacities for one render. Colors are normalized to RGB tuples."""
    bg_primary: RGB = Config.BG_PRIMARY
    bg_secondary: RGB = Config.BG_SECONDARY
    bg_tertiary: Optional[RGB] = Config.BG_TERTIARY
    overlay_color: RGB = Config.OVERLAY_COLOR
    overlay_opacity: float = Config.OVERLAY_OPACITY
    depth_opacity: float = Config.DEPTH_OPACITY
    accent_color: RGB = Config.ACCENT_COLOR
    text_color: RGB = Config.TEXT_COLOR
    banner_color: RGB = Config.BANNER_COLOR
    banner_opacity: float = Config.BANNER_OPACITY
    category_color: RGB = Config.CATEGORY_COLOR
    title_color: RGB = Config.TITLE_COLOR
    banner_height: int = Config.BANNER_HEIGHT
    banner_padding: int = Config.BANNER_PADDING
    accents: bool = True

    def __post_init__(self):
        for name in COLOR_FIELDS:
            value = getattr(self, name)
            if name == 'bg_tertiary' and (value is None or str(value).strip().lower() in ('', 'none')):
                object.__setattr__(self, name, None)
                continue
            object.__setattr__(self, name, to_rgb(value))
        for name in OPACITY_FIELDS:
            object.__setattr__(self, name, clamp_opacity(getattr(self, name)))
        for name in ('banner_height', 'banner_padding'):
            try:
                object.__setattr__(self, name, max(0, int(getattr(self, name))))
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid {name}: {getattr(self, name)!r}")

    @property
    def gradient_stops(self) -> List[RGB]:
        stops = [self.bg_primary, self.bg_secondary]
        if self.bg_tertiary is not None:
            stops.append(self.bg_tertiary)
        return stops

    def with_overrides(self, **overrides) -> "StyleConfig":
        """Return a copy with some fields replaced; values are validated like the constructor."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValidationError(f"Unknown style field: {', '.join(sorted(unknown))}")
        if 'accents' in overrides and isinstance(overrides['accents'], str):
            overrides['accents'] = overrides['accents'].strip().lower() in ('1', 'yes', 'true', 'on')
        return replace(self, **overrides)

    def describe(self) -> List[Tuple[str, str]]:
        rows = []
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in COLOR_FIELDS and value is not None:
                value = '#%02x%02x%02x' % value
            rows.append((f.name, str(value)))
        return rows


@dataclass(frozen=True)
class GenerationRequest:
    """Everything one render needs; built fresh from session state per generation."""
    text: str
    category: str = ""
    background: Optional[bytes] = None
    variant: Variant = Variant.CLASSIC
    style: StyleConfig = field(default_factory=StyleConfig)

    def validate(self):
        if not self.text or not self.text.strip():
            raise ValidationError("Please enter some text")
        Variant.parse(self.variant)


@dataclass(frozen=True)
class TextLayout:
    lines: List[str]
    font_size: int
    line_height: float
    first_baseline: float


@dataclass(frozen=True)
class RenderedImage:
    """Serialized PNG output of one successful generation."""
    data: bytes
    width: int
    height: int
    layout: Optional[TextLayout] = None
    content_type: str = "image/png"
    created_at: int = field(default_factory=lambda: int(time.time() * 1000))

    def data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode('ascii')
        return f"data:{self.content_type};base64,{encoded}"

    def filename(self) -> str:
        return f"featured-image-{self.created_at}.png"

    def to_bytesio(self) -> BytesIO:
        output = BytesIO(self.data)
        output.name = self.filename()
        output.seek(0)
        return output
