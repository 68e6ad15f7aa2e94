"""
Per-user generation state kept outside the drawing pipeline.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

from exceptions import BackgroundDecodeError, ValidationError
from image_templates.featured_image import FeaturedImageGenerator
from logging_config import log_exception
from models import GenerationRequest, RenderedImage, StyleConfig, Variant
from text_utils import clean_text

logger = logging.getLogger(__name__)

MSG_EMPTY_TEXT = "Please enter some text"
MSG_FAILED = "Failed to generate image"
MSG_GENERATED = "Image generated successfully!"
MSG_UPLOADED = "Background image uploaded!"
MSG_DOWNLOADED = "Image downloaded!"
MSG_NO_IMAGE = "Generate an image first"
MSG_BUSY = "Already generating, please wait"


@dataclass(frozen=True)
class Notice:
    """User-facing notification; level is 'success', 'error' or 'warning'."""
    level: str
    message: str

    @property
    def ok(self) -> bool:
        return self.level == 'success'


class ImageSession:
    """Current text, background, style and last good image for one user."""

    def __init__(self, generator: FeaturedImageGenerator):
        self.generator = generator
        self.text = ""
        self.category = ""
        self.background: Optional[bytes] = None
        self.variant = Variant.CLASSIC
        self.style = StyleConfig()
        self.current: Optional[RenderedImage] = None
        self._lock = threading.Lock()

    @property
    def is_generating(self) -> bool:
        return self._lock.locked()

    def set_text(self, text: str):
        """
        Store the headline with whitespace runs collapsed. The font size tier
        is picked from this cleaned text, so padding or pasted line breaks do
        not push a short headline into a smaller tier.
        """
        self.text = clean_text(text)

    def set_category(self, category: str):
        self.category = clean_text(category)

    def set_variant(self, name) -> Variant:
        self.variant = Variant.parse(name)
        return self.variant

    def set_style(self, name: str, value) -> StyleConfig:
        self.style = self.style.with_overrides(**{name: value})
        return self.style

    def reset_style(self):
        self.style = StyleConfig()

    def upload_background(self, data: bytes) -> Notice:
        self.background = bytes(data)
        logger.info(f"Upload stored: background {len(self.background)} bytes")
        return Notice('success', MSG_UPLOADED)

    def clear_background(self):
        self.background = None

    def build_request(self) -> GenerationRequest:
        return GenerationRequest(
            text=self.text,
            category=self.category,
            background=self.background,
            variant=self.variant,
            style=self.style,
        )

    def generate(self) -> Notice:
        """
        Render from the current state. A failure of any kind leaves the
        previously generated image in place.
        """
        if not self._lock.acquire(blocking=False):
            return Notice('warning', MSG_BUSY)
        try:
            request = self.build_request()
            try:
                request.validate()
            except ValidationError as e:
                logger.warning(f"Validation failed: {e}")
                return Notice('error', str(e) or MSG_EMPTY_TEXT)

            try:
                rendered = self.generator.generate_featured_image(request)
            except BackgroundDecodeError as e:
                logger.warning(f"Background decode failed: {e}")
                return Notice('error', MSG_FAILED)
            except Exception as e:
                log_exception(e, "Error generating image")
                return Notice('error', MSG_FAILED)

            self.current = rendered
            logger.info(f"✅ Generated: {rendered.filename()} ({len(rendered.data) // 1024} KB)")
            return Notice('success', MSG_GENERATED)
        finally:
            self._lock.release()

    def download(self) -> Tuple[Notice, Optional[RenderedImage]]:
        if self.current is None:
            return Notice('warning', MSG_NO_IMAGE), None
        logger.info(f"Download served: {self.current.filename()}")
        return Notice('success', MSG_DOWNLOADED), self.current
