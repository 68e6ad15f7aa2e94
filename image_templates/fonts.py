"""
Font resolution for the featured image templates.
Google Fonts are downloaded once and cached; system fonts are the fallback.
"""

import logging
import os
import re
import tempfile
from io import BytesIO
from pathlib import Path

import requests
from PIL import ImageFont

from config import Config

logger = logging.getLogger(__name__)

# Platform fonts keyed by (kind, style)
WINDOWS_FONTS = {
    ('sans', 'bold'): 'arialbd.ttf',
    ('sans', 'semibold'): 'arialbd.ttf',
    ('sans', 'normal'): 'arial.ttf',
    ('serif', 'bold'): 'georgiab.ttf',
    ('serif', 'normal'): 'georgia.ttf',
}

LINUX_FONTS = {
    ('sans', 'bold'): '/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf',
    ('sans', 'semibold'): '/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf',
    ('sans', 'normal'): '/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf',
    ('serif', 'bold'): '/usr/share/fonts/truetype/dejavu/DejaVuSerif-Bold.ttf',
    ('serif', 'normal'): '/usr/share/fonts/truetype/dejavu/DejaVuSerif.ttf',
}

STYLE_WEIGHTS = {'bold': '700', 'semibold': '600', 'normal': '400'}


class FontLoader:
    """Loads and caches Pillow fonts by family, style and size."""

    def __init__(self, google_fonts=None, cache_dir=None):
        self.google_fonts = Config.GOOGLE_FONTS if google_fonts is None else google_fonts
        self.cache_dir = Path(cache_dir or Config.FONT_CACHE_DIR)
        self._fonts = {}

    def download_google_font(self, font_family, style):
        """Download Google Font from CDN and cache it locally."""
        if not font_family or not self.google_fonts:
            return None

        weight = STYLE_WEIGHTS.get(style, '400')
        font_path = self.cache_dir / f"{font_family.replace(' ', '')}-{weight}.ttf"

        if font_path.exists():
            return str(font_path)

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            font_name_encoded = font_family.replace(' ', '+')
            api_url = f"https://fonts.googleapis.com/css2?family={font_name_encoded}:wght@{weight}&display=swap"

            # An old User-Agent makes the CSS API answer with truetype files
            headers = {'User-Agent': 'Mozilla/5.0 (Windows NT 6.1)'}
            response = requests.get(api_url, headers=headers, timeout=10)
            response.raise_for_status()

            font_urls = re.findall(r'src:\s*url\(([^)]+)\)\s+format\([\'"]truetype[\'"]\)', response.text)
            if not font_urls:
                font_urls = re.findall(r'src:\s*url\(([^)]+)\)', response.text)

            if not font_urls:
                logger.warning(f"No font URL found in CSS for {font_family}")
                return None

            font_response = requests.get(font_urls[0].strip(), timeout=15)
            font_response.raise_for_status()

            # reject anything FreeType cannot open before it reaches the cache
            ImageFont.truetype(BytesIO(font_response.content), 12)

            # write to a temp file, then rename into place
            fd, tmp_path = tempfile.mkstemp(suffix='.part', dir=self.cache_dir)
            try:
                with os.fdopen(fd, 'wb') as f:
                    f.write(font_response.content)
                os.replace(tmp_path, font_path)
            except OSError:
                Path(tmp_path).unlink(missing_ok=True)
                raise

            logger.info(f"Downloaded and cached Google Font: {font_family} ({style})")
            return str(font_path)

        except (requests.RequestException, OSError) as e:
            logger.warning(f"Could not download Google Font {font_family} ({style}): {e}")

        return None

    def load_system_font(self, kind, style, size):
        """Load platform font with fallback to Pillow's scalable default."""
        for table in (WINDOWS_FONTS, LINUX_FONTS):
            font_file = table.get((kind, style)) or table[(kind, 'normal')]
            try:
                return ImageFont.truetype(font_file, size)
            except OSError:
                continue

        logger.warning(f"Could not load {kind} {style} font, using default")
        return ImageFont.load_default(size=size)

    def get(self, family, size, style='bold', kind='sans'):
        """Return a font for (family, style, size), loading it on first use."""
        key = (family, style, kind, size)
        font = self._fonts.get(key)
        if font is not None:
            return font

        font_path = self.download_google_font(family, style)
        if font_path:
            try:
                font = ImageFont.truetype(font_path, size)
            except OSError as e:
                logger.warning(f"Could not load Google Font {family}, removing cached file: {e}")
                Path(font_path).unlink(missing_ok=True)

        if font is None:
            font = self.load_system_font(kind, style, size)

        self._fonts[key] = font
        return font
