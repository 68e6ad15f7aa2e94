"""
Configuration loader - reads from .env file and provides image style defaults
"""
import os
from typing import Dict
from dotenv import load_dotenv
from PIL import ImageColor

# Load environment variables from .env file
load_dotenv()

# Load from environment variables
TELEGRAM_BOT_TOKEN = os.getenv('TELEGRAM_BOT_TOKEN', 'your_bot_token_here')
GENERATOR_WORKERS = int(os.getenv('GENERATOR_WORKERS', '2'))

# Output surface is fixed for blog headers
IMAGE_WIDTH = 1200
IMAGE_HEIGHT = 630


def parse_color(color_str: str, default=(0, 0, 0)) -> tuple:
    """Parse a color from env (e.g., '255,0,128' or '#ff0080') to an RGB(A) tuple"""
    if not color_str:
        return default
    color_str = color_str.strip()
    try:
        if ',' in color_str and not color_str.lower().startswith(('rgb', 'hsl', 'hsv')):
            return tuple(int(p.strip()) for p in color_str.split(','))
        return ImageColor.getrgb(color_str)
    except ValueError:
        return default


def parse_opacity(value: str, default: float) -> float:
    """Parse an opacity scalar from env and clamp it to [0, 1]"""
    try:
        opacity = float(value)
    except (TypeError, ValueError):
        return default
    return min(1.0, max(0.0, opacity))


# Image Generator Configuration Class
class Config:
    """Default style parameters for the featured image generator"""

    # Background gradient stops
    BG_PRIMARY = parse_color(os.getenv('BG_PRIMARY', '#1a1a2e'))
    BG_SECONDARY = parse_color(os.getenv('BG_SECONDARY', '#16213e'))
    BG_TERTIARY = parse_color(os.getenv('BG_TERTIARY', '#0f3460'))

    # Overlay (tinted variant)
    OVERLAY_COLOR = parse_color(os.getenv('OVERLAY_COLOR', '#0f172a'))
    OVERLAY_OPACITY = parse_opacity(os.getenv('OVERLAY_OPACITY'), 0.45)
    DEPTH_OPACITY = parse_opacity(os.getenv('DEPTH_OPACITY'), 0.5)

    # Text and accents
    ACCENT_COLOR = parse_color(os.getenv('ACCENT_COLOR', '99,102,241'))
    TEXT_COLOR = parse_color(os.getenv('TEXT_COLOR', '#ffffff'))

    # Banner variant
    BANNER_COLOR = parse_color(os.getenv('BANNER_COLOR', '#000000'))
    BANNER_OPACITY = parse_opacity(os.getenv('BANNER_OPACITY'), 0.6)
    CATEGORY_COLOR = parse_color(os.getenv('CATEGORY_COLOR', '#fbbf24'))
    TITLE_COLOR = parse_color(os.getenv('TITLE_COLOR', '#ffffff'))
    BANNER_HEIGHT = 240
    BANNER_PADDING = 60

    # Font Families (Google Fonts names; empty disables the download)
    FONT_HEADLINE_FAMILY = os.getenv('FONT_HEADLINE_FAMILY', 'Inter')
    FONT_TITLE_FAMILY = os.getenv('FONT_TITLE_FAMILY', 'Playfair Display')
    FONT_CATEGORY_FAMILY = os.getenv('FONT_CATEGORY_FAMILY', 'Inter')

    # Font Sizes (headline size is picked from text length)
    FONT_TITLE_SIZE = int(os.getenv('FONT_TITLE_SIZE', '48'))
    FONT_CATEGORY_SIZE = int(os.getenv('FONT_CATEGORY_SIZE', '22'))

    GOOGLE_FONTS = os.getenv('GOOGLE_FONTS', 'YES').upper() == 'YES'
    FONT_CACHE_DIR = os.getenv('FONT_CACHE_DIR', os.path.join(os.path.dirname(os.path.abspath(__file__)), 'fonts_cache'))

    # Logging
    LOG_FILE = os.getenv('LOG_FILE', 'featured_image.log')
    LOG_DEBUG_FILE = os.getenv('LOG_DEBUG_FILE', 'featured_image_debug.log')
    LOG_TIMEZONE = os.getenv('LOG_TIMEZONE', 'UTC')


def get_config() -> Dict:
    """Get complete configuration"""
    return {
        'telegram_bot_token': TELEGRAM_BOT_TOKEN,
        'generator_workers': GENERATOR_WORKERS,
        'google_fonts': Config.GOOGLE_FONTS,
        'image_settings': {
            'width': IMAGE_WIDTH,
            'height': IMAGE_HEIGHT
        }
    }


def validate_config() -> bool:
    """Validate configuration"""
    if not TELEGRAM_BOT_TOKEN or TELEGRAM_BOT_TOKEN == 'your_bot_token_here':
        print("❌ TELEGRAM_BOT_TOKEN not set in .env file")
        return False

    return True
