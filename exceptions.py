"""
Error types raised by the featured image pipeline.
"""


class FeaturedImageError(Exception):
    """Base class for generation failures."""


class ValidationError(FeaturedImageError):
    """Request rejected before any drawing starts (missing text, bad color, ...)."""


class BackgroundDecodeError(FeaturedImageError):
    """Uploaded background bytes could not be decoded into a bitmap."""
