"""
Preview Script for the Featured Image Variants
Renders a sample header for each variant so the design can be checked
without running the bot.

Usage: python preview_template.py [classic|banner|tinted ...]
"""

import os
import sys

from image_templates.featured_image import FeaturedImageGenerator
from models import GenerationRequest, Variant

SAMPLE_DATA = {
    "text": "Ten Practical Lessons From Shipping Our First Python Service",
    "category": "Engineering",
}


def preview_variant(generator, variant):
    """Render one variant to preview_<variant>.png and return the path."""
    request = GenerationRequest(
        text=SAMPLE_DATA["text"],
        category=SAMPLE_DATA["category"],
        variant=variant,
    )
    rendered = generator.generate_featured_image(request)

    output_filename = f"preview_{variant.value}.png"
    with open(output_filename, 'wb') as f:
        f.write(rendered.data)
    return output_filename


def preview_templates(names):
    print("=" * 70)
    print("Featured Image Template Preview")
    print("=" * 70)

    variants = [Variant.parse(name) for name in names] if names else list(Variant)
    generator = FeaturedImageGenerator()

    for step, variant in enumerate(variants, start=1):
        print(f"\n[{step}/{len(variants)}] Rendering {variant.value}...")
        path = preview_variant(generator, variant)
        file_size = os.path.getsize(path) / 1024
        print(f"   📁 File: {path}")
        print(f"   📊 Size: {file_size:.2f} KB")

    print("\n✅ Done. Open the PNG files to preview the designs.")


if __name__ == "__main__":
    args = [a for a in sys.argv[1:] if not a.startswith('-')]
    if '--help' in sys.argv or '-h' in sys.argv:
        print(__doc__)
    else:
        preview_templates(args)
