"""Color value parsing and brand palette extraction."""

from __future__ import annotations

import re

from shortcode_lsp.constants import BRAND_PALETTE_SECTION, CSS_COLORS
from shortcode_lsp.models import BrandColor

from .subset import extract_mapping

# Compiled regex patterns for performance
_re_hex = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6}|[0-9a-f]{8})$", re.IGNORECASE)
_re_rgb = re.compile(r"^rgba?\((\d+),\s*(\d+),\s*(\d+)(?:,\s*([\d.]+))?\)$")
_re_palette_value = re.compile(r"^(#[0-9a-fA-F]{3,8}|[\w-]+)$")

RGBA = tuple[int, int, int, float]


def parse_color_value(value: str) -> RGBA | None:
    """Parse a hex, ``rgb()``/``rgba()`` or named CSS color into an RGBA tuple."""
    clean = value.strip().strip("\"'").lower()

    if clean in CSS_COLORS:
        red, green, blue = CSS_COLORS[clean]
        return (red, green, blue, 1.0)

    match = _re_hex.match(clean)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(char * 2 for char in digits)
        red, green, blue = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
        alpha = int(digits[6:8], 16) / 255 if len(digits) == 8 else 1.0
        return (red, green, blue, alpha)

    match = _re_rgb.match(clean)
    if match:
        red, green, blue = (int(match.group(i)) for i in (1, 2, 3))
        alpha = float(match.group(4)) if match.group(4) else 1.0
        return (red, green, blue, alpha)

    return None


def parse_color(value: str, brand_colors: list[BrandColor] | None = None) -> RGBA | None:
    """Parse a color, resolving brand palette names first (case-sensitive)."""
    clean = value.strip().strip("\"'")
    for brand_color in brand_colors or []:
        if brand_color.name == clean:
            return parse_color_value(brand_color.value)
    return parse_color_value(clean)


def color_to_hex(color: RGBA) -> str:
    red, green, blue, alpha = color
    hex_value = f"#{red:02x}{green:02x}{blue:02x}"
    if alpha < 1:
        hex_value += f"{round(alpha * 255):02x}"
    return hex_value


def find_named_color(color: RGBA) -> str | None:
    """Find the first CSS color name with the same RGB components."""
    for name, rgb in CSS_COLORS.items():
        if rgb == color[:3]:
            return name
    return None


def find_brand_color_name(color: RGBA, brand_colors: list[BrandColor]) -> str | None:
    for brand_color in brand_colors:
        parsed = parse_color_value(brand_color.value)
        if parsed is not None and parsed[:3] == color[:3]:
            return brand_color.name
    return None


def parse_brand_colors(content: str) -> list[BrandColor]:
    """Read the ``color.palette`` entries of a ``_brand.yml`` document."""
    return [
        BrandColor(name=name, value=value)
        for name, value in extract_mapping(content, BRAND_PALETTE_SECTION)
        if _re_palette_value.match(value)
    ]
