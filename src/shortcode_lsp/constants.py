"""Constants for shortcode-lsp."""

from __future__ import annotations

# Shortcode delimiters
SHORTCODE_OPEN = "{{<"
SHORTCODE_CLOSE = ">}}"

# Span delimiters
SPAN_OPEN = "{"
SPAN_CLOSE = "}"

# Field read from list items when a spec does not name one
DEFAULT_VALUE_PATH = "shortname"

# Frontmatter key listing the Quarto filters enabled for a document
FILTERS_KEY = "filters"

# Companion file holding the brand palette
BRAND_FILE = "_brand.yml"
BRAND_PALETTE_SECTION = "color.palette"

# Cache capacities
CACHE_MAX_SPEC_ENTRIES = 50
CACHE_MAX_FILE_DATA_ENTRIES = 20
CACHE_MAX_FILTER_ENTRIES = 100
CACHE_MAX_BRAND_ENTRIES = 50
CACHE_MAX_EXTRACTION_ENTRIES = 100

# Host command re-triggering completion after an insertion
TRIGGER_SUGGEST_COMMAND = "editor.action.triggerSuggest"

# Characters after which clients should ask for completions
TRIGGER_CHARACTERS = [" ", "=", "<", "/", "-", ".", '"']

# Environment variable with extra spec directories (os.pathsep separated)
SPEC_PATH_ENV = "SHORTCODE_LSP_SPEC_PATH"

# Named colors suggested for color attributes
CSS_COLOR_NAMES = [
    "red",
    "blue",
    "green",
    "yellow",
    "orange",
    "purple",
    "pink",
    "black",
    "white",
    "gray",
    "cyan",
    "magenta",
]

# Named CSS colors mapped to RGB values
CSS_COLORS: dict[str, tuple[int, int, int]] = {
    "red": (255, 0, 0),
    "blue": (0, 0, 255),
    "green": (0, 128, 0),
    "yellow": (255, 255, 0),
    "orange": (255, 165, 0),
    "purple": (128, 0, 128),
    "pink": (255, 192, 203),
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "cyan": (0, 255, 255),
    "magenta": (255, 0, 255),
    "lime": (0, 255, 0),
    "maroon": (128, 0, 0),
    "navy": (0, 0, 128),
    "olive": (128, 128, 0),
    "teal": (0, 128, 128),
    "aqua": (0, 255, 255),
    "fuchsia": (255, 0, 255),
    "silver": (192, 192, 192),
    "coral": (255, 127, 80),
    "crimson": (220, 20, 60),
    "gold": (255, 215, 0),
    "indigo": (75, 0, 130),
    "khaki": (240, 230, 140),
    "lavender": (230, 230, 250),
    "salmon": (250, 128, 114),
    "tomato": (255, 99, 71),
    "turquoise": (64, 224, 208),
    "violet": (238, 130, 238),
}
