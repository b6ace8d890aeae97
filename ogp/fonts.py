"""Font registration for OGP rendering."""
from dataclasses import dataclass, field
from typing import Dict, Optional

from PIL import ImageFont

from utils.logger import get_logger

logger = get_logger("fonts")


@dataclass
class FontSet:
    """Result of font registration.

    ``available`` is False when the preferred font could not be loaded and
    Pillow's bundled default font is used instead.
    """
    path: Optional[str]
    available: bool
    _cache: Dict[int, ImageFont.FreeTypeFont] = field(default_factory=dict, repr=False)

    def get(self, size: int):
        if size not in self._cache:
            if self.available:
                self._cache[size] = ImageFont.truetype(self.path, size)
            else:
                self._cache[size] = ImageFont.load_default(size=size)
        return self._cache[size]


def load_font_set(path: str) -> FontSet:
    """Register the preferred font, falling back to the default font on failure."""
    try:
        ImageFont.truetype(path, 10)
        logger.info(f"Registered font: {path}")
        return FontSet(path=path, available=True)
    except OSError as e:
        logger.warning(f"Failed to register custom font {path}: {e}")
        logger.warning(
            "Using the default font instead. Glyphs missing from it (e.g. Japanese text, "
            "U+2026) may not render correctly in OGP images."
        )
        return FontSet(path=None, available=False)
