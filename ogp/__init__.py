"""OGP image generation module."""
from ogp.fonts import FontSet, load_font_set
from ogp.models import DirectoryItem, OgpImageRequest, OgpImageResponse
from ogp.renderer import render_ogp_image
from ogp.services import (
    CacheCheckError,
    ImageWriteError,
    OgpError,
    OgpImageResult,
    compute_cache_key,
    generate_ogp_image
)

__all__ = [
    "FontSet",
    "load_font_set",
    "DirectoryItem",
    "OgpImageRequest",
    "OgpImageResponse",
    "render_ogp_image",
    "CacheCheckError",
    "ImageWriteError",
    "OgpError",
    "OgpImageResult",
    "compute_cache_key",
    "generate_ogp_image"
]
