"""OGP image generation routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from common.error_messages import ErrorCode, error_body
from config import Config
from ogp.fonts import FontSet
from ogp.models import OgpImageRequest, OgpImageResponse
from ogp.services import generate_ogp_image
from utils.logger import get_logger

logger = get_logger("routes")
router = APIRouter(tags=["ogp"])

THEMES_PREFIX = "/api/themes/{theme_id}/ogp"
API_PREFIX = "/api"


def get_fonts(request: Request) -> FontSet:
    """Font registration result made at application startup."""
    return request.app.state.fonts


def route_prefixes(variant: str) -> list:
    """URL prefixes the OGP router is mounted under for a deployment variant."""
    if variant == "themes":
        return [THEMES_PREFIX]
    if variant == "api":
        return [API_PREFIX]
    if variant == "both":
        return [THEMES_PREFIX, API_PREFIX]
    raise ValueError(f"Unknown OGP route variant: {variant}")


@router.post("/generate", response_model=OgpImageResponse)
def generate(request: Request, req: Optional[OgpImageRequest] = None, fonts: FontSet = Depends(get_fonts)):
    """
    Generate (or fetch from cache) the OGP image for a piece of content.

    Accepts:
      { title?, description?, content?, backgroundColor?, contentType?, directoryContent? }

    Returns:
      { imageUrl: "/generated_images/ogp_image_<sha256>.png" }
    """
    req = req or OgpImageRequest()
    theme_id = request.path_params.get("theme_id")
    try:
        result = generate_ogp_image(
            req,
            images_dir=Config.GENERATED_IMAGES_DIR,
            url_prefix=Config.GENERATED_IMAGES_URL_PREFIX,
            fonts=fonts,
            dedupe=Config.OGP_DEDUPE_INFLIGHT,
        )
    except Exception as e:
        logger.error(f"OGP image generation failed (theme: {theme_id}): {e}", exc_info=True)
        content, status_code = error_body(ErrorCode.OGP_GENERATION_FAILED)
        return JSONResponse(status_code=status_code, content=content)

    return {"imageUrl": result.image_url}
