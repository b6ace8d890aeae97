"""
FastAPI application for OGP (Open Graph Protocol) image generation.

Features:
- POST .../generate renders a 1200x628 preview image for a piece of content
- Generated images are cached by a hash of the request and served statically
- Health check endpoint
"""
import time
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse

from config import Config
from ogp.fonts import load_font_set
from ogp.routes import router as ogp_router, route_prefixes
from utils.logger import get_logger
from common.error_messages import ErrorCode, error_body

logger = get_logger("main")


def create_app() -> FastAPI:
    """Build the application from the current configuration."""
    Config.validate()

    app = FastAPI(
        title="OGP Image API",
        description="Generates and caches Open Graph preview images for repository content.",
        version="1.0.0"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.get_cors_origins(),
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed request bodies get a 400 with the uniform error shape."""
        logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
        content, status_code = error_body(ErrorCode.INVALID_PARAMETER)
        return JSONResponse(status_code=status_code, content=content)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions globally."""
        if isinstance(exc, HTTPException):
            return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        content, status_code = error_body(ErrorCode.UNKNOWN_ERROR)
        return JSONResponse(status_code=status_code, content=content)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all HTTP requests with timing."""
        start_time = time.time()
        full_url = str(request.url)
        client = request.client.host if request.client else "unknown"
        logger.info(f"→ {request.method} {full_url} - Client: {client}")
        try:
            response = await call_next(request)
        except Exception as e:
            process_time = (time.time() - start_time) * 1000
            logger.error(f"← {request.method} {full_url} - Error: {str(e)} - Time: {process_time:.2f}ms")
            raise
        process_time = (time.time() - start_time) * 1000
        logger.info(f"← {request.method} {full_url} - Status: {response.status_code} - Time: {process_time:.2f}ms")
        return response

    # Font registration happens once; the result is shared by all requests
    app.state.fonts = load_font_set(Config.OGP_FONT_PATH)

    app.mount(
        Config.GENERATED_IMAGES_URL_PREFIX,
        StaticFiles(directory=Config.GENERATED_IMAGES_DIR),
        name="generated_images"
    )
    logger.info(f"Generated images served at {Config.GENERATED_IMAGES_URL_PREFIX} from {Config.GENERATED_IMAGES_DIR}")

    for prefix in route_prefixes(Config.OGP_ROUTE_VARIANT):
        app.include_router(ogp_router, prefix=prefix)
        logger.info(f"OGP routes mounted at {prefix}")

    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app


app = create_app()


if __name__ == "__main__":
    logger.info(f"Starting server on {Config.HOST}:{Config.PORT}")
    uvicorn.run(
        "app:app",
        host=Config.HOST,
        port=Config.PORT,
        log_level="info"
    )
