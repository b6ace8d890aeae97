"""
Configuration module - loads all settings from environment variables.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
try:
    load_dotenv()
except Exception as e:
    print(f"Warning: Failed to load .env file: {e}")
    print("Continuing with environment variables or defaults...")


ROUTE_VARIANTS = ("themes", "api", "both")


class Config:
    """Application configuration loaded from environment variables."""

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Safely parse integer environment variable."""
        try:
            return int(os.getenv(key, str(default)))
        except (ValueError, TypeError) as e:
            print(f"Warning: Invalid integer for {key}, using default {default}: {e}")
            return default

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Safely parse boolean environment variable."""
        try:
            value = os.getenv(key, str(default)).lower()
            return value in ("true", "1", "yes", "on")
        except Exception as e:
            print(f"Warning: Invalid boolean for {key}, using default {default}: {e}")
            return default

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = _get_int.__func__("PORT", 3001)
    CORS_ORIGIN: str = os.getenv("CORS_ORIGIN", "*")

    # Generated image cache (flat files, served statically)
    GENERATED_IMAGES_DIR: str = os.getenv("GENERATED_IMAGES_DIR", "generated_ogp_images")
    GENERATED_IMAGES_URL_PREFIX: str = os.getenv("GENERATED_IMAGES_URL_PREFIX", "/generated_images")

    # Rendering
    OGP_FONT_PATH: str = os.getenv("OGP_FONT_PATH", "/usr/share/fonts/custom/NotoSansJP-Regular.ttf")

    # Routing: "themes" -> /api/themes/{theme_id}/ogp, "api" -> /api, "both" -> both
    OGP_ROUTE_VARIANT: str = os.getenv("OGP_ROUTE_VARIANT", "themes").lower()

    # Concurrent identical requests share a single render when enabled
    OGP_DEDUPE_INFLIGHT: bool = _get_bool.__func__("OGP_DEDUPE_INFLIGHT", True)

    @classmethod
    def validate(cls) -> None:
        """Validate configuration."""
        if cls.OGP_ROUTE_VARIANT not in ROUTE_VARIANTS:
            raise ValueError(
                f"OGP_ROUTE_VARIANT must be one of {', '.join(ROUTE_VARIANTS)}, got '{cls.OGP_ROUTE_VARIANT}'"
            )
        if not 0 < cls.PORT < 65536:
            raise ValueError(f"PORT must be between 1 and 65535, got {cls.PORT}")
        if not cls.GENERATED_IMAGES_URL_PREFIX.startswith("/"):
            raise ValueError("GENERATED_IMAGES_URL_PREFIX must start with '/'")

    @classmethod
    def get_cors_origins(cls) -> list:
        """Get the list of allowed CORS origins."""
        return [origin.strip() for origin in cls.CORS_ORIGIN.split(",") if origin.strip()]


# Initialize directories
try:
    os.makedirs(Config.GENERATED_IMAGES_DIR, exist_ok=True)
except Exception as e:
    print(f"Warning: Failed to create directories: {e}")
    print("OGP image generation may not work correctly without the image directory.")
