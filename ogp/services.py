"""OGP image services - cache key derivation, cache lookup, rendering and persistence."""
import os
import io
import re
import json
import hashlib
import tempfile
from threading import Lock
from typing import Dict, Optional

from pydantic import BaseModel, Field

from ogp.fonts import FontSet
from ogp.models import OgpImageRequest
from ogp.renderer import render_ogp_image
from utils.logger import get_logger

logger = get_logger("services")

IMAGE_FILENAME_PREFIX = "ogp_image_"

# any surrogate left in a decoded str is unpaired
_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


class OgpError(Exception):
    """Base error for OGP image generation."""


class CacheCheckError(OgpError):
    """Checking the cache failed for a reason other than the file being absent."""


class ImageWriteError(OgpError):
    """The rendered PNG could not be persisted."""


class OgpImageResult(BaseModel):
    image_url: str
    cache_key: str
    path: str
    generated: bool = Field(False, description="True when this call rendered the image")


def canonical_request_json(request: OgpImageRequest) -> str:
    """Serialize a request for hashing.

    The field order below is part of the on-disk cache contract: changing it
    (or the separators) orphans every image already in the cache.
    """
    directory = None
    if request.directory_content is not None:
        directory = [{"name": item.name, "type": item.type} for item in request.directory_content]
    payload = {
        "title": request.title,
        "description": request.description,
        "content": request.content,
        "backgroundColor": request.background_color,
        "contentType": request.content_type,
        "directoryContent": directory,
    }
    text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return _LONE_SURROGATE.sub(lambda m: "\\u%04x" % ord(m.group()), text)


def compute_cache_key(request: OgpImageRequest) -> str:
    """SHA-256 hex digest of the canonical request serialization."""
    return hashlib.sha256(canonical_request_json(request).encode("utf-8")).hexdigest()


def image_filename(cache_key: str) -> str:
    return f"{IMAGE_FILENAME_PREFIX}{cache_key}.png"


def image_url(url_prefix: str, cache_key: str) -> str:
    return f"{url_prefix.rstrip('/')}/{image_filename(cache_key)}"


def find_cached_image(path: str) -> bool:
    """Return True if the image exists, False only if it is absent.

    Any other failure (permissions, I/O) raises CacheCheckError.
    """
    try:
        os.stat(path)
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.error(f"Error while checking for existing OGP image {path}: {e}")
        raise CacheCheckError(f"Failed to check cached image {path}") from e


def save_png(image, path: str) -> None:
    """Encode ``image`` as PNG and write it to ``path`` atomically."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    data = buffer.getvalue()

    directory = os.path.dirname(path) or "."
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=".ogp_", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as e:
        logger.error(f"Failed to save OGP image {path}: {e}")
        raise ImageWriteError(f"Failed to save OGP image {path}") from e
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)


class InflightLocks:
    """Per-key locks so concurrent identical requests render once."""

    def __init__(self):
        self._lock = Lock()
        self._locks: Dict[str, Lock] = {}
        self._waiters: Dict[str, int] = {}

    def acquire(self, key: str) -> Lock:
        with self._lock:
            lock = self._locks.setdefault(key, Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1
        lock.acquire()
        return lock

    def release(self, key: str, lock: Lock) -> None:
        lock.release()
        with self._lock:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._locks)


inflight_locks = InflightLocks()


def _generate_unlocked(request: OgpImageRequest, cache_key: str, path: str, url: str, fonts: FontSet) -> OgpImageResult:
    if find_cached_image(path):
        logger.info(f"Found existing OGP image for hash {cache_key}, returning its URL")
        return OgpImageResult(image_url=url, cache_key=cache_key, path=path, generated=False)

    logger.info(f"No existing OGP image for hash {cache_key}, generating a new one")
    image = render_ogp_image(request, fonts)
    save_png(image, path)
    logger.info(f"Saved OGP image {os.path.basename(path)}")
    return OgpImageResult(image_url=url, cache_key=cache_key, path=path, generated=True)


def generate_ogp_image(
    request: OgpImageRequest,
    images_dir: str,
    url_prefix: str,
    fonts: FontSet,
    dedupe: bool = True,
    locks: Optional[InflightLocks] = None,
) -> OgpImageResult:
    """
    Return the OGP image for ``request``, rendering it on first use.

    Args:
        request: Content description
        images_dir: Directory holding the flat-file image cache
        url_prefix: URL prefix the cache directory is served under
        fonts: Font registration result used for rendering
        dedupe: Serialize concurrent requests for the same key
        locks: Lock map to use (defaults to the process-wide one)

    Returns:
        OgpImageResult with the public URL; the URL is only returned once the
        file exists on disk.
    """
    cache_key = compute_cache_key(request)
    path = os.path.join(images_dir, image_filename(cache_key))
    url = image_url(url_prefix, cache_key)

    if not dedupe:
        return _generate_unlocked(request, cache_key, path, url, fonts)

    locks = locks if locks is not None else inflight_locks
    lock = locks.acquire(cache_key)
    try:
        return _generate_unlocked(request, cache_key, path, url, fonts)
    finally:
        locks.release(cache_key, lock)
