"""Asset Store — MinIO/S3 implementation of the AssetStore protocol.

Invariants:
    - upload() enforces media constraints before any network I/O
    - Stored images fit inside max_width x max_height (never upscaled)
    - delete() NEVER raises: missing objects are success, other failures are
      logged with ASSET_CLEANUP_FAILED and swallowed
    - Object keys are derived from the public URL path: {base}/{bucket}/{key}

Design Decisions:
    - Sync minio client driven through asyncio.to_thread: the event loop is never
      blocked by HTTP calls to the object store or by Pillow decoding
    - Animated GIFs are stored as-is: re-encoding would drop frames
    - Bucket existence checked once per process, on first upload
"""

import asyncio
import io
import logging
import random
import time
from functools import lru_cache
from urllib.parse import urlparse

from minio import Minio
from minio.error import S3Error
from PIL import Image, UnidentifiedImageError

from blog_api.config import get_settings
from blog_api.core.domain_types import ImageUpload
from blog_api.core.errors import (
    ASSET_CLEANUP_FAILED, AssetStorageError, UnsupportedMediaError,
)
from blog_api.core.validate_post import check_image_upload

logger = logging.getLogger(__name__)

_MISSING_OBJECT_CODES = frozenset({"NoSuchKey", "NoSuchObject"})


def transform_image(
    data: bytes, max_width: int, max_height: int, quality: int,
) -> tuple[bytes, str, str]:
    """Fit an image inside the bounding box. Returns (bytes, content_type, extension)."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise UnsupportedMediaError("Invalid image file") from e

    if image.format == "GIF" and getattr(image, "is_animated", False):
        return data, "image/gif", "gif"

    image.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)
    if image.mode not in ("RGB", "RGBA"):
        has_alpha = image.mode in ("LA", "PA") or "transparency" in image.info
        image = image.convert("RGBA" if has_alpha else "RGB")
    buffer = io.BytesIO()
    image.save(buffer, format="WEBP", quality=quality, method=6)
    return buffer.getvalue(), "image/webp", "webp"


class MinioAssetStore:
    """Uploads post images to a public bucket and deletes them by URL."""

    def __init__(
        self,
        client: Minio,
        bucket: str,
        public_base_url: str,
        folder: str = "blog-uploads",
        max_width: int = 1200,
        max_height: int = 630,
        quality: int = 80,
    ):
        self.client = client
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        self.folder = folder.strip("/")
        self.max_width = max_width
        self.max_height = max_height
        self.quality = quality
        self._bucket_ready = False

    # ─── Keys & URLs ────────────────────────────────────────────

    def _new_object_key(self, extension: str) -> str:
        timestamp = int(time.time() * 1000)
        suffix = random.randint(0, 10**9)
        return f"{self.folder}/blog_{timestamp}_{suffix}.{extension}"

    def url_for(self, object_key: str) -> str:
        return f"{self.public_base_url}/{self.bucket}/{object_key}"

    def object_key_from_url(self, url: str) -> str | None:
        """Strip the /{bucket}/ prefix from the URL path; None if the URL is not ours."""
        prefix = f"/{self.bucket}/"
        path = urlparse(url).path
        if not path.startswith(prefix) or len(path) == len(prefix):
            return None
        return path[len(prefix):]

    # ─── Operations ─────────────────────────────────────────────

    def _ensure_bucket(self) -> None:
        if self._bucket_ready:
            return
        if not self.client.bucket_exists(self.bucket):
            self.client.make_bucket(self.bucket)
            logger.info(f"Created asset bucket {self.bucket}")
        self._bucket_ready = True

    def _put(self, object_key: str, data: bytes, content_type: str) -> None:
        self._ensure_bucket()
        self.client.put_object(
            self.bucket,
            object_key,
            io.BytesIO(data),
            length=len(data),
            content_type=content_type,
        )

    async def upload(self, image: ImageUpload) -> str:
        """Validate, transform and store an image. Returns its public URL."""
        check_image_upload(image)
        data, content_type, extension = await asyncio.to_thread(
            transform_image,
            image.data, self.max_width, self.max_height, self.quality,
        )
        object_key = self._new_object_key(extension)
        try:
            await asyncio.to_thread(self._put, object_key, data, content_type)
        except S3Error as e:
            logger.error(
                f"Asset upload rejected: {e.code}",
                extra={"object_key": object_key},
            )
            raise AssetStorageError(e.code or "storage error", "upload")
        except Exception as e:
            logger.error(
                f"Asset upload failed: {e}",
                extra={"object_key": object_key}, exc_info=True,
            )
            raise AssetStorageError("object store unreachable", "upload")
        logger.info(
            f"Uploaded image ({len(data)} bytes)", extra={"object_key": object_key},
        )
        return self.url_for(object_key)

    async def delete(self, url: str) -> None:
        """Best-effort delete. Never raises."""
        if not url:
            return
        object_key = self.object_key_from_url(url)
        if object_key is None:
            logger.warning(f"Skipping delete of foreign asset URL: {url}")
            return
        try:
            await asyncio.to_thread(self.client.remove_object, self.bucket, object_key)
        except S3Error as e:
            if e.code in _MISSING_OBJECT_CODES:
                logger.debug(
                    "Asset already absent", extra={"object_key": object_key},
                )
                return
            logger.error(
                f"Asset cleanup failed: {e.code}",
                extra={"object_key": object_key, "error_code": ASSET_CLEANUP_FAILED},
            )
            return
        except Exception as e:
            logger.error(
                f"Asset cleanup failed: {e}",
                extra={"object_key": object_key, "error_code": ASSET_CLEANUP_FAILED},
                exc_info=True,
            )
            return
        logger.info("Deleted image", extra={"object_key": object_key})


@lru_cache
def get_asset_store() -> MinioAssetStore:
    """Process-wide asset store built from settings."""
    settings = get_settings()
    client = Minio(
        settings.minio_endpoint,
        access_key=settings.minio_access_key,
        secret_key=settings.minio_secret_key,
        secure=settings.minio_secure,
    )
    return MinioAssetStore(
        client,
        bucket=settings.asset_bucket,
        public_base_url=settings.asset_public_base_url,
        folder=settings.asset_folder,
        max_width=settings.asset_max_width,
        max_height=settings.asset_max_height,
        quality=settings.asset_quality,
    )
