"""Test doubles and builders shared by service and route tests."""

from datetime import datetime, timedelta, timezone
from io import BytesIO

import jwt
from PIL import Image

from blog_api.core.domain_types import ImageUpload
from blog_api.core.errors import AssetStorageError

TEST_SECRET = "test-secret"
ASSET_BASE = "http://assets.test/blog-assets/blog-uploads"


class FakeAssetStore:
    """In-memory AssetStore. Records uploads and deletes in call order."""

    def __init__(self):
        self.uploaded: list[str] = []
        self.deleted: list[str] = []
        self.fail_upload = False
        self.on_delete = None

    async def upload(self, image: ImageUpload) -> str:
        if self.fail_upload:
            raise AssetStorageError("object store unreachable", "upload")
        url = f"{ASSET_BASE}/blog_{len(self.uploaded) + 1}.webp"
        self.uploaded.append(url)
        return url

    async def delete(self, url: str) -> None:
        if self.on_delete is not None:
            await self.on_delete(url)
        self.deleted.append(url)


def make_token(
    subject: str = "author-1", expires_in: int = 3600, secret: str = TEST_SECRET,
) -> str:
    payload = {
        "sub": subject,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(token: str | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {token or make_token()}"}


def make_png_bytes(size: tuple[int, int] = (64, 48)) -> bytes:
    image = Image.new("RGB", size, color=(0, 200, 100))
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def make_image_upload(
    filename: str = "photo.png", content_type: str = "image/png",
) -> ImageUpload:
    return ImageUpload(
        filename=filename, content_type=content_type, data=make_png_bytes(),
    )
