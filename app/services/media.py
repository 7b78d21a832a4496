"""Media hosting service - uploads product images to Cloudinary."""
import io
import logging
from functools import lru_cache
from typing import Optional

import cloudinary.exceptions
import cloudinary.uploader
from fastapi.concurrency import run_in_threadpool

from app.config import settings
from app.errors import UpstreamError

logger = logging.getLogger(__name__)

# Stored images are capped at 800x800 and recompressed.
IMAGE_TRANSFORMATION = [
    {"width": 800, "height": 800, "crop": "limit"},
    {"quality": "auto:eco"},
]


class MediaService:
    """Signed uploads to a Cloudinary account through the Cloudinary SDK."""

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        folder: str = "products",
        timeout: float = 15.0,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _upload(self, content: bytes, filename: str) -> dict:
        return cloudinary.uploader.upload(
            io.BytesIO(content),
            filename=filename,
            folder=self.folder,
            resource_type="image",
            transformation=IMAGE_TRANSFORMATION,
            timeout=self.timeout,
            cloud_name=self.cloud_name,
            api_key=self.api_key,
            api_secret=self.api_secret,
        )

    async def upload_image(self, content: bytes, filename: str = "image") -> str:
        """Upload an image and return its secure URL."""
        if not self.configured:
            raise UpstreamError("Media service is not configured")

        # The SDK is blocking; keep it off the event loop.
        try:
            result = await run_in_threadpool(self._upload, content, filename)
        except cloudinary.exceptions.Error as e:
            logger.error("Image upload failed: %s", e)
            raise UpstreamError("Image upload failed", details={"error": str(e)}) from e

        secure_url = result.get("secure_url")
        if not secure_url:
            raise UpstreamError("Media service returned no image URL")
        logger.info("Uploaded image %s", secure_url)
        return secure_url


@lru_cache()
def get_media_service() -> MediaService:
    """Process-wide media client built once from settings."""
    if not (settings.CLOUDINARY_CLOUD_NAME and settings.CLOUDINARY_API_KEY and settings.CLOUDINARY_API_SECRET):
        logger.warning("Cloudinary credentials missing; image uploads will fail")
    return MediaService(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        folder=settings.MEDIA_FOLDER,
        timeout=settings.MEDIA_TIMEOUT_SECONDS,
    )
