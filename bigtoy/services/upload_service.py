"""
Upload adapter for the Cloudinary image store.
"""

from typing import Any, Optional

import httpx

from bigtoy.capture import CapturedImage
from bigtoy.constants import CLOUDINARY_UPLOAD_URL, UPLOAD_TRANSFORMATION
from bigtoy.errors import UploadError
from bigtoy.utils.logger import logger


def extract_upload_error(payload: Any) -> Optional[str]:
    """Cloudinary nests its message under ``error``; other stores use ``message``."""
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    if payload.get("message"):
        return str(payload["message"])
    return None


def apply_transformation(secure_url: str, transformation: str = UPLOAD_TRANSFORMATION) -> str:
    """Insert a delivery transformation right after ``/upload/``."""
    if not transformation or "/upload/" not in secure_url:
        return secure_url
    return secure_url.replace("/upload/", f"/upload/{transformation}/", 1)


class UploadService:
    """Service for pushing captured images to the object store."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        cloud_name: Optional[str],
        upload_preset: Optional[str],
        transformation: str = UPLOAD_TRANSFORMATION,
    ):
        """
        Initialize the upload service.

        Args:
            http_client: Shared async HTTP client
            cloud_name: Cloudinary cloud name
            upload_preset: Unsigned upload preset
            transformation: Delivery transformation applied to the returned URL
        """
        self.http_client = http_client
        self.cloud_name = cloud_name
        self.upload_preset = upload_preset
        self.transformation = transformation

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.upload_preset)

    async def upload(self, image: CapturedImage) -> str:
        """
        Upload an image and return its public URL.

        Args:
            image: Captured image

        Returns:
            Publicly fetchable image URL

        Raises:
            UploadError: The store is not configured, unreachable, or rejected the image
        """
        if not self.configured:
            raise UploadError("Cloudinary is not configured")

        url = CLOUDINARY_UPLOAD_URL.format(cloud_name=self.cloud_name)
        logger.info(f"Uploading {image.filename} ({image.size} bytes)")
        try:
            response = await self.http_client.post(
                url,
                data={"upload_preset": self.upload_preset},
                files={"file": (image.filename, image.data, image.content_type)},
            )
        except httpx.HTTPError as e:
            logger.error(f"Error uploading image: {e}")
            raise UploadError("Image upload failed: store unreachable") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.is_success:
            message = extract_upload_error(payload) or "Image upload failed"
            logger.error(f"Upload rejected with HTTP {response.status_code}: {message}")
            raise UploadError(message)

        secure_url = payload.get("secure_url") if isinstance(payload, dict) else None
        if not secure_url:
            raise UploadError("Image upload failed: no URL returned")

        image_url = apply_transformation(secure_url, self.transformation)
        logger.info(f"Image uploaded: {image_url}")
        return image_url
