"""
Image sources for the capture step.
A live camera and a file picker both end up handing over a single image blob.
"""

import asyncio
import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict

from bigtoy.constants import MIN_IMAGE_BYTES
from bigtoy.errors import CaptureError
from bigtoy.utils.logger import logger


class CapturedImage(BaseModel):
    """Raw image bytes ready for upload."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    filename: str = "capture.jpg"
    content_type: str = "image/jpeg"

    @property
    def size(self) -> int:
        return len(self.data)


def validate_image(image: CapturedImage) -> CapturedImage:
    """Reject blobs that cannot be a usable photo."""
    if not image.content_type.startswith("image/"):
        raise CaptureError(f"Unsupported file type: {image.content_type}")
    if image.size < MIN_IMAGE_BYTES:
        raise CaptureError("Image data is invalid")
    return image


class ImageSource(ABC):
    """Abstract base class for anything that can produce a photo."""

    @abstractmethod
    async def acquire(self) -> CapturedImage:
        """
        Acquire one image.

        Returns:
            The captured image

        Raises:
            CaptureError: The source could not provide a usable image
        """
        pass


class FileImageSource(ImageSource):
    """File picker: reads an image from disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    async def acquire(self) -> CapturedImage:
        if not self.path.is_file():
            raise CaptureError(f"Image not found: {self.path}")

        content_type, _ = mimetypes.guess_type(self.path.name)
        try:
            data = await asyncio.to_thread(self.path.read_bytes)
        except OSError as e:
            logger.error(f"Error reading image {self.path}: {e}")
            raise CaptureError(f"Could not read image: {self.path}") from e

        logger.info(f"Read {len(data)} bytes from {self.path}")
        return validate_image(
            CapturedImage(
                data=data,
                filename=self.path.name,
                content_type=content_type or "application/octet-stream",
            )
        )


class BytesImageSource(ImageSource):
    """Frame already grabbed by a camera integration."""

    def __init__(self, data: bytes, filename: str = "capture.jpg", content_type: str = "image/jpeg"):
        self.image = CapturedImage(data=data, filename=filename, content_type=content_type)

    async def acquire(self) -> CapturedImage:
        return validate_image(self.image)
