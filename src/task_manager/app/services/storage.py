"""Image uploads to Cloudinary."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from ..core.config import Settings
from ..errors import BadRequestError, PayloadTooLargeError, StorageError

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ImagePayload:
    """A validated image read fully into memory."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class ImageStorage(Protocol):
    async def upload(self, image: ImagePayload) -> str:
        """Store ``image`` and return its public URL."""
        ...


def has_image(upload: UploadFile | None) -> bool:
    """Return ``True`` when the client actually attached a file."""
    return upload is not None and bool(upload.filename)


async def read_image_upload(upload: UploadFile, *, max_bytes: int) -> ImagePayload:
    """Validate an uploaded file and read it into memory.

    Only ``image/*`` content is accepted and the body may not exceed
    ``max_bytes``; the read stops one byte past the limit.
    """

    content_type = (upload.content_type or "").lower()
    if not content_type.startswith("image/"):
        raise BadRequestError(
            "Uploaded file must be an image.",
            details={"content_type": upload.content_type},
        )
    data = await upload.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise PayloadTooLargeError(
            "Uploaded image is too large.",
            details={"max_bytes": max_bytes},
        )
    if not data:
        raise BadRequestError("Uploaded image is empty.")
    return ImagePayload(
        filename=upload.filename or "upload",
        content_type=content_type,
        data=data,
    )


class CloudinaryStorage:
    """Signed uploads through the Cloudinary SDK.

    The SDK is synchronous, so each upload runs in a worker thread.
    Credentials are passed per call rather than through the SDK's global
    configuration.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def _upload_options(self) -> dict[str, Any]:
        settings = self._settings
        options: dict[str, Any] = {
            "resource_type": "image",
            "cloud_name": settings.cloudinary_cloud_name,
            "api_key": settings.cloudinary_api_key,
            "api_secret": settings.cloudinary_api_secret,
            "timeout": settings.upload_timeout_seconds,
        }
        if settings.cloudinary_folder:
            options["folder"] = settings.cloudinary_folder
        return options

    async def upload(self, image: ImagePayload) -> str:
        if not self._settings.storage_configured:
            raise StorageError("Image storage is not configured.")

        try:
            result = await run_in_threadpool(
                cloudinary.uploader.upload,
                io.BytesIO(image.data),
                **self._upload_options(),
            )
        except (CloudinaryError, ValueError) as exc:
            logger.error("Image upload failed", exc_info=True, extra={"image_name": image.filename})
            raise StorageError() from exc

        url = (result.get("secure_url") or result.get("url")) if isinstance(result, dict) else None
        if not url:
            logger.error("Storage response did not include a URL", extra={"image_name": image.filename})
            raise StorageError()
        logger.info("Uploaded image", extra={"image_name": image.filename, "bytes": image.size})
        return str(url)


__all__ = [
    "CloudinaryStorage",
    "ImagePayload",
    "ImageStorage",
    "has_image",
    "read_image_upload",
]
