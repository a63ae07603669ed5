"""Standalone image upload."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, UploadFile, status

from ...deps import ImageStorageDependency, PrincipalDependency, SettingsDependency
from ...errors import BadRequestError
from ...schemas import UploadResponse
from ...services.storage import has_image, read_image_upload

router = APIRouter(tags=["uploads"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an image and return its public URL",
)
async def upload_image(
    image: Annotated[UploadFile, File(description="Image to store (image/* only).")],
    _: PrincipalDependency,
    settings: SettingsDependency,
    storage: ImageStorageDependency,
) -> UploadResponse:
    if not has_image(image):
        raise BadRequestError("An image file is required.")
    payload = await read_image_upload(image, max_bytes=settings.upload_max_bytes)
    url = await storage.upload(payload)
    return UploadResponse(url=url)
