# backend/blog/uploads/router.py
from typing import Optional

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from ..auth.dependencies import CurrentUser
from ..auth.schema import AuthUser
from ..config import settings
from ..models import CustomModel
from . import service

router = APIRouter(tags=["uploads"])


class UploadResponse(CustomModel):
    image_url: str


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    image: Optional[UploadFile] = File(None),
    current_user: AuthUser = CurrentUser,
):
    if image is None or not image.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No image file provided")

    if image.content_type not in service.ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Only JPEG, PNG, and WebP are allowed.",
        )

    max_mb = settings.UPLOAD_MAX_BYTES // (1024 * 1024)
    too_large = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"File size too large. Maximum size is {max_mb}MB.",
    )
    if image.size is not None and image.size > settings.UPLOAD_MAX_BYTES:
        raise too_large
    data = await image.read()
    if len(data) > settings.UPLOAD_MAX_BYTES:
        raise too_large

    try:
        image_url = await service.upload_image(data, image.filename, image.content_type)
    except service.ImageUploadError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to upload image")
    return {"image_url": image_url}
