# backend/blog/uploads/service.py
"""
이미지 업로드 서비스 모듈
Cloudinary 업로드 REST API로 바이트를 그대로 전달하고 공개 URL(secure_url)을 돌려받습니다.
로컬 저장, 리사이즈 등 변환은 하지 않습니다.
"""

import hashlib
import logging
import time
from typing import Dict

import httpx

from ..config import settings

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}


class ImageUploadError(Exception):
    """외부 이미지 호스트 업로드 실패"""


def sign_params(params: Dict[str, str], api_secret: str) -> str:
    """Cloudinary 서명: 정렬된 key=value 쌍을 &로 연결하고 API secret을 붙여 SHA-1"""
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params) if params[key] != "")
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


async def upload_image(data: bytes, filename: str, content_type: str) -> str:
    """Cloudinary에 이미지를 업로드하고 secure_url을 반환합니다.

    Raises:
        ImageUploadError: 설정 누락, 타임아웃, HTTP 오류, 응답 형식 오류
    """
    if not (settings.CLOUDINARY_CLOUD_NAME and settings.CLOUDINARY_API_KEY and settings.CLOUDINARY_API_SECRET):
        logger.error("Cloudinary credentials are not configured")
        raise ImageUploadError("Missing Cloudinary configuration")

    params = {
        "folder": settings.CLOUDINARY_FOLDER,
        "timestamp": str(int(time.time())),
    }
    form = {
        **params,
        "api_key": settings.CLOUDINARY_API_KEY,
        "signature": sign_params(params, settings.CLOUDINARY_API_SECRET),
    }
    url = f"{settings.CLOUDINARY_UPLOAD_URL}/{settings.CLOUDINARY_CLOUD_NAME}/image/upload"

    logger.info(f"Uploading image to Cloudinary: {filename} ({len(data)} bytes)")
    try:
        async with httpx.AsyncClient(timeout=settings.UPLOAD_TIMEOUT_SECONDS) as client:
            response = await client.post(
                url,
                data=form,
                files={"file": (filename or "upload", data, content_type)},
            )
            response.raise_for_status()
            payload = response.json()
    except httpx.TimeoutException as e:
        logger.error(f"Cloudinary upload timeout after {settings.UPLOAD_TIMEOUT_SECONDS} seconds")
        raise ImageUploadError("Upload timed out") from e
    except httpx.HTTPStatusError as e:
        logger.error(f"Cloudinary HTTP error: {e.response.status_code} - {e.response.text}")
        raise ImageUploadError("Image host rejected the upload") from e
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Cloudinary upload error: {e}")
        raise ImageUploadError("Failed to upload image") from e

    secure_url = payload.get("secure_url") if isinstance(payload, dict) else None
    if not secure_url:
        logger.error(f"Cloudinary response without secure_url: {payload}")
        raise ImageUploadError("No result from upload")

    logger.info(f"Image uploaded successfully: {secure_url}")
    return secure_url
