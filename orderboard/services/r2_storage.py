from __future__ import annotations

import io
import logging
import os
from pathlib import Path
from uuid import uuid4

from botocore.exceptions import BotoCoreError, ClientError

from orderboard.core.config import IMAGE_MAX_HEIGHT, IMAGE_MAX_WIDTH, IMAGE_QUALITY, R2_FOLDER, R2_IMAGE_TRANSFORMS
from orderboard.core.errors import UpstreamFailure

logger = logging.getLogger(__name__)

_CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


def _get_required_env(var_name: str) -> str:
    value = os.getenv(var_name, "").strip()
    if not value:
        raise UpstreamFailure(
            f"Variable de entorno obligatoria ausente: {var_name}",
            status_code=502,
        )
    return value


def _get_r2_client():
    r2_account_id = _get_required_env("R2_ACCOUNT_ID")
    r2_access_key_id = _get_required_env("R2_ACCESS_KEY_ID")
    r2_secret_access_key = _get_required_env("R2_SECRET_ACCESS_KEY")

    import boto3

    return boto3.client(
        "s3",
        endpoint_url=f"https://{r2_account_id}.r2.cloudflarestorage.com",
        aws_access_key_id=r2_access_key_id,
        aws_secret_access_key=r2_secret_access_key,
        region_name="auto",
    )


def _sanitize_key_part(part: str) -> str:
    return part.strip().strip("/")


def build_object_key(filename: str | None, content_type: str | None, folder: str = R2_FOLDER) -> str:
    extension = Path(filename or "").suffix.lower() or _CONTENT_TYPE_EXTENSIONS.get((content_type or "").lower(), "")
    key_parts = [part for part in (_sanitize_key_part(folder), "orders") if part]
    key_parts.append(f"{uuid4().hex}{extension}")
    return "/".join(key_parts)


def build_public_url(public_base_url: str, object_key: str, transform: bool = R2_IMAGE_TRANSFORMS) -> str:
    """Public URL of an object, optionally through Cloudflare image resizing.

    The resizing path keeps the image inside IMAGE_MAX_WIDTH x IMAGE_MAX_HEIGHT
    without upscaling (``fit=scale-down``) and recompresses it.
    """
    base = public_base_url.rstrip("/")
    if not transform:
        return f"{base}/{object_key}"
    options = f"width={IMAGE_MAX_WIDTH},height={IMAGE_MAX_HEIGHT},fit=scale-down,quality={IMAGE_QUALITY}"
    return f"{base}/cdn-cgi/image/{options}/{object_key}"


class R2ImageStorage:
    """Completion photos stored in a Cloudflare R2 bucket (S3 API)."""

    def upload_image(self, data: bytes, filename: str | None, content_type: str | None) -> str:
        bucket_name = _get_required_env("R2_BUCKET_NAME")
        public_url = _get_required_env("R2_PUBLIC_URL")
        object_key = build_object_key(filename, content_type)

        try:
            _get_r2_client().upload_fileobj(
                io.BytesIO(data),
                bucket_name,
                object_key,
                ExtraArgs={"ContentType": content_type or "application/octet-stream"},
            )
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamFailure("Error al subir la imagen", status_code=502) from exc

        logger.info("image uploaded key=%s bytes=%s", object_key, len(data))
        return build_public_url(public_url, object_key)
