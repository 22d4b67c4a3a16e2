import io
import logging
import os
from typing import Iterable, List, Optional, Tuple

import boto3
from botocore.exceptions import ClientError
from fastapi import HTTPException
from PIL import Image, UnidentifiedImageError
from supabase import Client
from werkzeug.utils import secure_filename

from autodebate.config import settings

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "gif"}


class BucketStorage:
    """Supabase Storage bucket addressed by path string."""

    def __init__(self, supabase: Client, bucket: str):
        self.supabase = supabase
        self.bucket = bucket

    def upload(self, path: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        self.supabase.storage.from_(self.bucket).upload(
            path,
            content,
            file_options={"content-type": content_type, "upsert": "false"}
        )
        return path

    def remove(self, paths: Iterable[str]) -> bool:
        paths = [p for p in paths if p]
        if not paths:
            return True
        try:
            self.supabase.storage.from_(self.bucket).remove(paths)
            return True
        except Exception as e:
            logger.warning("Failed to remove %s from bucket %s: %s", paths, self.bucket, e)
            return False

    def signed_url(self, path: str, expires_in: int) -> str:
        response = self.supabase.storage.from_(self.bucket).create_signed_url(path, expires_in)
        url = None
        if isinstance(response, dict):
            url = response.get("signedURL") or response.get("signedUrl")
        if not url:
            raise HTTPException(status_code=500, detail="Could not create download URL")
        return url

    def public_url(self, path: Optional[str]) -> Optional[str]:
        if not path:
            return None
        return self.supabase.storage.from_(self.bucket).get_public_url(path)


class S3Storage:
    """S3 bucket holding originals under "<bucket>/<path>" keys."""

    def __init__(self, bucket: str):
        if not all([settings.aws_access_key_id, settings.aws_secret_access_key, settings.s3_bucket_name]):
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name
        self.bucket = bucket

    def _key(self, path: str) -> str:
        return f"{self.bucket}/{path}"

    def upload(self, path: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        """Upload file to S3 and return the storage path"""
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=self._key(path),
                Body=content,
                ContentType=content_type
            )
            return path
        except ClientError as e:
            logger.error(f"Failed to upload file to S3: {str(e)}")
            raise

    def remove(self, paths: Iterable[str]) -> bool:
        ok = True
        for path in paths:
            if not path:
                continue
            try:
                self.s3_client.delete_object(Bucket=self.bucket_name, Key=self._key(path))
            except ClientError as e:
                logger.warning(f"Failed to delete file from S3: {str(e)}")
                ok = False
        return ok

    def signed_url(self, path: str, expires_in: int) -> str:
        return self.s3_client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket_name, "Key": self._key(path)},
            ExpiresIn=expires_in
        )


def get_originals_storage(supabase: Client, bucket: str):
    """S3 when storage_backend is "s3" and configured, otherwise the Supabase bucket"""
    if settings.use_s3:
        try:
            return S3Storage(bucket)
        except ValueError as e:
            logger.warning(f"S3 storage initialization failed ({e}), will use Supabase Storage")
    return BucketStorage(supabase, bucket)


def file_extension(filename: Optional[str]) -> str:
    return os.path.splitext(filename or "")[1].lstrip(".").lower()


def is_image_file(filename: Optional[str]) -> bool:
    return file_extension(filename) in IMAGE_EXTENSIONS


def build_storage_path(user_id: str, scope_id: str, filename: str, epoch_ms: int) -> str:
    """<uid>/<event_or_car_id>/<epoch_ms>_<filename>"""
    return f"{user_id}/{scope_id}/{epoch_ms}_{secure_filename(filename) or 'upload'}"


def make_thumbnail(content: bytes, max_size: Optional[int] = None) -> Tuple[bytes, str]:
    """Downscale an image to fit max_size x max_size; returns (bytes, content_type)."""
    size = max_size or settings.thumbnail_size
    try:
        img = Image.open(io.BytesIO(content))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise HTTPException(status_code=400, detail=f"File is not a valid image: {e}")
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    img.thumbnail((size, size), Image.Resampling.LANCZOS)
    out = io.BytesIO()
    img.save(out, format="JPEG", quality=85)
    return out.getvalue(), "image/jpeg"


def cleanup(uploaded: List[Tuple[object, str]]) -> None:
    """Remove already-written objects after a failed multi-step write."""
    for storage, path in reversed(uploaded):
        if not storage.remove([path]):
            logger.warning(f"Orphaned storage object left behind: {path}")
        else:
            logger.info(f"Removed storage object after failed write: {path}")
