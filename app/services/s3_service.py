"""S3 object storage for uploaded documents.

Browsers upload and download directly through presigned URLs; the backend
only signs URLs, checks existence, deletes and fetches bytes for ingestion.
"""

import re
import time
from functools import lru_cache
from urllib.parse import unquote, urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import get_settings
from app.core.errors import StorageError
from app.core.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_EMAIL_CHARS = re.compile(r"[^a-zA-Z0-9@._-]")
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")

# Error codes S3 uses for a missing object on HEAD/GET
_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


@lru_cache(maxsize=1)
def get_s3_client():
    """Get the S3 client (cached singleton)."""
    settings = get_settings()
    return boto3.client(
        "s3",
        region_name=settings.AWS_REGION,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4", retries={"max_attempts": 3, "mode": "standard"}),
    )


def sanitize_email(email: str) -> str:
    return _UNSAFE_EMAIL_CHARS.sub("_", email)


def sanitize_filename(filename: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def build_s3_key(email: str, filename: str, timestamp_ms: int | None = None) -> str:
    """Object key for a new upload: '<email>/<epoch ms>_<filename>'."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{sanitize_email(email)}/{timestamp_ms}_{sanitize_filename(filename)}"


def key_from_url(url_or_key: str) -> str:
    """Recover an object key from a (presigned) S3 URL.

    Bare keys are returned unchanged.
    """
    parsed = urlparse(url_or_key)
    if not parsed.scheme or not parsed.netloc:
        return url_or_key
    return unquote(parsed.path.lstrip("/"))


def _is_not_found(error: ClientError) -> bool:
    return str(error.response.get("Error", {}).get("Code")) in _NOT_FOUND_CODES


def generate_presigned_url(email: str, filename: str, file_type: str) -> tuple[str, str]:
    """
    Sign a PUT URL the browser can upload a new document to.

    Args:
        email: Owner's email (prefixes the key)
        filename: Original filename
        file_type: MIME type the browser must send as Content-Type

    Returns:
        (presigned_url, s3_key)

    Raises:
        ValueError: If any parameter is missing
        StorageError: If signing fails
    """
    if not email or not filename or not file_type:
        raise ValueError("Missing required parameters for presigned URL generation")

    settings = get_settings()
    s3_key = build_s3_key(email, filename)
    logger.debug(f"Generating presigned URL for {s3_key}")

    try:
        presigned_url = get_s3_client().generate_presigned_url(
            "put_object",
            Params={
                "Bucket": settings.S3_BUCKET_NAME,
                "Key": s3_key,
                "ContentType": file_type,
                "ACL": "private",
            },
            ExpiresIn=settings.PRESIGNED_PUT_EXPIRES,
        )
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to generate presigned URL for {s3_key}: {e}")
        raise StorageError("Failed to generate presigned URL") from e

    logger.info(f"Generated presigned URL for {s3_key}")
    return presigned_url, s3_key


def verify_file_upload(s3_key: str) -> bool:
    """
    Check that the browser's upload actually landed.

    Returns:
        True if the object exists, False if S3 reports it missing

    Raises:
        StorageError: For any other S3 failure
    """
    settings = get_settings()
    try:
        get_s3_client().head_object(Bucket=settings.S3_BUCKET_NAME, Key=s3_key)
    except ClientError as e:
        if _is_not_found(e):
            logger.warning(f"File not found during verification: {s3_key}")
            return False
        logger.error(f"Failed to verify upload {s3_key}: {e}")
        raise StorageError("Failed to verify file upload") from e
    except BotoCoreError as e:
        raise StorageError("Failed to verify file upload") from e

    logger.info(f"File upload verified: {s3_key}")
    return True


def delete_file(s3_key: str) -> None:
    """Delete an object. Deleting a missing key is not an error in S3."""
    settings = get_settings()
    try:
        get_s3_client().delete_object(Bucket=settings.S3_BUCKET_NAME, Key=s3_key)
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to delete {s3_key}: {e}")
        raise StorageError("Failed to delete file") from e

    logger.info(f"File deleted: {s3_key}")


def get_object_content(s3_key: str) -> bytes:
    """
    Download an object's bytes.

    Raises:
        StorageError: If the object is missing, empty or unreadable
    """
    settings = get_settings()
    try:
        response = get_s3_client().get_object(Bucket=settings.S3_BUCKET_NAME, Key=s3_key)
        body = response.get("Body")
        content = body.read() if body is not None else b""
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to fetch {s3_key}: {e}")
        raise StorageError("Failed to fetch object content from S3") from e

    if not content:
        raise StorageError(f"Empty response body from S3 for {s3_key}")

    logger.info(f"Fetched {len(content)} bytes from S3 for {s3_key}")
    return content


def generate_presigned_get_url(s3_key: str) -> str:
    """Sign a short-lived GET URL for viewing a document."""
    settings = get_settings()
    try:
        presigned_url = get_s3_client().generate_presigned_url(
            "get_object",
            Params={"Bucket": settings.S3_BUCKET_NAME, "Key": s3_key},
            ExpiresIn=settings.PRESIGNED_GET_EXPIRES,
        )
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to generate access link for {s3_key}: {e}")
        raise StorageError("Failed to generate presigned GET URL") from e

    logger.info(f"Generated document access link for {s3_key}")
    return presigned_url
