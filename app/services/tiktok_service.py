"""Turning a document into a short video. Only the document fetch exists so far."""

from app.core.logging import get_logger
from app.services import s3_service

logger = get_logger(__name__)

PLACEHOLDER_VIDEO_URL = "pending://tiktok/{s3_key}"


def build_tiktok_from_doc(pdf_url: str) -> str:
    """
    Fetch the document behind a (presigned) URL and return its video URL.

    No video is rendered yet; the returned URL is a placeholder that names
    the source document.

    Raises:
        StorageError: If the document cannot be fetched
    """
    s3_key = s3_service.key_from_url(pdf_url)
    content = s3_service.get_object_content(s3_key)
    logger.info(f"Fetched {len(content)} bytes for tiktok build of {s3_key}")
    return PLACEHOLDER_VIDEO_URL.format(s3_key=s3_key)
