"""API endpoint for the document-to-video feature."""

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.auth_middleware import AuthContext, require_auth
from app.core.errors import BraintokError
from app.core.logging import get_logger
from app.services.tiktok_service import build_tiktok_from_doc

logger = get_logger(__name__)

router = APIRouter()


@router.get("/build-tiktok")
async def build_tiktok(
    pdf_url: str | None = Query(default=None, alias="pdfUrl"),
    auth: AuthContext = Depends(require_auth),
) -> dict:
    """Acknowledge a build request, fetching the source PDF when one is named."""
    logger.info(f"Tiktok build request received from {auth.user_id}")
    if not pdf_url:
        return {"message": "Tiktok build request received"}

    try:
        video_url = build_tiktok_from_doc(pdf_url)
    except BraintokError:
        logger.exception("Error building tiktok")
        raise HTTPException(status_code=500, detail="Failed to build tiktok")

    return {"message": "Tiktok build request received", "videoUrl": video_url}
