"""API endpoints for chat history."""

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.auth_middleware import AuthContext, require_auth
from app.core.errors import BraintokError
from app.core.logging import get_logger
from app.db.messages import get_all_messages_by_email_and_s3_key

logger = get_logger(__name__)

router = APIRouter()


@router.get("/fetch-all-messages")
async def fetch_all_messages(
    email: str | None = Query(default=None),
    s3_key: str | None = Query(default=None, alias="s3Key"),
    auth: AuthContext = Depends(require_auth),
) -> list[dict]:
    """Conversation about one document, newest first."""
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")
    if not s3_key:
        raise HTTPException(status_code=400, detail="s3Key is required")
    if auth.email and auth.email.lower() != email.lower():
        logger.warning(f"User {auth.user_id} asked for messages belonging to {email}")
        raise HTTPException(status_code=403, detail="Cannot read another user's messages")

    try:
        messages = get_all_messages_by_email_and_s3_key(email, s3_key)
    except BraintokError:
        logger.exception(f"Failed to fetch messages for {s3_key}")
        raise HTTPException(status_code=500, detail="Failed to fetch messages")

    logger.info(f"Fetched {len(messages)} messages for {s3_key} (user {auth.user_id})")
    return [message.to_wire() for message in messages]
