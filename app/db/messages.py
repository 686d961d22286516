"""Database operations for chat message history."""

from datetime import datetime, timedelta, timezone

from app.core.errors import DatabaseError
from app.core.logging import get_logger
from app.core.schemas_messages import ChatMessage
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "messages"

# Offset applied to the stored answer so it always sorts after its question
RESPONSE_OFFSET = timedelta(seconds=1)


def get_all_messages_by_email_and_s3_key(email: str, s3_key: str) -> list[ChatMessage]:
    """Fetch the conversation about one document, newest first."""
    try:
        supabase = get_supabase()
        response = (
            supabase.table(TABLE)
            .select("content, created_at, user_email, is_user_message")
            .eq("user_email", email)
            .eq("s3_key", s3_key)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        logger.error(f"Failed to fetch messages for {s3_key}: {e}")
        raise DatabaseError("Failed to fetch messages") from e

    return [ChatMessage.from_row(row) for row in response.data or []]


def save_message_pair(
    email: str,
    s3_key: str,
    user_message: ChatMessage,
    response_message: ChatMessage,
) -> None:
    """Store a question and its answer in one insert.

    Raises:
        DatabaseError: If the insert fails
    """
    asked_at = datetime.now(timezone.utc)
    rows = [
        {
            "user_email": email,
            "s3_key": s3_key,
            "content": user_message.content,
            "is_user_message": True,
            "created_at": asked_at.isoformat(),
        },
        {
            "user_email": email,
            "s3_key": s3_key,
            "content": response_message.content,
            "is_user_message": False,
            "created_at": (asked_at + RESPONSE_OFFSET).isoformat(),
        },
    ]

    try:
        supabase = get_supabase()
        supabase.table(TABLE).insert(rows).execute()
    except Exception as e:
        logger.error(f"Failed to save message pair for {s3_key}: {e}")
        raise DatabaseError("Failed to save message pair") from e

    logger.info(
        f"Saved message pair for {s3_key}: "
        f"{user_message.content[:50]!r} -> {response_message.content[:50]!r}"
    )
