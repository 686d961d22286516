"""Database operations for the waitlist."""

import uuid
from datetime import datetime, timezone
from typing import Any

from app.core.errors import DatabaseError
from app.core.logging import get_logger
from app.core.schemas_waitlist import WaitlistEntryCreate
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "waitlist"

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"


class DuplicateEntryError(DatabaseError):
    """The email is already on the waitlist."""


def create_entry(entry: WaitlistEntryCreate) -> dict[str, Any]:
    """Add someone to the waitlist.

    Raises:
        DuplicateEntryError: If the email is already registered
        DatabaseError: If the insert fails for any other reason
    """
    record = {
        "id": str(uuid.uuid4()),
        **entry.model_dump(),
        "created_at": datetime.now(timezone.utc).isoformat(),
    }

    try:
        response = get_supabase().table(TABLE).insert(record).execute()
    except Exception as e:
        if getattr(e, "code", None) == UNIQUE_VIOLATION:
            raise DuplicateEntryError("Email is already on the waitlist") from e
        logger.error(f"Failed to create waitlist entry: {e}")
        raise DatabaseError("Failed to submit waitlist entry") from e

    return response.data[0] if response.data else record


def get_all_entries() -> list[dict[str, Any]]:
    """List waitlist entries, newest first."""
    try:
        supabase = get_supabase()
        response = supabase.table(TABLE).select("*").order("created_at", desc=True).execute()
    except Exception as e:
        logger.error(f"Failed to fetch waitlist entries: {e}")
        raise DatabaseError("Failed to fetch waitlist entries") from e

    return response.data or []
