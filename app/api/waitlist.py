"""API endpoints for the product waitlist."""

from typing import Any

from fastapi import APIRouter, Body, HTTPException
from pydantic import ValidationError

from app.core.errors import BraintokError
from app.core.logging import get_logger
from app.core.schemas_waitlist import WaitlistEntryCreate, flatten_validation_error
from app.db import waitlist as waitlist_db

logger = get_logger(__name__)

router = APIRouter()


@router.post("/submit", status_code=201)
async def submit_entry(payload: Any = Body(default=None)) -> dict:
    """Add someone to the waitlist.

    Raises:
        HTTPException 400: With per-field messages if the body is invalid
        HTTPException 409: If the email is already registered
    """
    try:
        entry = WaitlistEntryCreate.model_validate(payload or {})
    except ValidationError as e:
        details = flatten_validation_error(e)
        logger.info(f"Invalid waitlist submission: {details}")
        raise HTTPException(
            status_code=400,
            detail={"error": "Invalid request body", "details": details},
        )

    try:
        created = waitlist_db.create_entry(entry)
    except waitlist_db.DuplicateEntryError:
        raise HTTPException(status_code=409, detail="Email is already on the waitlist")
    except BraintokError:
        raise HTTPException(status_code=500, detail="Failed to submit waitlist entry")

    logger.info(f"Waitlist entry submitted for {entry.email}")
    return {"success": True, "entry": created}


@router.get("")
async def list_entries() -> list[dict]:
    """All waitlist entries, newest first."""
    try:
        entries = waitlist_db.get_all_entries()
    except BraintokError:
        raise HTTPException(status_code=500, detail="Failed to fetch waitlist entries")

    logger.info(f"Fetched {len(entries)} waitlist entries")
    return entries
