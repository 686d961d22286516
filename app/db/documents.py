"""Database operations for the documents table."""

import uuid
from datetime import datetime, timezone
from typing import Any

from app.core.errors import DatabaseError
from app.core.logging import get_logger
from app.core.schemas_documents import UploadStatus, UploadedDocument
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "documents"

# Statuses a document may move to after creation
TERMINAL_STATUSES = {UploadStatus.COMPLETED, UploadStatus.FAILED}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_pending_document(
    email: str,
    filename: str,
    s3_key: str,
    file_size: int,
    file_type: str,
) -> str:
    """Create a pending document record ahead of the browser's S3 upload.

    Args:
        email: Owner's email
        filename: Original filename
        s3_key: Object key the presigned URL was issued for
        file_size: Size reported by the browser
        file_type: MIME type reported by the browser

    Returns:
        New document id

    Raises:
        DatabaseError: If the insert fails
    """
    document_id = str(uuid.uuid4())

    record = {
        "id": document_id,
        "user_email": email,
        "filename": filename,
        "s3_key": s3_key,
        "file_size": file_size,
        "file_type": file_type,
        "upload_status": UploadStatus.PENDING.value,
        "created_at": _now(),
    }

    try:
        get_supabase().table(TABLE).insert(record).execute()
    except Exception as e:
        logger.error(f"Failed to create pending document for {s3_key}: {e}")
        raise DatabaseError("Failed to create pending document") from e

    logger.info(f"Created pending document {document_id}: {filename}")
    return document_id


def update_document_status(
    document_id: str,
    email: str,
    status: UploadStatus | str,
    error: str | None = None,
) -> None:
    """Move one of a user's documents to completed or failed.

    Raises:
        ValueError: If status is not a terminal status
        DatabaseError: If the update fails
    """
    status = UploadStatus(status)
    if status not in TERMINAL_STATUSES:
        raise ValueError(f"Cannot move a document to status '{status.value}'")

    try:
        supabase = get_supabase()
        (
            supabase.table(TABLE)
            .update({"upload_status": status.value, "error": error, "updated_at": _now()})
            .match({"id": document_id, "user_email": email})
            .execute()
        )
    except Exception as e:
        logger.error(f"Failed to update status of document {document_id}: {e}")
        raise DatabaseError("Failed to update document status") from e


def process_upload_completion(email: str, documents: list[UploadedDocument]) -> None:
    """Persist the browser-reported outcome of each upload.

    Updates are scoped to both the document id and the owner's email so a
    caller cannot touch another user's rows.

    Raises:
        DatabaseError: If any update fails
    """
    for doc in documents:
        try:
            supabase = get_supabase()
            (
                supabase.table(TABLE)
                .update(
                    {
                        "upload_status": doc.status.to_upload_status().value,
                        "error": doc.error,
                        "updated_at": _now(),
                    }
                )
                .match({"id": doc.document_id, "user_email": email})
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to record upload completion for {doc.document_id}: {e}")
            raise DatabaseError("Failed to process upload completion") from e


def get_documents_by_email(email: str) -> list[dict[str, Any]]:
    """List a user's documents, oldest first."""
    try:
        supabase = get_supabase()
        response = (
            supabase.table(TABLE)
            .select("*")
            .eq("user_email", email)
            .order("created_at", desc=False)
            .execute()
        )
    except Exception as e:
        logger.error(f"Failed to fetch documents for {email}: {e}")
        raise DatabaseError("Failed to fetch documents") from e

    return response.data or []


def get_document_by_s3_key(email: str, s3_key: str) -> dict[str, Any] | None:
    """Get one of a user's documents by its object key."""
    try:
        supabase = get_supabase()
        response = (
            supabase.table(TABLE)
            .select("*")
            .eq("user_email", email)
            .eq("s3_key", s3_key)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise DatabaseError("Failed to fetch document") from e

    return response.data[0] if response.data else None


def delete_document_by_s3_key(email: str, s3_key: str) -> None:
    """Delete a user's document row."""
    try:
        supabase = get_supabase()
        supabase.table(TABLE).delete().eq("user_email", email).eq("s3_key", s3_key).execute()
    except Exception as e:
        logger.error(f"Failed to delete document {s3_key}: {e}")
        raise DatabaseError("Failed to delete document") from e
