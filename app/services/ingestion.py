"""Background ingestion of confirmed uploads into the vector index."""

import logging

from app.core.errors import BraintokError
from app.core.logging import get_logger, log_with_context
from app.core.schemas_documents import UploadStatus
from app.db.documents import update_document_status
from app.services.pinecone_service import get_pinecone_service

logger = get_logger(__name__)


def ingest_document(document_id: str, s3_key: str, user_email: str) -> bool:
    """
    Index one uploaded document, marking it failed if that is not possible.

    Runs after the HTTP response has been sent, so failures are recorded on
    the document row instead of raised.

    Returns:
        True if the document was indexed
    """
    log_with_context(logger, logging.INFO, "Ingesting document", document_id=document_id, s3_key=s3_key)

    try:
        chunk_count = get_pinecone_service().insert_document(s3_key, user_email)
    except BraintokError as e:
        log_with_context(
            logger, logging.ERROR, "Document ingestion failed",
            document_id=document_id, s3_key=s3_key, error=str(e),
        )
        update_document_status(document_id, user_email, UploadStatus.FAILED, error=f"Ingestion failed: {e}")
        return False
    except Exception:
        logger.exception(f"Unexpected ingestion error for {s3_key}")
        update_document_status(document_id, user_email, UploadStatus.FAILED, error="Ingestion failed")
        return False

    log_with_context(
        logger, logging.INFO, "Document ingested",
        document_id=document_id, s3_key=s3_key, chunks=chunk_count,
    )
    return True
