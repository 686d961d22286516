"""API endpoints for document upload coordination and access."""

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query

from app.core.errors import BraintokError
from app.core.logging import get_logger
from app.core.schemas_documents import (
    AccessLinkResponse,
    ConfirmUploadBody,
    ClientUploadStatus,
    MessageResponse,
    RequestUploadBody,
    RequestUploadResponse,
    UploadTarget,
    UploadedDocument,
)
from app.db import documents as documents_db
from app.services import s3_service
from app.services.ingestion import ingest_document
from app.services.pinecone_service import get_pinecone_service

logger = get_logger(__name__)

router = APIRouter()


@router.post("/request-upload")
async def request_upload(body: RequestUploadBody) -> RequestUploadResponse:
    """Issue presigned PUT URLs and create a pending record per file.

    Returns:
        One upload target per requested file, in request order

    Raises:
        HTTPException 400: If no files or no email were given
        HTTPException 500: If signing or the database insert fails
    """
    if not body.files:
        raise HTTPException(status_code=400, detail="No files specified")
    if not body.email:
        raise HTTPException(status_code=400, detail="Email is required")

    uploads: list[UploadTarget] = []
    try:
        for file in body.files:
            presigned_url, s3_key = s3_service.generate_presigned_url(
                body.email, file.filename, file.file_type
            )
            document_id = documents_db.create_pending_document(
                body.email, file.filename, s3_key, file.size, file.file_type
            )
            uploads.append(
                UploadTarget(document_id=document_id, presigned_url=presigned_url, s3_key=s3_key)
            )
    except (BraintokError, ValueError) as e:
        logger.error(f"Error in request_upload for {body.email}: {e}")
        raise HTTPException(status_code=500, detail="Failed to process upload request")

    logger.info(f"Issued {len(uploads)} upload URL(s) for {body.email}")
    return RequestUploadResponse(uploads=uploads)


@router.post("/confirm-upload")
async def confirm_upload(body: ConfirmUploadBody, background_tasks: BackgroundTasks) -> MessageResponse:
    """Record upload outcomes and queue ingestion of the successful ones.

    A file the browser reports as uploaded but that S3 does not have is
    recorded as failed. Entries whose id and key do not match one of the
    caller's pending rows are ignored.

    Raises:
        HTTPException 400: If email or documents are missing
        HTTPException 500: If verification or the status update fails
    """
    if not body.email:
        raise HTTPException(status_code=400, detail="Email is required")
    if not body.documents:
        raise HTTPException(status_code=400, detail="No documents specified")

    owned: list[UploadedDocument] = []
    try:
        for doc in body.documents:
            row = documents_db.get_document_by_s3_key(body.email, doc.s3_key)
            if not row or row.get("id") != doc.document_id:
                logger.warning(
                    f"Ignoring upload confirmation for {doc.s3_key}: "
                    f"no document {doc.document_id} owned by {body.email}"
                )
                continue
            owned.append(doc)

            if doc.status is not ClientUploadStatus.SUCCESS:
                continue
            if not s3_service.verify_file_upload(doc.s3_key):
                doc.status = ClientUploadStatus.FAILED
                doc.error = "File not found in S3"
                logger.error(f"File not found during upload confirmation: {doc.s3_key}")

        if owned:
            documents_db.process_upload_completion(body.email, owned)
    except BraintokError as e:
        logger.error(f"Error in confirm_upload for {body.email}: {e}")
        raise HTTPException(status_code=500, detail="Failed to process upload completion")

    for doc in owned:
        if doc.status is ClientUploadStatus.SUCCESS:
            background_tasks.add_task(ingest_document, doc.document_id, doc.s3_key, body.email)

    return MessageResponse(message="Upload completion processed successfully")


@router.get("/get-documents-by-email")
async def get_documents(email: str | None = Query(default=None)) -> list[dict]:
    """List a user's documents, oldest first."""
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")

    try:
        documents = documents_db.get_documents_by_email(email)
    except BraintokError:
        logger.exception(f"Failed to fetch documents for {email}")
        raise HTTPException(status_code=500, detail="Failed to fetch documents")

    logger.info(f"Fetched {len(documents)} documents for {email}")
    return documents


@router.get("/get-document-access-link")
async def get_document_access_link(s3_key: str | None = Query(default=None, alias="s3Key")) -> AccessLinkResponse:
    """Short-lived presigned GET URL for viewing a document."""
    if not s3_key:
        raise HTTPException(status_code=400, detail="Valid s3Key is required")

    try:
        presigned_url = s3_service.generate_presigned_get_url(s3_key)
    except BraintokError:
        raise HTTPException(status_code=500, detail="Failed to generate document access link")

    return AccessLinkResponse(presigned_url=presigned_url)


@router.delete("/delete-document-by-s3-key")
async def delete_document_by_s3_key(
    s3_key: str | None = Query(default=None, alias="s3Key"),
    email: str | None = Query(default=None),
) -> MessageResponse:
    """Delete a document's object, vectors and record."""
    if not s3_key:
        raise HTTPException(status_code=400, detail="Valid s3Key is required")
    if not email:
        raise HTTPException(status_code=400, detail="Valid email is required")

    try:
        s3_service.delete_file(s3_key)
    except BraintokError:
        raise HTTPException(status_code=500, detail="Failed to delete document")

    try:
        get_pinecone_service().delete_document(s3_key, email)
    except BraintokError as e:
        # Orphaned vectors are unreachable once the row is gone
        logger.warning(f"Could not delete vectors for {s3_key}: {e}")

    try:
        documents_db.delete_document_by_s3_key(email, s3_key)
    except BraintokError:
        raise HTTPException(status_code=500, detail="Failed to delete document")

    logger.info(f"Document deleted: {s3_key}")
    return MessageResponse(message="Document deleted successfully")
