"""Pydantic schemas for document upload coordination."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class UploadStatus(str, Enum):
    """Stored document status.

    pending -> completed | failed; completed -> failed if ingestion fails.
    """
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class ClientUploadStatus(str, Enum):
    """Upload outcome as reported by the browser after the S3 PUT."""
    SUCCESS = "success"
    FAILED = "failed"

    def to_upload_status(self) -> UploadStatus:
        return UploadStatus.COMPLETED if self is ClientUploadStatus.SUCCESS else UploadStatus.FAILED


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# Request upload
# ============================================================================


class FileToUpload(_CamelModel):
    """One file the browser wants to upload."""
    filename: str = Field(..., min_length=1)
    file_type: str = Field(..., alias="fileType", min_length=1)
    size: int = Field(default=0, ge=0)


class RequestUploadBody(_CamelModel):
    """Body of POST /documents/request-upload."""
    files: Optional[list[FileToUpload]] = None
    email: Optional[str] = None


class UploadTarget(_CamelModel):
    """Presigned PUT target for one pending document."""
    document_id: str = Field(..., serialization_alias="documentId")
    presigned_url: str = Field(..., serialization_alias="presignedUrl")
    s3_key: str = Field(..., serialization_alias="s3Key")


class RequestUploadResponse(BaseModel):
    uploads: list[UploadTarget]


# ============================================================================
# Confirm upload
# ============================================================================


class UploadedDocument(_CamelModel):
    """Per-file outcome reported by the browser."""
    document_id: str = Field(..., alias="documentId")
    s3_key: str = Field(..., alias="s3Key")
    file_name: Optional[str] = Field(default=None, alias="fileName")
    status: ClientUploadStatus
    error: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class ConfirmUploadBody(_CamelModel):
    """Body of POST /documents/confirm-upload."""
    email: Optional[str] = None
    documents: Optional[list[UploadedDocument]] = None


class MessageResponse(BaseModel):
    message: str


class AccessLinkResponse(BaseModel):
    presigned_url: str = Field(..., serialization_alias="presignedUrl")
