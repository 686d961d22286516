"""Domain exceptions raised by the service layer.

Route handlers translate these into HTTP responses; services never raise
HTTPException themselves.
"""


class BraintokError(Exception):
    """Base class for backend errors."""


class AuthError(BraintokError):
    """Bearer token missing, malformed, expired or rejected."""


class DatabaseError(BraintokError):
    """A Supabase table operation failed."""


class StorageError(BraintokError):
    """An S3 operation failed."""


class VectorStoreError(BraintokError):
    """A Pinecone operation failed or the index never became ready."""


class ExtractionError(BraintokError):
    """Text could not be extracted from a document."""
