"""Pinecone vector index: document ingestion and similarity search.

Each user gets one namespace; every vector carries its document's s3_key so
searches can be restricted to a single document.
"""

import threading
import time
from typing import Any

from pinecone import Pinecone, ServerlessSpec

from app.core.chunking import TextChunk, chunk_text
from app.core.config import get_settings
from app.core.embeddings import embed_query, embed_texts
from app.core.errors import ExtractionError, VectorStoreError
from app.core.logging import get_logger
from app.core.pdf_text import extract_pdf_text
from app.services import s3_service

logger = get_logger(__name__)

# Pinecone caps a single delete request at 1000 ids
DELETE_BATCH_SIZE = 1000


def namespace_for(user_email: str) -> str:
    """Namespace holding one user's vectors."""
    return s3_service.sanitize_email(user_email)


def vector_id(s3_key: str, chunk_index: int) -> str:
    return f"{s3_key}#chunk-{chunk_index}"


class PineconeService:
    """Lazily-initialised wrapper around one Pinecone index."""

    def __init__(self, client: Pinecone | None = None, index_name: str | None = None):
        settings = get_settings()
        if client is None:
            if not settings.PINECONE_API_KEY:
                raise VectorStoreError("PINECONE_API_KEY is not set")
            client = Pinecone(api_key=settings.PINECONE_API_KEY)

        self.client = client
        self.index_name = index_name or settings.PINECONE_INDEX_NAME
        self._index = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Index lifecycle
    # ------------------------------------------------------------------

    @property
    def index(self):
        """The index handle, creating the index on first use."""
        if self._index is None:
            with self._lock:
                if self._index is None:
                    self._index = self._initialize_index()
        return self._index

    def _initialize_index(self):
        settings = get_settings()
        try:
            existing = self.client.list_indexes().names()
            if self.index_name not in existing:
                logger.info(f"Creating Pinecone index {self.index_name}")
                self.client.create_index(
                    name=self.index_name,
                    dimension=settings.EMBEDDING_DIM,
                    metric=settings.PINECONE_METRIC,
                    spec=ServerlessSpec(
                        cloud=settings.PINECONE_CLOUD,
                        region=settings.PINECONE_REGION,
                    ),
                )
                self._wait_for_index()
            else:
                logger.info(f"Using existing Pinecone index {self.index_name}")

            return self.client.Index(self.index_name)
        except VectorStoreError:
            raise
        except Exception as e:
            logger.error(f"Pinecone index initialization failed: {e}")
            raise VectorStoreError("Failed to initialize index") from e

    def _wait_for_index(self) -> None:
        settings = get_settings()
        for attempt in range(1, settings.PINECONE_READY_ATTEMPTS + 1):
            try:
                if self.client.describe_index(self.index_name).status["ready"]:
                    logger.info(f"Pinecone index {self.index_name} is ready")
                    return
            except Exception as e:
                logger.warning(f"Attempt {attempt}: index not ready yet ({e})")
            time.sleep(settings.PINECONE_READY_INTERVAL)

        raise VectorStoreError("Index failed to become ready in time")

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    @staticmethod
    def extract_text(pdf_bytes: bytes) -> str:
        return extract_pdf_text(pdf_bytes).text

    @staticmethod
    def chunk_text(text: str) -> list[TextChunk]:
        return chunk_text(text)

    def insert_document(self, s3_key: str, user_email: str) -> int:
        """
        Fetch, extract, chunk, embed and upsert one document.

        Re-ingesting a document overwrites its vectors since ids are derived
        from the key and chunk index.

        Args:
            s3_key: Object key of the uploaded PDF
            user_email: Owner's email (selects the namespace)

        Returns:
            Number of chunks upserted

        Raises:
            StorageError: If the PDF cannot be fetched
            ExtractionError: If no text could be extracted
            VectorStoreError: If an upsert fails
        """
        settings = get_settings()
        namespace = namespace_for(user_email)

        pdf_bytes = s3_service.get_object_content(s3_key)
        text = self.extract_text(pdf_bytes)
        if not text.strip():
            raise ExtractionError(f"No extractable text in {s3_key}")

        chunks = self.chunk_text(text)
        batch_size = settings.EMBED_BATCH_SIZE

        for start in range(0, len(chunks), batch_size):
            batch = chunks[start:start + batch_size]
            embeddings = embed_texts([chunk.text for chunk in batch])
            vectors = [
                {
                    "id": vector_id(s3_key, chunk.index),
                    "values": embedding,
                    "metadata": {
                        "s3_key": s3_key,
                        "user_email": user_email,
                        "chunk_index": chunk.index,
                        "text": chunk.text,
                    },
                }
                for chunk, embedding in zip(batch, embeddings)
            ]
            try:
                self.index.upsert(vectors=vectors, namespace=namespace)
            except Exception as e:
                logger.error(f"Upsert failed for {s3_key} at chunk {start}: {e}")
                raise VectorStoreError("Failed to upsert document vectors") from e

        logger.info(f"Indexed {len(chunks)} chunks for {s3_key} in namespace {namespace}")
        return len(chunks)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    def vector_search(
        self,
        query: str,
        user_email: str,
        s3_key: str,
        top_k: int | None = None,
    ) -> list[str]:
        """
        Find the chunks of one document most similar to a query.

        Returns:
            Chunk texts in rank order

        Raises:
            VectorStoreError: If the query fails
        """
        top_k = top_k or get_settings().RAG_TOP_K
        query_vector = embed_query(query)

        try:
            response = self.index.query(
                vector=query_vector,
                top_k=top_k,
                namespace=namespace_for(user_email),
                filter={"s3_key": {"$eq": s3_key}},
                include_metadata=True,
            )
        except Exception as e:
            logger.error(f"Vector search failed for {s3_key}: {e}")
            raise VectorStoreError("Failed to query index") from e

        texts = []
        for match in response.matches or []:
            metadata: dict[str, Any] = match.metadata or {}
            if metadata.get("text"):
                texts.append(metadata["text"])

        logger.debug(f"Vector search returned {len(texts)} chunks for {s3_key}")
        return texts

    def delete_document(self, s3_key: str, user_email: str) -> int:
        """Remove every vector of one document. Returns the number deleted."""
        namespace = namespace_for(user_email)
        deleted = 0
        try:
            ids: list[str] = []
            for page in self.index.list(prefix=f"{s3_key}#", namespace=namespace):
                ids.extend(page)
            for start in range(0, len(ids), DELETE_BATCH_SIZE):
                batch = ids[start:start + DELETE_BATCH_SIZE]
                self.index.delete(ids=batch, namespace=namespace)
                deleted += len(batch)
        except Exception as e:
            logger.error(f"Failed to delete vectors for {s3_key}: {e}")
            raise VectorStoreError("Failed to delete document vectors") from e

        logger.info(f"Deleted {deleted} vectors for {s3_key}")
        return deleted


_service: PineconeService | None = None
_service_lock = threading.Lock()


def get_pinecone_service() -> PineconeService:
    """Process-wide PineconeService instance."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = PineconeService()
    return _service

