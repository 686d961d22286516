"""Chunk and query embeddings for the document index."""

from openai import OpenAI

from app.core.config import get_settings
from app.core.logging import get_logger

logger = get_logger(__name__)


def _get_client() -> OpenAI:
    return OpenAI(api_key=get_settings().OPENAI_API_KEY)


def _check_dimension(vector: list[float], position: int, expected: int) -> list[float]:
    if len(vector) != expected:
        raise ValueError(
            f"Embedding dimension mismatch for text {position}: "
            f"expected {expected}, got {len(vector)}"
        )
    return vector


def embed_texts(texts: list[str]) -> list[list[float]]:
    """
    Embed chunk texts with the configured OpenAI model.

    Vectors are requested at EMBEDDING_DIM so they fit the Pinecone index
    whatever the model's native size.

    Args:
        texts: Texts to embed

    Returns:
        One vector per text, in input order

    Raises:
        ValueError: If a returned vector has the wrong dimension
        openai.OpenAIError: If the API call fails
    """
    if not texts:
        return []

    settings = get_settings()
    try:
        response = _get_client().embeddings.create(
            model=settings.EMBEDDING_MODEL,
            input=texts,
            dimensions=settings.EMBEDDING_DIM,
        )
    except Exception as e:
        logger.error(f"Embedding request for {len(texts)} text(s) failed: {e}")
        raise

    vectors = [
        _check_dimension(item.embedding, i, settings.EMBEDDING_DIM)
        for i, item in enumerate(response.data)
    ]
    logger.debug(f"Embedded {len(vectors)} text(s) with {settings.EMBEDDING_MODEL}")
    return vectors


def embed_query(query: str) -> list[float]:
    """Embed a single search query."""
    return embed_texts([query])[0]
