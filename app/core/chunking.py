"""Fixed-size text chunking for document ingestion."""

from dataclasses import dataclass

from app.core.config import get_settings


@dataclass(frozen=True)
class TextChunk:
    """One window of document text."""

    index: int
    text: str
    start_char: int
    end_char: int


def chunk_text(
    text: str,
    chunk_size: int | None = None,
    overlap: int | None = None,
) -> list[TextChunk]:
    """
    Split text into fixed-size windows that overlap their neighbours.

    Args:
        text: Text to chunk
        chunk_size: Characters per chunk (defaults to CHUNK_SIZE)
        overlap: Characters shared by consecutive chunks (defaults to CHUNK_OVERLAP)

    Returns:
        Chunks in document order; the last one may be shorter than chunk_size

    Raises:
        ValueError: If chunk_size <= overlap or overlap is negative
    """
    settings = get_settings()
    chunk_size = settings.CHUNK_SIZE if chunk_size is None else chunk_size
    overlap = settings.CHUNK_OVERLAP if overlap is None else overlap

    if overlap < 0:
        raise ValueError(f"overlap ({overlap}) must not be negative")
    if chunk_size <= overlap:
        raise ValueError(f"chunk_size ({chunk_size}) must be greater than overlap ({overlap})")

    if not text:
        return []

    chunks: list[TextChunk] = []
    step = chunk_size - overlap
    text_length = len(text)

    for index, start in enumerate(range(0, text_length, step)):
        end = min(start + chunk_size, text_length)
        chunks.append(TextChunk(index=index, text=text[start:end], start_char=start, end_char=end))
        if end >= text_length:
            break

    return chunks
