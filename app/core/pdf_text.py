"""Text extraction from uploaded PDFs.

Uses PyMuPDF (fitz) for native text extraction. Scanned pages without a
text layer contribute nothing; there is no OCR.
"""

import io
from dataclasses import dataclass, field

from app.core.config import get_settings
from app.core.errors import ExtractionError
from app.core.logging import get_logger

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF-"

# Lazy import to avoid loading heavy libraries at module load
fitz = None


def _get_fitz():
    """Lazy load PyMuPDF."""
    global fitz
    if fitz is None:
        import fitz as _fitz

        fitz = _fitz
    return fitz


@dataclass
class PdfTextResult:
    """Result of text extraction from a PDF."""

    text: str
    page_count: int
    pages_with_text: int
    warnings: list[str] = field(default_factory=list)


def _normalize_page_text(text: str) -> str:
    """Collapse runs of blank lines left behind by the PDF layout."""
    lines = [line.rstrip() for line in text.splitlines()]
    cleaned: list[str] = []
    for line in lines:
        if not line and cleaned and not cleaned[-1]:
            continue
        cleaned.append(line)
    return "\n".join(cleaned).strip()


def extract_pdf_text(raw_bytes: bytes, max_pages: int | None = None) -> PdfTextResult:
    """
    Extract plain text from a PDF, page by page.

    Args:
        raw_bytes: Raw PDF content
        max_pages: Override max pages (defaults to MAX_PDF_PAGES)

    Returns:
        PdfTextResult with page texts joined by blank lines

    Raises:
        ExtractionError: If the bytes are not a readable PDF or exceed limits
    """
    settings = get_settings()

    if not raw_bytes:
        raise ExtractionError("Empty document")
    if len(raw_bytes) > settings.MAX_PDF_BYTES:
        raise ExtractionError(
            f"PDF is {len(raw_bytes)} bytes, limit is {settings.MAX_PDF_BYTES}"
        )
    if not raw_bytes.lstrip()[:5].startswith(PDF_MAGIC):
        raise ExtractionError("Document is not a PDF")

    fitz_lib = _get_fitz()
    max_pages = max_pages or settings.MAX_PDF_PAGES

    try:
        doc = fitz_lib.open(stream=io.BytesIO(raw_bytes), filetype="pdf")
    except Exception as e:
        raise ExtractionError(f"Failed to open PDF: {e}") from e

    try:
        page_count = len(doc)
        if page_count == 0:
            raise ExtractionError("PDF has no pages")
        warnings: list[str] = []
        if page_count > max_pages:
            warnings.append(f"PDF has {page_count} pages, truncating to {max_pages}")

        parts: list[str] = []
        for page_num in range(min(page_count, max_pages)):
            text = _normalize_page_text(doc[page_num].get_text("text"))
            if text:
                parts.append(text)
    except ExtractionError:
        raise
    except Exception as e:
        raise ExtractionError(f"Failed to read PDF pages: {e}") from e
    finally:
        doc.close()

    if len(parts) < min(page_count, max_pages):
        warnings.append(
            f"{min(page_count, max_pages) - len(parts)} page(s) had no text layer"
        )

    for warning in warnings:
        logger.warning(warning)

    return PdfTextResult(
        text="\n\n".join(parts),
        page_count=page_count,
        pages_with_text=len(parts),
        warnings=warnings,
    )
