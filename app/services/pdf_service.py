"""Read-side helpers for rendered PDFs."""
from io import BytesIO

from pypdf import PdfReader
from pypdf.errors import PyPdfError


def _reader(pdf_content: bytes) -> PdfReader:
    if not pdf_content or not pdf_content.startswith(b"%PDF-"):
        raise ValueError("Not a PDF byte stream")
    if not pdf_content.rstrip().endswith(b"%%EOF"):
        raise ValueError("PDF byte stream is truncated")
    try:
        return PdfReader(BytesIO(pdf_content))
    except PyPdfError as e:
        raise ValueError(f"Unreadable PDF: {e}") from e


def page_count(pdf_content: bytes) -> int:
    """Parse the whole cross-reference table and return the page count.

    Raises ValueError for empty, truncated or otherwise unreadable output.
    """
    try:
        pages = len(_reader(pdf_content).pages)
    except PyPdfError as e:
        raise ValueError(f"Unreadable PDF: {e}") from e
    if pages == 0:
        raise ValueError("PDF has no pages")
    return pages


def extract_text_from_pdf(pdf_content: bytes) -> str:
    """
    Extract text from a PDF file and return the raw text.
    """
    reader = _reader(pdf_content)
    return "\n".join(page.extract_text() or "" for page in reader.pages).strip()
