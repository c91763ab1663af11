"""PDF text extraction for uploaded statements."""

import logging
from io import BytesIO

import pdfplumber

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Raised when a PDF cannot be read."""

    pass


def extract_pdf_text(contents: bytes) -> str:
    """
    Extract the full text of a PDF, page by page.

    Layout is not preserved reliably: the statement parser treats the
    result as one blob.

    Raises:
        ExtractionError: If the PDF is unreadable or has no text layer
    """
    full_text = ""

    try:
        with pdfplumber.open(BytesIO(contents)) as pdf:
            for page in pdf.pages:
                text = page.extract_text() or ""
                full_text += text + "\n"
            page_count = len(pdf.pages)
    except Exception as e:
        logger.error(f"PDF extraction failed: {e}")
        raise ExtractionError(f"Failed to extract PDF content: {e}") from e

    if not full_text.strip():
        raise ExtractionError("PDF appears to be empty or has no text layer")

    logger.info(f"📄 PDF: Extracted {len(full_text)} chars of text from {page_count} pages")
    return full_text
