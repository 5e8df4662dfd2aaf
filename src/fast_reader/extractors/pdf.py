from __future__ import annotations

import logging
from typing import List

import fitz  # PyMuPDF

from ..errors import LoadFailureError, NoReadableTextError

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"


def extract_pdf_text(data: bytes, name: str = "document.pdf") -> str:
    """Extract text from every page of a PDF, in page order.

    Any page that fails to yield text aborts the whole extraction rather
    than silently producing a partial document.
    """
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        # fitz.FileDataError and EmptyFileError are RuntimeError subclasses.
        raise LoadFailureError(f"Failed to load PDF: {exc}") from exc

    try:
        if doc.needs_pass:
            raise LoadFailureError("Failed to load PDF: document is password-protected")
        if doc.page_count == 0:
            raise LoadFailureError("Failed to load PDF: PDF contains no pages")

        page_texts: List[str] = []
        for page_index in range(doc.page_count):
            try:
                page = doc.load_page(page_index)
                page_texts.append(page.get_text("text"))
            except (RuntimeError, ValueError) as exc:
                raise LoadFailureError(
                    f"Failed to extract text from page {page_index + 1}: {exc}"
                ) from exc
        logger.debug("Extracted %d pages from %s", len(page_texts), name)
    finally:
        doc.close()

    full_text = PAGE_SEPARATOR.join(page_texts)
    if not full_text.strip():
        raise NoReadableTextError("PDF contains no readable text content")
    return full_text
