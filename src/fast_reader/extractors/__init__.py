"""
Format extractors: one per supported format, each turning raw bytes into text.
"""

from __future__ import annotations

from typing import Callable, Dict

from ..errors import UnsupportedTypeError
from ..formats import UNSUPPORTED_MESSAGE, FormatKind
from .docx import extract_docx_text
from .epub import extract_epub_text
from .pdf import extract_pdf_text
from .plain_text import extract_plain_text

Extractor = Callable[[bytes, str], str]

EXTRACTORS: Dict[FormatKind, Extractor] = {
    FormatKind.PLAIN_TEXT: extract_plain_text,
    FormatKind.PDF: extract_pdf_text,
    FormatKind.EPUB: extract_epub_text,
    FormatKind.DOCX: extract_docx_text,
}


def extract(kind: FormatKind, data: bytes, name: str) -> str:
    """Run the extractor registered for ``kind``."""
    extractor = EXTRACTORS.get(kind)
    if extractor is None:
        raise UnsupportedTypeError(UNSUPPORTED_MESSAGE)
    return extractor(data, name)


__all__ = [
    "EXTRACTORS",
    "Extractor",
    "extract",
    "extract_docx_text",
    "extract_epub_text",
    "extract_pdf_text",
    "extract_plain_text",
]
