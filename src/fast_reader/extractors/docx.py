from __future__ import annotations

import io
import re
import zipfile
from typing import Iterator, List

import docx
from docx.document import Document as DocxDocument
from docx.opc.exceptions import PackageNotFoundError
from docx.table import Table
from docx.text.paragraph import Paragraph
from lxml import etree

from ..errors import LoadFailureError, NoReadableTextError

EXCESS_BLANK_LINES_RE = re.compile(r"\n{3,}")


def extract_docx_text(data: bytes, name: str = "document.docx") -> str:
    """Extract paragraph text from a Word document, one blank line between paragraphs."""
    try:
        document = docx.Document(io.BytesIO(data))
    except (
        PackageNotFoundError,
        zipfile.BadZipFile,
        etree.XMLSyntaxError,
        KeyError,
        ValueError,
    ) as exc:
        raise LoadFailureError(f"Failed to parse DOCX: {exc}") from exc

    text = "\n\n".join(_iter_paragraph_text(document))
    if not text.strip():
        raise NoReadableTextError("DOCX contains no readable text content")
    return tidy_lines(text)


def tidy_lines(text: str) -> str:
    """Trim every line and collapse three or more newlines to a single blank line."""
    lines = [line.strip() for line in text.split("\n")]
    return EXCESS_BLANK_LINES_RE.sub("\n\n", "\n".join(lines))


def _iter_paragraph_text(document: DocxDocument) -> Iterator[str]:
    # Body paragraphs and tables, in the order they appear in the document.
    for block in document.iter_inner_content():
        if isinstance(block, Paragraph):
            yield block.text
        elif isinstance(block, Table):
            yield from _table_text(block)


def _table_text(table: Table) -> List[str]:
    texts: List[str] = []
    for row in table.rows:
        for cell in row.cells:
            texts.extend(paragraph.text for paragraph in cell.paragraphs)
    return texts
