from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Iterable

import docx
import fitz


def minimal_epub_bytes(
    chapters: list[str],
    include_spine: bool = True,
    missing_chapters: Iterable[int] = (),
) -> bytes:
    """Build a minimal EPUB holding the provided XHTML chapters.

    Chapters whose 1-based index is in ``missing_chapters`` are listed in the
    manifest and spine but left out of the archive.
    """
    missing = set(missing_chapters)
    container_xml = """<?xml version="1.0"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""
    manifest_items = []
    spine_items = []
    chapter_files = []
    for idx, chapter in enumerate(chapters, start=1):
        href = f"chapter{idx}.xhtml"
        manifest_items.append(
            f'<item id="chap{idx}" href="{href}" media-type="application/xhtml+xml"/>'
        )
        spine_items.append(f'<itemref idref="chap{idx}"/>')
        if idx not in missing:
            chapter_files.append((f"OEBPS/{href}", chapter))
    spine_block = (
        "<spine>" + "".join(spine_items) + "</spine>" if include_spine else "<spine/>"
    )
    opf = f"""<?xml version="1.0" encoding="utf-8"?>
<package version="3.0" xmlns="http://www.idpf.org/2007/opf">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:title>Test</dc:title>
  </metadata>
  <manifest>
    {''.join(manifest_items)}
  </manifest>
  {spine_block}
</package>
"""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr(
            "mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED
        )
        zf.writestr("META-INF/container.xml", container_xml)
        zf.writestr("OEBPS/content.opf", opf)
        for file_path, body in chapter_files:
            zf.writestr(file_path, body)
    return buffer.getvalue()


def xhtml(body: str) -> str:
    return f"<html xmlns='http://www.w3.org/1999/xhtml'><body>{body}</body></html>"


def docx_bytes(paragraphs: list[str], table: list[list[str]] | None = None) -> bytes:
    """Build a DOCX with one paragraph per entry and an optional trailing table."""
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    if table:
        grid = document.add_table(rows=len(table), cols=len(table[0]))
        for row_idx, row in enumerate(table):
            for col_idx, value in enumerate(row):
                grid.cell(row_idx, col_idx).text = value
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def pdf_bytes(pages: list[str], password: str | None = None) -> bytes:
    """Build a PDF with one page per entry; empty strings make blank pages."""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    if password is None:
        data = doc.tobytes()
    else:
        data = doc.tobytes(
            encryption=fitz.PDF_ENCRYPT_AES_256,
            owner_pw=password + "-owner",
            user_pw=password,
        )
    doc.close()
    return data


def replace_zip_member(data: bytes, member: str, content: str) -> bytes:
    """Return a copy of a zip archive with one member's contents swapped out."""
    source = zipfile.ZipFile(io.BytesIO(data))
    buffer = io.BytesIO()
    with source, zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as target:
        for info in source.infolist():
            body = content.encode("utf-8") if info.filename == member else source.read(info)
            target.writestr(info, body)
    return buffer.getvalue()


def write_file(path: Path, data: bytes) -> Path:
    path.write_bytes(data)
    return path


class FakeClock:
    """Monotonic clock the test advances by hand (seconds)."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000


class FakeMillisClock:
    """Epoch-milliseconds clock for the position store."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def tick(self, ms: int = 1) -> int:
        self.now += ms
        return self.now
