from __future__ import annotations

from ..errors import NoReadableTextError


def extract_plain_text(data: bytes, name: str = "document.txt") -> str:
    """Decode a text file as UTF-8; a leading BOM is dropped, bad bytes replaced."""
    text = data.decode("utf-8-sig", errors="replace")
    if not text.strip():
        raise NoReadableTextError("File contains no text content")
    return text
