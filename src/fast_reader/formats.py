from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet


class FormatKind(str, Enum):
    """Closed set of source formats the reader can ingest."""

    PLAIN_TEXT = "txt"
    PDF = "pdf"
    EPUB = "epub"
    DOCX = "docx"
    UNSUPPORTED = "unsupported"


# Ordered the way they are listed to users.
SUPPORTED_EXTENSIONS: Dict[str, FormatKind] = {
    ".txt": FormatKind.PLAIN_TEXT,
    ".pdf": FormatKind.PDF,
    ".epub": FormatKind.EPUB,
    ".docx": FormatKind.DOCX,
}

# User agents often omit the media type or send a generic one.
GENERIC_MEDIA_TYPES: FrozenSet[str] = frozenset({"", "application/octet-stream"})

MEDIA_TYPES: Dict[FormatKind, FrozenSet[str]] = {
    FormatKind.PLAIN_TEXT: frozenset({"text/plain", "text/txt"}),
    FormatKind.PDF: frozenset({"application/pdf", "application/x-pdf"}),
    FormatKind.EPUB: frozenset(
        {"application/epub+zip", "application/epub", "application/x-epub+zip"}
    ),
    FormatKind.DOCX: frozenset(
        {
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "application/docx",
        }
    ),
}

UNSUPPORTED_MESSAGE = (
    "Unsupported file type. Please upload a .txt, .pdf, .epub, or .docx file."
)


def file_extension(name: str) -> str:
    """Return the lower-cased suffix of ``name`` including the dot, or ''."""
    dot = name.rfind(".")
    if dot == -1:
        return ""
    return name[dot:].lower()


def identify(name: str, declared_type: str | None = "") -> FormatKind:
    """Classify a file by its name suffix, cross-checked against its media type."""
    kind = SUPPORTED_EXTENSIONS.get(file_extension(name))
    if kind is None:
        return FormatKind.UNSUPPORTED
    media_type = _base_media_type(declared_type)
    if media_type in GENERIC_MEDIA_TYPES or media_type in MEDIA_TYPES[kind]:
        return kind
    return FormatKind.UNSUPPORTED


def is_supported(name: str, declared_type: str | None = "") -> bool:
    return identify(name, declared_type) is not FormatKind.UNSUPPORTED


def _base_media_type(declared_type: str | None) -> str:
    # Drop parameters such as "; charset=utf-8".
    if not declared_type:
        return ""
    return declared_type.split(";", 1)[0].strip().lower()
