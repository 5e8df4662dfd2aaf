from __future__ import annotations

import io
import logging
import posixpath
import xml.etree.ElementTree as ET
import zipfile
import zlib
from html.parser import HTMLParser
from typing import Dict, Iterator, List, Tuple

from ..errors import LoadFailureError, NoReadableTextError

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n"
CONTAINER_PATH = "META-INF/container.xml"
TEXT_MEDIA_PREFIXES = ("application/xhtml", "text/html", "text/plain")
TEXT_SUFFIXES = (".xhtml", ".html", ".htm", ".txt")


def extract_epub_text(data: bytes, name: str = "book.epub") -> str:
    """Return the text of every readable spine section, in reading order.

    Sections that cannot be read are skipped with a warning; the whole
    extraction only fails when no section yields text.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            sections = list(_section_texts(archive, name))
    except zipfile.BadZipFile as exc:
        raise LoadFailureError(f"Failed to load EPUB: {exc}") from exc

    if not sections:
        raise NoReadableTextError("EPUB contains no readable text content")
    return SECTION_SEPARATOR.join(sections)


def _section_texts(archive: zipfile.ZipFile, name: str) -> Iterator[str]:
    members = _reading_order(archive, _package_path(archive)) or _loose_documents(
        archive
    )
    for member in members:
        try:
            markup = archive.read(member).decode("utf-8", errors="ignore")
        except (KeyError, zipfile.BadZipFile, zlib.error) as exc:
            logger.warning(
                "Skipping unreadable EPUB section %s in %s: %s", member, name, exc
            )
            continue
        text = html_to_text(markup)
        if text:
            yield text


def _package_path(archive: zipfile.ZipFile) -> str:
    """Path of the OPF package document named by the container file."""
    try:
        container = ET.fromstring(archive.read(CONTAINER_PATH))
    except KeyError as exc:
        raise LoadFailureError(f"Failed to load EPUB: missing {CONTAINER_PATH}") from exc
    except ET.ParseError as exc:
        raise LoadFailureError(f"Failed to load EPUB: malformed {CONTAINER_PATH}") from exc
    rootfile = container.find(".//{*}rootfile")
    full_path = rootfile.get("full-path") if rootfile is not None else None
    if not full_path:
        raise LoadFailureError("Failed to load EPUB: no package document declared")
    return full_path


def _reading_order(archive: zipfile.ZipFile, package_path: str) -> List[str]:
    """Archive members listed in the spine that hold text, in spine order."""
    try:
        package = ET.fromstring(archive.read(package_path))
    except KeyError:
        logger.warning("EPUB package document %s is missing", package_path)
        return []
    except ET.ParseError:
        logger.warning("Unable to parse EPUB package document %s", package_path)
        return []

    manifest: Dict[str, Tuple[str, str]] = {
        item.get("id", ""): (item.get("href", ""), item.get("media-type", "").lower())
        for item in package.iterfind(".//{*}manifest/{*}item")
    }
    base = posixpath.dirname(package_path)
    members: List[str] = []
    for itemref in package.iterfind(".//{*}spine/{*}itemref"):
        href, media_type = manifest.get(itemref.get("idref", ""), ("", ""))
        if href and media_type.startswith(TEXT_MEDIA_PREFIXES):
            members.append(_member_path(base, href))
    return members


def _loose_documents(archive: zipfile.ZipFile) -> List[str]:
    # No usable spine: fall back to every text document, sorted by path.
    return sorted(
        member for member in archive.namelist() if member.lower().endswith(TEXT_SUFFIXES)
    )


def _member_path(base: str, href: str) -> str:
    href = href.partition("#")[0]
    return posixpath.normpath(posixpath.join(base, href)) if base else href


class _SectionTextParser(HTMLParser):
    """Collects visible text, one line per block element."""

    LINE_BREAK_TAGS = frozenset(
        {"p", "div", "br", "li", "ul", "ol", "section", "article", "blockquote", "tr"}
        | {f"h{level}" for level in range(1, 7)}
    )
    HIDDEN_TAGS = frozenset({"head", "script", "style"})

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.lines: List[str] = []
        self._line: List[str] = []
        self._hidden = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in self.HIDDEN_TAGS:
            self._hidden += 1
        elif tag == "br":
            self._end_line()

    def handle_endtag(self, tag: str) -> None:
        if tag in self.HIDDEN_TAGS:
            self._hidden = max(0, self._hidden - 1)
        elif tag in self.LINE_BREAK_TAGS:
            self._end_line()

    def handle_data(self, data: str) -> None:
        if not self._hidden:
            # Whitespace between inline elements still separates words.
            self._line.append(data)

    def close(self) -> None:
        super().close()
        self._end_line()

    def _end_line(self) -> None:
        line = " ".join("".join(self._line).split())
        self._line = []
        if line:
            self.lines.append(line)


def html_to_text(markup: str) -> str:
    """Visible text of an (X)HTML document with one line per block."""
    parser = _SectionTextParser()
    parser.feed(markup)
    parser.close()
    return "\n".join(parser.lines)
