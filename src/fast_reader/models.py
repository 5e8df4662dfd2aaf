from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping


@dataclass(slots=True, frozen=True)
class Document:
    """A parsed document ready for RSVP display."""

    words: tuple[str, ...]
    name: str
    total_words: int
    byte_size: int | None = None

    def __post_init__(self) -> None:
        if self.total_words != len(self.words):
            raise ValueError("total_words must equal the number of words.")
        if any(not word for word in self.words):
            raise ValueError("Document words must not contain empty strings.")

    def to_record(self) -> dict[str, Any]:
        """Return the plain output record for this document."""
        record: dict[str, Any] = {
            "words": list(self.words),
            "fileName": self.name,
            "totalWords": self.total_words,
        }
        if self.byte_size is not None:
            record["fileSize"] = self.byte_size
        return record


@dataclass(slots=True)
class SourceFile:
    """File-like input: a name, a declared media type, a size and its bytes."""

    name: str
    media_type: str
    size: int | None
    reader: Callable[[], bytes] = field(repr=False)

    def read(self) -> bytes:
        return self.reader()

    @classmethod
    def from_bytes(cls, name: str, data: bytes, media_type: str = "") -> SourceFile:
        return cls(name=name, media_type=media_type, size=len(data), reader=lambda: data)

    @classmethod
    def from_path(cls, path: str | Path, media_type: str | None = None) -> SourceFile:
        path = Path(path)
        if media_type is None:
            media_type = mimetypes.guess_type(path.name)[0] or ""
        return cls(
            name=path.name,
            media_type=media_type,
            size=path.stat().st_size,
            reader=path.read_bytes,
        )


@dataclass(slots=True, frozen=True)
class OVPSplit:
    """A word sliced around its optimal viewing position."""

    prefix: str
    letter: str
    suffix: str

    @property
    def word(self) -> str:
        return self.prefix + self.letter + self.suffix


@dataclass(slots=True, frozen=True)
class PlaybackState:
    """Snapshot of the playback engine."""

    current_index: int
    is_playing: bool
    speed_wpm: int


@dataclass(slots=True)
class ReadingPosition:
    """Saved reading progress for one document."""

    document_id: str
    name: str
    current_index: int
    total_words: int
    saved_at: int = 0
    speed_wpm: int = 250

    def to_record(self) -> dict[str, Any]:
        return {
            "documentId": self.document_id,
            "fileName": self.name,
            "currentWordIndex": self.current_index,
            "totalWords": self.total_words,
            "timestamp": self.saved_at,
            "speed": self.speed_wpm,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ReadingPosition:
        """Build a position from a stored record; raises KeyError/ValueError if malformed."""
        return cls(
            document_id=str(record["documentId"]),
            name=str(record.get("fileName", "")),
            current_index=int(record["currentWordIndex"]),
            total_words=int(record.get("totalWords", 0)),
            saved_at=int(record.get("timestamp", 0)),
            speed_wpm=int(record.get("speed", 250)),
        )
