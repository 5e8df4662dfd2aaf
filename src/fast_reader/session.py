from __future__ import annotations

import logging
import time
from concurrent.futures import Future
from typing import Callable

from .config import ReaderConfig
from .models import Document, OVPSplit, ReadingPosition, SourceFile
from .ovp import split_word
from .pipeline import (
    PASTED_TEXT_NAME,
    DocumentLoader,
    assemble_document,
    document_from_text,
)
from .playback import Clock, PlaybackEngine
from .positions import PositionStore, document_id
from .scheduler import FrameScheduler
from .timing import estimate_seconds

logger = logging.getLogger(__name__)


class ReadingSession:
    """Ties one open document to its playback engine and saved position.

    The position is saved on pause, on every seek and on close, and restored
    when the same document is opened again.
    """

    def __init__(
        self,
        store: PositionStore,
        scheduler: FrameScheduler,
        config: ReaderConfig | None = None,
        *,
        clock: Clock = time.monotonic,
        loader: DocumentLoader | None = None,
        on_word: Callable[[int, OVPSplit], None] | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        self.config = config or ReaderConfig()
        self._store = store
        self._scheduler = scheduler
        self._load_token = 0
        self._activation_handle: int | None = None
        self._loader = loader or DocumentLoader(self.config)
        self.on_word = on_word
        self.on_complete = on_complete
        self.document: Document | None = None
        self.engine = PlaybackEngine(
            (),
            scheduler,
            speed_wpm=self.config.default_wpm,
            clock=clock,
            on_index_change=self._handle_index_change,
            on_complete=self._handle_complete,
        )

    @property
    def document_id(self) -> str | None:
        if self.document is None:
            return None
        return document_id(self.document.name, self.document.byte_size)

    def open(self, source: SourceFile, *, restore: bool = True) -> Document:
        """Assemble ``source`` synchronously and make it the active document."""
        self._release()
        document = assemble_document(source, self.config)
        self._activate(document, restore=restore)
        return document

    def open_async(
        self,
        source: SourceFile,
        *,
        restore: bool = True,
        on_error: Callable[[Exception], None] | None = None,
    ) -> Future[Document]:
        """Assemble ``source`` on the loader thread.

        The returned future resolves with the parsed document; it becomes the
        active document on the next frame, unless the session was closed or
        another document opened in the meantime.
        """
        self._release()
        token = self._load_token
        return self._loader.load(
            source,
            on_loaded=lambda document: self._queue_activation(document, token, restore),
            on_error=on_error,
        )

    def open_text(
        self, text: str, *, name: str = PASTED_TEXT_NAME, restore: bool = True
    ) -> Document:
        """Make pasted or piped text the active document."""
        self._release()
        document = document_from_text(text, name)
        self._activate(document, restore=restore)
        return document

    def close(self) -> None:
        """Save progress and release the active document."""
        self._release()

    def shutdown(self) -> None:
        self.close()
        self._loader.shutdown()

    def play(self) -> None:
        self.engine.play()

    def pause(self) -> None:
        self.engine.pause()
        self.save_position()

    def toggle(self) -> None:
        if self.engine.is_playing:
            self.pause()
        else:
            self.play()

    def next(self) -> None:
        self.engine.next()
        self.save_position()

    def previous(self) -> None:
        self.engine.previous()
        self.save_position()

    def jump_to(self, index: int) -> None:
        self.engine.jump_to(index)
        self.save_position()

    def set_speed(self, wpm: int) -> None:
        self.engine.speed_wpm = wpm

    def current_split(self) -> OVPSplit:
        return split_word(self.engine.current_word)

    def progress(self) -> float:
        return self.engine.progress

    def remaining_seconds(self) -> int:
        remaining = self.engine.total_words - self.engine.current_index - 1
        return estimate_seconds(remaining, self.engine.speed_wpm)

    def save_position(self) -> None:
        doc_id = self.document_id
        if doc_id is None or self.document is None:
            return
        self._store.save(
            ReadingPosition(
                document_id=doc_id,
                name=self.document.name,
                current_index=self.engine.current_index,
                total_words=self.document.total_words,
                speed_wpm=self.engine.speed_wpm,
            )
        )

    def _activate(self, document: Document, *, restore: bool) -> None:
        self.document = document
        self.engine.load_words(document.words)
        restored = restore and self._restore_position()
        if not restored:
            self._emit_word(self.engine.current_index)

    def _restore_position(self) -> bool:
        """Jump to the saved position; True when that moved off the first word."""
        doc_id = self.document_id
        if doc_id is None:
            return False
        saved = self._store.load(doc_id)
        if saved is None:
            return False
        self.engine.speed_wpm = saved.speed_wpm
        self.engine.jump_to(saved.current_index)
        logger.info(
            "Restored %s at word %d of %d",
            saved.name,
            self.engine.current_index + 1,
            self.engine.total_words,
        )
        return self.engine.current_index != 0

    def _queue_activation(self, document: Document, token: int, restore: bool) -> None:
        # Loader thread: hand the document to the frame loop.
        self._activation_handle = self._scheduler.request_frame(
            lambda: self._finish_activation(document, token, restore)
        )

    def _finish_activation(self, document: Document, token: int, restore: bool) -> None:
        self._activation_handle = None
        if token != self._load_token:
            logger.debug("Dropping %s; its load was superseded", document.name)
            return
        self._activate(document, restore=restore)

    def _release(self) -> None:
        self._load_token += 1
        # In-flight extraction first, then the pending frames.
        self._loader.cancel()
        if self._activation_handle is not None:
            self._scheduler.cancel_frame(self._activation_handle)
            self._activation_handle = None
        if self.document is not None:
            self.engine.pause()
            self.save_position()
        self.engine.load_words(())
        self.document = None

    def _handle_index_change(self, index: int) -> None:
        self._emit_word(index)

    def _handle_complete(self) -> None:
        self.save_position()
        if self.on_complete is not None:
            self.on_complete()

    def _emit_word(self, index: int) -> None:
        if self.on_word is not None and self.engine.total_words:
            self.on_word(index, split_word(self.engine.words[index]))
