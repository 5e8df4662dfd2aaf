from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable

from .config import ReaderConfig
from .errors import (
    EmptyContentError,
    LoadCancelledError,
    OversizeInputError,
    UnsupportedTypeError,
)
from .extractors import extract
from .formats import UNSUPPORTED_MESSAGE, FormatKind, identify
from .models import Document, SourceFile
from .textutils import parse_words, validate_text

logger = logging.getLogger(__name__)

_MB = 1024 * 1024
PASTED_TEXT_NAME = "Pasted Text"


def assemble_document(source: SourceFile, config: ReaderConfig | None = None) -> Document:
    """Detect, extract, normalize and segment ``source`` into a Document."""
    config = config or ReaderConfig()
    kind = identify(source.name, source.media_type)
    if kind is FormatKind.UNSUPPORTED:
        raise UnsupportedTypeError(UNSUPPORTED_MESSAGE)

    check_size(source.size, config)
    data = source.read()
    # Size unknown up front: check the bytes actually read.
    if source.size is None:
        check_size(len(data), config)

    raw_text = extract(kind, data, source.name)
    words = parse_words(raw_text)
    if not words:
        raise EmptyContentError(
            "This file contains no text. Please upload a file with readable content."
        )

    logger.info("Assembled %s (%s): %d words", source.name, kind.value, len(words))
    return Document(
        words=tuple(words),
        name=source.name,
        total_words=len(words),
        byte_size=source.size,
    )


def document_from_text(text: str, name: str = PASTED_TEXT_NAME) -> Document:
    """Build a Document from text typed or pasted directly, with no source file."""
    validation = validate_text(text)
    if not validation.is_valid:
        raise EmptyContentError(validation.error or "Invalid text")
    if validation.warning:
        logger.warning("%s: %s", name, validation.warning)
    words = parse_words(text)
    logger.info("Assembled %s: %d words", name, len(words))
    return Document(
        words=tuple(words),
        name=name,
        total_words=len(words),
        byte_size=len(text.encode("utf-8")),
    )


def check_size(size: int | None, config: ReaderConfig) -> None:
    if size is None:
        return
    if size > config.max_file_size:
        raise OversizeInputError(
            f"File too large. Maximum file size is {config.max_file_size / _MB:.0f} MB. "
            f"Your file: {size / _MB:.2f} MB"
        )
    if size > config.large_file_threshold:
        logger.warning(
            "Large file detected (%.2f MB). Parsing may take longer.", size / _MB
        )


class DocumentLoader:
    """Runs document assembly on a worker thread; only the latest load is delivered.

    Starting a new load or calling :meth:`cancel` discards the result of any
    load still in flight, so a slow parse can never overwrite a newer document.
    """

    def __init__(
        self,
        config: ReaderConfig | None = None,
        executor: ThreadPoolExecutor | None = None,
        assembler: Callable[[SourceFile, ReaderConfig], Document] = assemble_document,
    ) -> None:
        self._config = config or ReaderConfig()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="fast-reader-load"
        )
        self._assembler = assembler
        # Reentrant so a callback may start or cancel another load.
        self._lock = threading.RLock()
        self._generation = 0
        self._pending: Future[Document] | None = None

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._pending is not None and not self._pending.done()

    def load(
        self,
        source: SourceFile,
        on_loaded: Callable[[Document], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> Future[Document]:
        """Start assembling ``source``; callbacks run only if not superseded."""
        with self._lock:
            self._generation += 1
            generation = self._generation
            if self._pending is not None:
                self._pending.cancel()
            result: Future[Document] = Future()
            self._pending = result

        def run() -> None:
            if not result.set_running_or_notify_cancel():
                return
            outcome: Document | Exception
            try:
                outcome = self._assembler(source, self._config)
            except Exception as exc:
                outcome = exc
            self._settle(result, generation, outcome, on_loaded, on_error)

        self._executor.submit(run)
        return result

    def cancel(self) -> None:
        """Discard any in-flight load.

        Blocks while a delivery callback is running; once this returns, no
        callback of an earlier load will start.
        """
        with self._lock:
            self._generation += 1
            pending, self._pending = self._pending, None
        if pending is not None and not pending.cancel() and not pending.done():
            logger.debug("Load already running; its result will be discarded")

    def shutdown(self) -> None:
        self.cancel()
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def _settle(
        self,
        result: Future[Document],
        generation: int,
        outcome: Document | Exception,
        on_loaded: Callable[[Document], None] | None,
        on_error: Callable[[Exception], None] | None,
    ) -> None:
        # The generation check and the callback share one critical section
        # with cancel(), so a cancelled load can never deliver.
        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding result of superseded load")
                result.set_exception(LoadCancelledError("Document load was cancelled."))
                return
            # Callbacks run before the future resolves.
            if isinstance(outcome, Exception):
                try:
                    if on_error is not None:
                        on_error(outcome)
                finally:
                    result.set_exception(outcome)
                return
            if on_loaded is not None:
                try:
                    on_loaded(outcome)
                except Exception as exc:
                    logger.exception("Loaded-document callback failed")
                    result.set_exception(exc)
                    return
            result.set_result(outcome)
