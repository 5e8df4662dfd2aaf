from __future__ import annotations


class FastReaderError(RuntimeError):
    """Base class for all fast_reader failures."""


class IngestionError(FastReaderError):
    """Raised when a document cannot be turned into a word sequence.

    The message is user-facing; callers may show it verbatim.
    """


class UnsupportedTypeError(IngestionError):
    """Raised when the file name or media type is not a supported format."""


class OversizeInputError(IngestionError):
    """Raised when the input exceeds the configured size limit."""


class LoadFailureError(IngestionError):
    """Raised when a container is corrupt, encrypted or not what it claims."""


class NoReadableTextError(IngestionError):
    """Raised when a container parsed but held no extractable text."""


class EmptyContentError(IngestionError):
    """Raised when normalization leaves zero words."""


class LoadCancelledError(FastReaderError):
    """Raised when a document load was cancelled or superseded."""


class PersistenceError(FastReaderError):
    """Raised by storage backends when a read or write fails."""


class StorageQuotaError(PersistenceError):
    """Raised by storage backends when a write exceeds the available quota."""
