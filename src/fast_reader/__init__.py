"""
fast_reader package exports convenience helpers for library consumers.
"""

from __future__ import annotations

from .config import ReaderConfig, config_from_dict, config_from_yaml, load_config
from .models import Document, OVPSplit, PlaybackState, ReadingPosition, SourceFile
from .ovp import ovp_position, split_word
from .pipeline import DocumentLoader, assemble_document, document_from_text
from .playback import PlaybackEngine
from .positions import JsonFileStorage, MemoryStorage, PositionStore, document_id
from .session import ReadingSession

__all__ = [
    "ReaderConfig",
    "config_from_dict",
    "config_from_yaml",
    "load_config",
    "Document",
    "OVPSplit",
    "PlaybackState",
    "ReadingPosition",
    "SourceFile",
    "ovp_position",
    "split_word",
    "DocumentLoader",
    "assemble_document",
    "document_from_text",
    "PlaybackEngine",
    "JsonFileStorage",
    "MemoryStorage",
    "PositionStore",
    "document_id",
    "ReadingSession",
]

__version__ = "0.1.0"
