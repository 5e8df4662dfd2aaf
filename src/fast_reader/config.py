from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

DEFAULT_POSITIONS_PATH = "~/.fast_reader/positions.json"


@dataclass(slots=True)
class ReaderConfig:
    """Configuration options for ingestion, playback and position tracking."""

    default_wpm: int = 250
    max_file_size: int = 50 * 1024 * 1024
    large_file_threshold: int = 10 * 1024 * 1024
    max_positions: int = 50
    max_position_age_days: int = 30
    positions_path: str = DEFAULT_POSITIONS_PATH
    frame_interval: float = 1 / 60

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable dictionary representation of the configuration."""
        return dict(asdict(self))

    @property
    def resolved_positions_path(self) -> Path:
        return Path(self.positions_path).expanduser()


def _build_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    allowed = {field.name for field in fields(ReaderConfig)}
    return {key: data[key] for key in data if key in allowed}


def config_from_dict(data: Mapping[str, Any] | None) -> ReaderConfig:
    """Build a ReaderConfig from a dictionary-like input."""
    if data is None:
        return ReaderConfig()
    return ReaderConfig(**_build_kwargs(data))


def config_from_yaml(path: str | Path) -> ReaderConfig:
    """Load configuration from a YAML file."""
    contents = Path(path).read_text(encoding="utf-8")
    parsed = yaml.safe_load(contents) or {}
    if not isinstance(parsed, MutableMapping):
        raise ValueError("Configuration YAML must define a mapping.")
    return config_from_dict(parsed)


def load_config(path: str | Path | None = None) -> ReaderConfig:
    """Load configuration from YAML when provided, otherwise return defaults."""
    if path is None:
        return ReaderConfig()
    return config_from_yaml(path)
