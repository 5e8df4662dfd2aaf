from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, TypedDict

import typer
import yaml

from .config import ReaderConfig, load_config
from .errors import IngestionError
from .models import Document, OVPSplit, SourceFile
from .ovp import split_word
from .pipeline import assemble_document, document_from_text
from .positions import JsonFileStorage, PositionStore
from .scheduler import CooperativeFrameScheduler
from .session import ReadingSession
from .timing import (
    MAX_WPM,
    MIN_WPM,
    estimate_seconds,
    format_duration,
    should_show_speed_warning,
)

app = typer.Typer(help="Fast Reader: RSVP speed reading CLI.", no_args_is_help=True)

# Column at which the highlighted letter is pinned while reading.
PIVOT_COLUMN = 14
STDIN_MARKER = "-"
DOCUMENT_HELP = "Path to a .txt, .pdf, .epub or .docx file, or - to read text from stdin."


class DocumentSummary(TypedDict):
    fileName: str
    totalWords: int
    fileSize: int | None
    wpm: int
    estimatedSeconds: int
    estimatedTime: str


class PositionPayload(TypedDict):
    documentId: str
    fileName: str
    currentWordIndex: int
    totalWords: int
    timestamp: int
    speed: int


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "WARNING", "--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)."
    ),
) -> None:
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def info(
    file: str = typer.Argument(..., help=DOCUMENT_HELP),
    wpm: int | None = typer.Option(None, "--wpm", min=MIN_WPM, max=MAX_WPM),
    config: Path | None = typer.Option(None, "--config", "-c"),
) -> None:
    """Parse a document and emit a JSON summary with an estimated reading time."""
    cfg = load_config(config)
    document = _load_document(file, cfg)
    speed = wpm or cfg.default_wpm
    seconds = estimate_seconds(document.total_words, speed)
    summary: DocumentSummary = {
        "fileName": document.name,
        "totalWords": document.total_words,
        "fileSize": document.byte_size,
        "wpm": speed,
        "estimatedSeconds": seconds,
        "estimatedTime": format_duration(seconds),
    }
    typer.echo(json.dumps(summary, indent=2))


@app.command()
def words(
    file: str = typer.Argument(..., help=DOCUMENT_HELP),
    limit: int | None = typer.Option(None, "--limit", "-n", min=1),
    config: Path | None = typer.Option(None, "--config", "-c"),
) -> None:
    """Print the word sequence with each word's OVP letter in brackets."""
    cfg = load_config(config)
    document = _load_document(file, cfg)
    selected = document.words if limit is None else document.words[:limit]
    for word in selected:
        split = split_word(word)
        typer.echo(f"{split.prefix}[{split.letter}]{split.suffix}")


@app.command()
def read(
    file: str = typer.Argument(..., help=DOCUMENT_HELP),
    wpm: int | None = typer.Option(None, "--wpm", min=MIN_WPM, max=MAX_WPM),
    restart: bool = typer.Option(
        False, "--restart", help="Ignore any saved position and start at word 1."
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
) -> None:
    """Read a document in the terminal, one word at a time."""
    cfg = load_config(config)
    scheduler = CooperativeFrameScheduler(frame_interval=cfg.frame_interval)
    session = ReadingSession(
        _position_store(cfg),
        scheduler,
        cfg,
        on_word=lambda _index, split: typer.echo(render_word(split), nl=False),
    )
    try:
        try:
            if file == STDIN_MARKER:
                session.open_text(_read_stdin(), restore=not restart)
            else:
                session.open(_source_from_path(file), restore=not restart)
        except IngestionError as exc:
            raise typer.BadParameter(str(exc)) from exc
        if wpm is not None:
            session.set_speed(wpm)
        if should_show_speed_warning(session.engine.speed_wpm):
            typer.echo("High speed may reduce comprehension.", err=True)
        session.play()
        try:
            scheduler.run()
        except KeyboardInterrupt:
            session.pause()
        typer.echo("")
        typer.echo(
            f"Stopped at word {session.engine.current_index + 1} of "
            f"{session.engine.total_words} ({session.progress():.0f}%)"
        )
    finally:
        session.shutdown()


@app.command()
def positions(config: Path | None = typer.Option(None, "--config", "-c")) -> None:
    """List saved reading positions as JSON, most recent first."""
    store = _position_store(load_config(config))
    payload: List[PositionPayload] = [
        PositionPayload(**position.to_record()) for position in store.all()
    ]
    typer.echo(json.dumps({"positions": payload}, indent=2))


@app.command()
def forget(
    document_id: str = typer.Argument(...),
    config: Path | None = typer.Option(None, "--config", "-c"),
) -> None:
    """Delete the saved position for one document."""
    _position_store(load_config(config)).remove(document_id)
    typer.echo(f"Forgot {document_id}")


@app.command("clear-positions")
def clear_positions(config: Path | None = typer.Option(None, "--config", "-c")) -> None:
    """Delete every saved reading position."""
    _position_store(load_config(config)).clear()
    typer.echo("Cleared all reading positions")


@app.command("print-config")
def print_config() -> None:
    """Print the default configuration as YAML."""
    cfg = ReaderConfig()
    typer.echo(yaml.safe_dump(cfg.to_dict(), sort_keys=False))


def main() -> None:
    app()


def render_word(split: OVPSplit, pivot: int = PIVOT_COLUMN) -> str:
    """Render a word so its OVP letter always lands on the same column."""
    padding = " " * max(0, pivot - len(split.prefix))
    letter = typer.style(split.letter, fg=typer.colors.RED, bold=True)
    return f"\r\x1b[2K{padding}{split.prefix}{letter}{split.suffix}"


def _load_document(target: str, config: ReaderConfig) -> Document:
    """Read and assemble a document, surfacing ingestion failures as CLI errors."""
    try:
        if target == STDIN_MARKER:
            return document_from_text(_read_stdin())
        return assemble_document(_source_from_path(target), config)
    except IngestionError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _source_from_path(target: str) -> SourceFile:
    path = Path(target)
    if not path.is_file():
        raise typer.BadParameter(f"File '{target}' does not exist.")
    return SourceFile.from_path(path)


def _read_stdin() -> str:
    return typer.get_text_stream("stdin").read()


def _position_store(config: ReaderConfig) -> PositionStore:
    return PositionStore(
        JsonFileStorage(config.resolved_positions_path),
        max_positions=config.max_positions,
        max_age_days=config.max_position_age_days,
    )


if __name__ == "__main__":
    main()
