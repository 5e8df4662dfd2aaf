"""Drift-corrected RSVP playback.

The engine never adds "one word per tick". Each frame recomputes the current
index from the anchor ``(time, index)`` captured when playback last started
or was steered, so timing error cannot accumulate across frames. Every
explicit operation re-anchors, which also turns any stale frame into a no-op.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable, Sequence

from .models import PlaybackState
from .scheduler import FrameScheduler
from .textutils import calculate_progress
from .timing import DEFAULT_WPM, MAX_WPM, MIN_WPM, wpm_to_ms

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class PlaybackEngine:
    """Two-state (paused/playing) controller over a fixed word sequence."""

    def __init__(
        self,
        words: Sequence[str],
        scheduler: FrameScheduler,
        *,
        speed_wpm: int = DEFAULT_WPM,
        clock: Clock = time.monotonic,
        on_index_change: Callable[[int], None] | None = None,
        on_state_change: Callable[[bool], None] | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._clock = clock
        self._words: tuple[str, ...] = tuple(words)
        self._speed_wpm = _clamp_speed(speed_wpm)
        self._index = 0
        self._playing = False
        self._anchor_index = 0
        self._anchor_time = 0.0
        self._frame_handle: int | None = None
        self.on_index_change = on_index_change
        self.on_state_change = on_state_change
        self.on_complete = on_complete

    @property
    def words(self) -> tuple[str, ...]:
        return self._words

    @property
    def total_words(self) -> int:
        return len(self._words)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_word(self) -> str:
        if not self._words:
            return ""
        return self._words[self._index]

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def progress(self) -> float:
        return calculate_progress(self._index, self.total_words)

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            current_index=self._index,
            is_playing=self._playing,
            speed_wpm=self._speed_wpm,
        )

    @property
    def speed_wpm(self) -> int:
        return self._speed_wpm

    @speed_wpm.setter
    def speed_wpm(self, value: int) -> None:
        self._speed_wpm = _clamp_speed(value)
        if self._playing:
            # Elapsed time measured at the old rate must not leak into the new one.
            self._reanchor()

    def play(self) -> None:
        if self._playing or not self._words:
            return
        if self._index >= self.total_words - 1:
            self._set_index(0)
        self._reanchor()
        self._set_playing(True)
        if self.total_words == 1:
            self._complete()
            return
        self._schedule_frame()

    def pause(self) -> None:
        self._cancel_frame()
        self._anchor_index = self._index
        self._set_playing(False)

    def toggle(self) -> None:
        if self._playing:
            self.pause()
        else:
            self.play()

    def next(self) -> None:
        self.jump_to(self._index + 1)

    def previous(self) -> None:
        self.jump_to(self._index - 1)

    def jump_to(self, index: int) -> None:
        self._set_index(self._clamp_index(index))
        self._anchor_index = self._index
        if self._playing:
            self._anchor_time = self._clock()

    def reset(self) -> None:
        self._cancel_frame()
        self._set_index(0)
        self._anchor_index = 0
        self._set_playing(False)

    def load_words(self, words: Sequence[str]) -> None:
        """Swap in a new word sequence; playback stops and restarts at 0."""
        self._cancel_frame()
        self._set_playing(False)
        self._words = tuple(words)
        self._anchor_index = 0
        self._set_index(0)

    def _on_frame(self) -> None:
        self._frame_handle = None
        if not self._playing:
            return
        elapsed_ms = (self._clock() - self._anchor_time) * 1000
        ms_per_word = wpm_to_ms(self._speed_wpm)
        words_elapsed = max(0, math.floor(elapsed_ms / ms_per_word))
        target = self._anchor_index + words_elapsed
        last = self.total_words - 1
        if target >= last:
            self._set_index(last)
            self._complete()
            return
        self._set_index(target)
        self._schedule_frame()

    def _complete(self) -> None:
        self._cancel_frame()
        self._anchor_index = self._index
        self._set_playing(False)
        logger.debug("Playback reached the last of %d words", self.total_words)
        if self.on_complete is not None:
            self.on_complete()

    def _reanchor(self) -> None:
        self._anchor_index = self._index
        self._anchor_time = self._clock()

    def _schedule_frame(self) -> None:
        if self._frame_handle is None:
            self._frame_handle = self._scheduler.request_frame(self._on_frame)

    def _cancel_frame(self) -> None:
        if self._frame_handle is not None:
            self._scheduler.cancel_frame(self._frame_handle)
            self._frame_handle = None

    def _clamp_index(self, index: int) -> int:
        if not self._words:
            return 0
        return max(0, min(int(index), self.total_words - 1))

    def _set_index(self, index: int) -> None:
        if index == self._index:
            return
        self._index = index
        if self.on_index_change is not None:
            self.on_index_change(index)

    def _set_playing(self, playing: bool) -> None:
        if playing == self._playing:
            return
        self._playing = playing
        if self.on_state_change is not None:
            self.on_state_change(playing)


def _clamp_speed(value: int) -> int:
    return int(max(MIN_WPM, min(MAX_WPM, value)))
