"""Conversions between reading speed and per-word display time."""

from __future__ import annotations

import math

MIN_WPM = 50
MAX_WPM = 350
WARNING_WPM = 300
DEFAULT_WPM = 250


def clamp_wpm(wpm: float) -> float:
    return max(MIN_WPM, min(MAX_WPM, wpm))


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def wpm_to_ms(wpm: float) -> int:
    """Milliseconds each word is shown at ``wpm``, clamped to the allowed range."""
    return _round_half_up(60000 / clamp_wpm(wpm))


def ms_to_wpm(ms: float) -> int:
    """Words per minute for a per-word display time, clamped to the allowed range."""
    if ms <= 0:
        return MAX_WPM
    return int(clamp_wpm(_round_half_up(60000 / ms)))


def is_valid_wpm(wpm: float) -> bool:
    return MIN_WPM <= wpm <= MAX_WPM


def should_show_speed_warning(wpm: float) -> bool:
    """True when ``wpm`` is fast enough that comprehension tends to suffer."""
    return wpm > WARNING_WPM


def estimate_seconds(word_count: int, wpm: float) -> int:
    """Estimated reading time in whole seconds, rounded up."""
    if word_count <= 0 or wpm <= 0:
        return 0
    return math.ceil(word_count / wpm * 60)


def format_duration(seconds: int) -> str:
    """Render seconds as ``"45s"``, ``"5m 30s"`` or ``"1h 15m"``."""
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds}s"
    hours, remainder = divmod(seconds, 3600)
    minutes, remaining_seconds = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}h {minutes}m" if minutes > 0 else f"{hours}h"
    return f"{minutes}m {remaining_seconds}s" if remaining_seconds > 0 else f"{minutes}m"
