"""Optimal viewing position (OVP): the letter the eye should fixate on.

The position depends only on the word's length. Short words fixate on the
second or third character; longer words roughly a third of the way in.
"""

from __future__ import annotations

import math

from .models import OVPSplit


def ovp_position(word: str) -> int:
    """Return the 0-based index of the letter to highlight in ``word``.

    >>> ovp_position("the")
    1
    >>> ovp_position("reading")
    2
    >>> ovp_position("comprehension")
    3
    """
    length = len(word)
    if length <= 1:
        return 0
    if length <= 3:
        return 1
    if length <= 6:
        return 2
    if length <= 9:
        return math.floor(length * 0.35)
    return math.floor(length * 0.30)


def split_word(word: str) -> OVPSplit:
    """Slice ``word`` into the text before, at and after its OVP letter."""
    if not word:
        return OVPSplit(prefix="", letter="", suffix="")
    index = ovp_position(word)
    return OVPSplit(
        prefix=word[:index],
        letter=word[index : index + 1],
        suffix=word[index + 1 :],
    )
