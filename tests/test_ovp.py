import math

import pytest

from fast_reader.ovp import ovp_position, split_word


def _expected(length: int) -> int:
    if length <= 1:
        return 0
    if length <= 3:
        return 1
    if length <= 6:
        return 2
    if length <= 9:
        return math.floor(length * 0.35)
    return math.floor(length * 0.30)


@pytest.mark.parametrize("length", range(0, 31))
def test_ovp_position_follows_length_bands(length: int):
    """Position depends only on length and matches the banded table."""
    word = "x" * length
    assert ovp_position(word) == _expected(length)
    split = split_word(word)
    assert split.prefix + split.letter + split.suffix == word
    assert len(split.letter) == (1 if length else 0)


@pytest.mark.parametrize(
    ("length", "expected"),
    [(1, 0), (2, 1), (3, 1), (4, 2), (6, 2), (7, 2), (9, 3), (10, 3), (13, 3), (20, 6)],
)
def test_ovp_position_reference_points(length: int, expected: int):
    assert ovp_position("a" * length) == expected


def test_split_word_examples():
    split = split_word("reading")
    assert (split.prefix, split.letter, split.suffix) == ("re", "a", "ding")
    assert split_word("the").letter == "h"
    assert split_word("comprehension").letter == "p"


def test_split_word_keeps_punctuation():
    split = split_word("hello,")
    assert split.word == "hello,"
    assert split.letter == "l"


def test_split_empty_word_is_all_empty():
    split = split_word("")
    assert (split.prefix, split.letter, split.suffix) == ("", "", "")
