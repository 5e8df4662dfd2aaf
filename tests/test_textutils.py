import pytest

from fast_reader.textutils import (
    calculate_progress,
    normalize_text,
    parse_words,
    progress_to_index,
    segment,
    strip_punctuation,
    validate_text,
    word_count,
)

SAMPLES = [
    "Hello, world!",
    "  leading and trailing  ",
    "line one\r\nline two\rline three\nline four",
    "para one\n\n\n\npara two",
    "tabs\tand   spaces mixed",
    "It's a well-known fact.",
    "\n\n\n",
    "",
]


def test_parse_words_keeps_punctuation_attached():
    assert parse_words("Hello, world!") == ["Hello,", "world!"]


def test_parse_words_keeps_contractions_and_hyphens():
    assert parse_words("It's a well-known fact.") == ["It's", "a", "well-known", "fact."]


def test_normalize_text_unifies_line_endings_and_whitespace():
    assert normalize_text("a\r\nb\rc\nd") == "a b c d"
    assert normalize_text("  a \t  b  ") == "a b"
    assert normalize_text("one\n\n\n\ntwo") == "one two"


@pytest.mark.parametrize("text", SAMPLES)
def test_normalize_text_is_idempotent(text: str):
    once = normalize_text(text)
    assert normalize_text(once) == once


@pytest.mark.parametrize("text", SAMPLES)
def test_word_count_matches_segmentation(text: str):
    assert word_count(text) == len(segment(normalize_text(text)))


def test_whitespace_only_text_has_no_words():
    assert parse_words("   \n\t ") == []
    assert word_count("") == 0


def test_progress_helpers():
    assert calculate_progress(0, 0) == 0
    assert calculate_progress(0, 4) == 25
    assert calculate_progress(3, 4) == 100
    assert progress_to_index(50, 10) == 5
    assert progress_to_index(100, 10) == 9
    assert progress_to_index(-5, 10) == 0
    assert progress_to_index(50, 0) == 0


def test_validate_text():
    assert not validate_text("   ").is_valid
    single = validate_text("word")
    assert single.is_valid and single.warning
    assert validate_text("two words") == validate_text("two words")
    assert validate_text("two words").warning is None


def test_strip_punctuation():
    assert strip_punctuation("hello,") == "hello"
    assert strip_punctuation("'world'") == "world"
    assert strip_punctuation("don't") == "don't"
