"""Tests for token normalisation."""

from readcoach.services.normalizer import clean_word, normalise, tokenize


def test_lowercases_and_strips_edge_punctuation():
    assert normalise("Hello,") == "hello"
    assert normalise('"Hello!"') == "hello"
    assert normalise("(park).") == "park"


def test_unifies_apostrophes_and_keeps_inner_ones():
    assert normalise("It’s,") == "it's"
    assert normalise("it`s") == "it's"
    assert normalise("they‘re") == "they're"


def test_folds_diacritics():
    assert normalise("Café") == "cafe"
    assert normalise("naïve") == "naive"


def test_symbols_are_stripped_from_edges():
    assert normalise("$15") == "15"
    assert normalise("15%") == "15"


def test_empty_and_punctuation_only_tokens():
    assert normalise("") == ""
    assert normalise("...") == ""
    assert normalise("—") == ""


def test_clean_word_keeps_case():
    assert clean_word("park!") == "park"
    assert clean_word("“Tom’s”") == "Tom's"


def test_tokenize_splits_on_any_whitespace():
    assert tokenize("  the cat\nsat\t on ") == ["the", "cat", "sat", "on"]
    assert tokenize("") == []
