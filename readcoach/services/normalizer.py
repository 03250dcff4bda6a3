"""Token normalisation shared by matching, classification and the review list."""

from __future__ import annotations

import unicodedata

APOSTROPHE = "'"

# Curly quotes, modifier letters and stray accents that recognisers and
# typeset text use in place of a plain apostrophe.
_APOSTROPHE_VARIANTS = str.maketrans({
    "’": APOSTROPHE,  # right single quotation mark
    "‘": APOSTROPHE,  # left single quotation mark
    "ʼ": APOSTROPHE,  # modifier letter apostrophe
    "′": APOSTROPHE,  # prime
    "`": APOSTROPHE,
    "´": APOSTROPHE,  # acute accent
    '"': APOSTROPHE,
    "“": APOSTROPHE,
    "”": APOSTROPHE,
})


def _is_edge_char(ch: str) -> bool:
    """Punctuation or symbol characters that never belong to a word's edges."""
    return unicodedata.category(ch)[0] in ("P", "S")


def _strip_edges(word: str) -> str:
    start, end = 0, len(word)
    while start < end and _is_edge_char(word[start]):
        start += 1
    while end > start and _is_edge_char(word[end - 1]):
        end -= 1
    return word[start:end]


def _fold_diacritics(word: str) -> str:
    decomposed = unicodedata.normalize("NFKD", word)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalise(token: str) -> str:
    """Lower-case, unify apostrophes, fold diacritics and strip edge punctuation.

    Inner apostrophes survive, so ``"It’s,"`` becomes ``"it's"``.
    """
    if not token:
        return ""
    word = token.strip().lower().translate(_APOSTROPHE_VARIANTS)
    word = _fold_diacritics(word)
    return _strip_edges(word)


def clean_word(token: str) -> str:
    """Display form of a paragraph word: edge punctuation removed, case kept."""
    return _strip_edges(token.strip().translate(_APOSTROPHE_VARIANTS))


def tokenize(text: str) -> list[str]:
    """Split on whitespace and newlines, dropping empties."""
    return text.split()
