"""Decide whether a recognised token counts as a reading of an expected word.

Speech-to-text output for a learner reading aloud is noisy in predictable
ways: homophones come back with the "wrong" spelling, possessives and
plurals collapse into each other, contractions lose their apostrophes and
accented speech swaps a handful of phonemes.  Each of those is covered by
an independent rule below; a token matches when any rule accepts it.

Rules are pure predicates over normalised strings and never raise.
"""

from __future__ import annotations

import logging
from typing import Sequence

from readcoach.services.normalizer import normalise

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Possessive / contraction forms
# ---------------------------------------------------------------------------

# (possessive or contracted form, base form), matched in either direction.
_IRREGULAR_POSSESSIVES: tuple[tuple[str, str], ...] = (
    ("children's", "children"),
    ("men's", "men"),
    ("women's", "women"),
    ("people's", "people"),
    ("mice's", "mice"),
    ("geese's", "geese"),
    ("feet's", "feet"),
    ("teeth's", "teeth"),
    ("knives's", "knives"),
    ("lives's", "lives"),
    ("wives's", "wives"),
    ("wolves's", "wolves"),
    ("leaves's", "leaves"),
    ("shelves's", "shelves"),
    ("calves's", "calves"),
    ("halves's", "halves"),
    ("thieves's", "thieves"),
    ("loaves's", "loaves"),
    ("scarves's", "scarves"),
    ("hooves's", "hooves"),
    ("elves's", "elves"),
    ("selves's", "selves"),
    ("how's", "how"),
    ("what's", "what"),
    ("where's", "where"),
    ("when's", "when"),
    ("why's", "why"),
    ("who's", "who"),
    ("it's", "it"),
    ("he's", "he"),
    ("she's", "she"),
    ("that's", "that"),
    ("there's", "there"),
    ("we're", "we"),
    ("they're", "they"),
    ("you're", "you"),
    ("i'm", "i"),
    ("i'll", "i"),
    ("i've", "i"),
    ("i'd", "i"),
    ("he'll", "he"),
    ("she'll", "she"),
    ("we'll", "we"),
    ("they'll", "they"),
    ("you'll", "you"),
    ("he'd", "he"),
    ("she'd", "she"),
    ("we'd", "we"),
    ("they'd", "they"),
    ("you'd", "you"),
    ("we've", "we"),
    ("they've", "they"),
    ("you've", "you"),
)


def _possessive_match(expected: str, spoken: str) -> bool:
    """``"industry's"`` ~ ``"industries"``, ``"dog's"`` ~ ``"dogs"`` and friends."""
    # Expected is possessive, spoken is plural
    if expected.endswith("'s"):
        base = expected[:-2]
        if spoken in (base + "s", base + "es"):
            return True
        if base.endswith("y") and spoken == base[:-1] + "ies":
            return True

    # Expected is plural, spoken is possessive
    if spoken.endswith("'s"):
        base = spoken[:-2]
        if expected in (base + "s", base + "es"):
            return True
        if base.endswith("y") and expected == base[:-1] + "ies":
            return True

    for possessive, base in _IRREGULAR_POSSESSIVES:
        if (expected == possessive and spoken == base) or (
            expected == base and spoken == possessive
        ):
            return True
    return False


# ---------------------------------------------------------------------------
# Homonyms
# ---------------------------------------------------------------------------

_HOMONYM_GROUPS: tuple[frozenset[str], ...] = tuple(
    frozenset(group)
    for group in (
        ("soar", "sore"),
        ("their", "there", "they're"),
        ("to", "too", "two"),
        ("your", "you're"),
        ("its", "it's"),
        ("whose", "who's"),
        ("where", "wear", "ware"),
        ("here", "hear"),
        ("see", "sea"),
        ("meet", "meat"),
        ("write", "right", "rite"),
        ("read", "reed"),
        ("blue", "blew"),
        ("new", "knew"),
        ("know", "no"),
        ("one", "won"),
        ("son", "sun"),
        ("break", "brake"),
        ("peace", "piece"),
        ("plain", "plane"),
        ("rain", "reign", "rein"),
        ("sail", "sale"),
        ("sight", "site", "cite"),
        ("steal", "steel"),
        ("tail", "tale"),
        ("wait", "weight"),
        ("way", "weigh"),
        ("weak", "week"),
        ("weather", "whether"),
        ("wood", "would"),
        ("flower", "flour"),
        ("hole", "whole"),
        ("hour", "our"),
        ("mail", "male"),
        ("pair", "pear", "pare"),
        ("passed", "past"),
        ("principal", "principle"),
        ("stationary", "stationery"),
        ("through", "threw"),
        ("thrown", "throne"),
        ("vain", "vein", "vane"),
        ("waste", "waist"),
        ("bear", "bare"),
        ("board", "bored"),
        ("buy", "by", "bye"),
        ("cell", "sell"),
        ("cent", "scent", "sent"),
        ("coarse", "course"),
        ("dear", "deer"),
        ("die", "dye"),
        ("fair", "fare"),
        ("find", "fined"),
        ("for", "four", "fore"),
        ("hair", "hare"),
        ("heal", "heel"),
        ("him", "hymn"),
        ("in", "inn"),
        ("knight", "night"),
        ("knot", "not"),
        ("made", "maid"),
        ("main", "mane"),
        ("morning", "mourning"),
        ("none", "nun"),
        ("oar", "or", "ore"),
        ("pale", "pail"),
        ("poor", "pour"),
        ("road", "rode", "rowed"),
        ("role", "roll"),
        ("root", "route"),
        ("scene", "seen"),
        ("seam", "seem"),
        ("sew", "so", "sow"),
        ("shear", "sheer"),
        ("some", "sum"),
        ("stair", "stare"),
        ("straight", "strait"),
        ("suite", "sweet"),
        ("tear", "tier"),
        ("tied", "tide"),
        ("toe", "tow"),
        ("wail", "whale"),
        ("warn", "worn"),
        ("which", "witch"),
        ("wring", "ring"),
        ("allowed", "aloud"),
        ("ate", "eight"),
        ("be", "bee"),
        ("berry", "bury"),
        ("brews", "bruise"),
        ("ceiling", "sealing"),
        ("cereal", "serial"),
        ("chews", "choose"),
        ("flew", "flu", "flue"),
        ("groan", "grown"),
        ("guessed", "guest"),
        ("heard", "herd"),
        ("higher", "hire"),
        ("idle", "idol"),
        ("lead", "led"),
        ("loan", "lone"),
        ("missed", "mist"),
        ("pause", "paws"),
        ("plum", "plumb"),
        ("rap", "wrap"),
        ("seas", "sees", "seize"),
        ("stake", "steak"),
        ("wade", "weighed"),
    )
)


def _homonym_match(expected: str, spoken: str) -> bool:
    return any(expected in group and spoken in group for group in _HOMONYM_GROUPS)


# ---------------------------------------------------------------------------
# Phonetic similarity
# ---------------------------------------------------------------------------

_MIN_CHARSET_OVERLAP = 0.8

# Phoneme confusions typical of accented speech and recogniser drift.
_PHONETIC_SUBSTITUTIONS: tuple[tuple[str, str], ...] = (
    ("th", "f"), ("th", "v"),  # think / fink
    ("w", "v"), ("v", "w"),  # very / wery
    ("l", "r"), ("r", "l"),  # light / right
    ("s", "z"), ("z", "s"),  # zoo / soo
    ("f", "v"), ("v", "f"),  # very / fery
    ("p", "b"), ("b", "p"),  # pat / bat
    ("t", "d"), ("d", "t"),  # time / dime
    ("k", "g"), ("g", "k"),
    ("sh", "s"), ("s", "sh"),  # ship / sip
    ("ch", "t"), ("t", "ch"),
    ("j", "d"), ("d", "j"),  # jump / dump
    ("ng", "n"), ("n", "ng"),  # sing / sin
    ("m", "n"), ("n", "m"),
    ("w", "h"), ("h", "w"),  # what / wat
    ("y", "i"), ("i", "y"),
    ("u", "oo"), ("oo", "u"),  # put / poot
    ("a", "ah"), ("ah", "a"),
    ("e", "ee"), ("ee", "e"),  # bed / beed
    ("i", "ee"), ("ee", "i"),  # sit / seet
    ("o", "oh"), ("oh", "o"),
    ("u", "you"), ("you", "u"),
)


def _charset_overlap(a: str, b: str) -> float:
    longest = max(len(a), len(b))
    if longest == 0:
        return 0.0
    return len(set(a) & set(b)) / longest


def _phonetic_match(expected: str, spoken: str) -> bool:
    if not expected or not spoken:
        return False

    # Same length (give or take one) and nearly the same letters
    if abs(len(expected) - len(spoken)) <= 1:
        if _charset_overlap(expected, spoken) >= _MIN_CHARSET_OVERLAP:
            return True

    for source, target in _PHONETIC_SUBSTITUTIONS:
        if expected.replace(source, target) == spoken:
            return True
        if spoken.replace(source, target) == expected:
            return True
    return False


# ---------------------------------------------------------------------------
# Common recognition errors
# ---------------------------------------------------------------------------

# (what the recogniser produced, what the text says).  Directional.
_COMMON_ERRORS: frozenset[tuple[str, str]] = frozenset({
    ("a", "uh"), ("uh", "a"),
    ("the", "duh"), ("duh", "the"),
    ("and", "an"), ("an", "and"),
    ("is", "it's"), ("it's", "is"),
    ("are", "our"), ("our", "are"),
    ("we're", "were"), ("were", "we're"),
    ("they're", "their"), ("their", "they're"),
    ("you're", "your"), ("your", "you're"),
    ("can't", "can"), ("can", "can't"),
    ("cant", "can't"),
    ("won't", "want"), ("want", "won't"),
    ("wont", "won't"),
    ("don't", "don"), ("don", "don't"),
    ("dont", "don't"),
    ("doesn't", "does"), ("does", "doesn't"),
    ("doesnt", "doesn't"),
    ("isn't", "is"), ("is", "isn't"),
    ("isnt", "isn't"),
    ("aren't", "are"), ("are", "aren't"),
    ("arent", "aren't"),
    ("wasn't", "was"), ("was", "wasn't"),
    ("wasnt", "wasn't"),
    ("weren't", "were"), ("were", "weren't"),
    ("hasn't", "has"), ("has", "hasn't"),
    ("haven't", "have"), ("have", "haven't"),
    ("hadn't", "had"), ("had", "hadn't"),
    ("wouldn't", "would"), ("would", "wouldn't"),
    ("wouldnt", "wouldn't"),
    ("couldn't", "could"), ("could", "couldn't"),
    ("couldnt", "couldn't"),
    ("shouldn't", "should"), ("should", "shouldn't"),
    ("shouldnt", "shouldn't"),
    ("mightn't", "might"), ("might", "mightn't"),
    ("mustn't", "must"), ("must", "mustn't"),
    ("shan't", "shall"), ("shall", "shan't"),
    ("let's", "lets"), ("lets", "let's"),
    ("that's", "thats"), ("thats", "that's"),
    ("what's", "whats"), ("whats", "what's"),
    ("who's", "whos"), ("whos", "who's"),
    ("where's", "wheres"), ("wheres", "where's"),
    ("when's", "whens"), ("whens", "when's"),
    ("why's", "whys"), ("whys", "why's"),
    ("how's", "hows"), ("hows", "how's"),
    ("it's", "its"), ("its", "it's"),
    ("he's", "hes"), ("hes", "he's"),
    ("she's", "shes"), ("shes", "she's"),
    ("i'm", "im"), ("im", "i'm"),
    ("i'll", "ill"), ("ill", "i'll"),
    ("i've", "ive"), ("ive", "i've"),
    ("i'd", "id"), ("id", "i'd"),
    ("he'll", "hell"), ("hell", "he'll"),
    ("she'll", "shell"), ("shell", "she'll"),
    ("we'll", "well"), ("well", "we'll"),
    ("they'll", "theyll"), ("theyll", "they'll"),
    ("you'll", "youll"), ("youll", "you'll"),
    ("we've", "weve"), ("weve", "we've"),
    ("they've", "theyve"), ("theyve", "they've"),
    ("you've", "youve"), ("youve", "you've"),
    ("he'd", "hed"), ("hed", "he'd"),
    ("she'd", "shed"), ("shed", "she'd"),
    ("we'd", "wed"), ("wed", "we'd"),
    ("they'd", "theyd"), ("theyd", "they'd"),
    ("you'd", "youd"), ("youd", "you'd"),
})


def _recognition_error_match(expected: str, spoken: str) -> bool:
    return (spoken, expected) in _COMMON_ERRORS


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

_NUMBER_WORDS: dict[str, int] = {
    "zero": 0, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11,
    "twelve": 12, "thirteen": 13, "fourteen": 14, "fifteen": 15,
    "sixteen": 16, "seventeen": 17, "eighteen": 18, "nineteen": 19,
    "twenty": 20, "thirty": 30, "forty": 40, "fifty": 50, "sixty": 60,
    "seventy": 70, "eighty": 80, "ninety": 90, "hundred": 100,
    "thousand": 1000, "million": 1_000_000, "billion": 1_000_000_000,
}


def _as_number(word: str) -> float | None:
    if word in _NUMBER_WORDS:
        return float(_NUMBER_WORDS[word])
    digits = word.replace(",", "")
    if not digits.replace(".", "", 1).isdecimal():
        return None
    return float(digits)


def _number_match(expected: str, spoken: str) -> bool:
    """``"15,000"`` ~ ``"15000"``, ``"7"`` ~ ``"seven"``."""
    expected_value = _as_number(expected)
    if expected_value is None:
        return False
    return expected_value == _as_number(spoken)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class WordMatcher:
    """Stateless matcher; safe to share between sessions."""

    def is_match(self, expected: str, spoken: str) -> bool:
        expected_norm = normalise(expected)
        spoken_norm = normalise(spoken)
        if not spoken_norm:
            return False

        if expected_norm == spoken_norm:
            return True
        if _number_match(expected_norm, spoken_norm):
            return True
        if _possessive_match(expected_norm, spoken_norm):
            return True
        if _homonym_match(expected_norm, spoken_norm):
            return True
        if _phonetic_match(expected_norm, spoken_norm):
            return True
        if _recognition_error_match(expected_norm, spoken_norm):
            return True
        return False

    def is_compound_match(self, expected: str, last_two_spoken: Sequence[str]) -> bool:
        """True when the last two spoken tokens spell *expected* together.

        Recognisers sometimes split a long word ("elephant" → "ele phant")
        or a closed compound ("winemaker" → "wine maker").
        """
        if len(last_two_spoken) < 2:
            return False
        expected_norm = normalise(expected)
        if not expected_norm:
            return False

        pair = [normalise(token) for token in last_two_spoken[-2:]]
        if not all(pair):
            return False
        if "".join(pair) == expected_norm:
            return True
        return "-".join(pair) == expected_norm


default_matcher = WordMatcher()
