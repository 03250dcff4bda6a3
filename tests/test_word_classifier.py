"""Tests for important-word and proper-noun classification."""

from types import SimpleNamespace

from readcoach.services.word_classifier import SpacyTagger, WordClassifier, WordTag

from conftest import FakeTagger


def test_content_words_are_important(classifier):
    assert classifier.is_important("elephant")
    assert classifier.is_important("Running,")


def test_function_words_are_not_important(classifier):
    assert not classifier.is_important("the")
    assert not classifier.is_important("With")


def test_stop_list_wins_over_tagger(classifier, tagger):
    for word in ("a", "an", "is", "for", "I", "my", "we"):
        assert not classifier.is_important(word)
    # stop words never reach the tagger
    assert tagger.calls == []


def test_empty_and_punctuation_only(classifier):
    assert not classifier.is_important("")
    assert not classifier.is_important("—")
    assert not classifier.is_proper_noun("...")


def test_proper_nouns(classifier):
    assert classifier.is_proper_noun("Tom.")
    assert classifier.is_important("Tom")
    assert not classifier.is_proper_noun("ball")


def test_results_are_memoised():
    tagger = FakeTagger()
    classifier = WordClassifier(tagger)
    classifier.is_important("kite")
    classifier.is_important("kite!")
    classifier.is_proper_noun("kite")
    assert tagger.calls == ["kite"]


def test_other_word_class_counts_as_important():
    class OtherTagger:
        def tag(self, token):
            return frozenset({WordTag.OTHER_WORD})

    assert WordClassifier(OtherTagger()).is_important("etc")


def _tagger_returning(pos):
    tagger = SpacyTagger()
    tagger._nlp = lambda text: [SimpleNamespace(pos_=pos)]
    return tagger


def test_spacy_pos_mapping():
    assert _tagger_returning("NOUN").tag("dog") == {WordTag.NOUN}
    assert _tagger_returning("PROPN").tag("Paris") == {WordTag.NOUN, WordTag.PROPER_NOUN}
    assert _tagger_returning("AUX").tag("has") == {WordTag.VERB}
    assert _tagger_returning("ADV").tag("quickly") == {WordTag.ADVERB}
    assert _tagger_returning("X").tag("etc") == {WordTag.OTHER_WORD}
    assert _tagger_returning("DET").tag("the") == frozenset()


def test_spacy_tagger_handles_empty_doc():
    tagger = SpacyTagger()
    tagger._nlp = lambda text: []
    assert tagger.tag("") == frozenset()


def test_warm_fills_the_cache_ahead_of_time():
    tagger = FakeTagger(proper_nouns={"Tom"})
    classifier = WordClassifier(tagger)

    assert classifier.warm(["Tom", "ran", "home.", "ran", "the", "—"]) == 4
    assert sorted(tagger.calls) == ["Tom", "home", "ran", "the"]

    tagger.calls.clear()
    assert classifier.is_proper_noun("Tom")
    assert classifier.is_important("home!")
    assert tagger.calls == []
    assert classifier.warm(["Tom"]) == 0
