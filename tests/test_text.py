"""Tests for sentence segmentation, word splitting and tagging."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from text2music.errors import LexiconNotLoadedError, TextTooShortError  # noqa: E402
from text2music.lexicon import Lexicon, Tendency  # noqa: E402
from text2music.text import (  # noqa: E402
    MIN_WORDS,
    Sentence,
    analyse_sentences,
    count_words,
    mark_fillers,
    require_min_words,
    sentence_pipeline,
    split_sentences,
    split_words,
    tag_sentences,
)


@pytest.mark.parametrize(
    "text,expected",
    [
        (
            "Dr. Smith paid 3.50 euro. It rained!",
            ["Dr. Smith paid 3.50 euro.", "It rained!"],
        ),
        (
            "We met Mr. Jones e.g. at noon. Then we left.",
            ["We met Mr. Jones e.g. at noon.", "Then we left."],
        ),
        (
            "The U.S. Army arrived at noon. Smith said so.",
            ["The U.S. Army arrived at noon.", "Smith said so."],
        ),
        ("Really?! Yes.", ["Really?!", "Yes."]),
        ('He said "Stop." Then he left.', ['He said "Stop."', "Then he left."]),
        ("Wait… Go on.", ["Wait…", "Go on."]),
    ],
)
def test_split_sentences_rules(text, expected):
    """Abbreviations and decimals do not end a sentence."""

    assert split_sentences(text) == expected


def test_split_sentences_german_abbreviations():
    """The language code selects that language's abbreviation list."""

    text = "Wir kaufen z.B. Äpfel. Dann gehen wir."
    assert split_sentences(text, "de") == ["Wir kaufen z.B. Äpfel.", "Dann gehen wir."]
    assert [s.text for s in analyse_sentences(text, language="de")] == [
        "Wir kaufen z.B. Äpfel.",
        "Dann gehen wir.",
    ]


def test_split_sentences_unknown_language():
    with pytest.raises(ValueError, match="Unsupported language: zz"):
        split_sentences("Hello there.", "zz")


def test_sentence_pipeline_is_cached():
    assert sentence_pipeline("en") is sentence_pipeline("en")


def test_split_sentences_on_line_breaks():
    """Line breaks split sentences and empty lines disappear."""

    text = "A headline without period\n\n\nThe body starts here. It ends here."
    assert split_sentences(text) == [
        "A headline without period",
        "The body starts here.",
        "It ends here.",
    ]


def test_split_sentences_ignores_whitespace_only_text():
    """Whitespace alone yields no sentences."""

    assert split_sentences("  \n\t ") == []
    assert split_sentences("") == []


def test_split_words_keeps_contractions_and_hyphens():
    """Inner apostrophes and hyphens stay inside the word; punctuation goes."""

    assert split_words("Don't stop, well-known 3.50 euro!") == [
        "Don't",
        "stop",
        "well-known",
        "3",
        "50",
        "euro",
    ]


def test_analyse_sentences_drops_wordless_fragments():
    """A line of dashes is not a sentence."""

    sentences = analyse_sentences("Hello there.\n----\nBye now.")
    assert [s.text for s in sentences] == ["Hello there.", "Bye now."]
    assert [w.name for w in sentences[1]] == ["Bye", "now"]


def test_sentence_requires_words():
    """Constructing an empty ``Sentence`` is rejected."""

    with pytest.raises(ValueError):
        Sentence("...", ())


def test_require_min_words_rejects_short_text():
    """Texts below the minimum raise ``TextTooShortError`` with both counts."""

    sentences = analyse_sentences("Only a few words here.")
    with pytest.raises(TextTooShortError, match="at least 50 words") as info:
        require_min_words(sentences)
    assert info.value.words == 5
    assert info.value.minimum == MIN_WORDS


def test_require_min_words_accepts_article(article):
    """The sample article is long enough and its words are counted."""

    sentences = analyse_sentences(article)
    assert len(sentences) == 6
    assert require_min_words(sentences) == count_words(sentences) == 63


def test_mark_fillers():
    """Function words are flagged regardless of case."""

    sentences = analyse_sentences("The storm and the sky.")
    assert mark_fillers(sentences) == 3
    assert [w.is_filler for w in sentences[0]] == [True, False, True, True, False]


def test_mark_fillers_custom_list():
    """A custom filler list replaces the default one."""

    sentences = analyse_sentences("The storm and the sky.")
    assert mark_fillers(sentences, {"sky"}) == 1
    assert sentences[0].words[-1].is_filler


def test_tag_sentences_uses_lowercase_lookup(lexicon):
    """Capitalised words still find their lowercase lexicon entry."""

    sentences = analyse_sentences("Happy children played beside the river.")
    tagged = tag_sentences(sentences, lexicon)
    words = sentences[0].words
    assert tagged >= 1
    assert words[0].entry.name == "happy"
    assert words[0].entry.tendency is Tendency.GOOD
    assert words[1].entry is None


def test_tag_sentences_needs_loaded_lexicon():
    """Tagging against an unloaded lexicon propagates the lookup error."""

    sentences = analyse_sentences("Happy days.")
    with pytest.raises(LexiconNotLoadedError):
        tag_sentences(sentences, Lexicon())
