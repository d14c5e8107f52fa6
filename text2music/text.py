"""Sentence and word segmentation plus lexicon tagging.

``analyse_sentences`` turns raw prose into :class:`Sentence` objects, each an
ordered, non-empty tuple of :class:`Word` instances. Sentence boundaries come
from a blank spaCy pipeline for the text's language with the rule based
``sentencizer`` added. spaCy's tokenizer keeps abbreviations (``Dr.``,
``U.S.``, ``z.B.``) and decimals (``3.50``) in one token, so they never end a
sentence. Line breaks inside a detected sentence split it further and empty
lines are dropped.

Words are runs of letters and digits that may contain inner apostrophes or
hyphens (``don't``, ``well-known``); other punctuation is discarded.

Example
-------
>>> [s.text for s in analyse_sentences("Dr. Smith paid 3.50 euro. It rained!")]
['Dr. Smith paid 3.50 euro.', 'It rained!']
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence, Tuple

import spacy
from spacy.language import Language
from spacy.pipeline import Sentencizer

from .errors import TextTooShortError
from .lexicon import DEFAULT_MIN_SIMILARITY, Lexicon, LexiconEntry

__all__ = [
    "MIN_WORDS",
    "DEFAULT_LANGUAGE",
    "DEFAULT_FILLERS",
    "Word",
    "Sentence",
    "sentence_pipeline",
    "split_sentences",
    "split_words",
    "analyse_sentences",
    "count_words",
    "require_min_words",
    "mark_fillers",
    "tag_sentences",
]

# Texts shorter than this do not give the generators enough material.
MIN_WORDS = 50

DEFAULT_LANGUAGE = "en"

_WORD = re.compile(r"[^\W_]+(?:['’\-][^\W_]+)*")

# Function words marked as fillers by ``mark_fillers``.
DEFAULT_FILLERS = frozenset(
    {
        "a", "an", "the", "and", "or", "but", "of", "to", "in", "on", "at",
        "is", "are", "was", "were", "be", "been", "it", "its", "this",
        "that", "with", "for", "as", "by", "from", "so",
        "der", "die", "das", "und", "oder", "ein", "eine", "ist", "zu",
        "den", "dem", "des", "mit", "auf", "für", "von", "im", "es",
    }
)


@dataclass
class Word:
    """A word of the text with its filler flag and lexicon match."""

    name: str
    is_filler: bool = False
    entry: Optional[LexiconEntry] = None

    def __len__(self) -> int:
        return len(self.name)


@dataclass(frozen=True)
class Sentence:
    """An ordered, non-empty sequence of words."""

    text: str
    words: Tuple[Word, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.words:
            raise ValueError(f"Sentence without words: {self.text!r}")

    def __len__(self) -> int:
        return len(self.words)

    def __iter__(self):
        return iter(self.words)


@lru_cache(maxsize=None)
def sentence_pipeline(language: str = DEFAULT_LANGUAGE) -> Language:
    """Return the cached sentence splitting pipeline for ``language``.

    Raises
    ------
    ValueError
        If spaCy has no language class for ``language``.
    """

    try:
        nlp = spacy.blank(language)
    except ImportError as exc:
        raise ValueError(f"Unsupported language: {language}") from exc
    # The ellipsis character ends a sentence as well.
    nlp.add_pipe(
        "sentencizer",
        config={"punct_chars": Sentencizer.default_punct_chars + ["…"]},
    )
    return nlp


def split_sentences(text: str, language: str = DEFAULT_LANGUAGE) -> List[str]:
    """Split ``text`` into trimmed, non-empty sentence strings."""

    sentences: List[str] = []
    if not text.strip():
        return sentences
    for span in sentence_pipeline(language)(text).sents:
        # Multi-line input may embed line breaks inside one detected span.
        sentences.extend(line.strip() for line in span.text.splitlines() if line.strip())
    return sentences


def split_words(sentence: str) -> List[str]:
    """Return the words of ``sentence`` in order, punctuation removed."""

    return _WORD.findall(sentence)


def analyse_sentences(text: str, language: str = DEFAULT_LANGUAGE) -> List[Sentence]:
    """Segment ``text`` into :class:`Sentence` objects.

    Fragments without any word (for example a line of dashes) are dropped.
    """

    sentences = []
    for raw in split_sentences(text, language):
        words = split_words(raw)
        if words:
            sentences.append(Sentence(raw, tuple(Word(w) for w in words)))
    logging.debug("Segmented text into %d sentences", len(sentences))
    return sentences


def count_words(sentences: Iterable[Sentence]) -> int:
    return sum(len(s.words) for s in sentences)


def require_min_words(sentences: Sequence[Sentence], minimum: int = MIN_WORDS) -> int:
    """Return the word count of ``sentences`` or reject a too short text.

    Raises
    ------
    TextTooShortError
        If fewer than ``minimum`` words were found.
    """

    words = count_words(sentences)
    if words < minimum:
        raise TextTooShortError(words, minimum)
    return words


def mark_fillers(sentences: Iterable[Sentence], fillers: Iterable[str] = DEFAULT_FILLERS) -> int:
    """Flag filler words in place and return how many were marked."""

    lookup = {f.lower() for f in fillers}
    marked = 0
    for sentence in sentences:
        for word in sentence.words:
            word.is_filler = word.name.lower() in lookup
            marked += word.is_filler
    return marked


def tag_sentences(
    sentences: Iterable[Sentence],
    lexicon: Lexicon,
    min_similarity: float = DEFAULT_MIN_SIMILARITY,
    precise: bool = False,
) -> int:
    """Attach the best lexicon entry to every word.

    Words are looked up lower-cased. The only side effect is setting
    :attr:`Word.entry`; the number of words that found an entry is returned.
    """

    tagged = 0
    for sentence in sentences:
        for word in sentence.words:
            word.entry = lexicon.find(word.name.lower(), min_similarity, precise)
            if word.entry is not None:
                tagged += 1
    return tagged
