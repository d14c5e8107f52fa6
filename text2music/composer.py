"""End-to-end pipeline from prose to a :class:`~text2music.sequence.Sequence`.

:class:`Composer` runs the stages in order:

1. segment the text into sentences and words and reject short texts,
2. mark filler words and tag every word with its lexicon entry,
3. compute the prosody vector and plan tempo and key,
4. generate the melody (channel 0) and rhythm (channel 1) tracks,
5. merge them into one sequence.

The lexicon is passed in explicitly and only read here.
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional

from . import INSTRUMENTS
from .lexicon import DEFAULT_MIN_SIMILARITY, Lexicon
from .melody_track import MelodyTrack
from .note_mapping import NoteMapping
from .planner import CompositionContext, plan_composition
from .prosody import sentence_word_lengths
from .rhythm_track import RhythmTrack
from .sequence import Sequence, assemble_sequence
from .text import (
    DEFAULT_LANGUAGE,
    MIN_WORDS,
    Sentence,
    analyse_sentences,
    mark_fillers,
    require_min_words,
    sentence_pipeline,
    tag_sentences,
)
from .tracks import TrackGenerator

__all__ = ["Composer"]


class Composer:
    """Compose a short piece from text using a loaded :class:`Lexicon`."""

    def __init__(
        self,
        lexicon: Lexicon,
        *,
        min_similarity: float = DEFAULT_MIN_SIMILARITY,
        precise: bool = False,
        effects: bool = True,
        instrument: str = "p",
        note_mapping: Optional[NoteMapping] = None,
        min_words: int = MIN_WORDS,
        workers: Optional[int] = None,
        language: str = DEFAULT_LANGUAGE,
    ) -> None:
        if instrument not in INSTRUMENTS:
            raise ValueError(f"Unknown instrument: {instrument}")
        if not 0.0 <= min_similarity <= 1.0:
            raise ValueError("min_similarity must lie between 0 and 1")
        # Fails early for languages spaCy does not know.
        sentence_pipeline(language)
        self.lexicon = lexicon
        self.min_similarity = min_similarity
        self.precise = precise
        self.effects = effects
        self.instrument = instrument
        self.note_mapping = note_mapping
        self.min_words = min_words
        self.workers = workers
        self.language = language
        self.sentences: List[Sentence] = []
        self.context: Optional[CompositionContext] = None

    def analyse(self, text: str) -> List[Sentence]:
        """Segment and tag ``text``; raises ``TextTooShortError`` when too short."""

        start = time.perf_counter()
        sentences = analyse_sentences(text, self.language)
        words = require_min_words(sentences, self.min_words)
        mark_fillers(sentences)
        tagged = tag_sentences(sentences, self.lexicon, self.min_similarity, self.precise)
        logging.info(
            "Analysed %d sentences, %d words (%d tagged) in %.0fms",
            len(sentences),
            words,
            tagged,
            (time.perf_counter() - start) * 1000,
        )
        return sentences

    def generators(self, context: CompositionContext, sentences: List[Sentence]) -> List[TrackGenerator]:
        melody = MelodyTrack(
            context,
            sentences,
            self.note_mapping,
            effects=self.effects,
            program=INSTRUMENTS[self.instrument],
        )
        rhythm = RhythmTrack(context, sentence_word_lengths(sentences))
        return [melody, rhythm]

    def compose(self, text: str) -> Sequence:
        """Return the sequence composed from ``text``."""

        sentences = self.analyse(text)
        start = time.perf_counter()
        context = plan_composition(sentences)
        sequence = assemble_sequence(
            context.tempo, self.generators(context, sentences), workers=self.workers
        )
        self.sentences = sentences
        self.context = context
        logging.info("Generated music in %.0fms", (time.perf_counter() - start) * 1000)
        return sequence
