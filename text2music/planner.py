"""Global musical parameters derived from text statistics.

:func:`plan_composition` produces the immutable :class:`CompositionContext`
every track generator reads from:

``tempo``
    Resolution (ticks per quarter note) and beats per minute. The bpm is a
    pure function of the whole-text average word length: texts with longer
    words play slower.
``harmony``
    Root letter taken from the first character of the first word, major
    mode. This is a deliberate simplification; tendencies of the text do not
    influence the key yet.
``dynamic``
    A fixed marking for now.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Sequence

from . import NOTES
from .note_utils import note_to_midi
from .prosody import text_average_word_length
from .text import Sentence

__all__ = [
    "DEFAULT_RESOLUTION",
    "DEFAULT_DYNAMIC",
    "MIN_BPM",
    "MAX_BPM",
    "Mode",
    "Tempo",
    "Harmony",
    "CompositionContext",
    "compute_bpm",
    "derive_harmony",
    "plan_composition",
]

DEFAULT_RESOLUTION = 480
DEFAULT_DYNAMIC = "mf"
MIN_BPM = 60
MAX_BPM = 180
DEFAULT_ROOT = "C"


class Mode(Enum):
    MAJOR = "major"
    MINOR = "minor"


# Semitone offsets from the root for each mode.
_MODE_PATTERNS: Dict[Mode, List[int]] = {
    Mode.MAJOR: [0, 2, 4, 5, 7, 9, 11],
    Mode.MINOR: [0, 2, 3, 5, 7, 8, 10],
}


@dataclass(frozen=True)
class Tempo:
    """Timing grid of the piece."""

    bpm: int
    resolution: int = DEFAULT_RESOLUTION

    def __post_init__(self) -> None:
        if self.bpm <= 0:
            raise ValueError("bpm must be a positive integer")
        if self.resolution <= 0 or self.resolution % 4:
            raise ValueError("resolution must be a positive multiple of 4")

    @property
    def quarter(self) -> int:
        return self.resolution

    @property
    def quaver(self) -> int:
        return self.resolution // 2

    @property
    def semiquaver(self) -> int:
        return self.resolution // 4

    def seconds_to_ticks(self, seconds: float) -> int:
        """Convert wall-clock ``seconds`` to ticks at this tempo."""

        return int(seconds * self.bpm / 60 * self.resolution)


@dataclass(frozen=True)
class Harmony:
    """Key of the piece: root letter, mode and the alternate (minor) flag."""

    root: str = DEFAULT_ROOT
    mode: Mode = Mode.MAJOR
    alternate: bool = False

    @property
    def pattern(self) -> List[int]:
        if self.alternate and self.mode is Mode.MAJOR:
            return _MODE_PATTERNS[Mode.MINOR]
        return _MODE_PATTERNS[self.mode]

    def scale(self, octave: int = 4) -> List[int]:
        """Return the MIDI pitches of one octave of the scale from ``octave``."""

        root = note_to_midi(f"{self.root}{octave}")
        return [root + step for step in self.pattern]

    @property
    def name(self) -> str:
        quality = "minor" if self.alternate else self.mode.value
        return f"{self.root} {quality}"


@dataclass(frozen=True)
class CompositionContext:
    """Immutable parameters shared by all track generators."""

    tempo: Tempo
    harmony: Harmony
    dynamic: str = DEFAULT_DYNAMIC


def compute_bpm(avg_word_length: float) -> int:
    """Return the tempo for a text with the given average word length.

    The mapping is linear, non-increasing and clamped to
    ``[MIN_BPM, MAX_BPM]``: an average of five letters gives 100 bpm.
    """

    bpm = round(200 - 20 * avg_word_length)
    return max(MIN_BPM, min(MAX_BPM, bpm))


def derive_harmony(sentences: Sequence[Sentence]) -> Harmony:
    """Pick the key from the first letter of the text.

    Only the pitch letters A-G are usable as a root; any other first
    character (or an empty text) falls back to C major.
    """

    if sentences:
        letter = sentences[0].words[0].name[:1].upper()
        if letter in NOTES:
            return Harmony(letter, Mode.MAJOR, False)
    return Harmony(DEFAULT_ROOT, Mode.MAJOR, False)


def plan_composition(
    sentences: Sequence[Sentence], resolution: int = DEFAULT_RESOLUTION
) -> CompositionContext:
    """Derive the :class:`CompositionContext` for ``sentences``."""

    avg = text_average_word_length(sentences)
    tempo = Tempo(compute_bpm(avg), resolution)
    harmony = derive_harmony(sentences)
    logging.info(
        "Planned %s at %d bpm (average word length %.2f)", harmony.name, tempo.bpm, avg
    )
    return CompositionContext(tempo, harmony, DEFAULT_DYNAMIC)
