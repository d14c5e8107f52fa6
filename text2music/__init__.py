#!/usr/bin/env python3
"""text2music library.

This package turns a piece of prose into a short MIDI composition. A typical
workflow loads a :class:`Lexicon` of emotionally tagged words, feeds the text
to :class:`Composer` and writes the resulting :class:`Sequence` with
:func:`write_midi`. The command line interface in :mod:`text2music.cli` wraps
the same calls.

Underlying Algorithm
--------------------
The text is segmented into sentences and words. Every word is looked up in
the lexicon by approximate string matching so misspellings and inflections
still receive a *tendency* (Bad … Good) and an optional *effect* tag. The
average word length of each sentence forms a prosody vector which is smoothed
and normalised before it drives the spacing of bass, snare and hi-hat hits.
The melody walks the words in order and maps each tendency to a small figure
inside the key derived from the first word of the text.

Algorithm Pseudocode
--------------------
::

    sentences = analyse_sentences(text)
    tag_sentences(sentences, lexicon)
    context = plan_composition(sentences)
    tracks = [MelodyTrack(context, sentences), RhythmTrack(context, prosody)]
    sequence = assemble_sequence(context.tempo, tracks)

Everything after the lexicon lookup is deterministic, so the same text and
lexicon always produce the same piece.
"""

__version__ = "0.1.0"

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

# Default path for storing user preferences. The file lives in the user's
# home directory so settings persist between runs.
env_path = os.environ.get("TEXT2MUSIC_SETTINGS_FILE")
if env_path:
    DEFAULT_SETTINGS_FILE = Path(env_path).expanduser()
else:
    DEFAULT_SETTINGS_FILE = Path.home() / ".text2music_settings.json"

# Values used when neither the settings file nor the command line supply an
# option.
DEFAULT_SETTINGS: Dict[str, Any] = {
    "lexicon": None,
    "min_similarity": 0.65,
    "precise": False,
    "instrument": "p",
    "effects": True,
    "note_mapping": None,
    "language": "en",
}


def load_settings(path: Path = DEFAULT_SETTINGS_FILE) -> dict:
    """Load saved user settings from ``path`` if it exists.

    @param path (Path): Location of the settings file.
    @returns dict: Loaded settings or an empty dictionary when unavailable.
    """
    if path.is_file():
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logging.error(f"Could not load settings: {exc}")
            return {}
        if isinstance(data, dict):
            return data
        logging.error("Settings file %s does not contain a JSON object", path)
    return {}


def save_settings(settings: dict, path: Path = DEFAULT_SETTINGS_FILE) -> None:
    """Save user ``settings`` to ``path`` as JSON.

    @param settings (dict): Options to be persisted.
    @param path (Path): Destination file path.
    @returns None: Function does not return a value.
    """
    # Failing to save preferences never prevents composition.
    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(settings, fh, indent=2)
    except OSError as exc:
        logging.error(f"Could not save settings: {exc}")


def resolve_settings(
    saved: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Layer defaults, saved settings and explicit overrides.

    Unknown keys in ``saved`` are ignored. ``None`` values in ``overrides``
    mean "not supplied" and leave the lower layers untouched.
    """

    merged = dict(DEFAULT_SETTINGS)
    for layer in (saved or {}, overrides or {}):
        for key, value in layer.items():
            if key in DEFAULT_SETTINGS and value is not None:
                merged[key] = value
    return merged


# NOTE_TO_SEMITONE maps both sharp and flat spellings to the semitone offset
# within an octave so ``note_to_midi`` handles enharmonic names.
NOTE_TO_SEMITONE = {
    "C": 0,
    "B#": 0,
    "C#": 1,
    "Db": 1,
    "D": 2,
    "D#": 3,
    "Eb": 3,
    "E": 4,
    "Fb": 4,
    "E#": 5,
    "F": 5,
    "F#": 6,
    "Gb": 6,
    "G": 7,
    "G#": 8,
    "Ab": 8,
    "A": 9,
    "A#": 10,
    "Bb": 10,
    "B": 11,
    "Cb": 11,
}

NOTES: List[str] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# General MIDI programs (zero based) selectable for the melody channel. Keys
# are the short instrument class names accepted by ``--instrument``.
INSTRUMENTS: Dict[str, int] = {
    "p": 0,
    "acpn": 1,
    "clt": 8,
    "drborg": 16,
    "acc": 21,
    "accgtr": 24,
    "vln": 40,
    "vla": 41,
    "cl": 42,
    "ctbs": 43,
    "hrp": 46,
    "tmpn": 47,
    "trp": 56,
    "trb": 57,
    "tuba": 58,
    "c": 60,
    "sSax": 64,
    "aSax": 65,
    "tSax": 66,
    "bSax": 67,
    "ob": 68,
    "ehrn": 69,
    "bsn": 70,
    "clrt": 71,
    "flt": 73,
    "dr": 116,
    "cmbl": 119,
}

from .errors import (  # noqa: E402
    Text2MusicError,
    LexiconLoadError,
    LexiconNotLoadedError,
    LexiconPersistenceError,
    GenerationError,
    TextTooShortError,
)
from .note_utils import note_to_midi, midi_to_note  # noqa: E402,F401
from .lexicon import (  # noqa: E402
    DEFAULT_MIN_SIMILARITY,
    Lexicon,
    LexiconEntry,
    Tendency,
    levenshtein_distance,
    similarity,
)
from .text import (  # noqa: E402
    MIN_WORDS,
    Sentence,
    Word,
    analyse_sentences,
    count_words,
    mark_fillers,
    require_min_words,
    split_sentences,
    split_words,
    tag_sentences,
)
from .prosody import (  # noqa: E402
    blur,
    normalize,
    sentence_word_lengths,
    text_average_word_length,
)
from .planner import (  # noqa: E402
    CompositionContext,
    Harmony,
    Mode,
    Tempo,
    compute_bpm,
    derive_harmony,
    plan_composition,
)
from .tracks import NoteEvent, TrackGenerator, TrackOutput, make_note  # noqa: E402
from .rhythm_track import RhythmTrack  # noqa: E402
from .note_mapping import NoteMapping, NoteRule, load_note_mapping  # noqa: E402
from .melody_track import MelodyTrack  # noqa: E402
from .sequence import Sequence, assemble_sequence  # noqa: E402
from .composer import Composer  # noqa: E402
from .midi_io import write_midi  # noqa: E402

__all__ = [
    "Text2MusicError",
    "LexiconLoadError",
    "LexiconNotLoadedError",
    "LexiconPersistenceError",
    "GenerationError",
    "TextTooShortError",
    "DEFAULT_MIN_SIMILARITY",
    "Lexicon",
    "LexiconEntry",
    "Tendency",
    "levenshtein_distance",
    "similarity",
    "MIN_WORDS",
    "Sentence",
    "Word",
    "analyse_sentences",
    "count_words",
    "mark_fillers",
    "require_min_words",
    "split_sentences",
    "split_words",
    "tag_sentences",
    "blur",
    "normalize",
    "sentence_word_lengths",
    "text_average_word_length",
    "CompositionContext",
    "Harmony",
    "Mode",
    "Tempo",
    "compute_bpm",
    "derive_harmony",
    "plan_composition",
    "NoteEvent",
    "TrackGenerator",
    "TrackOutput",
    "make_note",
    "RhythmTrack",
    "NoteMapping",
    "NoteRule",
    "load_note_mapping",
    "MelodyTrack",
    "Sequence",
    "assemble_sequence",
    "Composer",
    "write_midi",
    "load_settings",
    "save_settings",
    "resolve_settings",
]


def run_cli():
    from .cli import run_cli as _run_cli
    _run_cli()


def main():
    from .cli import main as _main
    _main()


if __name__ == "__main__":
    main()
