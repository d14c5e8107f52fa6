"""Conversions between note names and MIDI numbers.

The planner spells keys with letter names while generators emit MIDI pitch
numbers; the helpers here bridge the two.

Example
-------
>>> from text2music.note_utils import note_to_midi
>>> note_to_midi("C4")
60
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

from . import NOTE_TO_SEMITONE, NOTES

__all__ = ["note_to_midi", "midi_to_note", "pitch_class"]


def pitch_class(name: str) -> int:
    """Return the semitone offset (0-11) of a note name without octave.

    Raises
    ------
    ValueError
        If ``name`` is not a known note spelling.
    """

    normalised = name[:1].upper() + name[1:]
    try:
        return NOTE_TO_SEMITONE[normalised]
    except KeyError:
        raise ValueError(f"Unknown note name: {name}") from None


@lru_cache(maxsize=None)
def note_to_midi(note: str) -> int:
    """Convert a note string such as ``C#4`` into a MIDI number.

    Octaves follow scientific pitch notation, so ``C4`` is middle C (60).

    Raises
    ------
    ValueError
        If ``note`` is malformed or lies outside the ``0-127`` MIDI range.
    """

    match = re.fullmatch(r"([A-Ga-g][#b]?)(-?\d+)", note)
    if not match:
        logging.error("Invalid note format: %s", note)
        raise ValueError(f"Invalid note format: {note}")

    name, octave_str = match.groups()
    # MIDI octave numbers are offset by one relative to scientific pitch.
    midi_val = pitch_class(name) + (int(octave_str) + 1) * 12
    if not 0 <= midi_val <= 127:
        logging.error("MIDI value out of range: %s -> %d", note, midi_val)
        raise ValueError(
            f"Computed MIDI value {midi_val} out of range 0-127 for note {note}"
        )
    return midi_val


def midi_to_note(midi_note: int) -> str:
    """Convert a MIDI number into a note name using sharps.

    >>> midi_to_note(61)
    'C#4'
    """

    if not 0 <= midi_note <= 127:
        raise ValueError(f"MIDI note {midi_note} out of range 0-127")
    return f"{NOTES[midi_note % 12]}{midi_note // 12 - 1}"
