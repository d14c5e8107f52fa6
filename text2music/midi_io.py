"""Write a composed :class:`~text2music.sequence.Sequence` as a MIDI file.

Every channel of the sequence becomes its own ``MidiTrack``. The first track
also carries the tempo. Note events use absolute ticks internally, so they
are expanded into ``note_on``/``note_off`` pairs, sorted, and converted to
the delta times MIDI expects. At equal ticks ``note_off`` messages come
first so a repeated pitch is not cut short by the previous note's release,
and a note still sounding when its pitch starts again is shortened to end at
that onset.

``mido`` is imported lazily so the rest of the package can be used for
analysis without it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Tuple, Union

if TYPE_CHECKING:
    from mido import MidiFile

from .sequence import Sequence
from .tracks import NoteEvent

__all__ = ["write_midi", "build_midi"]


def _clip_overlaps(notes: Iterable[NoteEvent]) -> Iterator[Tuple[int, int, NoteEvent]]:
    """Yield ``(start, end, note)`` with same-pitch overlaps removed.

    MIDI cannot hold two sounding copies of one pitch on a channel, so a note
    ends at the next onset of its pitch. A note starting on the same tick as
    the following one is dropped.
    """

    by_key: Dict[Tuple[int, int], List[NoteEvent]] = {}
    for note in sorted(notes, key=lambda n: n.start):
        by_key.setdefault((note.channel, note.pitch), []).append(note)
    for group in by_key.values():
        for current, following in zip(group, group[1:] + [None]):
            end = current.end if following is None else min(current.end, following.start)
            if end > current.start:
                yield current.start, end, current


def build_midi(sequence: Sequence) -> "MidiFile":
    """Return an in-memory ``MidiFile`` for ``sequence``."""

    try:
        import mido
        from mido import Message, MidiFile, MidiTrack
    except ModuleNotFoundError as exc:
        raise ImportError(
            "mido is required to create MIDI files; install it with 'pip install mido'"
        ) from exc

    mid = MidiFile(ticks_per_beat=sequence.resolution)
    for index, channel in enumerate(sorted(sequence.tracks)):
        track = MidiTrack()
        mid.tracks.append(track)
        name = sequence.names.get(channel)
        if name:
            track.append(mido.MetaMessage("track_name", name=name, time=0))
        if index == 0:
            track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(sequence.bpm)))
        track.append(
            Message("program_change", program=sequence.programs.get(channel, 0), channel=channel, time=0)
        )

        # (tick, order, message); order 0 releases notes before new onsets.
        events: List[Tuple[int, int, Message]] = []
        for start, end, note in _clip_overlaps(sequence.tracks[channel]):
            events.append(
                (start, 1, Message("note_on", note=note.pitch, velocity=note.velocity, channel=note.channel))
            )
            events.append(
                (end, 0, Message("note_off", note=note.pitch, velocity=0, channel=note.channel))
            )
        events.sort(key=lambda e: (e[0], e[1]))

        last = 0
        for tick, _, msg in events:
            msg.time = tick - last
            track.append(msg)
            last = tick
        track.append(mido.MetaMessage("end_of_track", time=0))
    return mid


def write_midi(sequence: Sequence, output_file: Union[str, Path]) -> "MidiFile":
    """Save ``sequence`` to ``output_file`` and return the ``MidiFile``.

    The parent directory is created when missing.
    """

    mid = build_midi(sequence)
    path = Path(output_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    mid.save(str(path))
    logging.info("MIDI file saved to %s", path)
    return mid
