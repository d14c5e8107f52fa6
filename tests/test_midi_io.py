"""Unit tests for writing sequences as MIDI files.

The tests render a tiny hand-built sequence, read the file back with
``mido`` and check tempo, programs and absolute note timing. A second test
simulates a missing ``mido`` installation to check the install hint.
"""

from __future__ import annotations

import builtins
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from text2music import midi_io  # noqa: E402
from text2music.sequence import Sequence  # noqa: E402
from text2music.tracks import TrackOutput, make_note  # noqa: E402


def _sequence():
    seq = Sequence(480, 120)
    seq.add_track(
        0,
        TrackOutput([make_note(0, 480, 60, 80, 0), make_note(480, 240, 60, 90, 0)]),
        program=40,
        name="melody",
    )
    seq.add_track(1, TrackOutput([make_note(0, 480, 36, 64, 1)]), program=0, name="rhythm")
    return seq


def _absolute(track, kind):
    now = 0
    result = []
    for msg in track:
        now += msg.time
        if msg.type == kind:
            result.append((now, msg.note))
    return result


def test_write_midi_round_trip(tmp_path):
    """Tempo, programs and note times survive writing and reading."""

    import mido

    out = tmp_path / "nested" / "song.mid"
    returned = midi_io.write_midi(_sequence(), out)
    assert isinstance(returned, mido.MidiFile)
    assert out.exists()

    mid = mido.MidiFile(str(out))
    assert mid.ticks_per_beat == 480
    assert len(mid.tracks) == 2

    melody, rhythm = mid.tracks
    tempos = [m.tempo for m in melody if m.type == "set_tempo"]
    assert tempos == [mido.bpm2tempo(120)]
    assert not [m for m in rhythm if m.type == "set_tempo"]
    assert [m.program for m in melody if m.type == "program_change"] == [40]
    assert [m.channel for m in rhythm if m.type == "program_change"] == [1]
    assert [m.name for m in melody if m.type == "track_name"] == ["melody"]

    assert _absolute(melody, "note_on") == [(0, 60), (480, 60)]
    assert _absolute(melody, "note_off") == [(480, 60), (720, 60)]
    assert _absolute(rhythm, "note_on") == [(0, 36)]


def test_repeated_pitch_releases_before_onset():
    """At equal ticks the release of the old note precedes the new onset."""

    mid = midi_io.build_midi(_sequence())
    kinds = [m.type for m in mid.tracks[0] if m.type in ("note_on", "note_off")]
    assert kinds == ["note_on", "note_off", "note_on", "note_off"]


def test_overlapping_same_pitch_is_cut_at_next_onset():
    """A still sounding note ends where the same pitch starts again."""

    seq = Sequence(480, 120)
    seq.add_track(
        1,
        TrackOutput([make_note(0, 480, 36, 64, 1), make_note(240, 480, 36, 64, 1)]),
    )
    (track,) = midi_io.build_midi(seq).tracks
    assert _absolute(track, "note_on") == [(0, 36), (240, 36)]
    assert _absolute(track, "note_off") == [(240, 36), (720, 36)]
    kinds = [m.type for m in track if m.type in ("note_on", "note_off")]
    assert kinds == ["note_on", "note_off", "note_on", "note_off"]


def test_same_tick_duplicate_keeps_one_note():
    seq = Sequence(480, 120)
    seq.add_track(
        1,
        TrackOutput([make_note(0, 240, 42, 64, 1), make_note(0, 480, 42, 64, 1)]),
    )
    (track,) = midi_io.build_midi(seq).tracks
    assert _absolute(track, "note_on") == [(0, 42)]
    assert _absolute(track, "note_off") == [(480, 42)]


def test_write_midi_missing_mido(monkeypatch, tmp_path):
    """Absent ``mido`` should raise ``ImportError`` with install guidance."""

    monkeypatch.delitem(sys.modules, "mido", raising=False)

    original_import = builtins.__import__

    def fake_import(name, globals=None, locals=None, fromlist=(), level=0):
        if name == "mido":
            raise ModuleNotFoundError("No module named 'mido'")
        return original_import(name, globals, locals, fromlist, level)

    monkeypatch.setattr(builtins, "__import__", fake_import)

    with pytest.raises(ImportError, match="pip install mido"):
        midi_io.write_midi(_sequence(), tmp_path / "song.mid")
