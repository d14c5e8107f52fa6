"""Note events and the contract shared by all track generators.

A track generator turns the :class:`~text2music.planner.CompositionContext`
and its own view of the text into a start-ordered list of
:class:`NoteEvent` objects for one channel. Generators are peers: the
assembler only relies on the :class:`TrackGenerator` protocol and never on a
common base class.

Invalid note parameters are not fatal. :func:`make_note` raises
:class:`GenerationError`; generators catch it, skip that single note and
record the error in :attr:`TrackOutput.errors` so the caller can see that the
track was degraded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol

from .errors import GenerationError

__all__ = ["NoteEvent", "TrackOutput", "TrackGenerator", "make_note", "MAX_CHANNEL"]

MAX_CHANNEL = 15


@dataclass(frozen=True)
class NoteEvent:
    """A single note: absolute start tick, length in ticks and MIDI data."""

    start: int
    duration: int
    pitch: int
    velocity: int
    channel: int

    @property
    def end(self) -> int:
        return self.start + self.duration


def make_note(
    start: int, duration: int, pitch: int, velocity: int, channel: int, *, track: str = ""
) -> NoteEvent:
    """Build a validated :class:`NoteEvent`.

    Raises
    ------
    GenerationError
        If any parameter is outside the range a MIDI file can hold.
    """

    problems = []
    if start < 0:
        problems.append(f"start tick {start} is negative")
    if duration <= 0:
        problems.append(f"duration {duration} must be positive")
    if not 0 <= pitch <= 127:
        problems.append(f"pitch {pitch} out of range 0-127")
    if not 0 <= velocity <= 127:
        problems.append(f"velocity {velocity} out of range 0-127")
    if not 0 <= channel <= MAX_CHANNEL:
        problems.append(f"channel {channel} out of range 0-{MAX_CHANNEL}")
    if problems:
        raise GenerationError("; ".join(problems), track=track, tick=start)
    return NoteEvent(start, duration, pitch, velocity, channel)


@dataclass
class TrackOutput:
    """Events produced for one channel plus the notes that had to be skipped."""

    events: List[NoteEvent] = field(default_factory=list)
    errors: List[GenerationError] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.errors)


class TrackGenerator(Protocol):
    """Capability every generator offers to the sequence assembler."""

    name: str
    program: int

    def write_to_track(self, channel: int) -> TrackOutput:
        """Generate this track's notes on ``channel``."""
        ...
