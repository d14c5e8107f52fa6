"""Percussion generator driven by sentence-level word lengths.

The prosody vector (average word length per sentence) is blurred to damp
sentence-to-sentence jumps and normalised to ``[0, 3]``. Three independent
drum streams then walk that vector with different strides:

========  =====  ==========  ======  =====================================
stream    pitch  note        stride  step
========  =====  ==========  ======  =====================================
bass      36     quarter     3       quarter * level, floored to quavers
snare     38     quarter     4       quaver * level, floored to quavers
hi-hat    42     semiquaver  5       semiquaver or quaver (see below)
========  =====  ==========  ======  =====================================

The hi-hat computes ``semiquaver * level`` floored to semiquavers; when that
value is not a whole number of quavers the next hit follows after a
semiquaver, otherwise after a quaver. A bass or snare step that floors to
zero advances by one quaver so every stream makes progress. All streams stop
at the end of the time window (15 seconds by default).
"""

from __future__ import annotations

import heapq
import logging
from typing import Dict, List, Optional, Sequence

from .errors import GenerationError
from .planner import CompositionContext
from .prosody import blur, normalize
from .tracks import NoteEvent, TrackOutput, make_note

__all__ = ["RhythmTrack", "round_down"]

BASS_PITCH = 36
SNARE_PITCH = 38
HI_HAT_PITCH = 42


def round_down(value: float, unit: int) -> int:
    """Floor ``value`` to a multiple of ``unit`` ticks."""

    return (int(value) // unit) * unit


class RhythmTrack:
    """Generate bass, snare and hi-hat hits from a prosody vector."""

    name = "rhythm"
    program = 0
    velocity = 64

    def __init__(
        self,
        context: CompositionContext,
        prosody: Sequence[float],
        *,
        blur_radius: int = 3,
        window_seconds: float = 15.0,
    ) -> None:
        if not prosody:
            raise ValueError("prosody vector must not be empty")
        self.tempo = context.tempo
        self.levels: List[float] = normalize(blur(prosody, blur_radius))
        self.window = self.tempo.seconds_to_ticks(window_seconds)

    def _level(self, index: int) -> float:
        return self.levels[index % len(self.levels)]

    def _emit(
        self,
        events: List[NoteEvent],
        errors: List[GenerationError],
        start: int,
        duration: int,
        pitch: int,
        channel: int,
        stream: str,
    ) -> None:
        try:
            events.append(
                make_note(start, duration, pitch, self.velocity, channel, track=stream)
            )
        except GenerationError as exc:
            logging.debug("Skipping %s note at tick %d: %s", stream, start, exc)
            errors.append(exc)

    def _bass(self, channel: int, errors: List[GenerationError]) -> List[NoteEvent]:
        t = self.tempo
        events: List[NoteEvent] = []
        i = 0
        n = 0
        while n < self.window:
            self._emit(events, errors, n, t.quarter, BASS_PITCH, channel, "bass")
            i += 3
            n += round_down(t.quarter * self._level(i), t.quaver) or t.quaver
        return events

    def _snare(self, channel: int, errors: List[GenerationError]) -> List[NoteEvent]:
        t = self.tempo
        events: List[NoteEvent] = []
        i = 0
        n = 0
        while n < self.window:
            self._emit(events, errors, n, t.quarter, SNARE_PITCH, channel, "snare")
            i += 3 + 1
            n += round_down(t.quaver * self._level(i), t.quaver) or t.quaver
        return events

    def _hi_hat(self, channel: int, errors: List[GenerationError]) -> List[NoteEvent]:
        t = self.tempo
        events: List[NoteEvent] = []
        i = 0
        n = 0
        while n < self.window:
            i += 3 + 2
            interval = round_down(t.semiquaver * self._level(i), t.semiquaver)
            self._emit(events, errors, n, t.semiquaver, HI_HAT_PITCH, channel, "hi-hat")
            n += t.semiquaver if interval % t.quaver else t.quaver
        return events

    def sub_streams(
        self, channel: int, errors: Optional[List[GenerationError]] = None
    ) -> Dict[str, List[NoteEvent]]:
        """Return the three drum streams separately, keyed by name."""

        if errors is None:
            errors = []
        return {
            "bass": self._bass(channel, errors),
            "snare": self._snare(channel, errors),
            "hi-hat": self._hi_hat(channel, errors),
        }

    def write_to_track(self, channel: int) -> TrackOutput:
        out = TrackOutput()
        streams = self.sub_streams(channel, out.errors)
        out.events = list(heapq.merge(*streams.values(), key=lambda e: e.start))
        if out.errors:
            logging.warning("Rhythm track skipped %d notes", len(out.errors))
        return out
