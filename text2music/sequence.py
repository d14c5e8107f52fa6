"""Merge generated tracks into one timed :class:`Sequence`.

Each generator receives its own channel index (0, 1, …) in the order it was
passed in. Generators share no mutable state, so they may run on a thread
pool when ``workers`` is greater than one; the result is identical to the
serial run.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence as Seq

from .errors import GenerationError
from .planner import Tempo
from .tracks import MAX_CHANNEL, NoteEvent, TrackGenerator, TrackOutput

__all__ = ["Sequence", "assemble_sequence"]


@dataclass
class Sequence:
    """Resolution, tempo and per-channel notes of a finished piece."""

    resolution: int
    bpm: int
    tracks: Dict[int, List[NoteEvent]] = field(default_factory=dict)
    programs: Dict[int, int] = field(default_factory=dict)
    names: Dict[int, str] = field(default_factory=dict)
    degradations: List[GenerationError] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        """``True`` when any generator had to skip notes."""

        return bool(self.degradations)

    @property
    def length_ticks(self) -> int:
        return max((e.end for events in self.tracks.values() for e in events), default=0)

    def add_track(
        self, channel: int, output: TrackOutput, *, program: int = 0, name: str = ""
    ) -> None:
        if channel in self.tracks:
            raise ValueError(f"channel {channel} already holds a track")
        self.tracks[channel] = list(output.events)
        self.programs[channel] = program
        self.names[channel] = name
        self.degradations.extend(output.errors)


def assemble_sequence(
    tempo: Tempo,
    generators: Seq[TrackGenerator],
    *,
    workers: Optional[int] = None,
) -> Sequence:
    """Run every generator once and collect the results.

    Parameters
    ----------
    tempo:
        Resolution and bpm of the output sequence.
    generators:
        Track generators; the generator at position ``i`` writes channel
        ``i``.
    workers:
        Optional thread count. ``None`` or ``1`` runs serially. ``ValueError``
        is raised for zero or negative values.
    """

    if workers is not None and workers <= 0:
        raise ValueError("workers must be positive")
    if len(generators) > MAX_CHANNEL + 1:
        raise ValueError(f"at most {MAX_CHANNEL + 1} tracks fit into a sequence")

    channels = range(len(generators))
    if workers is None or workers <= 1:
        outputs = [g.write_to_track(ch) for g, ch in zip(generators, channels)]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futs = [pool.submit(g.write_to_track, ch) for g, ch in zip(generators, channels)]
            outputs = [f.result() for f in futs]

    sequence = Sequence(tempo.resolution, tempo.bpm)
    for channel, (generator, output) in enumerate(zip(generators, outputs)):
        sequence.add_track(
            channel,
            output,
            program=getattr(generator, "program", 0),
            name=getattr(generator, "name", ""),
        )
    if sequence.degraded:
        logging.warning(
            "%d notes could not be generated and were skipped", len(sequence.degradations)
        )
    return sequence
