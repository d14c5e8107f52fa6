"""Melody generator that plays the tagged words of the text in order.

Every word becomes a short figure chosen by its tendency (see
:mod:`text2music.note_mapping`). The figure starts on an *anchor* degree
derived from the word's length, so long and short words land on different
scale steps, and its pitches are taken from the key planned for the piece.

Filler words are a semiquaver rest and every sentence ends with a quaver
rest. When effects are enabled a lexicon effect tag reshapes the word's
notes:

``accent``       louder by 20 velocity units (capped at 127)
``staccato``     sounds for half of its slot
``legato``       sounds for one and a half of its slot
``octave_up``    one octave higher
``octave_down``  one octave lower
``rest``         silent, the slot is still consumed

Several tags can be combined with ``|``; unknown tags are ignored.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence

from .errors import GenerationError
from .note_mapping import NoteMapping
from .planner import CompositionContext
from .text import Sentence, Word
from .tracks import NoteEvent, TrackOutput, make_note

__all__ = ["MelodyTrack", "EFFECTS", "parse_effects"]


class Voice(NamedTuple):
    pitch: int
    slot: int
    length: int
    velocity: int
    silent: bool = False


EFFECTS: Dict[str, Callable[[Voice], Voice]] = {
    "accent": lambda v: v._replace(velocity=min(127, v.velocity + 20)),
    "staccato": lambda v: v._replace(length=max(1, v.length // 2)),
    "legato": lambda v: v._replace(length=v.length * 3 // 2),
    "octave_up": lambda v: v._replace(pitch=v.pitch + 12),
    "octave_down": lambda v: v._replace(pitch=v.pitch - 12),
    "rest": lambda v: v._replace(silent=True),
}


def parse_effects(tag: Optional[str]) -> List[str]:
    """Split an effect tag into known effect names."""

    if not tag:
        return []
    names = [t.strip().lower().replace("-", "_").replace(" ", "_") for t in tag.split("|")]
    known = [n for n in names if n in EFFECTS]
    if len(known) != len([n for n in names if n]):
        logging.debug("Ignoring unknown effects in %r", tag)
    return known


class MelodyTrack:
    """Turn tagged sentences into a melodic line in the planned key."""

    name = "melody"

    def __init__(
        self,
        context: CompositionContext,
        sentences: Sequence[Sentence],
        note_mapping: Optional[NoteMapping] = None,
        *,
        effects: bool = True,
        program: int = 0,
        window_seconds: float = 15.0,
        base_octave: int = 4,
    ) -> None:
        self.context = context
        self.sentences = sentences
        self.mapping = note_mapping or NoteMapping()
        self.effects = effects
        self.program = program
        self.window = context.tempo.seconds_to_ticks(window_seconds)
        self.scale = context.harmony.scale(base_octave)

    def _pitch(self, degree: int) -> int:
        size = len(self.scale)
        return self.scale[degree % size] + 12 * (degree // size)

    def _voices(self, word: Word) -> List[Voice]:
        """Return the notes ``word`` plays, effects applied."""

        rule = self.mapping.rule_for(word)
        anchor = len(word.name) % len(self.scale)
        resolution = self.context.tempo.resolution
        voices = []
        for offset, beats in rule.steps:
            slot = max(1, int(beats * resolution))
            voices.append(Voice(self._pitch(anchor + offset), slot, slot, rule.velocity))
        if self.effects and word.entry is not None:
            for effect in parse_effects(word.entry.effect):
                voices = [EFFECTS[effect](v) for v in voices]
        return voices

    def write_to_track(self, channel: int) -> TrackOutput:
        out = TrackOutput()
        tempo = self.context.tempo
        cursor = 0
        for sentence in self.sentences:
            for word in sentence.words:
                if cursor >= self.window:
                    break
                if word.is_filler:
                    cursor += tempo.semiquaver
                    continue
                for voice in self._voices(word):
                    if cursor >= self.window:
                        break
                    if not voice.silent:
                        self._emit(out, cursor, voice, channel)
                    cursor += voice.slot
            if cursor >= self.window:
                break
            cursor += tempo.quaver

        if out.errors:
            logging.warning("Melody track skipped %d notes", len(out.errors))
        return out

    def _emit(self, out: TrackOutput, start: int, voice: Voice, channel: int) -> None:
        try:
            event: NoteEvent = make_note(
                start, voice.length, voice.pitch, voice.velocity, channel, track=self.name
            )
        except GenerationError as exc:
            logging.debug("Skipping melody note at tick %d: %s", start, exc)
            out.errors.append(exc)
            return
        out.events.append(event)
