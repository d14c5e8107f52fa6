"""Word-to-figure rules used by the melody generator.

Each :class:`NoteRule` describes the short figure a word becomes: a list of
scale-degree offsets relative to the word's anchor degree, the length of each
note in beats and a velocity. Rules are keyed by :class:`Tendency`; the
``None`` key holds the rule for words the lexicon did not recognise.

Mappings can be supplied as a CSV file with one rule per row::

    # tendency, offsets, beats, velocity
    *,0,0.5,72
    good,0 2 4,0.25 0.25 0.5,96
    0,0 -2 -4,1 0.5 0.5,60

The tendency column accepts the integer value, the member name or ``*`` for
untagged words. ``beats`` is cycled when it is shorter than ``offsets``.
Lines starting with ``#`` are ignored.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union

from .lexicon import Tendency
from .text import Word

__all__ = ["NoteRule", "NoteMapping", "DEFAULT_RULES", "load_note_mapping"]


@dataclass(frozen=True)
class NoteRule:
    """Figure played for a word: ``(degree offset, beats)`` steps."""

    steps: Tuple[Tuple[int, float], ...]
    velocity: int = 72

    def __post_init__(self) -> None:
        if not self.steps:
            raise ValueError("a note rule needs at least one step")
        if any(beats <= 0 for _, beats in self.steps):
            raise ValueError("note lengths must be positive")


# Negative words descend and sit low in the dynamic range, positive words
# climb and get louder.
DEFAULT_RULES: Dict[Optional[Tendency], NoteRule] = {
    None: NoteRule(((0, 0.5),), 72),
    Tendency.BAD: NoteRule(((0, 1.0), (-2, 0.5), (-4, 0.5)), 60),
    Tendency.NEGATIVE: NoteRule(((0, 0.5), (-1, 0.5)), 66),
    Tendency.NEUTRAL: NoteRule(((0, 0.5),), 72),
    Tendency.POSITIVE: NoteRule(((0, 0.5), (2, 0.5)), 84),
    Tendency.GOOD: NoteRule(((0, 0.25), (2, 0.25), (4, 0.5)), 96),
}


class NoteMapping:
    """Lookup from a word's tendency to the :class:`NoteRule` it plays."""

    def __init__(self, rules: Optional[Mapping[Optional[Tendency], NoteRule]] = None) -> None:
        self.rules: Dict[Optional[Tendency], NoteRule] = dict(DEFAULT_RULES)
        if rules:
            self.rules.update(rules)

    def rule_for(self, word: Word) -> NoteRule:
        """Return the rule for ``word``, falling back to the untagged rule."""

        if word.entry is not None and word.entry.tendency in self.rules:
            return self.rules[word.entry.tendency]
        return self.rules[None]


def _parse_tendency(text: str) -> Optional[Tendency]:
    text = text.strip()
    if text == "*":
        return None
    if text.lstrip("-").isdigit():
        return Tendency(int(text))
    return Tendency[text.upper()]


def load_note_mapping(path: Union[str, Path]) -> NoteMapping:
    """Read a :class:`NoteMapping` from the CSV file at ``path``.

    Tendencies missing from the file keep their default rule.

    Raises
    ------
    ValueError
        If a row is malformed; the message names the offending line.
    OSError
        If the file cannot be read.
    """

    rules: Dict[Optional[Tendency], NoteRule] = {}
    with open(path, "r", encoding="utf-8", newline="") as fh:
        for line_no, row in enumerate(csv.reader(fh), start=1):
            if not row or row[0].lstrip().startswith("#"):
                continue
            if len(row) < 4:
                raise ValueError(f"{path}:{line_no}: expected tendency, offsets, beats, velocity")
            try:
                tendency = _parse_tendency(row[0])
                offsets = [int(v) for v in row[1].split()]
                beats = [float(v) for v in row[2].split()]
                velocity = int(row[3])
                if not beats:
                    raise ValueError("no note lengths given")
                steps = tuple(
                    (offset, beats[i % len(beats)]) for i, offset in enumerate(offsets)
                )
                rules[tendency] = NoteRule(steps, velocity)
            except (KeyError, ValueError) as exc:
                raise ValueError(f"{path}:{line_no}: invalid note rule: {exc}") from exc
    return NoteMapping(rules)
