"""Word lexicon with approximate lookup.

The lexicon maps word text to a :class:`LexiconEntry` holding the word's
emotional :class:`Tendency` and an optional *effect* tag. It is backed by a
plain CSV file with one ``word,tendency,effect`` row per entry::

    happy,4,accent
    gloomy,0,
    table,2,

Lookups are fuzzy: the query is compared with every stored word using a
normalised Levenshtein similarity so typos and inflected forms still match.
Two search strategies are offered:

``fast``
    Walk the table in order and return the first entry whose similarity meets
    the threshold. Cheap when a match sits near the front of the table.
``precise``
    Scan the whole table and return the best scoring entry (first one wins on
    ties). Always linear but never settles for a weaker match.

Mutations (:meth:`Lexicon.upsert` and :meth:`Lexicon.remove`) rewrite the
entire backing file so the table on disk always mirrors memory. A failed
write raises :class:`LexiconPersistenceError` instead of being ignored.

Example
-------
>>> lexicon = Lexicon.from_file("words.csv")
>>> lexicon.find("happpy").name
'happy'
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, replace
from enum import IntEnum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from .errors import LexiconLoadError, LexiconNotLoadedError, LexiconPersistenceError

__all__ = [
    "DEFAULT_MIN_SIMILARITY",
    "Tendency",
    "LexiconEntry",
    "Lexicon",
    "levenshtein_distance",
    "similarity",
]

logger = logging.getLogger(__name__)

# Minimum similarity for two words to count as the same entry. Values below
# roughly 0.6 start matching unrelated short words.
DEFAULT_MIN_SIMILARITY = 0.65

PathLike = Union[str, Path]


class Tendency(IntEnum):
    """Five ordered emotional classes a word can carry."""

    BAD = 0
    NEGATIVE = 1
    NEUTRAL = 2
    POSITIVE = 3
    GOOD = 4

    @classmethod
    def parse(cls, text: Union[str, int, None]) -> "Tendency":
        """Convert the textual column value to a :class:`Tendency`.

        Only ``0``, ``1``, ``3`` and ``4`` select a non-neutral class; every
        other integer, unparseable text and ``None`` fall back to
        :attr:`NEUTRAL` so a sloppy lexicon file never aborts loading.
        """

        try:
            value = int(str(text).strip())
        except (TypeError, ValueError):
            return cls.NEUTRAL
        if value in (0, 1, 3, 4):
            return cls(value)
        return cls.NEUTRAL


@dataclass(frozen=True)
class LexiconEntry:
    """A word together with its tendency and optional effect tag."""

    name: str
    tendency: Tendency = Tendency.NEUTRAL
    effect: Optional[str] = None


def levenshtein_distance(lhs: str, rhs: str) -> int:
    """Return the edit distance between ``lhs`` and ``rhs``.

    Only two rows of the dynamic programming table are kept. They are sized
    to ``lhs`` and swapped after every character of ``rhs``.
    """

    len0 = len(lhs) + 1
    cost = list(range(len0))
    new_cost = [0] * len0

    for j in range(1, len(rhs) + 1):
        new_cost[0] = j
        rch = rhs[j - 1]
        for i in range(1, len0):
            match = 0 if lhs[i - 1] == rch else 1
            new_cost[i] = min(
                cost[i] + 1,  # insertion
                new_cost[i - 1] + 1,  # deletion
                cost[i - 1] + match,  # replacement
            )
        cost, new_cost = new_cost, cost

    return cost[len0 - 1]


def similarity(a: str, b: str) -> float:
    """Return a similarity score between ``0.0`` and ``1.0``.

    ``1.0`` means the strings are equal; two empty strings are equal as well.
    """

    longer_length = max(len(a), len(b))
    if longer_length == 0:
        return 1.0
    return (longer_length - levenshtein_distance(a, b)) / longer_length


class Lexicon:
    """In-memory word table loaded from, and persisted to, a CSV file.

    A freshly constructed instance is *not loaded*; :meth:`find` raises
    :class:`LexiconNotLoadedError` until :meth:`load` succeeds. Mutations are
    single-writer: callers must not run :meth:`upsert` or :meth:`remove`
    concurrently.
    """

    def __init__(self) -> None:
        self._entries: Optional[Dict[str, LexiconEntry]] = None
        self.source: Optional[Path] = None

    @classmethod
    def from_file(cls, source: PathLike) -> "Lexicon":
        """Create a lexicon and load it from ``source``."""

        lexicon = cls()
        lexicon.load(source)
        return lexicon

    @property
    def loaded(self) -> bool:
        return self._entries is not None

    def __len__(self) -> int:
        return len(self._entries) if self._entries is not None else 0

    def __contains__(self, word: object) -> bool:
        return self._entries is not None and word in self._entries

    def __iter__(self) -> Iterator[LexiconEntry]:
        return iter(self.entries())

    def entries(self) -> List[LexiconEntry]:
        """Return copies of all entries in table order."""

        return [replace(e) for e in self._require_loaded().values()]

    def load(self, source: PathLike) -> None:
        """Read the lexicon table from ``source``.

        The live table is only replaced once the whole file parsed, so a
        failing load leaves a previously loaded lexicon intact.

        Raises
        ------
        LexiconLoadError
            If the file cannot be read or a row has fewer than three columns.
        """

        path = Path(source)
        table: Dict[str, LexiconEntry] = {}
        try:
            with open(path, "r", encoding="utf-8", newline="") as fh:
                for line_no, row in enumerate(csv.reader(fh), start=1):
                    if not row or all(not cell.strip() for cell in row):
                        continue
                    if len(row) < 3:
                        raise LexiconLoadError(
                            f'Word database file "{path}" does not provide word, '
                            f"tendency and effect column (line {line_no})"
                        )
                    name = row[0].strip()
                    if not name:
                        logger.warning("Skipping blank word in %s line %d", path, line_no)
                        continue
                    if name in table:
                        logger.warning(
                            "Duplicate word %r in %s line %d ignored", name, path, line_no
                        )
                        continue
                    effect = row[2].strip() or None
                    table[name] = LexiconEntry(name, Tendency.parse(row[1]), effect)
        except (OSError, UnicodeDecodeError, csv.Error) as exc:
            raise LexiconLoadError(f'Error loading database "{path}": {exc}') from exc

        self._entries = table
        self.source = path
        logger.info("Loaded %d lexicon entries from %s", len(table), path)

    def find(
        self,
        word: str,
        min_similarity: float = DEFAULT_MIN_SIMILARITY,
        precise: bool = False,
    ) -> Optional[LexiconEntry]:
        """Return the entry matching ``word`` or ``None``.

        Parameters
        ----------
        word:
            Query text, compared verbatim with the stored words.
        min_similarity:
            Threshold in ``[0, 1]`` a candidate must meet or exceed.
        precise:
            ``False`` returns the first qualifying entry in table order,
            ``True`` the best qualifying entry across the whole table.

        Raises
        ------
        LexiconNotLoadedError
            If :meth:`load` has not been called yet.
        """

        entries = self._require_loaded()
        best: Optional[LexiconEntry] = None
        best_score = -1.0
        for entry in entries.values():
            score = similarity(word, entry.name)
            if score < min_similarity:
                continue
            if not precise:
                return replace(entry)
            if score > best_score:
                best, best_score = entry, score
                if score == 1.0:
                    break
        return replace(best) if best is not None else None

    def upsert(self, word: str, tendency: Tendency, effect: Optional[str] = None) -> bool:
        """Insert ``word`` or update its tendency and effect, then persist.

        Surrounding whitespace is stripped, as on load. Blank words are refused
        and leave the table untouched.

        Returns
        -------
        bool
            ``True`` when the table changed and was written back.

        Raises
        ------
        LexiconPersistenceError
            If the backing file could not be rewritten.
        """

        entries = self._require_loaded()
        word = (word or "").strip()
        if not word:
            logger.warning("Refusing to store an empty word in the lexicon")
            return False
        entries[word] = LexiconEntry(word, Tendency(tendency), effect or None)
        self._write()
        return True

    def remove(self, word: str) -> bool:
        """Delete ``word`` and persist; returns ``False`` if it was absent."""

        entries = self._require_loaded()
        word = word.strip()
        if word not in entries:
            return False
        del entries[word]
        self._write()
        return True

    def _require_loaded(self) -> Dict[str, LexiconEntry]:
        if self._entries is None:
            raise LexiconNotLoadedError("Word database was not loaded yet")
        return self._entries

    def _write(self) -> None:
        """Rewrite the whole backing file from the in-memory table."""

        entries = self._require_loaded()
        if self.source is None:
            raise LexiconPersistenceError("Lexicon has no backing file to write to")
        try:
            with open(self.source, "w", encoding="utf-8", newline="") as fh:
                writer = csv.writer(fh, lineterminator="\n")
                for e in entries.values():
                    writer.writerow([e.name, int(e.tendency), e.effect or ""])
        except OSError as exc:
            logger.error(
                "Could not write lexicon %s; memory and file are out of sync: %s",
                self.source,
                exc,
            )
            raise LexiconPersistenceError(
                f'Could not update word database "{self.source}"; the in-memory '
                f"lexicon no longer matches the file: {exc}"
            ) from exc
