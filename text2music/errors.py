"""Exception hierarchy shared by the text2music modules.

Every error raised deliberately by the package derives from
:class:`Text2MusicError` so callers can catch the whole family at once while
still distinguishing lexicon failures from generation problems.
"""

from __future__ import annotations

__all__ = [
    "Text2MusicError",
    "LexiconLoadError",
    "LexiconNotLoadedError",
    "LexiconPersistenceError",
    "GenerationError",
    "TextTooShortError",
]


class Text2MusicError(Exception):
    """Base class for all text2music errors."""


class LexiconLoadError(Text2MusicError):
    """Raised when the lexicon backing file is unreadable or malformed."""


class LexiconNotLoadedError(Text2MusicError):
    """Raised when a lookup is attempted before :meth:`Lexicon.load`."""


class LexiconPersistenceError(Text2MusicError):
    """Raised when an upsert or removal could not be written back.

    The in-memory table already holds the change at that point, so memory and
    backing file disagree until the next successful write.
    """


class GenerationError(Text2MusicError, ValueError):
    """Raised when a track generator computes an out-of-range note parameter."""

    def __init__(self, message: str, *, track: str = "", tick: int = -1) -> None:
        super().__init__(message)
        self.track = track
        self.tick = tick


class TextTooShortError(Text2MusicError, ValueError):
    """Raised when a text has fewer words than the composition minimum."""

    def __init__(self, words: int, minimum: int) -> None:
        super().__init__(
            f"Article needs to be at least {minimum} words long (got {words})"
        )
        self.words = words
        self.minimum = minimum
