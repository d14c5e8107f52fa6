"""Per-sentence text statistics and the smoothing helpers applied to them.

The *prosody vector* holds one value per sentence, the average character
length of that sentence's words. The rhythm generator smooths it with
:func:`blur` and rescales it with :func:`normalize` before using the values
as step multipliers.

Example
-------
>>> blur([4.0, 8.0, 6.0], 1)
[6.0, 6.0, 7.0]
>>> normalize([6.0, 6.0, 7.0])
[0.0, 0.0, 3.0]
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

import numpy as np

from .text import Sentence

__all__ = [
    "NORMALIZED_MAX",
    "average_word_length",
    "sentence_word_lengths",
    "text_average_word_length",
    "blur",
    "normalize",
]

# Upper bound of ``normalize``. Three quarter notes is the longest step the
# rhythm generator produces from a single value.
NORMALIZED_MAX = 3.0


def average_word_length(words: Iterable) -> float:
    """Return the mean length of ``words`` or ``0.0`` when empty."""

    lengths = [len(w) for w in words]
    if not lengths:
        return 0.0
    return sum(lengths) / len(lengths)


def sentence_word_lengths(sentences: Sequence[Sentence]) -> List[float]:
    """Average word length of every sentence, aligned with ``sentences``."""

    return [average_word_length(s.words) for s in sentences]


def text_average_word_length(sentences: Sequence[Sentence]) -> float:
    """Average word length over all words of the text."""

    return average_word_length(w for s in sentences for w in s.words)


def blur(vector: Sequence[float], radius: int) -> List[float]:
    """Replace each value with the mean of its neighbourhood.

    The window ``[i - radius, i + radius]`` is clipped at both ends of the
    array, so edge values average fewer neighbours. The output has the same
    length as ``vector``.

    Raises
    ------
    ValueError
        If ``radius`` is negative.
    """

    if radius < 0:
        raise ValueError("radius must be non-negative")
    arr = np.asarray(vector, dtype=np.float64)
    n = arr.shape[0]
    if n == 0 or radius == 0:
        return arr.tolist()

    # Window sums from a prefix sum; ``csum[k]`` is the sum of ``arr[:k]``.
    csum = np.concatenate(([0.0], np.cumsum(arr)))
    idx = np.arange(n)
    lo = np.maximum(idx - radius, 0)
    hi = np.minimum(idx + radius + 1, n)
    return ((csum[hi] - csum[lo]) / (hi - lo)).tolist()


def normalize(vector: Sequence[float], upper: float = NORMALIZED_MAX) -> List[float]:
    """Rescale ``vector`` linearly so its minimum is 0 and maximum ``upper``.

    A constant vector is returned unchanged since it has no range to scale.
    Values that differ only by rounding noise, as left by :func:`blur`, count
    as constant.
    """

    arr = np.asarray(vector, dtype=np.float64)
    if arr.size == 0:
        return []
    low = arr.min()
    high = arr.max()
    if np.isclose(high, low):
        return arr.tolist()
    return (upper * (arr - low) / (high - low)).tolist()
