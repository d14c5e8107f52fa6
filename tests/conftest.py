"""Shared fixtures for the text2music test-suite.

``ARTICLE`` is a short English text that clears the 50 word minimum and
mentions a handful of the words stored in the ``lexicon_file`` fixture.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the package is importable regardless of the current working directory
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

ARTICLE = (
    "Bright sunshine filled the quiet valley this morning. "
    "Happy children played beside the river while their parents watched. "
    "Later a terrible storm arrived and the sky turned dark. "
    "Everyone ran home, wet and cold, but nobody was hurt.\n"
    "By evening the clouds had gone and the air smelled fresh again. "
    "Dr. Miller said the weather had been unusual for this time of year."
)

LEXICON_ROWS = (
    "happy,4,accent\n"
    "sunshine,3,\n"
    "terrible,0,staccato\n"
    "storm,1,\n"
    "cold,1,octave_down\n"
    "fresh,3,legato\n"
    "table,2,\n"
)


@pytest.fixture
def article() -> str:
    return ARTICLE


@pytest.fixture
def lexicon_file(tmp_path) -> Path:
    """Write the sample lexicon to a temporary CSV file and return its path."""

    path = tmp_path / "words.csv"
    path.write_text(LEXICON_ROWS, encoding="utf-8")
    return path


@pytest.fixture
def lexicon(lexicon_file):
    from text2music.lexicon import Lexicon

    return Lexicon.from_file(lexicon_file)
