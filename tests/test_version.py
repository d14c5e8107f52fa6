"""Simple version check for the package.

Verifies that the ``__version__`` attribute matches the expected release
string."""

import importlib
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

text2music = importlib.import_module("text2music")


def test_version_matches():
    """Ensure ``text2music.__version__`` exposes the release version."""
    assert text2music.__version__ == "0.1.0"
