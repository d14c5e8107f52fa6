"""Entry point wrapper for ``python -m text2music``.

Forwards to :func:`text2music.main` so ``python -m text2music`` and the
installed ``text2music`` console script behave identically.

Example
-------
::

    python -m text2music article.txt song.mid --lexicon words.csv
"""

from . import main

if __name__ == "__main__":
    main()
