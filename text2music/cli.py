"""Command line front end for text2music.

``run_cli`` parses the arguments, loads the lexicon and either edits it
(``--set-word``/``--remove-word``) or composes a MIDI file from an article.
Options not given on the command line come from the JSON settings file
(``--settings-file`` or ``TEXT2MUSIC_SETTINGS_FILE``) and then from
:data:`text2music.DEFAULT_SETTINGS`.

Example
-------
Compose ``article.txt`` with a violin melody and precise lexicon search::

    python -m text2music article.txt song.mid --lexicon words.csv -i vln -p

Add or update a lexicon word without composing anything::

    python -m text2music --lexicon words.csv --set-word sunny 4 --effect accent

User errors are logged and end the process with exit code 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import (
    DEFAULT_SETTINGS_FILE,
    INSTRUMENTS,
    load_settings,
    resolve_settings,
    save_settings,
)
from .errors import LexiconLoadError, LexiconPersistenceError, TextTooShortError
from .lexicon import Lexicon, Tendency

__all__ = ["run_cli", "main"]


def _parse_tendency(value: str) -> Tendency:
    """Accept ``0``-``4`` or a tendency name such as ``good``."""

    try:
        return Tendency(int(value))
    except ValueError:
        pass
    try:
        return Tendency[value.strip().upper()]
    except KeyError:
        raise argparse.ArgumentTypeError(
            f"invalid tendency {value!r}; use 0-4 or one of "
            + ", ".join(t.name.lower() for t in Tendency)
        ) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="text2music",
        description="Compose a short MIDI piece from a prose text.",
    )
    parser.add_argument("article", nargs="?", help="Text file to compose from.")
    parser.add_argument("output", nargs="?", help="MIDI file to write.")
    parser.add_argument("--lexicon", type=str, help="CSV word database (word,tendency,effect).")
    parser.add_argument("-p", "--precise", action="store_true", default=None, help="Search the lexicon for the best match instead of the first one.")
    parser.add_argument("--min-similarity", type=float, help="Minimum similarity (0-1) for a lexicon match.")
    parser.add_argument("-i", "--instrument", type=str, choices=sorted(INSTRUMENTS), help="Melody instrument (default: p, piano).")
    parser.add_argument("--no-effects", dest="effects", action="store_false", default=None, help="Ignore the effect tags of lexicon words.")
    parser.add_argument("--note-mapping", type=str, help="CSV file overriding the word-to-note rules.")
    parser.add_argument("--language", type=str, help="Language code used to find sentence boundaries (default: en).")
    parser.add_argument("--workers", type=int, help="Generate tracks on this many threads.")
    parser.add_argument("--list-instruments", action="store_true", help="List instrument names and exit.")
    parser.add_argument("--set-word", nargs=2, metavar=("WORD", "TENDENCY"), help="Add or update a lexicon word and exit.")
    parser.add_argument("--effect", type=str, help="Effect tag stored with --set-word.")
    parser.add_argument("--remove-word", metavar="WORD", help="Remove a word from the lexicon and exit.")
    parser.add_argument("--settings-file", type=str, help="JSON settings file with default options.")
    parser.add_argument("--save-settings", action="store_true", help="Store the effective options in the settings file.")
    return parser


def _edit_lexicon(lexicon: Lexicon, args: argparse.Namespace) -> None:
    try:
        if args.set_word:
            word, raw_tendency = args.set_word
            try:
                tendency = _parse_tendency(raw_tendency)
            except argparse.ArgumentTypeError as exc:
                logging.error(str(exc))
                sys.exit(1)
            if lexicon.upsert(word, tendency, args.effect):
                logging.info("Stored %r as %s", word, tendency.name.lower())
            else:
                logging.error("Empty words cannot be stored in the lexicon.")
                sys.exit(1)
        if args.remove_word:
            if lexicon.remove(args.remove_word):
                logging.info("Removed %r from the lexicon", args.remove_word)
            else:
                logging.warning("%r is not in the lexicon; nothing changed", args.remove_word)
    except LexiconPersistenceError as exc:
        logging.error(str(exc))
        sys.exit(1)


def run_cli(argv: Optional[list] = None) -> None:
    """Parse ``argv`` (default ``sys.argv[1:]``) and run the requested action."""

    argv = sys.argv[1:] if argv is None else argv
    if "--list-instruments" in argv:
        print("\n".join(sorted(INSTRUMENTS)))
        return

    parser = build_parser()
    args = parser.parse_args(argv)

    settings_path = Path(args.settings_file).expanduser() if args.settings_file else DEFAULT_SETTINGS_FILE
    settings = resolve_settings(
        load_settings(settings_path),
        {
            "lexicon": args.lexicon,
            "min_similarity": args.min_similarity,
            "precise": args.precise,
            "instrument": args.instrument,
            "effects": args.effects,
            "note_mapping": args.note_mapping,
            "language": args.language,
        },
    )

    if not settings["lexicon"]:
        logging.error("A lexicon file is required (--lexicon or the settings file).")
        sys.exit(1)
    if settings["instrument"] not in INSTRUMENTS:
        logging.error(f"Unknown instrument: {settings['instrument']}")
        sys.exit(1)
    if not 0.0 <= float(settings["min_similarity"]) <= 1.0:
        logging.error("Minimum similarity must lie between 0 and 1.")
        sys.exit(1)
    if args.workers is not None and args.workers <= 0:
        logging.error("Workers must be a positive integer.")
        sys.exit(1)

    try:
        lexicon = Lexicon.from_file(settings["lexicon"])
    except LexiconLoadError as exc:
        logging.error(str(exc))
        sys.exit(1)

    if args.set_word or args.remove_word:
        _edit_lexicon(lexicon, args)
        if args.article is None:
            return

    if not args.article or not args.output:
        logging.error("Both an article file and an output file are required.")
        sys.exit(1)

    try:
        text = Path(args.article).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logging.error("Could not read article: %s", exc)
        sys.exit(1)

    note_mapping = None
    if settings["note_mapping"]:
        from .note_mapping import load_note_mapping

        try:
            note_mapping = load_note_mapping(settings["note_mapping"])
        except (OSError, ValueError) as exc:
            logging.error("Could not load note mapping: %s", exc)
            sys.exit(1)

    from .composer import Composer
    from .midi_io import write_midi

    try:
        composer = Composer(
            lexicon,
            min_similarity=float(settings["min_similarity"]),
            precise=bool(settings["precise"]),
            effects=bool(settings["effects"]),
            instrument=settings["instrument"],
            note_mapping=note_mapping,
            workers=args.workers,
            language=settings["language"],
        )
    except ValueError as exc:
        logging.error(str(exc))
        sys.exit(1)

    try:
        sequence = composer.compose(text)
    except TextTooShortError as exc:
        logging.error(str(exc))
        sys.exit(1)

    if sequence.degraded:
        logging.warning(
            "Composition is incomplete: %d notes were out of range and skipped.",
            len(sequence.degradations),
        )

    try:
        write_midi(sequence, args.output)
    except OSError as exc:
        logging.error("Could not write MIDI file: %s", exc)
        sys.exit(1)

    if args.save_settings:
        save_settings(settings, settings_path)
    logging.info(
        "Composition complete: %s at %d bpm", composer.context.harmony.name, sequence.bpm
    )


def main() -> None:
    """Console entry point."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    run_cli()
