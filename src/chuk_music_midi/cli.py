#!/usr/bin/env python3
"""
Command line entry point for the MIDI translator.

    chuk-music-midi import song.mid [-o song.yaml]
    chuk-music-midi export composition.yaml output[.mid]
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from chuk_music_midi.composition import validate_composition
from chuk_music_midi.config import TranslatorConfig
from chuk_music_midi.constants import ErrorMessages
from chuk_music_midi.engine import SequenceError
from chuk_music_midi.models import Composition
from chuk_music_midi.translator import export_composition, import_midi_file

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(description="CHUK MIDI ⇄ composition translator")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with translator settings",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Read a MIDI file")
    import_parser.add_argument("input", type=Path, help="MIDI file to read")
    import_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the import result as YAML (default: stdout)",
    )

    export_parser = subparsers.add_parser("export", help="Write a composition as MIDI")
    export_parser.add_argument("document", type=Path, help="Composition YAML document")
    export_parser.add_argument("output", type=Path, help="MIDI file to write ('.mid' appended)")

    return parser


def run_import(args: argparse.Namespace, config: TranslatorConfig) -> int:
    """Import a MIDI file and dump the result as YAML."""
    result = import_midi_file(args.input, config)
    text = yaml.safe_dump(result.to_dict(), default_flow_style=False, sort_keys=False)

    if args.output is None:
        sys.stdout.write(text)
    else:
        args.output.write_text(text)
        logger.info(f"Wrote import result to {args.output}")
    return 0


def run_export(args: argparse.Namespace, config: TranslatorConfig) -> int:
    """Load a composition document and export it as MIDI."""
    if not args.document.is_file():
        logger.error(ErrorMessages.DOCUMENT_NOT_FOUND.format(path=args.document))
        return 1

    with open(args.document) as f:
        data = yaml.safe_load(f) or {}
    composition = Composition.from_yaml_dict(data)

    validation = validate_composition(composition, config)
    for issue in validation.issues:
        logger.warning(str(issue))
    if not validation.is_valid:
        logger.error(f"Composition {composition.name!r} is not valid, nothing written")
        return 1

    export_composition(composition, args.output, config)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    logging.basicConfig(level=logging.INFO)

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = TranslatorConfig.from_yaml(args.config)
        if args.command == "import":
            return run_import(args, config)
        return run_export(args, config)
    except (SequenceError, ValidationError, ValueError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        logger.debug("Traceback", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
