import os
import sys
import argparse
import logging

from .config import load_config
from .converters.elibz_converter import (
    process_elib_file, convert_footprint, STATUS_SUCCESS
)


logger = logging.getLogger(__name__)


LOG_FORMAT = '[elibz2kicad] %(levelname)s: %(message)s'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="elibz2kicad",
        description="Convert EasyEDA Pro .elibz footprints to KiCad .kicad_mod files"
    )
    parser.add_argument(
        "archive", nargs="?",
        help="path to an .elibz library archive"
    )
    parser.add_argument(
        "--efoo", metavar="FILE",
        help="convert a raw .efoo record stream instead of an archive"
    )
    parser.add_argument(
        "--name", metavar="NAME",
        help="footprint name for --efoo (default: file stem)"
    )
    parser.add_argument(
        "-o", "--output-dir", default=".",
        help="directory for the .kicad_mod file (default: current directory)"
    )
    parser.add_argument(
        "--symbol-lib", default="", metavar="PATH",
        help="target .kicad_sym library (symbol conversion is not supported yet)"
    )
    parser.add_argument(
        "--config", metavar="JSON",
        help="JSON file with converter setting overrides"
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="increase log output (-v info, -vv debug)"
    )
    return parser


def configure_logging(verbosity: int):
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG

    logging.basicConfig(level=level, format=LOG_FORMAT)


def run(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.archive and not args.efoo:
        parser.error("an .elibz archive or --efoo FILE is required")

    configure_logging(args.verbose)
    config = load_config(args.config)

    if args.efoo:
        try:
            with open(args.efoo, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            logger.error(f"Cannot read {args.efoo}: {e}")
            print(f"Cannot read {args.efoo}")
            return 1

        name = args.name or os.path.splitext(os.path.basename(args.efoo))[0]
        status = convert_footprint(content, args.output_dir, name, config)
        if status is None:
            print("Failed to write footprint file")
            return 1
        print(status)
        return 0

    status = process_elib_file(args.archive, args.output_dir, args.symbol_lib, config)
    print(status)
    return 0 if status.startswith(STATUS_SUCCESS) else 1


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
