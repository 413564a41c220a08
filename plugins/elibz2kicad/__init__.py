__version__ = "1.0.0"
__author__ = "elibz2kicad Contributors"

from .converters.elibz_converter import process_elib_file, convert_footprint
from .converters.footprint_converter import FootprintConverter


def main():
    """Entry point for the command line launcher."""
    from .cli import main as cli_main

    cli_main()
