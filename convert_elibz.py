#!/usr/bin/env python3
"""
convert_elibz - Standalone Launcher for elibz2kicad

Run this script to convert an .elibz archive without installing the package.
You can also install it as a command with: pip install -e .
"""

import sys
import os

# Add the plugins directory to path
script_dir = os.path.dirname(os.path.abspath(__file__))
plugins_dir = os.path.join(script_dir, "plugins")
if plugins_dir not in sys.path:
    sys.path.insert(0, plugins_dir)


def main():
    from elibz2kicad.cli import main as cli_main

    cli_main()


if __name__ == "__main__":
    main()
