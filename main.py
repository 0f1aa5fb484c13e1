"""
Main entry point for the GIF Converter.

Reads `config.txt` (next to this script unless `--config` is given), converts
every file under INPUT_FOLDER into a GIF under OUTPUT_FOLDER, and exits with
0 when every file was converted, 1 when some files failed, 2 when the run
could not start.
"""

import sys

from gifconverter.cli import main


if __name__ == "__main__":
    sys.exit(main())
