"""
GIF Converter: batch conversion of video files into size-constrained GIFs.

The package is split into layers, following the same structure throughout:

- `config`: constants and the runtime settings loaded from `config.txt`.
- `domain`: exceptions, media metadata and per-file/batch results.
- `services`: adapters around the external engines (FFmpeg, Pillow), the
  compression controller, file processing and logging.
- `pipeline`: the batch pipeline that ties everything together.
- `utils`: helpers for locating external tools and formatting values.
"""

__version__ = "1.0.0"
