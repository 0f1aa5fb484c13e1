"""
Configuration Package for the GIF Converter.

This package centralizes the configuration of the application. It is split in
two parts:
- `common.py` holds static constants: logging formats, default file names,
  the compression schedule and the optional user tool paths.
- `settings.py` parses the line-oriented `config.txt` file into an immutable
  `ConverterConfig`, which is created once at startup and passed explicitly to
  the pipeline.
"""
