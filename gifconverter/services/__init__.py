"""
Services Package for the GIF Converter.

This package contains the "service layer" of the application: classes and
functions that each perform one well-defined task for the pipeline.

- **Engine adapters (`GifTranscoder`, `PaletteCompressor`):**
  Thin wrappers around the external engines. The transcoder drives FFmpeg to
  turn a video into GIF bytes; the compressor uses Pillow to re-encode a GIF
  with a smaller palette. Engine failures are converted into the domain's
  `TranscodeError` / `CompressionError`.

- **Compression controller (`CompressionController`):**
  The bounded loop that walks the palette schedule until a GIF fits the
  configured size budget.

- **File processing (`ProcessFiles`, `FilesystemGateway`, path mapping):**
  Discovery of source files, mapping onto the mirrored output tree, and the
  lock-protected writes and moves shared by all workers.

- **Logging (`setup_logging`, trace ids, exception hooks):**
  Loguru sinks for the console and the append-only log file.
"""
