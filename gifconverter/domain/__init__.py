"""
This package contains the core domain models of the GIF Converter.

The domain layer represents the concepts the converter works with, independent
of the CLI, the services and the external tools.

Modules:
    exceptions.py: Exception types, one per processing stage, each tagged
                   with the error kind reported for a failed file.
    media.py: `MediaProfile` (what ffprobe says about a video) and
              `EncodeTarget` (what the transcoder is asked to produce),
              plus the probing function that builds a profile.
    results.py: `FileResult` and `BatchReport`, the per-file outcome and
                its aggregation over a whole run.
"""
