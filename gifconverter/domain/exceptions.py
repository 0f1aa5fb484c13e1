"""
Defines custom exception types for the GIF Converter.

The pipeline converts every failure of a single file into one log entry and a
failed `FileResult`. To make those entries useful, each stage raises its own
exception type, and each type carries an `error_kind` that ends up in the log
and in the batch report.

All custom exceptions inherit from the base `GifConverterException`.
"""


class GifConverterException(Exception):
    """Base class for all custom exceptions in the GIF Converter."""

    pass


# --- Startup Exceptions ---
class ConfigurationError(GifConverterException):
    """Raised when `config.txt` is missing, unreadable, or holds an invalid value."""

    pass


class ToolNotFoundError(GifConverterException):
    """Raised when ffmpeg or ffprobe cannot be found or executed."""

    pass


# --- Per-File Processing Exceptions ---
class ProcessingException(GifConverterException):
    """
    Base class for errors that abort the processing of one source file.

    These never abort the batch: the pipeline catches them at the per-file
    boundary, logs them, and moves on with the other files.
    """

    error_kind = "unexpected"


class ProbeError(ProcessingException):
    """
    Raised when a file cannot be probed as a video.

    Every file under the input folder is probed, regardless of its extension,
    so non-video files end up here.
    """

    error_kind = "probe"


class TranscodeError(ProcessingException):
    """Raised when FFmpeg fails to produce a GIF for a file."""

    error_kind = "transcode"


class CompressionError(ProcessingException):
    """Raised when re-encoding a GIF with a smaller palette fails."""

    error_kind = "compression"


class FilesystemError(ProcessingException):
    """Raised when creating a directory, writing the output, or moving the source fails."""

    error_kind = "filesystem"
