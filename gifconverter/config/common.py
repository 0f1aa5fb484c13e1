"""
Common configuration settings used throughout the application.

This module contains the constants shared across the GIF Converter: the
compression schedule, the names of the files and folders the converter reads
and writes, and the logging formats. It also loads the optional user tool
configuration from `config.user.yaml`, which lets users point the converter at
a specific FFmpeg installation without modifying the source code.
"""
from pathlib import Path

import yaml
from loguru import logger

# --- User-Defined Path Configuration ---
# `config.user.yaml` at the project root may contain:
#
#   paths:
#     ffmpeg_dir: /opt/ffmpeg/bin
#
# If it is missing, ffmpeg/ffprobe are expected on the system PATH.

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"

# The directory containing the ffmpeg and ffprobe executables.
MODULE_PATH: Path | None = None

if USER_CONFIG_PATH.is_file():
    try:
        with USER_CONFIG_PATH.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
        if user_config and "paths" in user_config:
            paths_config = user_config.get("paths") or {}
            ffmpeg_dir_str = paths_config.get("ffmpeg_dir")
            if ffmpeg_dir_str:
                MODULE_PATH = Path(ffmpeg_dir_str)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{USER_CONFIG_PATH}': {e}")
else:
    logger.debug(f"User config '{USER_CONFIG_PATH}' not found. Relying on system PATH for executables.")


# --- Logging Configuration ---

# Console format for the Loguru stderr sink.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[trace]}</cyan> | "
    "<level>{message}</level>"
)

# Format of the append-only log file. Timestamps are rendered in UTC.
LOG_FILE_FORMAT = "[{time:YYYY-MM-DD HH:mm:ss!UTC}Z|{extra[trace]}] {message}"

# Trace id used for log lines that do not belong to a single file.
DEFAULT_TRACE = "?"

# Length of the random per-file trace id.
TRACE_ID_LENGTH = 5


# --- Directory and File Management ---

# Default config file name, looked up next to `main.py` unless overridden.
DEFAULT_CONFIG_FILE_NAME = "config.txt"

DEFAULT_LOG_FILE_NAME = "log.txt"

# Scratch directory, cleared at the end of every run.
DEFAULT_TEMP_DIR_NAME = "TEMP"

# Subdirectory of the output root that receives relocated source files.
PROCESSED_DIR_NAME = "_processed"

OUTPUT_EXTENSION = ".gif"

# Suffix of the temporary file written next to an output before it is renamed into place.
PARTIAL_FILE_SUFFIX = ".part"


# --- Compression Rules ---

# Number of extra palette compression passes attempted before giving up.
MAX_COLOR_COMPRESSION = 7

# Palette size for compression step 0; every further step removes PALETTE_STEP_SIZE colors.
BASE_PALETTE_SIZE = 128
PALETTE_STEP_SIZE = 16

# Template of the filename token that records the compression step applied.
COMPRESSION_SUFFIX_TEMPLATE = " [c{step}]"


# --- Transcoder Settings ---

# GIF muxer options: loop forever and hold the last frame for 0.5s.
GIF_LOOP = 0
GIF_FINAL_DELAY = 50
GIF_PALETTE_DITHER = "bayer"
