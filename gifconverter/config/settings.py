"""
Runtime settings of the GIF Converter.

The converter is configured through a flat, line-oriented `config.txt`:

    # comment
    INPUT_FOLDER: D:\\videos\\in
    OUTPUT_FOLDER: D:\\videos\\out
    MAX_GIF_SIZE_KB: 500
    MAX_GIF_FPS: 20
    MAX_GIF_HEIGHT_PX: 480
    MOVE_PROCESSED_FILES_TO_OUTPUT_FOLDER: false

The file is read once at startup into an immutable `ConverterConfig` which is
then handed to the pipeline. Nothing in the application reads configuration
from module-level state.
"""
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Iterable, Optional

from loguru import logger

from ..domain.exceptions import ConfigurationError
from .common import DEFAULT_LOG_FILE_NAME, DEFAULT_TEMP_DIR_NAME

REQUIRED_KEYS = (
    "INPUT_FOLDER",
    "OUTPUT_FOLDER",
    "MAX_GIF_SIZE_KB",
    "MAX_GIF_FPS",
    "MAX_GIF_HEIGHT_PX",
    "MOVE_PROCESSED_FILES_TO_OUTPUT_FOLDER",
)

_TRUE_VALUES = {"true", "yes", "1", "on"}
_FALSE_VALUES = {"false", "no", "0", "off"}


def default_max_workers() -> int:
    """Same default as `concurrent.futures.ThreadPoolExecutor`."""
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass(frozen=True)
class ConverterConfig:
    """
    Immutable settings for one converter run.

    Attributes:
        input_folder (Path): Root of the tree scanned for source files.
        output_folder (Path): Root of the mirrored output tree.
        max_gif_size_kb (int): Byte budget of one GIF, in whole kilobytes.
        max_gif_fps (int): Upper bound of the output frame rate.
        max_gif_height_px (int): Upper bound of the output height.
        move_processed_files (bool): Relocate sources under `<output>/_processed` after success.
        temp_folder (Path): Scratch directory cleared at the end of every run.
        log_file (Path): Append-only log file.
        max_workers (int): Number of files processed concurrently.
        batch_report_file (Path | None): Where to write the YAML batch report, if anywhere.
    """

    input_folder: Path
    output_folder: Path
    max_gif_size_kb: int
    max_gif_fps: int
    max_gif_height_px: int
    move_processed_files: bool
    temp_folder: Path
    log_file: Path
    max_workers: int
    batch_report_file: Optional[Path] = None

    def with_max_workers(self, max_workers: int) -> "ConverterConfig":
        if max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {max_workers}")
        return replace(self, max_workers=max_workers)


def parse_config_lines(lines: Iterable[str]) -> Dict[str, str]:
    """
    Parses `key: value` lines into a flat string mapping.

    Lines starting with `#` are comments, lines without a `:` are ignored. The
    line is split at the first colon only, so Windows paths such as
    `C:\\videos` survive intact. Later duplicates override earlier ones.
    """
    values: Dict[str, str] = {}
    for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if line.startswith("#") or ":" not in line:
            continue
        key, _, value = line.partition(":")
        values[key.strip()] = value.strip()
    return values


def _parse_int(values: Dict[str, str], key: str, minimum: int = 1) -> int:
    raw = values[key]
    try:
        number = int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got '{raw}'") from None
    if number < minimum:
        raise ConfigurationError(f"{key} must be at least {minimum}, got {number}")
    return number


def _parse_bool(values: Dict[str, str], key: str) -> bool:
    raw = values[key].strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{key} must be a boolean (true/false), got '{values[key]}'")


def _resolve_path(raw: str, base_dir: Path) -> Path:
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()


def config_from_mapping(values: Dict[str, str], base_dir: Path) -> ConverterConfig:
    """Validates a parsed mapping and converts it into a `ConverterConfig`."""
    missing = [key for key in REQUIRED_KEYS if not values.get(key)]
    if missing:
        raise ConfigurationError(f"Missing required config key(s): {', '.join(missing)}")

    optional_workers = values.get("MAX_WORKERS")
    max_workers = _parse_int(values, "MAX_WORKERS") if optional_workers else default_max_workers()

    report_raw = values.get("BATCH_REPORT_FILE")

    return ConverterConfig(
        input_folder=_resolve_path(values["INPUT_FOLDER"], base_dir),
        output_folder=_resolve_path(values["OUTPUT_FOLDER"], base_dir),
        max_gif_size_kb=_parse_int(values, "MAX_GIF_SIZE_KB"),
        max_gif_fps=_parse_int(values, "MAX_GIF_FPS"),
        max_gif_height_px=_parse_int(values, "MAX_GIF_HEIGHT_PX"),
        move_processed_files=_parse_bool(values, "MOVE_PROCESSED_FILES_TO_OUTPUT_FOLDER"),
        temp_folder=_resolve_path(values.get("TEMP_FOLDER") or DEFAULT_TEMP_DIR_NAME, base_dir),
        log_file=_resolve_path(values.get("LOG_FILE") or DEFAULT_LOG_FILE_NAME, base_dir),
        max_workers=max_workers,
        batch_report_file=_resolve_path(report_raw, base_dir) if report_raw else None,
    )


def load_config(config_path: Path) -> ConverterConfig:
    """
    Reads `config_path` and returns the validated configuration.

    Relative paths inside the file are resolved against the directory that
    contains it.

    Raises:
        ConfigurationError: If the file cannot be read or a value is missing or invalid.
    """
    config_path = Path(config_path)
    try:
        with config_path.open("r", encoding="utf-8") as f:
            values = parse_config_lines(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file '{config_path}': {e}") from e

    logger.debug(f"Loaded {len(values)} config value(s) from {config_path}")
    return config_from_mapping(values, config_path.resolve().parent)
