"""
Command-Line Interface (CLI) of the GIF Converter.

Everything about *what* to convert lives in `config.txt`; the command line
only selects the config file and overrides a few runtime knobs.
"""
import argparse
import functools
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .config.common import DEFAULT_CONFIG_FILE_NAME, DEFAULT_LOG_FILE_NAME, PROJECT_ROOT
from .config.settings import load_config
from .domain.exceptions import GifConverterException
from .domain.media import probe_media
from .pipeline.gif_pipeline import GifBatchPipeline
from .services.logging_service import install_exception_hooks, setup_logging
from .services.transcoder import GifTranscoder
from .utils.ffmpeg_utils import get_tool_path, verify_tools

EXIT_OK = 0
EXIT_FILES_FAILED = 1
EXIT_ERROR = 2


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the GIF Converter.

    Returns:
        argparse.Namespace: An object containing the parsed command-line
                            arguments as attributes.
    """
    parser = argparse.ArgumentParser(description="Batch-convert videos into size-constrained GIFs.")
    parser.add_argument(
        "--config", type=Path, default=PROJECT_ROOT / DEFAULT_CONFIG_FILE_NAME,
        help="Path of the key/value config file.",
    )
    parser.add_argument(
        "--workers", type=int, default=None,
        help="Number of files converted concurrently (overrides MAX_WORKERS).",
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO", choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level. The log file always records INFO and above.",
    )
    args = parser.parse_args(argv)
    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1")
    return args


def main(argv: Optional[List[str]] = None) -> int:
    """
    Runs one conversion batch.

    Returns:
        0 if every file was converted, 1 if at least one file failed, 2 if the
        run could not start (bad config, missing tools) or crashed.
    """
    args = get_args(argv)

    try:
        config = load_config(args.config)
        if args.workers is not None:
            config = config.with_max_workers(args.workers)
    except GifConverterException as e:
        # LOG_FILE is unknown here; use the default log file beside the config file.
        if args.config.parent.is_dir():
            setup_logging(args.config.parent / DEFAULT_LOG_FILE_NAME, args.log_level)
        logger.error(f"Configuration error: {e}")
        return EXIT_ERROR

    setup_logging(config.log_file, args.log_level)
    install_exception_hooks()
    logger.debug(f"Effective configuration: {config}")

    try:
        ffmpeg_cmd = get_tool_path("ffmpeg")
        ffprobe_cmd = get_tool_path("ffprobe")
        verify_tools(ffmpeg_cmd, ffprobe_cmd)

        pipeline = GifBatchPipeline(
            config,
            prober=functools.partial(probe_media, ffprobe_cmd=ffprobe_cmd),
            transcoder=GifTranscoder(ffmpeg_cmd),
        )
        report = pipeline.run()
    except GifConverterException as e:
        logger.error(f"GIF conversion could not run: {e}")
        return EXIT_ERROR
    except KeyboardInterrupt:
        logger.warning("GIF conversion interrupted by user.")
        return EXIT_ERROR
    except Exception:
        logger.exception("UnhandledException in batch run")
        return EXIT_ERROR

    return EXIT_OK if report.all_succeeded else EXIT_FILES_FAILED
