"""
This module locates and verifies the external tools the converter relies on:
ffmpeg for transcoding and ffprobe for reading stream metadata.
"""

import subprocess
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from ..config.common import MODULE_PATH
from ..domain.exceptions import ToolNotFoundError


def get_tool_path(tool_name: str, module_path: Optional[Path] = MODULE_PATH) -> str:
    """
    Determines the executable to run for `tool_name` ("ffmpeg" or "ffprobe").

    The `ffmpeg_dir` from `config.user.yaml` takes priority. If it is not set,
    or the executable is not there, the bare tool name is returned and the
    system PATH is used.
    """
    exe_name = f"{tool_name}.exe" if sys.platform == "win32" else tool_name

    if module_path and module_path.is_dir():
        configured_path = module_path / exe_name
        if configured_path.is_file():
            logger.debug(f"Using {tool_name} from configured path: '{configured_path}'")
            return str(configured_path)
        logger.warning(
            f"`ffmpeg_dir` is configured, but '{exe_name}' was not found there. Falling back to system PATH."
        )

    return tool_name


def verify_tool(tool_cmd: str) -> str:
    """
    Runs `<tool> -version` and returns the first line of its output.

    Raises:
        ToolNotFoundError: If the tool is missing or exits with an error.
    """
    try:
        result = subprocess.run(
            [tool_cmd, "-version"],
            check=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except subprocess.CalledProcessError as e:
        raise ToolNotFoundError(
            f"'{tool_cmd} -version' failed (return code {e.returncode}):\n{e.stderr}"
        ) from e
    except OSError as e:
        raise ToolNotFoundError(
            f"'{tool_cmd}' could not be executed: {e}. Add it to the system PATH or set "
            "`paths.ffmpeg_dir` in 'config.user.yaml'."
        ) from e

    lines = result.stdout.splitlines()
    version_line = lines[0] if lines else ""
    logger.debug(f"{tool_cmd} version check successful: {version_line}")
    return version_line


def verify_tools(ffmpeg_cmd: str, ffprobe_cmd: str):
    """Startup check for both tools. Raises `ToolNotFoundError` on the first missing one."""
    for tool_cmd in (ffmpeg_cmd, ffprobe_cmd):
        verify_tool(tool_cmd)
