"""
The transcoder turns a source video into raw GIF bytes with FFmpeg.

The filter graph is built with ffmpeg-python:

    split[a][b]; [a]palettegen[pg];
    [b]fps=<fps>, scale=w=-1:h=<height>, mpdecimate [b];
    [b][pg]paletteuse=dither=bayer

One branch of the input generates an optimal palette for the whole clip, the
other caps the frame rate, scales to the target height (keeping the aspect
ratio), drops duplicate frames, and is then mapped onto the palette. The GIF is
written to stdout and captured in memory, so nothing touches the output folder
until the pipeline writes the final buffer.
"""

from pathlib import Path

import ffmpeg
from loguru import logger

from ..config.common import GIF_FINAL_DELAY, GIF_LOOP, GIF_PALETTE_DITHER
from ..domain.exceptions import TranscodeError
from ..domain.media import EncodeTarget


class GifTranscoder:
    def __init__(self, ffmpeg_cmd: str = "ffmpeg"):
        self.ffmpeg_cmd = ffmpeg_cmd

    @staticmethod
    def build_stream(path: Path, target: EncodeTarget):
        """Builds the ffmpeg-python output node for `path` at `target`."""
        source = ffmpeg.input(str(path))
        branches = source.filter_multi_output("split")
        palette = branches[0].filter("palettegen")
        frames = (
            branches[1]
            .filter("fps", fps=target.fps)
            .filter("scale", w=-1, h=target.height)
            .filter("mpdecimate")
        )
        return (
            ffmpeg.filter([frames, palette], "paletteuse", dither=GIF_PALETTE_DITHER)
            .output("pipe:", format="gif", loop=GIF_LOOP, final_delay=GIF_FINAL_DELAY, vsync=0)
        )

    def transcode(self, path: Path, target: EncodeTarget) -> bytes:
        """
        Transcodes `path` into GIF bytes at `target` fps and height.

        Raises:
            TranscodeError: If ffmpeg fails, cannot be executed, or produces no output.
        """
        stream = self.build_stream(path, target)
        logger.trace(f"ffmpeg arguments: {stream.get_args()}")
        try:
            out, _ = stream.run(cmd=self.ffmpeg_cmd, capture_stdout=True, capture_stderr=True)
        except ffmpeg.Error as e:
            stderr = e.stderr.decode("utf-8", errors="replace") if e.stderr else ""
            raise TranscodeError(f"ffmpeg failed for '{path}':\n{stderr.strip()}") from e
        except OSError as e:
            raise TranscodeError(f"Could not run ffmpeg for '{path}': {e}") from e

        if not out:
            raise TranscodeError(f"ffmpeg produced no output for '{path}'")
        return out
