import math
from dataclasses import dataclass
from fractions import Fraction
from pathlib import Path

import ffmpeg
from loguru import logger

from .exceptions import ProbeError


def parse_frame_rate(rate_str: str) -> Fraction:
    """
    Parses an ffprobe frame rate such as "30000/1001" or "25" into a Fraction.

    Raises:
        ValueError: If the rate is malformed, zero, or negative. ffprobe reports
                    "0/0" for streams without a known rate.
    """
    try:
        rate = Fraction(rate_str)
    except (ValueError, ZeroDivisionError, TypeError):
        raise ValueError(f"Invalid frame rate: {rate_str!r}") from None
    if rate <= 0:
        raise ValueError(f"Invalid frame rate: {rate_str!r}")
    return rate


@dataclass(frozen=True)
class MediaProfile:
    """
    Stream metadata of a source video, as reported by ffprobe.

    Attributes:
        fps (Fraction): Average frame rate of the primary video stream.
        height (int): Frame height in pixels.
    """

    fps: Fraction
    height: int

    @property
    def rounded_fps(self) -> int:
        return math.ceil(self.fps)


@dataclass(frozen=True)
class EncodeTarget:
    """Frame rate and height the transcoder is asked to produce."""

    fps: int
    height: int

    @classmethod
    def from_profile(cls, profile: MediaProfile, max_fps: int, max_height: int) -> "EncodeTarget":
        return cls(
            fps=min(profile.rounded_fps, max_fps),
            height=min(profile.height, max_height),
        )


def profile_from_probe(probe: dict, path: Path) -> MediaProfile:
    """Extracts a `MediaProfile` from the first video stream of an ffprobe result."""
    video_stream = next(
        (s for s in probe.get("streams", []) if s.get("codec_type") == "video"),
        None,
    )
    if video_stream is None:
        raise ProbeError(f"No video stream found in '{path}'")

    try:
        fps = parse_frame_rate(video_stream.get("avg_frame_rate", ""))
    except ValueError as e:
        raise ProbeError(f"{e} in '{path}'") from e

    height = video_stream.get("height")
    if not isinstance(height, int) or height <= 0:
        raise ProbeError(f"No valid frame height ({height!r}) in '{path}'")

    return MediaProfile(fps=fps, height=height)


def probe_media(path: Path, ffprobe_cmd: str = "ffprobe") -> MediaProfile:
    """
    Probes `path` with ffprobe (through ffmpeg-python) and returns its profile.

    Raises:
        ProbeError: If ffprobe fails or the file has no usable video stream.
    """
    try:
        probe = ffmpeg.probe(str(path), cmd=ffprobe_cmd)
    except ffmpeg.Error as e:
        stderr = e.stderr.decode("utf-8", errors="replace") if e.stderr else ""
        logger.debug(f"ffprobe failed for {path}: {stderr}")
        raise ProbeError(f"ffprobe failed for '{path}': {stderr.strip()}") from e
    except OSError as e:
        raise ProbeError(f"Could not run ffprobe for '{path}': {e}") from e

    return profile_from_probe(probe, path)
