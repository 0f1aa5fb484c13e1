"""
Pillow-based palette compressor for animated GIFs.

`PaletteCompressor.compress` re-encodes a GIF with a smaller global palette.
It always starts from the bytes it is given and never touches the filesystem.

The fixed encode settings mirror what a careful image pipeline does:
- frames are converted to sRGB (ICC-tagged frames through `PIL.ImageCms`);
- frames whose size differs from the canvas are resampled with Lanczos and a
  quality-favoring `reducing_gap`;
- one palette, built from a sample of frames, is shared by every frame.
"""

import functools
import io
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from loguru import logger
from PIL import Image, ImageCms, ImageSequence

from ..domain.exceptions import CompressionError

MIN_PALETTE_SIZE = 2
MAX_PALETTE_SIZE = 256

# Number of frames sampled to build the shared palette.
PALETTE_SAMPLE_FRAMES = 10

DEFAULT_FRAME_DURATION_MS = 100


class DitherMode(Enum):
    AUTO = "auto"
    DIFFUSION = "diffusion"
    NONE = "none"

    def to_pillow(self) -> Image.Dither:
        if self is DitherMode.NONE:
            return Image.Dither.NONE
        # Pillow only implements Floyd-Steinberg diffusion when mapping onto a palette.
        return Image.Dither.FLOYDSTEINBERG


@dataclass(frozen=True)
class EncodeSettings:
    resample: Image.Resampling = Image.Resampling.LANCZOS
    # Larger gaps favor quality over speed in Pillow's two-stage (reduce + resample) scaling.
    reducing_gap: Optional[float] = 3.0
    convert_to_srgb: bool = True
    quantize_method: Image.Quantize = Image.Quantize.MEDIANCUT


@functools.lru_cache(maxsize=None)
def _srgb_profile():
    return ImageCms.createProfile("sRGB")


class PaletteCompressor:
    def __init__(self, settings: EncodeSettings = EncodeSettings()):
        self.settings = settings

    def _to_rgb(self, frame: Image.Image) -> Image.Image:
        icc_profile = frame.info.get("icc_profile")
        if self.settings.convert_to_srgb and icc_profile:
            try:
                source_profile = ImageCms.ImageCmsProfile(io.BytesIO(icc_profile))
                return ImageCms.profileToProfile(
                    frame.convert("RGB"), source_profile, _srgb_profile(), outputMode="RGB"
                )
            except ImageCms.PyCMSError as e:
                logger.debug(f"Ignoring unusable ICC profile: {e}")
        return frame.convert("RGB")

    def _read_frames(self, data: bytes) -> Tuple[List[Image.Image], List[int], List[int]]:
        frames, durations, disposals = [], [], []
        with Image.open(io.BytesIO(data)) as img:
            canvas_size = img.size
            for frame in ImageSequence.Iterator(img):
                rgb = self._to_rgb(frame)
                if rgb.size != canvas_size:
                    rgb = rgb.resize(
                        canvas_size,
                        resample=self.settings.resample,
                        reducing_gap=self.settings.reducing_gap,
                    )
                frames.append(rgb)
                durations.append(frame.info.get("duration", DEFAULT_FRAME_DURATION_MS))
                disposals.append(getattr(frame, "disposal_method", 0))
        return frames, durations, disposals

    def _build_palette(self, frames: List[Image.Image], palette_size: int) -> Image.Image:
        """Quantizes a vertical strip of sampled frames to get one palette for the whole clip."""
        samples = frames[::max(1, len(frames) // PALETTE_SAMPLE_FRAMES)]
        strip = Image.new("RGB", (max(f.width for f in samples), sum(f.height for f in samples)))
        y_offset = 0
        for frame in samples:
            strip.paste(frame, (0, y_offset))
            y_offset += frame.height
        return strip.quantize(
            colors=palette_size,
            method=self.settings.quantize_method,
            dither=Image.Dither.NONE,
        )

    def compress(self, data: bytes, palette_size: int, dither: DitherMode = DitherMode.AUTO) -> bytes:
        """
        Re-encodes the GIF in `data` with at most `palette_size` colors.

        Raises:
            ValueError: If `palette_size` is outside 2..256.
            CompressionError: If `data` cannot be decoded or re-encoded.
        """
        if not MIN_PALETTE_SIZE <= palette_size <= MAX_PALETTE_SIZE:
            raise ValueError(
                f"palette_size must be between {MIN_PALETTE_SIZE} and {MAX_PALETTE_SIZE}, got {palette_size}"
            )

        try:
            frames, durations, disposals = self._read_frames(data)
            if not frames:
                raise CompressionError("GIF contains no frames")

            palette = self._build_palette(frames, palette_size)
            quantized = [
                frame.quantize(palette=palette, dither=dither.to_pillow()) for frame in frames
            ]

            out = io.BytesIO()
            quantized[0].save(
                out,
                format="GIF",
                save_all=True,
                append_images=quantized[1:],
                duration=durations,
                disposal=disposals,
                loop=0,
                optimize=True,
            )
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise CompressionError(f"Palette re-encode with {palette_size} colors failed: {e}") from e

        return out.getvalue()
