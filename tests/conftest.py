import io
import sys
import threading
from fractions import Fraction
from pathlib import Path

import pytest
from loguru import logger
from PIL import Image

from gifconverter.config.settings import ConverterConfig
from gifconverter.domain.exceptions import CompressionError, ProbeError, TranscodeError
from gifconverter.domain.media import MediaProfile


def make_gif(frames=4, size=(32, 24), seed=0, disposal=0) -> bytes:
    """Small animated GIF whose frames differ from each other."""
    images = []
    for i in range(frames):
        img = Image.new("RGB", size)
        img.putdata([
            ((x * 8 + i * 40 + seed) % 256, (y * 10 + i * 20) % 256, (x * y + i * 60) % 256)
            for y in range(size[1]) for x in range(size[0])
        ])
        images.append(img)
    out = io.BytesIO()
    images[0].save(out, format="GIF", save_all=True, append_images=images[1:], duration=80, loop=0, disposal=disposal)
    return out.getvalue()


class FakeProber:
    """Returns a fixed profile; files named `*.txt` or in `fail_on` fail like non-video input."""

    def __init__(self, profile=MediaProfile(fps=Fraction(30), height=720), fail_on=()):
        self.profile = profile
        self.fail_on = set(fail_on)
        self.calls = []

    def __call__(self, path: Path) -> MediaProfile:
        self.calls.append(path)
        if path.suffix == ".txt" or path.name in self.fail_on:
            raise ProbeError(f"ffprobe failed for '{path}': Invalid data found when processing input")
        return self.profile


class FakeTranscoder:
    """Produces a buffer of `size_kb` kilobytes (per file name, or the default)."""

    def __init__(self, size_kb=100, sizes=None, fail_on=()):
        self.size_kb = size_kb
        self.sizes = sizes or {}
        self.fail_on = set(fail_on)
        self.calls = []

    def transcode(self, path, target):
        self.calls.append((path, target))
        if path.name in self.fail_on:
            raise TranscodeError(f"ffmpeg failed for '{path}'")
        kb = self.sizes.get(path.name, self.size_kb)
        return path.name.encode() + b"\0" * (kb * 1024)


class FakeCompressor:
    """
    Maps palette size to output kilobytes through `kb_for_palette`.
    Records the input buffer of every call.
    """

    def __init__(self, kb_for_palette=lambda palette_size: palette_size * 8, fail=False):
        self.kb_for_palette = kb_for_palette
        self.fail = fail
        self.calls = []

    def compress(self, data, palette_size, dither=None):
        self.calls.append((data, palette_size, dither))
        if self.fail:
            raise CompressionError("encoder crashed")
        return b"c" * (self.kb_for_palette(palette_size) * 1024)


@pytest.fixture
def tree(tmp_path):
    input_dir = tmp_path / "input"
    output_dir = tmp_path / "output"
    input_dir.mkdir()
    return input_dir, output_dir


@pytest.fixture
def make_config(tmp_path, tree):
    input_dir, output_dir = tree

    def _make(**overrides):
        values = dict(
            input_folder=input_dir,
            output_folder=output_dir,
            max_gif_size_kb=500,
            max_gif_fps=20,
            max_gif_height_px=480,
            move_processed_files=False,
            temp_folder=tmp_path / "TEMP",
            log_file=tmp_path / "log.txt",
            max_workers=4,
        )
        values.update(overrides)
        return ConverterConfig(**values)

    return _make


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.configure(extra={"trace": "?"})
    logger.add(sys.stderr)
    sys.excepthook = sys.__excepthook__
    threading.excepthook = threading.__excepthook__
