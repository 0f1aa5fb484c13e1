"""
Size-constrained palette compression.

A freshly transcoded GIF is often larger than the configured budget. The
controller shrinks it by re-encoding it with progressively smaller palettes:

    step:          0    1    2    3    4    5    6    7
    palette size:  128  112  96   80   64   48   32   16

Each step re-encodes the *original* buffer, never the output of the previous
step, so quality loss does not accumulate. The loop stops as soon as the result
fits the budget, or after the last step.

A buffer under 1 KB (zero whole kilobytes) is never accepted as-is: it is
treated like an oversized one and goes through the schedule.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from loguru import logger

from ..config.common import BASE_PALETTE_SIZE, MAX_COLOR_COMPRESSION, PALETTE_STEP_SIZE
from ..utils.format_utils import size_in_kb
from .compressor import DitherMode

# Step value of a buffer that was accepted without any compression pass.
NO_COMPRESSION = -1


class Compressor(Protocol):
    def compress(self, data: bytes, palette_size: int, dither: DitherMode = DitherMode.AUTO) -> bytes:
        ...


def palette_size_for_step(step: int, max_step: int = MAX_COLOR_COMPRESSION) -> int:
    """Palette size used at compression `step` (128 at step 0, 16 fewer colors per step)."""
    if not 0 <= step <= max_step:
        raise ValueError(f"Compression step must be between 0 and {max_step}, got {step}")
    return BASE_PALETTE_SIZE - step * PALETTE_STEP_SIZE


def fits_budget(data: bytes, max_size_kb: int) -> bool:
    size_kb = size_in_kb(len(data))
    return size_kb != 0 and size_kb <= max_size_kb


@dataclass(frozen=True)
class CompressionResult:
    """
    Attributes:
        data (bytes): The accepted (or smallest-effort) GIF.
        step (int): Last compression step applied, `NO_COMPRESSION` if none.
        attempts (int): Number of compressor invocations.
    """

    data: bytes
    step: int
    attempts: int

    @property
    def compressed(self) -> bool:
        return self.step > 0


class CompressionController:
    def __init__(self, compressor: Compressor, max_size_kb: int,
                 max_step: int = MAX_COLOR_COMPRESSION, dither: DitherMode = DitherMode.AUTO):
        if max_step < 0 or BASE_PALETTE_SIZE - max_step * PALETTE_STEP_SIZE <= 0:
            raise ValueError(f"max_step {max_step} would produce an empty palette")
        self.compressor = compressor
        self.max_size_kb = max_size_kb
        self.max_step = max_step
        self.dither = dither

    def run(self, data: bytes, on_step: Optional[Callable[[int, int], None]] = None) -> CompressionResult:
        """
        Compresses `data` until it fits the budget or the schedule is exhausted.

        Args:
            data: The GIF produced by the transcoder.
            on_step: Called as `on_step(step, max_step)` before each compression pass.

        Returns:
            The final buffer and the step at which the loop stopped. The loop
            runs at most `max_step + 1` compressor passes.

        Raises:
            CompressionError: Propagated from the compressor. There is no retry.
        """
        source = data
        current = data
        step = NO_COMPRESSION
        attempts = 0

        while step != self.max_step and not fits_budget(current, self.max_size_kb):
            step += 1
            palette_size = palette_size_for_step(step, self.max_step)
            if on_step:
                on_step(step, self.max_step)
            logger.debug(
                f"Compression step {step}: {size_in_kb(len(current))}kb does not fit {self.max_size_kb}kb, "
                f"re-encoding with {palette_size} colors"
            )
            current = self.compressor.compress(source, palette_size, self.dither)
            attempts += 1

        return CompressionResult(data=current, step=step, attempts=attempts)
