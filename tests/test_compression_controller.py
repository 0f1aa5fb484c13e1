import pytest

from gifconverter.domain.exceptions import CompressionError
from gifconverter.services.compression_controller import (
    NO_COMPRESSION,
    CompressionController,
    fits_budget,
    palette_size_for_step,
)
from gifconverter.services.compressor import DitherMode

from conftest import FakeCompressor


def kb(n: int) -> bytes:
    return b"x" * (n * 1024)


def test_palette_schedule():
    assert [palette_size_for_step(step) for step in range(8)] == [128, 112, 96, 80, 64, 48, 32, 16]


@pytest.mark.parametrize("step", [-1, 8])
def test_palette_schedule_rejects_out_of_range_steps(step):
    with pytest.raises(ValueError):
        palette_size_for_step(step)


def test_fits_budget_rejects_sub_kilobyte_buffers():
    assert not fits_budget(b"x" * 1023, 500)
    assert fits_budget(b"x" * 1024, 500)
    assert fits_budget(kb(500) + b"x" * 1023, 500)
    assert not fits_budget(kb(501), 500)


def test_buffer_within_budget_is_accepted_without_compression():
    compressor = FakeCompressor()
    result = CompressionController(compressor, max_size_kb=500).run(kb(480))

    assert result.step == NO_COMPRESSION
    assert result.attempts == 0
    assert result.data == kb(480)
    assert compressor.calls == []


def test_compresses_until_budget_is_met():
    # 128 colors -> 1024kb, 112 -> 896kb, 96 -> 768kb, 80 -> 640kb, 64 -> 512kb, 48 -> 384kb
    compressor = FakeCompressor()
    result = CompressionController(compressor, max_size_kb=500).run(kb(2048))

    assert result.step == 5
    assert result.attempts == 6
    assert len(result.data) // 1024 == 384
    assert [palette for _, palette, _ in compressor.calls] == [128, 112, 96, 80, 64, 48]


def test_every_step_recompresses_the_original_buffer():
    original = kb(2048)
    compressor = FakeCompressor()
    CompressionController(compressor, max_size_kb=500).run(original)

    assert all(data is original for data, _, _ in compressor.calls)
    assert all(dither is DitherMode.AUTO for _, _, dither in compressor.calls)


def test_stops_after_last_step_when_budget_is_never_met():
    compressor = FakeCompressor(kb_for_palette=lambda palette: 900)
    result = CompressionController(compressor, max_size_kb=500).run(kb(2048))

    assert result.step == 7
    assert result.attempts == 8
    assert len(result.data) // 1024 == 900
    assert min(palette for _, palette, _ in compressor.calls) == 16


def test_sub_kilobyte_buffer_forces_compression():
    compressor = FakeCompressor(kb_for_palette=lambda palette: 1)
    result = CompressionController(compressor, max_size_kb=500).run(b"tiny")

    assert result.step == 0
    assert result.attempts == 1


def test_zero_kilobyte_results_run_through_the_whole_schedule():
    compressor = FakeCompressor(kb_for_palette=lambda palette: 0)
    result = CompressionController(compressor, max_size_kb=500).run(b"")

    assert result.step == 7
    assert result.attempts == 8


@pytest.mark.parametrize("budget", [1, 10, 100, 200, 500, 5000])
@pytest.mark.parametrize("initial_kb", [0, 1, 50, 499, 500, 501, 4096])
def test_termination_and_acceptance_properties(budget, initial_kb):
    compressor = FakeCompressor()
    result = CompressionController(compressor, max_size_kb=budget).run(kb(initial_kb))

    assert result.attempts <= 8
    assert result.attempts == result.step + 1
    if result.step < 7:
        size_kb = len(result.data) // 1024
        assert size_kb != 0 and size_kb <= budget


def test_on_step_callback_receives_each_step():
    seen = []
    CompressionController(FakeCompressor(), max_size_kb=500).run(
        kb(2048), on_step=lambda step, max_step: seen.append((step, max_step))
    )
    assert seen == [(0, 7), (1, 7), (2, 7), (3, 7), (4, 7), (5, 7)]


def test_compressor_errors_propagate():
    controller = CompressionController(FakeCompressor(fail=True), max_size_kb=500)
    with pytest.raises(CompressionError):
        controller.run(kb(2048))


def test_rejects_schedule_that_reaches_an_empty_palette():
    with pytest.raises(ValueError):
        CompressionController(FakeCompressor(), max_size_kb=500, max_step=8)
