import pytest

from gifconverter.utils.format_utils import formatted_size, size_in_kb


@pytest.mark.parametrize("size_bytes, expected", [
    (0, 0),
    (1023, 0),
    (1024, 1),
    (500 * 1024 + 1023, 500),
])
def test_size_in_kb_rounds_down(size_bytes, expected):
    assert size_in_kb(size_bytes) == expected


@pytest.mark.parametrize("size_bytes, expected", [
    (-5, "0 B"),
    (0, "0 B"),
    (512, "512 B"),
    (1024, "1 KB"),
    (1536, "1.5 KB"),
    (2 * 1024 * 1024, "2 MB"),
    (int(1.25 * 1024 ** 3), "1.25 GB"),
    (3 * 1024 ** 5, "3072 TB"),
])
def test_formatted_size(size_bytes, expected):
    assert formatted_size(size_bytes) == expected
