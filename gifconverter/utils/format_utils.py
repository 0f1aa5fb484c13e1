"""
Helper functions for formatting values in log messages.
"""

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def size_in_kb(size_bytes: int) -> int:
    """Whole kilobytes in `size_bytes`, rounded down. This is the unit of the GIF budget."""
    return size_bytes // 1024


def formatted_size(size_bytes: int) -> str:
    """
    Human-readable size for log lines, in binary units with up to two decimals.

    For example, 512 becomes "512 B", 1536 becomes "1.5 KB" and 2097152
    becomes "2 MB". Negative sizes are treated as zero.
    """
    value = float(max(size_bytes, 0))
    for unit in SIZE_UNITS[:-1]:
        if value < 1024:
            break
        value /= 1024
    else:
        unit = SIZE_UNITS[-1]
    if unit == "B":
        return f"{int(value)} B"
    return f"{value:.2f}".rstrip("0").rstrip(".") + f" {unit}"
