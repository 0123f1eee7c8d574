"""Tests for spatialview.utils - message formatting helpers."""
from spatialview.utils import format_byte_size, format_duration


def test_small_file_size():
    assert format_byte_size(2048) == "File Size: 2048 bytes (2 KB, <1 MB)"


def test_megabyte_file_size():
    n = 3 * 1024 * 1024
    assert format_byte_size(n) == f"File Size: {n} bytes (3072 KB, 3 MB)"


def test_zero_size():
    assert format_byte_size(0) == "File Size: 0 bytes (0 KB, <1 MB)"


def test_duration_has_two_decimals():
    assert format_duration(1.23456) == "1.23 seconds"
    assert format_duration(0) == "0.00 seconds"
