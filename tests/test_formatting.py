from __future__ import annotations

from datetime import datetime

from calidrone.formatting import format_duration, format_file_size, format_timestamp


def test_format_duration():
    assert format_duration(0) == "0:00"
    assert format_duration(9) == "0:09"
    assert format_duration(75) == "1:15"
    assert format_duration(600) == "10:00"
    assert format_duration(-3) == "0:00"


def test_format_file_size():
    assert format_file_size(0) == "0 B"
    assert format_file_size(512) == "512 B"
    assert format_file_size(1024) == "1 KB"
    assert format_file_size(1536) == "1.5 KB"
    assert format_file_size(5 * 1024 * 1024) == "5 MB"
    assert format_file_size(3 * 1024 ** 3) == "3 GB"


def test_format_timestamp_is_local_time():
    ts = datetime(2024, 5, 17, 14, 3, 9).timestamp()

    assert format_timestamp(ts) == "2024-05-17 14:03:09"
