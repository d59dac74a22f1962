"""Human-readable labels for recording and path listings."""

from datetime import datetime

_SIZE_UNITS = ('B', 'KB', 'MB', 'GB')


def format_duration(seconds: int) -> str:
    """``75`` -> ``"1:15"``."""
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"


def format_file_size(size_bytes: int) -> str:
    """``1536`` -> ``"1.5 KB"``; 1024-based, at most two decimals."""
    if size_bytes <= 0:
        return "0 B"
    exponent = 0
    while size_bytes >= 1024 ** (exponent + 1) and exponent < len(_SIZE_UNITS) - 1:
        exponent += 1
    value = round(size_bytes / 1024 ** exponent, 2)
    return f"{value:g} {_SIZE_UNITS[exponent]}"


def format_timestamp(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime('%Y-%m-%d %H:%M:%S')


__all__ = ["format_duration", "format_file_size", "format_timestamp"]
