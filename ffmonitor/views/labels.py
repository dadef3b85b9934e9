import math
from datetime import timedelta


def format_duration(value: timedelta) -> str:
    seconds = abs(int(value.total_seconds()))
    return f"{seconds // 3600:02}:{seconds // 60 % 60:02}:{seconds % 60:02}"


def format_size(size_bytes: int) -> str:
    if size_bytes > 1_000_000_000:
        return f"{size_bytes / 1_000_000_000:.2f} GiB"
    if size_bytes > 1_000_000:
        return f"{size_bytes / 1_000_000:.2f} MiB"
    if size_bytes > 1_000:
        return f"{size_bytes / 1_000:.2f} KiB"
    return f"{size_bytes} B"


def format_fps(value: float) -> str:
    return f"FPS: {value:.1f}"


def format_speed(value: float) -> str:
    return f"Speed: {value:.2f}x"


def format_bitrate(value: float) -> str:
    return f"Bitrate: {value / 1000.0:.1f} kbits/s"


def progress_ratio(out_time: timedelta, duration: timedelta) -> float:
    total = duration.total_seconds()
    if total <= 0:
        return 0.0

    ratio = out_time.total_seconds() / total
    if math.isnan(ratio):
        return 0.0
    return max(0.0, min(1.0, ratio))
