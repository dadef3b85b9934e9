"""
Parser for the machine-readable progress protocol ffmpeg writes with ``-progress``.

The protocol is a flat stream of ``key=value`` lines. There is no record separator;
the ``progress`` key (``continue`` or ``end``) closes the fields reported since the
previous one. Each closed group becomes one ``ProgressRecord``.
"""

import logging
import math
from datetime import timedelta
from typing import Any, Callable, Dict, Iterable, Iterator, Optional

from ffmonitor.exceptions import ProgressParseError
from ffmonitor.model.progress_record import ProgressRecord

log = logging.getLogger(__name__)

SENTINEL_KEY = "progress"
BITRATE_SUFFIX = "kbits/s"
SPEED_SUFFIX = "x"
U64_MAX = 2 ** 64 - 1


def parse_unsigned(value: str) -> int:
    if not value.isascii() or not value.isdigit():
        raise ValueError("expected an unsigned integer")
    result = int(value)
    if result > U64_MAX:
        raise ValueError("does not fit in an unsigned 64-bit integer")
    return result


def parse_float(value: str) -> float:
    return float(value)


def saturate_unsigned(value: float) -> int:
    if math.isnan(value) or value <= 0:
        return 0
    if value >= U64_MAX:
        return U64_MAX
    return int(value)


def parse_bitrate(value: str) -> int:
    value = value.removesuffix(BITRATE_SUFFIX)
    return saturate_unsigned(float(value) * 1000.0)


def parse_speed(value: str) -> float:
    return float(value.removesuffix(SPEED_SUFFIX))


def parse_out_time(value: str) -> timedelta:
    hours, sep, rest = value.partition(":")
    if not sep:
        raise ValueError("hours missing")
    minutes, sep, rest = rest.partition(":")
    if not sep:
        raise ValueError("minutes missing")
    seconds, sep, micros = rest.partition(".")
    if not sep:
        raise ValueError("seconds missing")

    total_seconds = parse_unsigned(hours) * 3600 + parse_unsigned(minutes) * 60 + parse_unsigned(seconds)
    return timedelta(seconds=total_seconds, microseconds=parse_unsigned(micros))


_DECODERS: Dict[str, Callable[[str], Any]] = {
    "frame": parse_unsigned,
    "fps": parse_float,
    "bitrate": parse_bitrate,
    "total_size": parse_unsigned,
    "out_time_us": parse_unsigned,
    "out_time_ms": parse_unsigned,
    "out_time": parse_out_time,
    "dup_frames": parse_unsigned,
    "drop_frames": parse_unsigned,
    "speed": parse_speed,
}


class ProgressParser:
    """
    Two-state machine turning protocol lines into records.

    While accumulating, recognized fields are decoded into the pending epoch. The
    sentinel key emits the pending epoch as a record and starts a new, empty one.
    Fields never carry over from one epoch to the next.
    """

    def __init__(self):
        self._fields: Dict[str, Any] = {}
        self._records_emitted = 0

    @property
    def has_partial_epoch(self) -> bool:
        return bool(self._fields)

    @property
    def records_emitted(self) -> int:
        return self._records_emitted

    def feed(self, line: str) -> Optional[ProgressRecord]:
        key, sep, value = line.strip().partition("=")
        if not sep:
            return None

        key = key.strip()
        value = value.strip()

        if key == SENTINEL_KEY:
            record = ProgressRecord(**self._fields)
            self._fields = {}
            self._records_emitted += 1
            return record

        decoder = _DECODERS.get(key)
        if decoder is None:
            return None

        try:
            self._fields[key] = decoder(value)
        except (ValueError, OverflowError) as e:
            log.error("Malformed progress value.")
            log.error("|-Key: %s", key)
            log.error("|-Value: %s", value)
            raise ProgressParseError(key, value, str(e)) from e

        return None


def parse_progress_lines(lines: Iterable[str]) -> Iterator[ProgressRecord]:
    parser = ProgressParser()
    for line in lines:
        record = parser.feed(line)
        if record is not None:
            yield record

    if parser.has_partial_epoch:
        log.debug("Progress stream ended inside an epoch. Discarding its fields.")
