"""
Compact binary primitives for session snapshots.

Unsigned integers use a variable-length scheme: values up to 250 take a single
byte, larger values are a marker byte (251, 252 or 253) followed by the value as a
little-endian u16, u32 or u64. Signed integers are zigzag-mapped onto unsigned ones
first. Floats are little-endian IEEE-754 doubles. Strings, sequences and maps carry
their length up front. Durations are whole seconds (signed) plus nanoseconds.
"""

import struct
from datetime import timedelta
from typing import Dict, Optional

from ffmonitor.exceptions import SnapshotDecodeError

SINGLE_BYTE_MAX = 250
U16_MARKER = 251
U32_MARKER = 252
U64_MARKER = 253

U16_MAX = 2 ** 16 - 1
U32_MAX = 2 ** 32 - 1
U64_MAX = 2 ** 64 - 1
I64_MIN = -(2 ** 63)
I64_MAX = 2 ** 63 - 1

NANOS_PER_MICRO = 1_000
MICROS_PER_SECOND = 1_000_000
NANOS_PER_SECOND = 1_000_000_000

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")
_F64 = struct.Struct("<d")


class BinaryWriter:
    def __init__(self):
        self._buffer = bytearray()

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def write_u8(self, value: int) -> None:
        if not 0 <= value <= 255:
            raise ValueError(f"Value does not fit in a byte: {value}")
        self._buffer.append(value)

    def write_varint(self, value: int) -> None:
        if value < 0 or value > U64_MAX:
            raise ValueError(f"Value does not fit in an unsigned 64-bit integer: {value}")

        if value <= SINGLE_BYTE_MAX:
            self._buffer.append(value)
        elif value <= U16_MAX:
            self._buffer.append(U16_MARKER)
            self._buffer += _U16.pack(value)
        elif value <= U32_MAX:
            self._buffer.append(U32_MARKER)
            self._buffer += _U32.pack(value)
        else:
            self._buffer.append(U64_MARKER)
            self._buffer += _U64.pack(value)

    def write_signed_varint(self, value: int) -> None:
        if value < I64_MIN or value > I64_MAX:
            raise ValueError(f"Value does not fit in a signed 64-bit integer: {value}")
        self.write_varint((value << 1) ^ (value >> 63))

    def write_f64(self, value: float) -> None:
        self._buffer += _F64.pack(value)

    def write_str(self, value: str) -> None:
        data = value.encode("utf-8")
        self.write_varint(len(data))
        self._buffer += data

    def write_optional_str(self, value: Optional[str]) -> None:
        if value is None:
            self.write_u8(0)
        else:
            self.write_u8(1)
            self.write_str(value)

    def write_str_map(self, value: Dict[str, str]) -> None:
        self.write_varint(len(value))
        for key, item in value.items():
            self.write_str(key)
            self.write_str(item)

    def write_duration(self, value: timedelta) -> None:
        total_micros = value // timedelta(microseconds=1)
        seconds, micros = divmod(total_micros, MICROS_PER_SECOND)
        self.write_signed_varint(seconds)
        self.write_varint(micros * NANOS_PER_MICRO)


class BinaryReader:
    def __init__(self, data: bytes):
        self._data = memoryview(data)
        self._position = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._position

    def _take(self, size: int) -> memoryview:
        if self.remaining < size:
            raise SnapshotDecodeError(
                f"Unexpected end of snapshot data at offset {self._position} (needed {size} bytes)")
        chunk = self._data[self._position:self._position + size]
        self._position += size
        return chunk

    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_varint(self) -> int:
        marker = self.read_u8()
        if marker <= SINGLE_BYTE_MAX:
            return marker
        if marker == U16_MARKER:
            return _U16.unpack(self._take(_U16.size))[0]
        if marker == U32_MARKER:
            return _U32.unpack(self._take(_U32.size))[0]
        if marker == U64_MARKER:
            return _U64.unpack(self._take(_U64.size))[0]
        raise SnapshotDecodeError(f"Invalid integer marker byte {marker} at offset {self._position - 1}")

    def read_signed_varint(self) -> int:
        value = self.read_varint()
        return (value >> 1) ^ -(value & 1)

    def read_f64(self) -> float:
        return _F64.unpack(self._take(_F64.size))[0]

    def read_str(self) -> str:
        size = self.read_varint()
        try:
            return bytes(self._take(size)).decode("utf-8")
        except UnicodeDecodeError as e:
            raise SnapshotDecodeError(f"Invalid UTF-8 string in snapshot: {e}") from e

    def read_optional_str(self) -> Optional[str]:
        tag = self.read_u8()
        if tag == 0:
            return None
        if tag == 1:
            return self.read_str()
        raise SnapshotDecodeError(f"Invalid optional tag {tag} at offset {self._position - 1}")

    def read_str_map(self) -> Dict[str, str]:
        size = self.read_varint()
        result = {}
        for _ in range(size):
            key = self.read_str()
            result[key] = self.read_str()
        return result

    def read_duration(self) -> timedelta:
        seconds = self.read_signed_varint()
        nanos = self.read_varint()
        if nanos >= NANOS_PER_SECOND:
            raise SnapshotDecodeError(f"Invalid sub-second nanoseconds value: {nanos}")
        try:
            return timedelta(seconds=seconds, microseconds=nanos // NANOS_PER_MICRO)
        except OverflowError as e:
            raise SnapshotDecodeError(f"Duration out of range: {seconds}s") from e

    def expect_end(self) -> None:
        if self.remaining:
            raise SnapshotDecodeError(f"Unexpected {self.remaining} trailing bytes in snapshot data")
