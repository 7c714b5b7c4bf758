"""Little-endian binary encoding with u64 length prefixes, as used on the wire."""

from __future__ import annotations

import struct
from typing import Any, Callable, Iterable, Optional, TypeVar

T = TypeVar("T")


class DecodeError(ValueError):
    """Raised when a byte string cannot be decoded."""


def _pack(fmt: str, value: Any) -> bytes:
    try:
        return struct.pack(fmt, value)
    except struct.error as err:
        raise ValueError(f"value {value!r} does not fit format {fmt!r}") from err


class Encoder:
    """Accumulates encoded values."""

    def __init__(self) -> None:
        self._parts: list[bytes] = []

    def write_u8(self, value: int) -> None:
        self._parts.append(_pack("<B", value))

    def write_u32(self, value: int) -> None:
        self._parts.append(_pack("<I", value))

    def write_i32(self, value: int) -> None:
        self._parts.append(_pack("<i", value))

    def write_u64(self, value: int) -> None:
        self._parts.append(_pack("<Q", value))

    def write_i64(self, value: int) -> None:
        self._parts.append(_pack("<q", value))

    def write_bool(self, value: bool) -> None:
        self._parts.append(b"\x01" if value else b"\x00")

    def write_fixed(self, data: bytes) -> None:
        self._parts.append(bytes(data))

    def write_bytes(self, data: bytes) -> None:
        self.write_u64(len(data))
        self._parts.append(bytes(data))

    def write_str(self, value: str) -> None:
        self.write_bytes(value.encode("utf-8"))

    def write_option(self, value: Optional[T], write: Callable[[T], None]) -> None:
        if value is None:
            self.write_u8(0)
        else:
            self.write_u8(1)
            write(value)

    def write_seq(self, items: Iterable[T], write: Callable[[T], None]) -> None:
        items = list(items)
        self.write_u64(len(items))
        for item in items:
            write(item)

    def getvalue(self) -> bytes:
        return b"".join(self._parts)


class Decoder:
    """Reads encoded values from a byte string."""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(bytes(data))
        self._pos = 0

    def _take(self, size: int) -> bytes:
        if size < 0 or self._pos + size > len(self._data):
            raise DecodeError(
                f"unexpected end of input: need {size} bytes at offset {self._pos}"
            )
        chunk = bytes(self._data[self._pos:self._pos + size])
        self._pos += size
        return chunk

    def _unpack(self, fmt: str) -> int:
        return struct.unpack(fmt, self._take(struct.calcsize(fmt)))[0]

    def read_u8(self) -> int:
        return self._unpack("<B")

    def read_u32(self) -> int:
        return self._unpack("<I")

    def read_i32(self) -> int:
        return self._unpack("<i")

    def read_u64(self) -> int:
        return self._unpack("<Q")

    def read_i64(self) -> int:
        return self._unpack("<q")

    def read_bool(self) -> bool:
        value = self.read_u8()
        if value > 1:
            raise DecodeError(f"invalid bool value {value}")
        return value == 1

    def read_fixed(self, size: int) -> bytes:
        return self._take(size)

    def read_bytes(self) -> bytes:
        return self._take(self.read_u64())

    def read_str(self) -> str:
        try:
            return self.read_bytes().decode("utf-8")
        except UnicodeDecodeError as err:
            raise DecodeError("invalid utf-8 string") from err

    def read_option(self, read: Callable[[], T]) -> Optional[T]:
        tag = self.read_u8()
        if tag == 0:
            return None
        if tag == 1:
            return read()
        raise DecodeError(f"invalid option tag {tag}")

    def read_seq(self, read: Callable[[], T]) -> list[T]:
        count = self.read_u64()
        if count > self.remaining():
            # every element takes at least one byte in practice
            raise DecodeError(f"sequence length {count} exceeds remaining input")
        return [read() for _ in range(count)]

    def remaining(self) -> int:
        return len(self._data) - self._pos