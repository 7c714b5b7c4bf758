"""Bounded byte buffer used to stage stream data."""

from __future__ import annotations


class StreamBuffer:
    """A fixed-capacity FIFO of bytes."""

    def __init__(self, buffer_len: int) -> None:
        if buffer_len <= 0:
            raise ValueError("buffer length must be positive")
        self._buffer_len = buffer_len
        self._buffer = bytearray()
        self._near_full = buffer_len * 95 // 100
        self._required_capacity = buffer_len * 75 // 100

    def append_bytes(self, data: bytes) -> bool:
        """Append data if it fits; returns False and leaves the buffer unchanged otherwise."""
        if self.remaining_capacity() > len(data):
            self._buffer.extend(data)
            return True
        return False

    def as_slices(self) -> tuple[bytes, bytes]:
        """Return the buffered bytes as two consecutive parts; the second is always empty."""
        return bytes(self._buffer), b""

    def consume(self, nb_bytes: int) -> bool:
        """Drop bytes from the front; returns False if fewer are buffered."""
        if len(self._buffer) < nb_bytes:
            return False
        del self._buffer[:nb_bytes]
        return True

    def as_buffer(self) -> bytes:
        return bytes(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    def remaining_capacity(self) -> int:
        return self._buffer_len - len(self._buffer)

    def is_empty(self) -> bool:
        return not self._buffer

    def is_near_full(self) -> bool:
        return len(self._buffer) > self._near_full

    def has_more_than_required_capacity(self) -> bool:
        return self.remaining_capacity() < self._required_capacity