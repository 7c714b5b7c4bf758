"""Compression settings for account data and block payloads."""

from __future__ import annotations

import enum
from dataclasses import dataclass

import lz4.block

from .bincode import DecodeError, Decoder, Encoder


class CompressionKind(enum.IntEnum):
    NONE = 0
    LZ4_FAST = 1
    LZ4 = 2


@dataclass(frozen=True, order=True)
class CompressionType:
    """A compression algorithm with its speed or level parameter."""

    kind: CompressionKind = CompressionKind.LZ4_FAST
    value: int = 8

    @classmethod
    def none(cls) -> "CompressionType":
        return cls(CompressionKind.NONE, 0)

    @classmethod
    def lz4_fast(cls, speed: int) -> "CompressionType":
        return cls(CompressionKind.LZ4_FAST, speed)

    @classmethod
    def lz4(cls, level: int) -> "CompressionType":
        return cls(CompressionKind.LZ4, level)

    @classmethod
    def default(cls) -> "CompressionType":
        return cls.lz4_fast(8)

    def compress(self, data: bytes) -> bytes:
        """Compress data; empty input always yields empty output."""
        if not data:
            return b""
        if self.kind is CompressionKind.NONE:
            return bytes(data)
        if self.kind is CompressionKind.LZ4_FAST:
            return lz4.block.compress(
                bytes(data), mode="fast", acceleration=self.value, store_size=True
            )
        return lz4.block.compress(
            bytes(data), mode="high_compression", compression=self.value, store_size=True
        )

    def decompress(self, data: bytes) -> bytes:
        if not data:
            return b""
        if self.kind is CompressionKind.NONE:
            return bytes(data)
        return lz4.block.decompress(bytes(data))

    def encode(self, encoder: Encoder) -> None:
        encoder.write_u32(int(self.kind))
        if self.kind is not CompressionKind.NONE:
            encoder.write_i32(self.value)

    @classmethod
    def decode(cls, decoder: Decoder) -> "CompressionType":
        tag = decoder.read_u32()
        try:
            kind = CompressionKind(tag)
        except ValueError as err:
            raise DecodeError(f"invalid compression type {tag}") from err
        if kind is CompressionKind.NONE:
            return cls.none()
        return cls(kind, decoder.read_i32())