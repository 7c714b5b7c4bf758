"""Messages exchanged between server and clients, with length-prefixed framing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Optional

from .bincode import DecodeError, Decoder, Encoder
from .block import Block
from .filters import Filter
from .transaction import Transaction
from .types import Account, BlockMeta, SlotMeta

_LENGTH_PREFIX = 8


class Message:
    """Base class of every network message."""

    TAG: ClassVar[int]

    def _encode_body(self, encoder: Encoder) -> None:
        raise NotImplementedError

    @classmethod
    def _decode_body(cls, decoder: Decoder) -> "Message":
        raise NotImplementedError

    def to_bytes(self) -> bytes:
        """Serialize the message without a length prefix."""
        encoder = Encoder()
        encoder.write_u32(self.TAG)
        self._encode_body(encoder)
        return encoder.getvalue()

    @staticmethod
    def from_bytes(data: bytes) -> "Message":
        """Deserialize a message; raises DecodeError on malformed input."""
        decoder = Decoder(data)
        tag = decoder.read_u32()
        variant = _VARIANTS.get(tag)
        if variant is None:
            raise DecodeError(f"invalid message variant {tag}")
        return variant._decode_body(decoder)

    def to_binary_stream(self) -> bytes:
        """Serialize with a little-endian u64 length prefix."""
        body = self.to_bytes()
        return len(body).to_bytes(_LENGTH_PREFIX, "little") + body

    @staticmethod
    def from_binary_stream(stream: bytes) -> Optional[tuple["Message", int]]:
        """Read one framed message; None if the stream does not yet hold a whole one."""
        frame = Message.from_binary_stream_binary(stream)
        if frame is None:
            return None
        body, consumed = frame
        return Message.from_bytes(body), consumed

    @staticmethod
    def from_binary_stream_binary(stream: bytes) -> Optional[tuple[bytes, int]]:
        """Read one framed message body as raw bytes and the number of bytes consumed."""
        if len(stream) < _LENGTH_PREFIX:
            return None
        size = int.from_bytes(bytes(stream[:_LENGTH_PREFIX]), "little")
        end = size + _LENGTH_PREFIX
        if len(stream) < end:
            return None
        return bytes(stream[_LENGTH_PREFIX:end]), end


@dataclass
class AccountMsg(Message):
    TAG: ClassVar[int] = 0
    account: Account

    def _encode_body(self, encoder: Encoder) -> None:
        self.account.encode(encoder)

    @classmethod
    def _decode_body(cls, decoder: Decoder) -> "AccountMsg":
        return cls(Account.decode(decoder))


@dataclass
class SlotMsg(Message):
    TAG: ClassVar[int] = 1
    slot_meta: SlotMeta

    def _encode_body(self, encoder: Encoder) -> None:
        self.slot_meta.encode(encoder)

    @classmethod
    def _decode_body(cls, decoder: Decoder) -> "SlotMsg":
        return cls(SlotMeta.decode(decoder))


@dataclass
class BlockMetaMsg(Message):
    TAG: ClassVar[int] = 2
    block_meta: BlockMeta

    def _encode_body(self, encoder: Encoder) -> None:
        self.block_meta.encode(encoder)

    @classmethod
    def _decode_body(cls, decoder: Decoder) -> "BlockMetaMsg":
        return cls(BlockMeta.decode(decoder))


@dataclass
class TransactionMsg(Message):
    TAG: ClassVar[int] = 3
    transaction: Transaction

    def _encode_body(self, encoder: Encoder) -> None:
        self.transaction.encode(encoder)

    @classmethod
    def _decode_body(cls, decoder: Decoder) -> "TransactionMsg":
        return cls(Transaction.decode(decoder))


@dataclass
class BlockMsg(Message):
    TAG: ClassVar[int] = 4
    block: Block

    def _encode_body(self, encoder: Encoder) -> None:
        self.block.encode(encoder)

    @classmethod
    def _decode_body(cls, decoder: Decoder) -> "BlockMsg":
        return cls(Block.decode(decoder))


@dataclass
class FiltersMsg(Message):
    """Subscription filters sent from a client to the server."""

    TAG: ClassVar[int] = 5
    filters: list[Filter] = field(default_factory=list)

    def _encode_body(self, encoder: Encoder) -> None:
        encoder.write_seq(self.filters, lambda f: f.encode(encoder))

    @classmethod
    def _decode_body(cls, decoder: Decoder) -> "FiltersMsg":
        return cls(decoder.read_seq(lambda: Filter.decode(decoder)))


@dataclass
class PingMsg(Message):
    TAG: ClassVar[int] = 6

    def _encode_body(self, encoder: Encoder) -> None:
        pass

    @classmethod
    def _decode_body(cls, decoder: Decoder) -> "PingMsg":
        return cls()


_VARIANTS: dict[int, type[Message]] = {
    variant.TAG: variant
    for variant in (
        AccountMsg,
        SlotMsg,
        BlockMetaMsg,
        TransactionMsg,
        BlockMsg,
        FiltersMsg,
        PingMsg,
    )
}