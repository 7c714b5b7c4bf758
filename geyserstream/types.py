"""Core wire types: keys, accounts, slots and block metadata."""

from __future__ import annotations

import enum
import itertools
import os
from dataclasses import dataclass, field
from typing import ClassVar, Optional

from .bincode import DecodeError, Decoder, Encoder
from .compression import CompressionKind, CompressionType
from .defaults import (
    DEFAULT_ACK_EXPONENT,
    DEFAULT_CONNECTION_TIMEOUT,
    DEFAULT_ENABLE_GSO,
    DEFAULT_ENABLE_PACING,
    DEFAULT_MAX_ACK_DELAY,
    DEFAULT_MAX_RECIEVE_WINDOW_SIZE,
    DEFAULT_MAX_STREAMS,
)

_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_B58_INDEX = {char: index for index, char in enumerate(_B58_ALPHABET)}


def b58encode(data: bytes) -> str:
    """Encode bytes as base58 text."""
    zeros = len(data) - len(data.lstrip(b"\x00"))
    number = int.from_bytes(data, "big")
    digits = []
    while number:
        number, rem = divmod(number, 58)
        digits.append(_B58_ALPHABET[rem])
    return "1" * zeros + "".join(reversed(digits))


def b58decode(text: str) -> bytes:
    """Decode base58 text into bytes."""
    number = 0
    for char in text:
        try:
            number = number * 58 + _B58_INDEX[char]
        except KeyError:
            raise ValueError(f"invalid base58 character {char!r}") from None
    zeros = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    return b"\x00" * zeros + body


_unique_counter = itertools.count(1)


def _unique_bytes(size: int) -> bytes:
    return next(_unique_counter).to_bytes(8, "big") + os.urandom(size - 8)


def _check_size(instance, size: int) -> None:
    if len(instance.data) != size:
        raise ValueError(f"{type(instance).__name__} needs {size} bytes, got {len(instance.data)}")
    object.__setattr__(instance, "data", bytes(instance.data))


@dataclass(frozen=True, order=True)
class Pubkey:
    """A 32-byte public key."""

    SIZE: ClassVar[int] = 32
    data: bytes

    def __post_init__(self) -> None:
        _check_size(self, self.SIZE)

    @classmethod
    def new_unique(cls) -> "Pubkey":
        return cls(_unique_bytes(cls.SIZE))

    @classmethod
    def from_base58(cls, text: str) -> "Pubkey":
        return cls(b58decode(text))

    def encode(self, encoder: Encoder) -> None:
        encoder.write_fixed(self.data)

    @classmethod
    def decode(cls, decoder: Decoder) -> "Pubkey":
        return cls(decoder.read_fixed(cls.SIZE))

    def __str__(self) -> str:
        return b58encode(self.data)


@dataclass(frozen=True, order=True)
class Signature:
    """A 64-byte signature."""

    SIZE: ClassVar[int] = 64
    data: bytes

    def __post_init__(self) -> None:
        _check_size(self, self.SIZE)

    @classmethod
    def new_unique(cls) -> "Signature":
        return cls(_unique_bytes(cls.SIZE))

    @classmethod
    def from_base58(cls, text: str) -> "Signature":
        return cls(b58decode(text))

    def encode(self, encoder: Encoder) -> None:
        encoder.write_fixed(self.data)

    @classmethod
    def decode(cls, decoder: Decoder) -> "Signature":
        return cls(decoder.read_fixed(cls.SIZE))

    def __str__(self) -> str:
        return b58encode(self.data)


@dataclass(frozen=True, order=True)
class Hash:
    """A 32-byte hash."""

    SIZE: ClassVar[int] = 32
    data: bytes

    def __post_init__(self) -> None:
        _check_size(self, self.SIZE)

    @classmethod
    def new_unique(cls) -> "Hash":
        return cls(_unique_bytes(cls.SIZE))

    @classmethod
    def from_base58(cls, text: str) -> "Hash":
        return cls(b58decode(text))

    def encode(self, encoder: Encoder) -> None:
        encoder.write_fixed(self.data)

    @classmethod
    def decode(cls, decoder: Decoder) -> "Hash":
        return cls(decoder.read_fixed(cls.SIZE))

    def __str__(self) -> str:
        return b58encode(self.data)


@dataclass(frozen=True, order=True)
class SlotIdentifier:
    slot: int

    def encode(self, encoder: Encoder) -> None:
        encoder.write_u64(self.slot)

    @classmethod
    def decode(cls, decoder: Decoder) -> "SlotIdentifier":
        return cls(decoder.read_u64())


@dataclass
class SolanaAccount:
    """An account as held by the validator, uncompressed."""

    lamports: int
    data: bytes
    owner: Pubkey
    executable: bool
    rent_epoch: int


@dataclass
class Account:
    """An account update as sent over the wire, data possibly compressed."""

    slot_identifier: SlotIdentifier
    pubkey: Pubkey
    owner: Pubkey
    lamports: int
    executable: bool
    rent_epoch: int
    write_version: int
    data: bytes
    compression_type: CompressionType
    data_length: int

    @classmethod
    def from_solana_account(
        cls,
        pubkey: Pubkey,
        solana_account: SolanaAccount,
        compression_type: CompressionType,
        slot_identifier: SlotIdentifier,
        write_version: int,
    ) -> "Account":
        return cls(
            slot_identifier=slot_identifier,
            pubkey=pubkey,
            owner=solana_account.owner,
            lamports=solana_account.lamports,
            executable=solana_account.executable,
            rent_epoch=solana_account.rent_epoch,
            write_version=write_version,
            data=compression_type.compress(solana_account.data),
            compression_type=compression_type,
            data_length=len(solana_account.data),
        )

    def solana_account(self) -> SolanaAccount:
        if self.compression_type.kind is CompressionKind.NONE:
            data = bytes(self.data)
        elif self.data_length > 0:
            data = self.compression_type.decompress(self.data)
        else:
            data = b""
        return SolanaAccount(
            lamports=self.lamports,
            data=data,
            owner=self.owner,
            executable=self.executable,
            rent_epoch=self.rent_epoch,
        )

    def encode(self, encoder: Encoder) -> None:
        self.slot_identifier.encode(encoder)
        self.pubkey.encode(encoder)
        self.owner.encode(encoder)
        encoder.write_u64(self.lamports)
        encoder.write_bool(self.executable)
        encoder.write_u64(self.rent_epoch)
        encoder.write_u64(self.write_version)
        encoder.write_bytes(self.data)
        self.compression_type.encode(encoder)
        encoder.write_u64(self.data_length)

    @classmethod
    def decode(cls, decoder: Decoder) -> "Account":
        return cls(
            slot_identifier=SlotIdentifier.decode(decoder),
            pubkey=Pubkey.decode(decoder),
            owner=Pubkey.decode(decoder),
            lamports=decoder.read_u64(),
            executable=decoder.read_bool(),
            rent_epoch=decoder.read_u64(),
            write_version=decoder.read_u64(),
            data=decoder.read_bytes(),
            compression_type=CompressionType.decode(decoder),
            data_length=decoder.read_u64(),
        )


def _decode_enum(enum_cls, value: int):
    try:
        return enum_cls(value)
    except ValueError as err:
        raise DecodeError(f"invalid {enum_cls.__name__} variant {value}") from err


class SlotStatus(enum.IntEnum):
    PROCESSED = 0
    CONFIRMED = 1
    FINALIZED = 2
    FIRST_SHRED_RECEIVED = 3
    LAST_SHRED_RECEIVED = 4
    DEAD = 5

    def encode(self, encoder: Encoder) -> None:
        encoder.write_u32(int(self))

    @classmethod
    def decode(cls, decoder: Decoder) -> "SlotStatus":
        return _decode_enum(cls, decoder.read_u32())


@dataclass
class SlotMeta:
    slot: int
    parent: int
    slot_status: SlotStatus

    def encode(self, encoder: Encoder) -> None:
        encoder.write_u64(self.slot)
        encoder.write_u64(self.parent)
        self.slot_status.encode(encoder)

    @classmethod
    def decode(cls, decoder: Decoder) -> "SlotMeta":
        return cls(decoder.read_u64(), decoder.read_u64(), SlotStatus.decode(decoder))


class RewardType(enum.IntEnum):
    FEE = 0
    RENT = 1
    STAKING = 2
    VOTING = 3


@dataclass
class Reward:
    pubkey: str
    lamports: int
    post_balance: int
    reward_type: Optional[RewardType] = None
    commission: Optional[int] = None

    def encode(self, encoder: Encoder) -> None:
        encoder.write_str(self.pubkey)
        encoder.write_i64(self.lamports)
        encoder.write_u64(self.post_balance)
        encoder.write_option(self.reward_type, lambda r: encoder.write_u32(int(r)))
        encoder.write_option(self.commission, encoder.write_u8)

    @classmethod
    def decode(cls, decoder: Decoder) -> "Reward":
        return cls(
            pubkey=decoder.read_str(),
            lamports=decoder.read_i64(),
            post_balance=decoder.read_u64(),
            reward_type=decoder.read_option(
                lambda: _decode_enum(RewardType, decoder.read_u32())
            ),
            commission=decoder.read_option(decoder.read_u8),
        )


@dataclass
class BlockMeta:
    parent_slot: int
    slot: int
    parent_blockhash: str
    blockhash: str
    rewards: list[Reward] = field(default_factory=list)
    block_height: Optional[int] = None
    executed_transaction_count: int = 0
    entries_count: int = 0
    block_time: int = 0

    def encode(self, encoder: Encoder) -> None:
        encoder.write_u64(self.parent_slot)
        encoder.write_u64(self.slot)
        encoder.write_str(self.parent_blockhash)
        encoder.write_str(self.blockhash)
        encoder.write_seq(self.rewards, lambda r: r.encode(encoder))
        encoder.write_option(self.block_height, encoder.write_u64)
        encoder.write_u64(self.executed_transaction_count)
        encoder.write_u64(self.entries_count)
        encoder.write_u64(self.block_time)

    @classmethod
    def decode(cls, decoder: Decoder) -> "BlockMeta":
        return cls(
            parent_slot=decoder.read_u64(),
            slot=decoder.read_u64(),
            parent_blockhash=decoder.read_str(),
            blockhash=decoder.read_str(),
            rewards=decoder.read_seq(lambda: Reward.decode(decoder)),
            block_height=decoder.read_option(decoder.read_u64),
            executed_transaction_count=decoder.read_u64(),
            entries_count=decoder.read_u64(),
            block_time=decoder.read_u64(),
        )


@dataclass
class ConnectionParameters:
    max_number_of_streams: int = DEFAULT_MAX_STREAMS
    recieve_window_size: int = DEFAULT_MAX_RECIEVE_WINDOW_SIZE
    timeout_in_seconds: int = DEFAULT_CONNECTION_TIMEOUT
    max_ack_delay: int = DEFAULT_MAX_ACK_DELAY
    ack_exponent: int = DEFAULT_ACK_EXPONENT
    enable_gso: bool = DEFAULT_ENABLE_GSO
    enable_pacing: bool = DEFAULT_ENABLE_PACING

    def encode(self, encoder: Encoder) -> None:
        encoder.write_u64(self.max_number_of_streams)
        encoder.write_u64(self.recieve_window_size)
        encoder.write_u64(self.timeout_in_seconds)
        encoder.write_u64(self.max_ack_delay)
        encoder.write_u64(self.ack_exponent)
        encoder.write_bool(self.enable_gso)
        encoder.write_bool(self.enable_pacing)

    @classmethod
    def decode(cls, decoder: Decoder) -> "ConnectionParameters":
        return cls(
            decoder.read_u64(),
            decoder.read_u64(),
            decoder.read_u64(),
            decoder.read_u64(),
            decoder.read_u64(),
            decoder.read_bool(),
            decoder.read_bool(),
        )