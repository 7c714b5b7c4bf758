"""Transaction types carried by the stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from .bincode import DecodeError, Decoder, Encoder
from .types import Hash, Pubkey, Reward, Signature, SlotIdentifier

T = TypeVar("T")


def _write_short_len(encoder: Encoder, length: int) -> None:
    if not 0 <= length <= 0xFFFF:
        raise ValueError(f"short vector length {length} out of range")
    while True:
        byte = length & 0x7F
        length >>= 7
        if length:
            encoder.write_u8(byte | 0x80)
        else:
            encoder.write_u8(byte)
            return


def _read_short_len(decoder: Decoder) -> int:
    value = 0
    for shift in (0, 7, 14):
        byte = decoder.read_u8()
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            if value > 0xFFFF:
                break
            return value
    raise DecodeError("invalid short vector length")


def _write_short_seq(encoder: Encoder, items: list, write: Callable[[T], None]) -> None:
    _write_short_len(encoder, len(items))
    for item in items:
        write(item)


def _read_short_seq(decoder: Decoder, read: Callable[[], T]) -> list[T]:
    return [read() for _ in range(_read_short_len(decoder))]


def _write_short_bytes(encoder: Encoder, data: bytes) -> None:
    _write_short_len(encoder, len(data))
    encoder.write_fixed(data)


def _read_short_bytes(decoder: Decoder) -> bytes:
    return decoder.read_fixed(_read_short_len(decoder))


@dataclass
class MessageHeader:
    num_required_signatures: int = 0
    num_readonly_signed_accounts: int = 0
    num_readonly_unsigned_accounts: int = 0

    def encode(self, encoder: Encoder) -> None:
        encoder.write_u8(self.num_required_signatures)
        encoder.write_u8(self.num_readonly_signed_accounts)
        encoder.write_u8(self.num_readonly_unsigned_accounts)

    @classmethod
    def decode(cls, decoder: Decoder) -> "MessageHeader":
        return cls(decoder.read_u8(), decoder.read_u8(), decoder.read_u8())


@dataclass
class CompiledInstruction:
    program_id_index: int
    accounts: bytes = b""
    data: bytes = b""

    def encode(self, encoder: Encoder) -> None:
        encoder.write_u8(self.program_id_index)
        _write_short_bytes(encoder, bytes(self.accounts))
        _write_short_bytes(encoder, bytes(self.data))

    @classmethod
    def decode(cls, decoder: Decoder) -> "CompiledInstruction":
        return cls(decoder.read_u8(), _read_short_bytes(decoder), _read_short_bytes(decoder))


@dataclass
class MessageAddressTableLookup:
    account_key: Pubkey
    writable_indexes: bytes = b""
    readonly_indexes: bytes = b""

    def encode(self, encoder: Encoder) -> None:
        self.account_key.encode(encoder)
        _write_short_bytes(encoder, bytes(self.writable_indexes))
        _write_short_bytes(encoder, bytes(self.readonly_indexes))

    @classmethod
    def decode(cls, decoder: Decoder) -> "MessageAddressTableLookup":
        return cls(Pubkey.decode(decoder), _read_short_bytes(decoder), _read_short_bytes(decoder))


@dataclass
class TransactionMessage:
    """A versioned (v0) transaction message."""

    header: MessageHeader
    account_keys: list[Pubkey]
    recent_blockhash: Hash
    instructions: list[CompiledInstruction] = field(default_factory=list)
    address_table_lookups: list[MessageAddressTableLookup] = field(default_factory=list)

    def encode(self, encoder: Encoder) -> None:
        self.header.encode(encoder)
        _write_short_seq(encoder, self.account_keys, lambda k: k.encode(encoder))
        self.recent_blockhash.encode(encoder)
        _write_short_seq(encoder, self.instructions, lambda i: i.encode(encoder))
        _write_short_seq(encoder, self.address_table_lookups, lambda t: t.encode(encoder))

    @classmethod
    def decode(cls, decoder: Decoder) -> "TransactionMessage":
        return cls(
            header=MessageHeader.decode(decoder),
            account_keys=_read_short_seq(decoder, lambda: Pubkey.decode(decoder)),
            recent_blockhash=Hash.decode(decoder),
            instructions=_read_short_seq(decoder, lambda: CompiledInstruction.decode(decoder)),
            address_table_lookups=_read_short_seq(
                decoder, lambda: MessageAddressTableLookup.decode(decoder)
            ),
        )


@dataclass
class LoadedAddresses:
    writable: list[Pubkey] = field(default_factory=list)
    readonly: list[Pubkey] = field(default_factory=list)

    def encode(self, encoder: Encoder) -> None:
        encoder.write_seq(self.writable, lambda k: k.encode(encoder))
        encoder.write_seq(self.readonly, lambda k: k.encode(encoder))

    @classmethod
    def decode(cls, decoder: Decoder) -> "LoadedAddresses":
        return cls(
            decoder.read_seq(lambda: Pubkey.decode(decoder)),
            decoder.read_seq(lambda: Pubkey.decode(decoder)),
        )


@dataclass
class InnerInstruction:
    instruction: CompiledInstruction
    stack_height: Optional[int] = None

    def encode(self, encoder: Encoder) -> None:
        self.instruction.encode(encoder)
        encoder.write_option(self.stack_height, encoder.write_u32)

    @classmethod
    def decode(cls, decoder: Decoder) -> "InnerInstruction":
        return cls(CompiledInstruction.decode(decoder), decoder.read_option(decoder.read_u32))


@dataclass
class InnerInstructions:
    index: int
    instructions: list[InnerInstruction] = field(default_factory=list)

    def encode(self, encoder: Encoder) -> None:
        encoder.write_u8(self.index)
        encoder.write_seq(self.instructions, lambda i: i.encode(encoder))

    @classmethod
    def decode(cls, decoder: Decoder) -> "InnerInstructions":
        return cls(decoder.read_u8(), decoder.read_seq(lambda: InnerInstruction.decode(decoder)))


@dataclass
class TransactionReturnData:
    program_id: Pubkey
    data: bytes = b""

    def encode(self, encoder: Encoder) -> None:
        self.program_id.encode(encoder)
        encoder.write_bytes(self.data)

    @classmethod
    def decode(cls, decoder: Decoder) -> "TransactionReturnData":
        return cls(Pubkey.decode(decoder), decoder.read_bytes())


@dataclass
class TransactionMeta:
    """Execution results; ``error`` holds the transaction error variant index."""

    error: Optional[int] = None
    fee: int = 0
    pre_balances: list[int] = field(default_factory=list)
    post_balances: list[int] = field(default_factory=list)
    inner_instructions: Optional[list[InnerInstructions]] = None
    log_messages: Optional[list[str]] = None
    rewards: Optional[list[Reward]] = None
    loaded_addresses: LoadedAddresses = field(default_factory=LoadedAddresses)
    return_data: Optional[TransactionReturnData] = None
    compute_units_consumed: Optional[int] = None

    def encode(self, encoder: Encoder) -> None:
        encoder.write_option(self.error, encoder.write_u32)
        encoder.write_u64(self.fee)
        encoder.write_seq(self.pre_balances, encoder.write_u64)
        encoder.write_seq(self.post_balances, encoder.write_u64)
        encoder.write_option(
            self.inner_instructions,
            lambda items: encoder.write_seq(items, lambda i: i.encode(encoder)),
        )
        encoder.write_option(
            self.log_messages, lambda logs: encoder.write_seq(logs, encoder.write_str)
        )
        encoder.write_option(
            self.rewards, lambda rs: encoder.write_seq(rs, lambda r: r.encode(encoder))
        )
        self.loaded_addresses.encode(encoder)
        encoder.write_option(self.return_data, lambda r: r.encode(encoder))
        encoder.write_option(self.compute_units_consumed, encoder.write_u64)

    @classmethod
    def decode(cls, decoder: Decoder) -> "TransactionMeta":
        return cls(
            error=decoder.read_option(decoder.read_u32),
            fee=decoder.read_u64(),
            pre_balances=decoder.read_seq(decoder.read_u64),
            post_balances=decoder.read_seq(decoder.read_u64),
            inner_instructions=decoder.read_option(
                lambda: decoder.read_seq(lambda: InnerInstructions.decode(decoder))
            ),
            log_messages=decoder.read_option(lambda: decoder.read_seq(decoder.read_str)),
            rewards=decoder.read_option(
                lambda: decoder.read_seq(lambda: Reward.decode(decoder))
            ),
            loaded_addresses=LoadedAddresses.decode(decoder),
            return_data=decoder.read_option(lambda: TransactionReturnData.decode(decoder)),
            compute_units_consumed=decoder.read_option(decoder.read_u64),
        )


@dataclass
class Transaction:
    slot_identifier: SlotIdentifier
    signatures: list[Signature]
    message: TransactionMessage
    is_vote: bool
    transaction_meta: TransactionMeta
    index: int

    def encode(self, encoder: Encoder) -> None:
        self.slot_identifier.encode(encoder)
        encoder.write_seq(self.signatures, lambda s: s.encode(encoder))
        self.message.encode(encoder)
        encoder.write_bool(self.is_vote)
        self.transaction_meta.encode(encoder)
        encoder.write_u64(self.index)

    @classmethod
    def decode(cls, decoder: Decoder) -> "Transaction":
        return cls(
            slot_identifier=SlotIdentifier.decode(decoder),
            signatures=decoder.read_seq(lambda: Signature.decode(decoder)),
            message=TransactionMessage.decode(decoder),
            is_vote=decoder.read_bool(),
            transaction_meta=TransactionMeta.decode(decoder),
            index=decoder.read_u64(),
        )