"""Subscription filters deciding which messages a client receives."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union

from .bincode import DecodeError, Decoder, Encoder
from .channel_message import (
    AccountUpdate,
    BlockMetaUpdate,
    BlockUpdate,
    ChannelMessage,
    SlotUpdate,
    TransactionUpdate,
)
from .types import Pubkey, Signature

VOTE_PROGRAM_ID = Pubkey.from_base58("Vote111111111111111111111111111111111111111")
STAKE_PROGRAM_ID = Pubkey.from_base58("Stake11111111111111111111111111111111111111")

_DATASIZE_TAG = 0
_MEMCMP_TAG = 1
_MEMCMP_BYTES_TAG = 0


@dataclass(frozen=True)
class DataSizeFilter:
    """Matches account data of exactly ``data_size`` bytes."""

    data_size: int

    def matches(self, data: bytes) -> bool:
        return len(data) == self.data_size

    def encode(self, encoder: Encoder) -> None:
        encoder.write_u32(_DATASIZE_TAG)
        encoder.write_u64(self.data_size)


@dataclass(frozen=True)
class MemcmpFilter:
    """Matches account data holding ``data`` at ``offset``."""

    offset: int
    data: bytes

    def matches(self, data: bytes) -> bool:
        if self.offset > len(data):
            return False
        tail = data[self.offset:]
        if len(tail) < len(self.data):
            return False
        return tail[: len(self.data)] == bytes(self.data)

    def encode(self, encoder: Encoder) -> None:
        encoder.write_u32(_MEMCMP_TAG)
        encoder.write_u64(self.offset)
        encoder.write_u32(_MEMCMP_BYTES_TAG)
        encoder.write_bytes(self.data)


AccountFilterType = Union[DataSizeFilter, MemcmpFilter]


def decode_account_filter_type(decoder: Decoder) -> AccountFilterType:
    """Read a data-size or memcmp filter."""
    tag = decoder.read_u32()
    if tag == _DATASIZE_TAG:
        return DataSizeFilter(decoder.read_u64())
    if tag == _MEMCMP_TAG:
        offset = decoder.read_u64()
        data_tag = decoder.read_u32()
        if data_tag != _MEMCMP_BYTES_TAG:
            raise DecodeError(f"invalid memcmp data variant {data_tag}")
        return MemcmpFilter(offset, decoder.read_bytes())
    raise DecodeError(f"invalid account filter type {tag}")


@dataclass
class AccountFilter:
    """Selects accounts by owner (with optional data filters) or by key."""

    owner: Optional[Pubkey] = None
    accounts: Optional[set[Pubkey]] = None
    filters: Optional[list[AccountFilterType]] = None

    def allows(self, message: ChannelMessage) -> bool:
        if not isinstance(message, AccountUpdate):
            return False
        account_data = message.account
        if self.owner is not None and self.owner == account_data.account.owner:
            if self.filters is not None:
                data = account_data.account.data
                return all(f.matches(data) for f in self.filters)
            return True
        if self.accounts is not None:
            return account_data.pubkey in self.accounts
        return False

    def encode(self, encoder: Encoder) -> None:
        encoder.write_option(self.owner, lambda key: key.encode(encoder))
        encoder.write_option(
            self.accounts,
            lambda keys: encoder.write_seq(sorted(keys), lambda key: key.encode(encoder)),
        )
        encoder.write_option(
            self.filters,
            lambda items: encoder.write_seq(items, lambda f: f.encode(encoder)),
        )

    @classmethod
    def decode(cls, decoder: Decoder) -> "AccountFilter":
        owner = decoder.read_option(lambda: Pubkey.decode(decoder))
        accounts = decoder.read_option(
            lambda: set(decoder.read_seq(lambda: Pubkey.decode(decoder)))
        )
        filters = decoder.read_option(
            lambda: decoder.read_seq(lambda: decode_account_filter_type(decoder))
        )
        return cls(owner=owner, accounts=accounts, filters=filters)


class FilterKind(enum.IntEnum):
    ACCOUNT = 0
    ACCOUNTS_ALL = 1
    SLOT = 2
    BLOCK_META = 3
    TRANSACTION = 4
    TRANSACTIONS_ALL = 5
    BLOCK_ALL = 6
    DELETED_ACCOUNTS = 7
    ACCOUNTS_EXCLUDING = 8


@dataclass
class Filter:
    """A client subscription; only the field matching ``kind`` is used."""

    kind: FilterKind
    account_filter: Optional[AccountFilter] = None
    signature: Optional[Signature] = None

    @classmethod
    def account(cls, account_filter: AccountFilter) -> "Filter":
        return cls(FilterKind.ACCOUNT, account_filter=account_filter)

    @classmethod
    def accounts_all(cls) -> "Filter":
        """All accounts except those owned by the vote and stake programs."""
        return cls(FilterKind.ACCOUNTS_ALL)

    @classmethod
    def slot(cls) -> "Filter":
        return cls(FilterKind.SLOT)

    @classmethod
    def block_meta(cls) -> "Filter":
        return cls(FilterKind.BLOCK_META)

    @classmethod
    def transaction(cls, signature: Signature) -> "Filter":
        return cls(FilterKind.TRANSACTION, signature=signature)

    @classmethod
    def transactions_all(cls) -> "Filter":
        return cls(FilterKind.TRANSACTIONS_ALL)

    @classmethod
    def block_all(cls) -> "Filter":
        return cls(FilterKind.BLOCK_ALL)

    @classmethod
    def deleted_accounts(cls) -> "Filter":
        return cls(FilterKind.DELETED_ACCOUNTS)

    @classmethod
    def accounts_excluding(cls, account_filter: AccountFilter) -> "Filter":
        return cls(FilterKind.ACCOUNTS_EXCLUDING, account_filter=account_filter)

    def allows(self, message: ChannelMessage) -> bool:
        kind = self.kind
        if kind is FilterKind.ACCOUNT:
            return self.account_filter.allows(message)
        if kind is FilterKind.ACCOUNTS_ALL:
            if not isinstance(message, AccountUpdate):
                return False
            owner = message.account.account.owner
            return owner != VOTE_PROGRAM_ID and owner != STAKE_PROGRAM_ID
        if kind is FilterKind.SLOT:
            return isinstance(message, SlotUpdate)
        if kind is FilterKind.BLOCK_META:
            return isinstance(message, BlockMetaUpdate)
        if kind is FilterKind.TRANSACTION:
            if not isinstance(message, TransactionUpdate):
                return False
            # only the first signature identifies the transaction
            return message.transaction.signatures[0] == self.signature
        if kind is FilterKind.TRANSACTIONS_ALL:
            return isinstance(message, TransactionUpdate)
        if kind is FilterKind.BLOCK_ALL:
            return isinstance(message, BlockUpdate)
        if kind is FilterKind.DELETED_ACCOUNTS:
            return (
                isinstance(message, AccountUpdate)
                and message.account.account.lamports == 0
            )
        return not self.account_filter.allows(message)

    def encode(self, encoder: Encoder) -> None:
        encoder.write_u32(int(self.kind))
        if self.kind in (FilterKind.ACCOUNT, FilterKind.ACCOUNTS_EXCLUDING):
            self.account_filter.encode(encoder)
        elif self.kind is FilterKind.TRANSACTION:
            self.signature.encode(encoder)

    @classmethod
    def decode(cls, decoder: Decoder) -> "Filter":
        tag = decoder.read_u32()
        try:
            kind = FilterKind(tag)
        except ValueError as err:
            raise DecodeError(f"invalid filter variant {tag}") from err
        if kind in (FilterKind.ACCOUNT, FilterKind.ACCOUNTS_EXCLUDING):
            return cls(kind, account_filter=AccountFilter.decode(decoder))
        if kind is FilterKind.TRANSACTION:
            return cls(kind, signature=Signature.decode(decoder))
        return cls(kind)