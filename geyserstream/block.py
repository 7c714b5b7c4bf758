"""Assembled blocks carrying serialized, possibly compressed, payloads."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, TypeVar

import lz4.block

from .bincode import DecodeError, Decoder, Encoder
from .compression import CompressionType
from .transaction import Transaction
from .types import Account, BlockMeta

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _encode_list(items: Iterable[T], write: Callable[[Encoder, T], None]) -> bytes:
    encoder = Encoder()
    encoder.write_seq(items, lambda item: write(encoder, item))
    return encoder.getvalue()


def _decode_list(data: bytes, read: Callable[[Decoder], T]) -> list[T]:
    decoder = Decoder(data)
    return decoder.read_seq(lambda: read(decoder))


@dataclass
class Block:
    """A block with its transactions and account updates serialized and compressed."""

    meta: BlockMeta
    transactions: bytes
    accounts_updated_in_block: bytes
    accounts_updated_count: int
    compression_type: CompressionType

    @classmethod
    def build(
        cls,
        meta: BlockMeta,
        transactions: list[Transaction],
        accounts: list[Account],
        compression_type: CompressionType,
    ) -> "Block":
        transactions_binary = _encode_list(transactions, lambda enc, tx: tx.encode(enc))
        accounts_binary = _encode_list(accounts, lambda enc, acc: acc.encode(enc))
        return cls(
            meta=meta,
            transactions=compression_type.compress(transactions_binary),
            accounts_updated_in_block=compression_type.compress(accounts_binary),
            accounts_updated_count=len(accounts),
            compression_type=compression_type,
        )

    def _decompress(self, data: bytes) -> bytes:
        try:
            return self.compression_type.decompress(data)
        except (lz4.block.LZ4BlockError, ValueError) as err:
            raise DecodeError(f"cannot decompress block payload: {err}") from err

    def get_transactions(self) -> list[Transaction]:
        """Decode the block's transactions; raises DecodeError on bad data."""
        data = self._decompress(self.transactions)
        transactions = _decode_list(data, Transaction.decode)
        if len(transactions) != self.meta.executed_transaction_count:
            logger.error(
                "transactions vector size is not equal to expected size in meta %d != %d",
                len(transactions),
                self.meta.executed_transaction_count,
            )
        return transactions

    def get_accounts(self) -> list[Account]:
        """Decode the accounts updated in the block; raises DecodeError on bad data."""
        data = self._decompress(self.accounts_updated_in_block)
        accounts = _decode_list(data, Account.decode)
        if len(accounts) != self.accounts_updated_count:
            logger.error(
                "accounts vector size is not equal to expected %d != %d",
                len(accounts),
                self.accounts_updated_count,
            )
        return accounts

    def encode(self, encoder: Encoder) -> None:
        self.meta.encode(encoder)
        encoder.write_bytes(self.transactions)
        encoder.write_bytes(self.accounts_updated_in_block)
        encoder.write_u64(self.accounts_updated_count)
        self.compression_type.encode(encoder)

    @classmethod
    def decode(cls, decoder: Decoder) -> "Block":
        return cls(
            meta=BlockMeta.decode(decoder),
            transactions=decoder.read_bytes(),
            accounts_updated_in_block=decoder.read_bytes(),
            accounts_updated_count=decoder.read_u64(),
            compression_type=CompressionType.decode(decoder),
        )