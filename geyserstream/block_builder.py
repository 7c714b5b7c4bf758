"""Assembles blocks from account, transaction, block-meta and slot notifications."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional

from .block import Block
from .channel_message import (
    AccountData,
    AccountUpdate,
    BlockMetaUpdate,
    BlockUpdate,
    ChannelMessage,
    SlotUpdate,
    TransactionUpdate,
)
from .compression import CompressionType
from .transaction import Transaction
from .types import Account, BlockMeta, Pubkey, SlotIdentifier, SlotStatus

logger = logging.getLogger(__name__)


@dataclass
class _PartialBlock:
    meta: Optional[BlockMeta] = None
    transactions: list[Transaction] = field(default_factory=list)
    account_updates: dict[Pubkey, AccountData] = field(default_factory=dict)


class BlockBuilder:
    """Collects per-slot data and emits a block once it is complete or finalized."""

    def __init__(
        self,
        compression_type: CompressionType,
        build_blocks_with_accounts: bool = True,
    ) -> None:
        self.compression_type = compression_type
        self.build_blocks_with_accounts = build_blocks_with_accounts
        self._partial_blocks: dict[int, _PartialBlock] = {}

    def _warn_if_late(self, what: str, slot: int) -> None:
        if self._partial_blocks:
            lowest = min(self._partial_blocks)
            if lowest > slot:
                logger.error(
                    "%s update is too late the slot data has already been dispatched "
                    "lowest slot: %d, slot: %d",
                    what,
                    lowest,
                    slot,
                )

    def _partial(self, slot: int) -> _PartialBlock:
        return self._partial_blocks.setdefault(slot, _PartialBlock())

    def process(self, message: ChannelMessage) -> list[BlockUpdate]:
        """Handle one notification and return the blocks it completed."""
        if isinstance(message, AccountUpdate):
            if message.init or not self.build_blocks_with_accounts:
                return []
            self._warn_if_late("Account", message.slot)
            partial = self._partial(message.slot)
            account_data = message.account
            previous = partial.account_updates.get(account_data.pubkey)
            if previous is None or previous.write_version < account_data.write_version:
                partial.account_updates[account_data.pubkey] = account_data
            return []

        if isinstance(message, SlotUpdate):
            if message.status is SlotStatus.FINALIZED:
                return self._dispatch(message.slot)
            if message.status is SlotStatus.DEAD:
                self._partial_blocks.pop(message.slot, None)
            return []

        if isinstance(message, BlockMetaUpdate):
            meta = message.meta
            self._warn_if_late("Blockmeta", meta.slot)
            partial = self._partial(meta.slot)
            if partial.meta is not None:
                logger.error("Block meta has already been set")
            else:
                partial.meta = meta
            if meta.executed_transaction_count == len(partial.transactions):
                return self._dispatch(meta.slot)
            return []

        if isinstance(message, TransactionUpdate):
            transaction = message.transaction
            slot = transaction.slot_identifier.slot
            self._warn_if_late("Transactions", slot)
            partial = self._partial(slot)
            partial.transactions.append(transaction)
            if (
                partial.meta is not None
                and partial.meta.executed_transaction_count == len(partial.transactions)
            ):
                return self._dispatch(slot)
            return []

        raise ValueError(f"block builder cannot handle {type(message).__name__}")

    def _dispatch(self, slot: int) -> list[BlockUpdate]:
        partial = self._partial_blocks.pop(slot, None)
        if partial is None:
            return []
        meta = partial.meta
        if meta is None:
            logger.error(
                "Block was dispatched without any meta data, cannot dispatch the block %d",
                slot,
            )
            return []
        if len(partial.transactions) != meta.executed_transaction_count:
            logger.error(
                "for block at slot %d transaction size mismatch %d!=%d",
                slot,
                len(partial.transactions),
                meta.executed_transaction_count,
            )
        accounts = [
            Account(
                slot_identifier=SlotIdentifier(slot),
                pubkey=pubkey,
                owner=data.account.owner,
                lamports=data.account.lamports,
                executable=data.account.executable,
                rent_epoch=data.account.rent_epoch,
                write_version=data.write_version,
                data=bytes(data.account.data),
                compression_type=CompressionType.none(),
                data_length=len(data.account.data),
            )
            for pubkey, data in partial.account_updates.items()
        ]
        try:
            block = Block.build(meta, partial.transactions, accounts, self.compression_type)
        except ValueError as err:
            logger.error("block building failed because of error: %s", err)
            return []
        logger.info("Dispatching block for slot %d", slot)
        return [BlockUpdate(block)]


def _receive(channel_messages: Any) -> Iterator[ChannelMessage]:
    if hasattr(channel_messages, "get"):
        return iter(channel_messages.get, None)
    return iter(channel_messages)


def build_blocks(
    channel_messages: Iterable[ChannelMessage] | Any,
    output: Any,
    compression_type: CompressionType,
    build_blocks_with_accounts: bool,
) -> None:
    """Consume messages and put finished blocks on ``output``.

    ``channel_messages`` is an iterable or a queue read until a ``None`` sentinel;
    ``output`` is any object with a ``put`` method.
    """
    builder = BlockBuilder(compression_type, build_blocks_with_accounts)
    for message in _receive(channel_messages):
        for block in builder.process(message):
            output.put(block)


def start_block_building_thread(
    channel_messages: Any,
    output: Any,
    compression_type: CompressionType,
    build_blocks_with_accounts: bool,
) -> threading.Thread:
    """Run :func:`build_blocks` on a daemon thread and return the thread."""
    thread = threading.Thread(
        target=build_blocks,
        args=(channel_messages, output, compression_type, build_blocks_with_accounts),
        name="block-builder",
        daemon=True,
    )
    thread.start()
    return thread