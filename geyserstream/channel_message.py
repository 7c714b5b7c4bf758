"""Messages passed from the validator hooks to the streaming components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .transaction import Transaction
from .types import BlockMeta, Pubkey, SlotStatus, SolanaAccount

if TYPE_CHECKING:
    from .block import Block


@dataclass
class AccountData:
    """An account as reported by the validator with its write version."""

    pubkey: Pubkey
    account: SolanaAccount
    write_version: int


class ChannelMessage:
    """Base class of every message flowing through the internal channels."""

    __slots__ = ()


@dataclass
class AccountUpdate(ChannelMessage):
    """An account changed at ``slot``; ``init`` marks startup snapshots."""

    account: AccountData
    slot: int
    init: bool = False


@dataclass
class SlotUpdate(ChannelMessage):
    """A slot changed status."""

    slot: int
    parent: int
    status: SlotStatus


@dataclass
class BlockMetaUpdate(ChannelMessage):
    """Metadata for a produced block."""

    meta: BlockMeta


@dataclass
class TransactionUpdate(ChannelMessage):
    """A transaction was executed."""

    transaction: Transaction


@dataclass
class BlockUpdate(ChannelMessage):
    """A fully assembled block."""

    block: "Block"