import logging
import os
import queue

import pytest

from geyserstream.block_builder import BlockBuilder, build_blocks, start_block_building_thread
from geyserstream.channel_message import (
    AccountData,
    AccountUpdate,
    BlockMetaUpdate,
    BlockUpdate,
    SlotUpdate,
    TransactionUpdate,
)
from geyserstream.compression import CompressionType
from geyserstream.transaction import (
    LoadedAddresses,
    MessageHeader,
    Transaction,
    TransactionMessage,
    TransactionMeta,
)
from geyserstream.types import (
    BlockMeta,
    Hash,
    Pubkey,
    Signature,
    SlotIdentifier,
    SlotStatus,
    SolanaAccount,
)


def make_account(pubkey, write_version, slot=5, lamports=12345, init=False):
    return AccountUpdate(
        AccountData(
            pubkey=pubkey,
            account=SolanaAccount(
                lamports=lamports,
                data=os.urandom(100),
                owner=Pubkey.new_unique(),
                executable=False,
                rent_epoch=2**64 - 1,
            ),
            write_version=write_version,
        ),
        slot,
        init,
    )


def make_transaction(slot, key):
    return Transaction(
        slot_identifier=SlotIdentifier(slot),
        signatures=[Signature.new_unique()],
        message=TransactionMessage(
            header=MessageHeader(1, 0, 0),
            account_keys=[key],
            recent_blockhash=Hash.new_unique(),
        ),
        is_vote=False,
        transaction_meta=TransactionMeta(
            error=None,
            fee=0,
            log_messages=["toto"],
            loaded_addresses=LoadedAddresses([], []),
            compute_units_consumed=1234,
        ),
        index=0,
    )


def make_meta(tx_count):
    return BlockMeta(
        parent_slot=4,
        slot=5,
        parent_blockhash=str(Hash.new_unique()),
        blockhash=str(Hash.new_unique()),
        rewards=[],
        block_height=4,
        executed_transaction_count=tx_count,
        entries_count=2,
        block_time=0,
    )


@pytest.fixture
def scenario():
    acc1_pk = Pubkey.new_unique()
    acc1 = make_account(acc1_pk, 1)
    acc2 = make_account(Pubkey.new_unique(), 1)
    acc3 = make_account(acc1_pk, 2)
    acc4 = make_account(acc1_pk, 0)
    tx1 = make_transaction(5, acc1_pk)
    tx2 = make_transaction(6, acc1_pk)
    tx3 = make_transaction(5, acc1_pk)
    return {
        "accounts": [acc1, acc2, acc3, acc4],
        "expected_accounts": {
            a.account.pubkey: a.account.account.data for a in (acc2, acc3)
        },
        "txs": (tx1, tx2, tx3),
    }


def check_block(block_update, meta, scenario):
    assert isinstance(block_update, BlockUpdate)
    block = block_update.block
    tx1, _, tx3 = scenario["txs"]
    transactions = block.get_transactions()
    accounts = block.get_accounts()
    assert block.meta == meta
    assert len(transactions) == 2
    assert transactions == [tx1, tx3]
    assert {acc.pubkey: acc.data for acc in accounts} == scenario["expected_accounts"]


def test_block_creation_transactions_after_blockmeta(scenario):
    messages = queue.Queue()
    output = queue.Queue()
    start_block_building_thread(messages, output, CompressionType.none(), True)
    meta = make_meta(2)
    tx1, tx2, tx3 = scenario["txs"]
    for msg in scenario["accounts"]:
        messages.put(msg)
    messages.put(BlockMetaUpdate(meta))
    for tx in (tx1, tx2, tx3):
        messages.put(TransactionUpdate(tx))
    block_update = output.get(timeout=5)
    messages.put(None)
    check_block(block_update, meta, scenario)


def test_block_creation_blockmeta_after_transactions(scenario):
    messages = queue.Queue()
    output = queue.Queue()
    meta = make_meta(2)
    tx1, tx2, tx3 = scenario["txs"]
    for msg in scenario["accounts"]:
        messages.put(msg)
    for tx in (tx1, tx2, tx3):
        messages.put(TransactionUpdate(tx))
    messages.put(BlockMetaUpdate(meta))
    messages.put(None)
    build_blocks(messages, output, CompressionType.none(), True)
    check_block(output.get_nowait(), meta, scenario)
    assert output.empty()


def test_block_creation_with_lz4(scenario):
    output = queue.Queue()
    meta = make_meta(2)
    tx1, tx2, tx3 = scenario["txs"]
    stream = list(scenario["accounts"]) + [BlockMetaUpdate(meta)]
    stream += [TransactionUpdate(tx) for tx in (tx1, tx2, tx3)]
    build_blocks(stream, output, CompressionType.lz4_fast(8), True)
    block_update = output.get_nowait()
    assert block_update.block.compression_type == CompressionType.lz4_fast(8)
    check_block(block_update, meta, scenario)


def test_block_creation_incomplete_slot(scenario):
    builder = BlockBuilder(CompressionType.none(), True)
    meta = make_meta(5)
    tx1, tx2, tx3 = scenario["txs"]
    produced = []
    for msg in scenario["accounts"]:
        produced += builder.process(msg)
    produced += builder.process(BlockMetaUpdate(meta))
    produced += builder.process(TransactionUpdate(tx1))
    produced += builder.process(TransactionUpdate(tx2))
    produced += builder.process(SlotUpdate(5, 4, SlotStatus.PROCESSED))
    produced += builder.process(TransactionUpdate(tx3))
    assert produced == []
    finalized = builder.process(SlotUpdate(5, 4, SlotStatus.FINALIZED))
    assert len(finalized) == 1
    check_block(finalized[0], meta, scenario)


def test_dead_slot_is_dropped(scenario):
    builder = BlockBuilder(CompressionType.none(), True)
    tx1 = scenario["txs"][0]
    builder.process(BlockMetaUpdate(make_meta(5)))
    builder.process(TransactionUpdate(tx1))
    assert builder.process(SlotUpdate(5, 4, SlotStatus.DEAD)) == []
    assert builder.process(SlotUpdate(5, 4, SlotStatus.FINALIZED)) == []


def test_finalized_without_meta_dispatches_nothing(scenario, caplog):
    builder = BlockBuilder(CompressionType.none(), True)
    builder.process(TransactionUpdate(scenario["txs"][0]))
    with caplog.at_level(logging.ERROR):
        result = builder.process(SlotUpdate(5, 4, SlotStatus.FINALIZED))
    assert result == []
    assert "without any meta data" in caplog.text


def test_accounts_skipped_when_disabled_or_init():
    builder = BlockBuilder(CompressionType.none(), False)
    builder.process(make_account(Pubkey.new_unique(), 1))
    (update,) = builder.process(BlockMetaUpdate(make_meta(0)))
    assert update.block.get_accounts() == []
    assert update.block.accounts_updated_count == 0

    builder = BlockBuilder(CompressionType.none(), True)
    builder.process(make_account(Pubkey.new_unique(), 1, init=True))
    (update,) = builder.process(BlockMetaUpdate(make_meta(0)))
    assert update.block.get_accounts() == []


def test_built_account_fields():
    builder = BlockBuilder(CompressionType.none(), True)
    update = make_account(Pubkey.new_unique(), 7, lamports=42)
    builder.process(update)
    (block_update,) = builder.process(BlockMetaUpdate(make_meta(0)))
    (account,) = block_update.block.get_accounts()
    assert account.slot_identifier == SlotIdentifier(5)
    assert account.lamports == 42
    assert account.write_version == 7
    assert account.data_length == 100
    assert account.compression_type == CompressionType.none()
    assert account.solana_account() == update.account.account


def test_late_update_is_logged(caplog):
    builder = BlockBuilder(CompressionType.none(), True)
    builder.process(make_account(Pubkey.new_unique(), 1, slot=6))
    with caplog.at_level(logging.ERROR):
        builder.process(make_account(Pubkey.new_unique(), 1, slot=3))
    assert "too late" in caplog.text


def test_block_message_is_rejected(scenario):
    builder = BlockBuilder(CompressionType.none(), True)
    (update,) = builder.process(BlockMetaUpdate(make_meta(0)))
    with pytest.raises(ValueError):
        builder.process(update)