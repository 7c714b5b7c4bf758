import random

import pytest

from geyserstream.bincode import DecodeError
from geyserstream.block import Block
from geyserstream.compression import CompressionType
from geyserstream.filters import AccountFilter, DataSizeFilter, Filter, MemcmpFilter
from geyserstream.message import (
    AccountMsg,
    BlockMetaMsg,
    BlockMsg,
    FiltersMsg,
    Message,
    PingMsg,
    SlotMsg,
    TransactionMsg,
)
from geyserstream.transaction import (
    MessageHeader,
    Transaction,
    TransactionMessage,
    TransactionMeta,
)
from geyserstream.types import (
    Account,
    BlockMeta,
    Hash,
    Pubkey,
    Signature,
    SlotIdentifier,
    SlotMeta,
    SlotStatus,
)


def create_random_message(rng: random.Random) -> Message:
    message_type = rng.randrange(3)
    if message_type == 0:
        return SlotMsg(
            SlotMeta(
                slot=rng.getrandbits(64),
                parent=rng.getrandbits(64),
                slot_status=rng.choice(list(SlotStatus)),
            )
        )
    if message_type == 1:
        data_length = rng.randrange(10, 128)
        return AccountMsg(
            Account(
                slot_identifier=SlotIdentifier(rng.getrandbits(64)),
                pubkey=Pubkey.new_unique(),
                owner=Pubkey.new_unique(),
                lamports=rng.getrandbits(64),
                executable=rng.random() < 0.5,
                rent_epoch=rng.getrandbits(64),
                write_version=rng.getrandbits(64),
                data=bytes(rng.getrandbits(8) for _ in range(data_length)),
                compression_type=CompressionType.none(),
                data_length=data_length,
            )
        )
    return BlockMetaMsg(
        BlockMeta(
            parent_blockhash="jfkjahfkajfnaf",
            parent_slot=rng.getrandbits(64),
            slot=rng.getrandbits(64),
            blockhash="lkjsahkjhakda",
            block_height=rng.choice([None, rng.getrandbits(64)]),
            rewards=[],
            entries_count=rng.getrandbits(64),
            executed_transaction_count=rng.getrandbits(64),
            block_time=rng.getrandbits(64),
        )
    )


def make_transaction() -> Transaction:
    return Transaction(
        slot_identifier=SlotIdentifier(5),
        signatures=[Signature.new_unique()],
        message=TransactionMessage(
            header=MessageHeader(1, 0, 0),
            account_keys=[Pubkey.new_unique()],
            recent_blockhash=Hash.new_unique(),
        ),
        is_vote=False,
        transaction_meta=TransactionMeta(log_messages=["toto"], compute_units_consumed=1234),
        index=0,
    )


def test_check_slot_message_size():
    message = SlotMsg(SlotMeta(slot=73282, parent=8392983, slot_status=SlotStatus.FINALIZED))
    binary = message.to_binary_stream()
    assert len(binary) == 32


def test_from_to_binary_stream():
    message = SlotMsg(SlotMeta(slot=73282, parent=8392983, slot_status=SlotStatus.FINALIZED))
    binary = message.to_binary_stream()
    msg_2, _ = Message.from_binary_stream(binary)
    assert msg_2 == message

    account_data = bytes(x % 255 for x in range(1000))
    message_account = AccountMsg(
        Account(
            slot_identifier=SlotIdentifier(938920),
            pubkey=Pubkey.new_unique(),
            owner=Pubkey.new_unique(),
            lamports=84782739,
            executable=True,
            rent_epoch=849293,
            write_version=9403,
            data=account_data,
            compression_type=CompressionType.none(),
            data_length=1000,
        )
    )
    binary_2 = message_account.to_binary_stream()
    total_binary = binary_2 + binary

    assert Message.from_binary_stream(total_binary[:32]) is None

    msg3, size_msg3 = Message.from_binary_stream(total_binary)
    assert msg3 == message_account
    msg4, _ = Message.from_binary_stream(total_binary[size_msg3:])
    assert msg4 == message


def test_short_stream_returns_none():
    assert Message.from_binary_stream(b"\x01\x02\x03") is None
    assert Message.from_binary_stream_binary(b"") is None


def test_binary_frame_matches_body():
    message = PingMsg()
    stream = message.to_binary_stream()
    body, consumed = Message.from_binary_stream_binary(stream + b"extra")
    assert body == message.to_bytes()
    assert consumed == len(stream)


def test_random_messages_round_trip():
    rng = random.Random(7)
    for _ in range(200):
        message = create_random_message(rng)
        decoded, consumed = Message.from_binary_stream(message.to_binary_stream())
        assert decoded == message
        assert consumed == len(message.to_binary_stream())


@pytest.mark.parametrize(
    "message",
    [
        PingMsg(),
        TransactionMsg(make_transaction()),
        FiltersMsg(
            [
                Filter.accounts_all(),
                Filter.slot(),
                Filter.transaction(Signature.new_unique()),
                Filter.account(
                    AccountFilter(
                        owner=Pubkey.new_unique(),
                        accounts={Pubkey.new_unique(), Pubkey.new_unique()},
                        filters=[DataSizeFilter(10), MemcmpFilter(2, b"\x03\x04")],
                    )
                ),
            ]
        ),
        BlockMsg(
            Block.build(
                BlockMeta(4, 5, "parent", "hash", executed_transaction_count=1),
                [make_transaction()],
                [],
                CompressionType.lz4_fast(8),
            )
        ),
    ],
)
def test_variants_round_trip(message):
    assert Message.from_bytes(message.to_bytes()) == message


def test_invalid_variant_raises():
    with pytest.raises(DecodeError):
        Message.from_bytes(b"\x63\x00\x00\x00")


def test_truncated_body_raises():
    message = SlotMsg(SlotMeta(slot=1, parent=0, slot_status=SlotStatus.PROCESSED))
    with pytest.raises(DecodeError):
        Message.from_bytes(message.to_bytes()[:-2])