# geyserstream

Data types, binary framing, subscription filters and block assembly for
streaming validator updates (accounts, slots, block metadata, transactions
and whole blocks) to subscribers.

## Installation

```
pip install geyserstream
```

For running the test suite:

```
pip install "geyserstream[test]"
pytest
```

## What is in the package

- `geyserstream.types`: `Pubkey`, `Signature`, `Hash` (with `new_unique()`
  and `from_base58()`), `b58encode` / `b58decode`, `SlotIdentifier`,
  `SolanaAccount`, `Account`, `SlotStatus`, `SlotMeta`, `RewardType`,
  `Reward`, `BlockMeta`, `ConnectionParameters`.
- `geyserstream.transaction`: `Transaction`, `TransactionMeta`,
  `TransactionMessage` and its parts (`MessageHeader`,
  `CompiledInstruction`, `MessageAddressTableLookup`, `LoadedAddresses`,
  `InnerInstruction`, `InnerInstructions`, `TransactionReturnData`).
- `geyserstream.bincode`: `Encoder`, `Decoder` and `DecodeError`, the
  little-endian encoding every type above uses through its `encode` and
  `decode` methods.
- `geyserstream.compression`: `CompressionType` with `none()`,
  `lz4_fast(speed)` and `lz4(level)`; `default()` is `lz4_fast(8)`.
  Empty input always compresses to empty output.
- `geyserstream.message`: `Message` and its variants (`AccountMsg`,
  `SlotMsg`, `BlockMetaMsg`, `TransactionMsg`, `BlockMsg`, `FiltersMsg`,
  `PingMsg`), with `to_bytes` / `from_bytes` and framing with an 8-byte
  little-endian length prefix.
- `geyserstream.channel_message`: the internal notifications
  `AccountUpdate`, `SlotUpdate`, `BlockMetaUpdate`, `TransactionUpdate`
  and `BlockUpdate`, plus `AccountData`.
- `geyserstream.filters`: `Filter`, `AccountFilter`, `DataSizeFilter` and
  `MemcmpFilter`, deciding which notifications a subscriber receives.
- `geyserstream.stream_buffer`: `StreamBuffer`, a fixed-capacity FIFO of
  bytes used when reading framed messages from a stream.
- `geyserstream.block`: `Block`, holding the serialized and compressed
  transactions and account updates of one slot.
- `geyserstream.block_builder`: `BlockBuilder`, `build_blocks` and
  `start_block_building_thread`.
- `geyserstream.config`: `ConfigQuicPlugin`, `QuicParameters` and
  `CompressionParameters`, loadable with `from_dict` / `from_json`.
- `geyserstream.net`: `parse_host` (a literal IP address) and
  `parse_host_port` (resolves `host:port` to an `(ip, port)` tuple).

## Framing messages

```python
from geyserstream.message import Message, SlotMsg
from geyserstream.types import SlotMeta, SlotStatus

msg = SlotMsg(SlotMeta(slot=73282, parent=8392983, slot_status=SlotStatus.FINALIZED))
frame = msg.to_binary_stream()          # 32 bytes
decoded, used = Message.from_binary_stream(frame)
assert decoded == msg and used == len(frame)
```

`Message.from_binary_stream` returns `None` while the frame is still
incomplete, so it can be called repeatedly on a growing buffer:

```python
from geyserstream.stream_buffer import StreamBuffer

buffer = StreamBuffer(3000)
buffer.append_bytes(frame)
while (result := Message.from_binary_stream(buffer.as_slices()[0])) is not None:
    message, size = result
    buffer.consume(size)
```

`append_bytes` returns `False` and leaves the buffer unchanged when the data
does not fit.

## Filtering updates

```python
from geyserstream.filters import AccountFilter, DataSizeFilter, Filter, MemcmpFilter
from geyserstream.types import Pubkey

owner = Pubkey.new_unique()
wanted = Filter.account(
    AccountFilter(
        owner=owner,
        filters=[DataSizeFilter(10), MemcmpFilter(offset=2, data=bytes([3, 4, 5]))],
    )
)
# wanted.allows(channel_message) -> bool
```

`Filter.accounts_all()` passes every account update except those owned by
the vote and stake programs. `Filter.transaction(signature)` matches on a
transaction's first signature only.

## Building blocks

```python
import queue
from geyserstream.block_builder import start_block_building_thread
from geyserstream.compression import CompressionType

inbox, outbox = queue.Queue(), queue.Queue()
start_block_building_thread(inbox, outbox, CompressionType.none(), True)
# put AccountUpdate / SlotUpdate / BlockMetaUpdate / TransactionUpdate on inbox;
# BlockUpdate messages appear on outbox. Put None on inbox to stop the thread.
```

`build_blocks` does the same work on the calling thread and also accepts a
plain iterable of notifications. `BlockBuilder.process(message)` handles one
notification and returns the blocks it completed.

A block is emitted as soon as its `BlockMeta` has arrived and the number of
transactions collected equals `executed_transaction_count`, or when the
slot is reported finalized. Dead slots are dropped. Startup (`init`) account
updates are ignored; for the others, only the update with the highest write
version per public key is kept.

## Configuration

```python
from geyserstream.config import ConfigQuicPlugin

config = ConfigQuicPlugin.from_json('{"address": "127.0.0.1:10800"}')
```

Missing fields take their defaults (address `[::]:10800`, compression
`lz4_fast(8)`, 100 retries, ...); unknown top-level fields raise
`ValueError`.

## What the package does not do

The package has no network transport: it does not open QUIC connections,
run a server or a client, or hook into a validator. It provides the
messages, framing, filters, configuration and block assembly that such
components exchange and use.