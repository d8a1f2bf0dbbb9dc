# sygma_relay

Core logic of a cross-chain bridge relayer for EVM and Substrate networks, as a library.

The package does four things:

- It decodes deposit calldata and chain events into bridge messages.
- It turns messages into proposals and computes the EIP-712 digest that relayers sign for a batch of proposals.
- It resolves retry requests back into the deposits they refer to.
- It groups proposals into batches that fit a gas limit.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `sygma_relay.message`: `Message`, `Metadata` and the `TransferType` enum (`FUNGIBLE`, `NON_FUNGIBLE`, `GENERIC`, `PERMISSIONLESS_GENERIC`).
- `sygma_relay.proposal`: `Proposal` and `proposals_hash(proposals, chain_id, verifying_contract, bridge_version)`, the Keccak-256 EIP-712 digest of a `Proposals` struct under the `Bridge` domain.
- `sygma_relay.blocks`: `calculate_starting_block(start_block, block_confirmations)` rounds a block number down to a multiple of the interval. It raises `ValueError` when either argument is `None`.
- `sygma_relay.chain_config`: `GeneralChainConfig` (`from_mapping`, `validate`) and `ConfigError`, a subclass of `ValueError`.
- `sygma_relay.evm_config`: `HandlerConfig`, `EVMConfig` and `new_evm_config(chain_config)`. It decodes a raw mapping, applies defaults and validates the result. The defaults are: max gas price 500000000000, gas multiplier 1, gas increase 15 %, gas limit 15000000, 10 block confirmations, block interval 5 and retry interval 5 s. A missing `bridge` raises `ConfigError`, and so does `blockConfirmations` below 1.
- `sygma_relay.substrate_config`: `SubstrateConfig` and `new_substrate_config(chain_config)`.
- `sygma_relay.evm_deposit`: the encoders `construct_erc20_deposit_data` and `construct_permissionless_generic_deposit_data`, and the decoders `erc20_deposit_handler` and `permissionless_generic_deposit_handler`. Calldata that is too short raises `ValueError`.
- `sygma_relay.evm_messages`: `EVMProposal` and `permissionless_generic_message_handler(msg, handler_address, bridge_address)`.
- `sygma_relay.substrate_deposit`: `SubstrateDepositHandler` (`register_deposit_handler`, `handle_deposit`) and `fungible_transfer_handler`. An unknown transfer type raises `LookupError`.
- `sygma_relay.substrate_messages`: `SubstrateMessageHandler` (`register_message_handler`, `handle_message`) and `fungible_transfer_message_handler`.
- `sygma_relay.evm_events`:
  - `EventSig`, with a `topic` property and `event_topic(signature)`.
  - The data classes `Refresh`, `RetryEvent`, `Deposit`, `Log` and `Receipt`.
  - `decode_deposit(data)`, an ABI decoder for Deposit log data.
  - `slice_to_4_bytes(data)`.
  - `Listener`, which fetches deposit, retry, keygen and refresh events through a chain client that you supply.
- `sygma_relay.evm_event_handler`: `RetryEventHandler.handle_event(start_block, end_block, msg_queue)`. It puts one list of messages per destination domain on the queue.
- `sygma_relay.substrate_events`: event name constants, `Event`, `DepositEvent.from_fields` and `RetryEventData.from_fields`.
- `sygma_relay.substrate_event_handlers`: three handlers, each with `handle_events(evts, msg_queue)`:
  - `SystemUpdateEventHandler` refreshes metadata on a runtime upgrade.
  - `FungibleTransferEventHandler` resolves deposits.
  - `RetryEventHandler` re-reads the deposits of a block once that block is finalized.
- `sygma_relay.substrate_listener`: `SubstrateListener`.
  - `fetch_events(start_block, end_block)` returns the events of a block range.
  - `listen_to_events(start_block, blockstore, msg_queue, stop_event)` polls finalized blocks in a daemon thread until `stop_event` is set. It returns that thread.
- `sygma_relay.batching`:
  - `Batch` and `proposal_batches(msgs, message_handler, bridge, transaction_max_gas)`. A proposal's `gasLimit` metadata counts toward the limit; a proposal without it counts as 200000.
  - `pending_proposals`, `are_proposals_executed`, `signature_bytes(r, s, recovery)` and `session_id(proposal_hash)`.

Chain clients, connections, deposit handlers and block stores are passed in as plain objects that follow the `Protocol` classes in each module. Message queues need only a `put` method, so `queue.Queue` works.

## Example

```python
from queue import Queue

from sygma_relay.blocks import calculate_starting_block
from sygma_relay.evm_config import new_evm_config
from sygma_relay.proposal import Proposal, proposals_hash

prop = Proposal(origin_domain_id=1, destination=2, deposit_nonce=3,
                resource_id=bytes([3]) + bytes(31), data=bytes(32))
digest = proposals_hash([prop], 5, "6CdE2Cd82a4F8B74693Ff5e194c19CA08c2d1c68", "3.1.0")
print(digest.hex())

calculate_starting_block(104, 5)  # 100

config = new_evm_config({
    "id": 1,
    "endpoint": "ws://localhost:8546",
    "name": "evm1",
    "bridge": "bridgeAddress",
})
config.gas_limit            # 15000000
config.block_confirmations  # 10
```

## What this package does not do

This is a library with no command-line program. It does not cover the following:

- It opens no network connections to EVM or Substrate nodes. Clients are passed in by the caller.
- It does not submit or track transactions or extrinsics.
- It does not run threshold key generation, resharing or signing.
- It does not store processed block numbers itself. `SubstrateListener` hands them to the block store object you pass in.