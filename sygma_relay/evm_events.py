"""EVM bridge event signatures, ABI decoding of their logs and a listener fetching them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, Sequence

from Crypto.Hash import keccak

logger = logging.getLogger(__name__)

_WORD = 32
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_UINT64_MASK = (1 << 64) - 1


def event_topic(signature: str) -> bytes:
    """Return the Keccak-256 topic of an event signature."""
    digest = keccak.new(digest_bits=256)
    digest.update(signature.encode())
    return digest.digest()


class EventSig(str, Enum):
    """Signatures of the events emitted by the bridge contract."""

    DEPOSIT = "Deposit(uint8,bytes32,uint64,address,bytes,bytes)"
    START_KEYGEN = "StartKeygen()"
    KEY_REFRESH = "KeyRefresh(string)"
    PROPOSAL_EXECUTION = "ProposalExecution(uint8,uint64,bytes32,bytes)"
    FEE_CHANGED = "FeeChanged(uint256)"
    RETRY = "Retry(string)"
    FEE_HANDLER_CHANGED = "FeeHandlerChanged(address)"

    @property
    def topic(self) -> bytes:
        """Keccak-256 topic identifying the event in logs."""
        return event_topic(self.value)

    def __str__(self) -> str:
        return self.value


def slice_to_4_bytes(data: bytes) -> bytes:
    """Return the first four bytes of data, padded with zeros on the right."""
    return bytes(data[:4]).ljust(4, b"\x00")


@dataclass
class Refresh:
    """Key refresh event: the hash of the topology file to load."""

    hash: str


@dataclass(frozen=True)
class RetryEvent:
    """Request to reprocess the deposits of an earlier transaction."""

    tx_hash: str


@dataclass
class Deposit:
    """Deposit event emitted by the bridge contract."""

    destination_domain_id: int = 0
    resource_id: bytes = bytes(32)
    deposit_nonce: int = 0
    sender_address: bytes = bytes(20)
    data: bytes = b""
    handler_response: bytes = b""


@dataclass
class Log:
    """A contract log entry."""

    address: bytes | str = bytes(20)
    data: bytes = b""
    tx_hash: bytes = bytes(32)
    block_number: int = 0
    topics: list[bytes] = field(default_factory=list)


@dataclass
class Receipt:
    """Receipt of a mined transaction."""

    block_number: int
    logs: list[Log] = field(default_factory=list)


class ChainClient(Protocol):
    """Access to an EVM node needed by the listener."""

    def fetch_event_logs(
        self, contract_address: Any, event: str, start_block: int, end_block: int
    ) -> Sequence[Log]: ...

    def wait_and_return_tx_receipt(self, tx_hash: bytes) -> Receipt: ...

    def latest_block(self) -> int: ...


def _hex_prefix_bytes(text: str) -> bytes:
    """Decode hex digits up to the first invalid pair."""
    digits = text[2:] if text[:2] in ("0x", "0X") else text
    if len(digits) % 2:
        digits = "0" + digits
    out = bytearray()
    pairs = iter(digits)
    for high, low in zip(pairs, pairs):
        if high not in _HEX_DIGITS or low not in _HEX_DIGITS:
            break
        out.append(int(high + low, 16))
    return bytes(out)


def _to_fixed(value: bytes | bytearray | str, size: int) -> bytes:
    raw = _hex_prefix_bytes(value) if isinstance(value, str) else bytes(value)
    return raw[-size:].rjust(size, b"\x00")


def _hex_to_hash(value: bytes | str) -> bytes:
    return _to_fixed(value, 32)


def _hex_to_address(value: bytes | str) -> bytes:
    return _to_fixed(value, 20)


def _word(data: bytes, offset: int) -> int:
    end = offset + _WORD
    if end > len(data):
        raise ValueError(f"abi: length insufficient {len(data)} require {end}")
    return int.from_bytes(data[offset:end], "big")


def _dynamic(data: bytes, head: int) -> bytes:
    offset = _word(data, head)
    length = _word(data, offset)
    start = offset + _WORD
    end = start + length
    if end > len(data):
        raise ValueError(f"abi: cannot marshal in to go type: length insufficient {len(data)} require {end}")
    return data[start:end]


def _non_empty(data: bytes) -> bytes:
    data = bytes(data)
    if not data:
        raise ValueError("abi: attempting to unmarshall an empty string while arguments are expected")
    return data


def _decode_string(data: bytes) -> str:
    return _dynamic(_non_empty(data), 0).decode("utf-8", errors="replace")


def decode_deposit(data: bytes) -> Deposit:
    """Decode the non-indexed fields of a Deposit log."""
    data = _non_empty(data)
    destination = _word(data, 0) & 0xFF
    _word(data, 32)
    resource_id = data[32:64]
    nonce = _word(data, 64) & _UINT64_MASK
    return Deposit(
        destination_domain_id=destination,
        resource_id=resource_id,
        deposit_nonce=nonce,
        data=_dynamic(data, 96),
        handler_response=_dynamic(data, 128),
    )


class Listener:
    """Fetches and decodes bridge events through a chain client."""

    def __init__(self, client: ChainClient) -> None:
        self._client = client

    def fetch_deposit_event(
        self, event: RetryEvent, bridge_address: bytes | str, block_confirmations: int
    ) -> list[Deposit]:
        """Return the bridge deposits made in the transaction a retry event refers to."""
        tx_hash = _hex_to_hash(event.tx_hash)
        try:
            receipt = self._client.wait_and_return_tx_receipt(tx_hash)
        except Exception as err:
            raise RuntimeError(
                f"unable to fetch logs for retried deposit 0x{tx_hash.hex()}, because of: {err}"
            ) from err

        latest = self._client.latest_block()
        confirmed_at = receipt.block_number + block_confirmations
        if latest <= confirmed_at:
            raise ValueError(
                f"latest block {latest} not higher than receipt block number "
                f"+ block confirmations {confirmed_at}"
            )

        bridge = _hex_to_address(bridge_address)
        deposits = []
        for entry in receipt.logs:
            if _hex_to_address(entry.address) != bridge:
                continue
            try:
                deposits.append(decode_deposit(entry.data))
            except ValueError:
                continue
        return deposits

    def fetch_retry_events(
        self, contract_address: Any, start_block: int, end_block: int
    ) -> list[RetryEvent]:
        """Return the retry events emitted in a block range; undecodable logs are skipped."""
        logs = self._client.fetch_event_logs(
            contract_address, EventSig.RETRY.value, start_block, end_block
        )
        events = []
        for entry in logs:
            try:
                events.append(RetryEvent(tx_hash=_decode_string(entry.data)))
            except ValueError as err:
                logger.error(
                    "failed unpacking retry event with txhash 0x%s, because of: %s",
                    bytes(entry.tx_hash).hex(),
                    err,
                )
        return events

    def fetch_keygen_events(
        self, contract_address: Any, start_block: int, end_block: int
    ) -> list[Log]:
        """Return the raw StartKeygen logs emitted in a block range."""
        return list(
            self._client.fetch_event_logs(
                contract_address, EventSig.START_KEYGEN.value, start_block, end_block
            )
        )

    def fetch_refresh_events(
        self, contract_address: Any, start_block: int, end_block: int
    ) -> list[Refresh]:
        """Return the key refresh events emitted in a block range; undecodable logs are skipped."""
        logs = self._client.fetch_event_logs(
            contract_address, EventSig.KEY_REFRESH.value, start_block, end_block
        )
        refreshes = []
        for entry in logs:
            try:
                refreshes.append(self.unpack_refresh(entry.data))
            except ValueError as err:
                logger.error("failed unpacking refresh event log: %s", err)
        return refreshes

    def unpack_refresh(self, data: bytes) -> Refresh:
        """Decode the data of a KeyRefresh log."""
        return Refresh(hash=_decode_string(data))