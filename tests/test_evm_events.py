import pytest

from sygma_relay.evm_events import (
    Deposit,
    EventSig,
    Listener,
    Log,
    Receipt,
    Refresh,
    RetryEvent,
    decode_deposit,
    event_topic,
    slice_to_4_bytes,
)

TX_HASH = "0xf25ed4a14bf7ad20354b46fe38d7d4525f2ea3042db9a9954ef8d73c558b500c"
BRIDGE = "0x5798e01f4b1d8f6a5d91167414f3a915d021bc4a"
OTHER = "0x1ec6b294902d42fee964d29fa962e5976e71e67d"
DEPOSIT_EVENT = bytes.fromhex(
    "00000000000000000000000000000000000000000000000000000000000000020000000000000000000000000000000000000000000000000000000000000300000000000000000000000000000000000000000000000000000000000000001d00000000000000000000000000000000000000000000000000000000000000a00000000000000000000000000000000000000000000000000000000000000120000000000000000000000000000000000000000000000000000000000000005600000000000000000000000000000000000000000000000000000000000f424000000000000000000000000000000000000000000000000000000000000000148e0a907331554af72563bd8d43051c2e64be5d350102000000000000000000000000000000000000000000000000000000000000000000000000000000000000"
)


def _uint(value):
    return value.to_bytes(32, "big")


def _padded(data):
    return data + bytes((-len(data)) % 32)


def _abi_string(text):
    raw = text.encode()
    return _uint(32) + _uint(len(raw)) + _padded(raw)


class FakeClient:
    def __init__(self, receipt=None, latest=0, receipt_error=None, logs=()):
        self.receipt = receipt
        self.latest = latest
        self.receipt_error = receipt_error
        self.logs = list(logs)
        self.requested_hashes = []
        self.log_requests = []

    def wait_and_return_tx_receipt(self, tx_hash):
        self.requested_hashes.append(tx_hash)
        if self.receipt_error is not None:
            raise self.receipt_error
        return self.receipt

    def latest_block(self):
        return self.latest

    def fetch_event_logs(self, contract_address, event, start_block, end_block):
        self.log_requests.append((contract_address, event, start_block, end_block))
        return self.logs


def test_fetch_deposit_event_fetching_tx_fails():
    client = FakeClient(receipt_error=ConnectionError("error"))
    listener = Listener(client)

    with pytest.raises(RuntimeError, match="unable to fetch logs for retried deposit"):
        listener.fetch_deposit_event(RetryEvent(TX_HASH), bytes(20), 5)
    assert client.requested_hashes == [bytes.fromhex(TX_HASH[2:])]


def test_fetch_deposit_event_event_too_new():
    client = FakeClient(receipt=Receipt(block_number=14), latest=10)

    with pytest.raises(ValueError):
        Listener(client).fetch_deposit_event(RetryEvent(TX_HASH), BRIDGE, 5)


def test_fetch_deposit_event_needs_block_strictly_after_confirmations():
    client = FakeClient(receipt=Receipt(block_number=14), latest=19)

    with pytest.raises(ValueError):
        Listener(client).fetch_deposit_event(RetryEvent(TX_HASH), BRIDGE, 5)


def test_fetch_deposit_event_no_deposit_event():
    client = FakeClient(receipt=Receipt(block_number=14), latest=20)

    deposits = Listener(client).fetch_deposit_event(RetryEvent(TX_HASH), BRIDGE, 5)

    assert deposits == []


def test_fetch_deposit_event_no_matching_event():
    receipt = Receipt(
        block_number=14,
        logs=[Log(address=OTHER, data=b""), Log(address=BRIDGE, data=b"")],
    )
    client = FakeClient(receipt=receipt, latest=20)

    deposits = Listener(client).fetch_deposit_event(RetryEvent(TX_HASH), BRIDGE, 5)

    assert deposits == []


def test_fetch_deposit_event_valid_event():
    receipt = Receipt(
        block_number=14,
        logs=[Log(address=OTHER, data=DEPOSIT_EVENT), Log(address=BRIDGE, data=DEPOSIT_EVENT)],
    )
    client = FakeClient(receipt=receipt, latest=20)

    deposits = Listener(client).fetch_deposit_event(RetryEvent(TX_HASH), BRIDGE, 5)

    assert len(deposits) == 1
    assert deposits[0].destination_domain_id == 2
    assert deposits[0].deposit_nonce == 29


def test_fetch_deposit_event_accepts_bytes_addresses():
    receipt = Receipt(
        block_number=1,
        logs=[Log(address=bytes.fromhex(BRIDGE[2:]), data=DEPOSIT_EVENT)],
    )
    client = FakeClient(receipt=receipt, latest=100)

    deposits = Listener(client).fetch_deposit_event(RetryEvent(TX_HASH), BRIDGE, 5)

    assert [d.destination_domain_id for d in deposits] == [2]


def test_decode_deposit_constructed_data():
    payload = b"\x01\x02\x03"
    response = b"\xaa" * 33
    data = (
        _uint(7)
        + b"\x05" + bytes(31)
        + _uint(42)
        + _uint(160)
        + _uint(224)
        + _uint(len(payload))
        + _padded(payload)
        + _uint(len(response))
        + _padded(response)
    )

    deposit = decode_deposit(data)

    assert deposit == Deposit(
        destination_domain_id=7,
        resource_id=b"\x05" + bytes(31),
        deposit_nonce=42,
        data=payload,
        handler_response=response,
    )


def test_decode_deposit_rejects_empty_and_truncated_data():
    with pytest.raises(ValueError):
        decode_deposit(b"")
    with pytest.raises(ValueError):
        decode_deposit(DEPOSIT_EVENT[:200])


def test_fetch_retry_events_skips_undecodable_logs():
    client = FakeClient(logs=[Log(data=_abi_string("0xabc")), Log(data=b"")])

    events = Listener(client).fetch_retry_events(BRIDGE, 0, 5)

    assert events == [RetryEvent(tx_hash="0xabc")]
    assert client.log_requests == [(BRIDGE, "Retry(string)", 0, 5)]


def test_fetch_refresh_events():
    client = FakeClient(logs=[Log(data=b"\x01"), Log(data=_abi_string("topology-hash"))])

    refreshes = Listener(client).fetch_refresh_events(BRIDGE, 10, 20)

    assert refreshes == [Refresh(hash="topology-hash")]
    assert client.log_requests == [(BRIDGE, "KeyRefresh(string)", 10, 20)]


def test_fetch_keygen_events_returns_logs():
    logs = [Log(data=b"", block_number=7)]
    client = FakeClient(logs=logs)

    result = Listener(client).fetch_keygen_events(BRIDGE, 1, 2)

    assert result == logs
    assert client.log_requests == [(BRIDGE, "StartKeygen()", 1, 2)]


def test_unpack_refresh_round_trip_and_error():
    listener = Listener(FakeClient())
    long_hash = "a" * 70

    assert listener.unpack_refresh(_abi_string(long_hash)) == Refresh(hash=long_hash)
    with pytest.raises(ValueError):
        listener.unpack_refresh(b"")


def test_event_topic_known_values():
    assert event_topic("").hex() == (
        "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    )
    assert event_topic("Transfer(address,address,uint256)").hex() == (
        "ddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
    )


def test_event_sig_topic_matches_signature():
    assert EventSig.RETRY.topic == event_topic("Retry(string)")
    assert str(EventSig.DEPOSIT) == "Deposit(uint8,bytes32,uint64,address,bytes,bytes)"


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\x01\x02", b"\x01\x02\x00\x00"),
        (b"\x01\x02\x03\x04\x05", b"\x01\x02\x03\x04"),
        (b"", b"\x00\x00\x00\x00"),
    ],
)
def test_slice_to_4_bytes(data, expected):
    assert slice_to_4_bytes(data) == expected