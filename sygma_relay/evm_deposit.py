"""Encoding of EVM deposit calldata and its decoding into cross-chain messages."""

from __future__ import annotations

from sygma_relay.message import Message, Metadata, TransferType

PERMISSIONLESS_GENERIC_MIN_LENGTH = 76
ERC20_MIN_LENGTH = 84
_UINT64_MASK = (1 << 64) - 1


def _uint_bytes(value: int) -> bytes:
    """Minimal big-endian encoding of a non-negative integer (empty for zero)."""
    value = abs(value)
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def _take(calldata: bytes, start: int, length: int) -> bytes:
    end = start + length
    if length < 0 or end > len(calldata):
        raise ValueError(
            f"invalid calldata: field at {start}:{end} exceeds {len(calldata)} bytes"
        )
    return calldata[start:end]


def _pack_permissionless_generic(
    max_fee: bytes,
    function_sig: bytes,
    contract_address: bytes,
    depositor: bytes,
    execution_data: bytes,
) -> bytes:
    return b"".join(
        (
            bytes(max_fee).rjust(32, b"\x00"),
            _uint_bytes(len(function_sig)).rjust(2, b"\x00"),
            bytes(function_sig),
            bytes([len(contract_address) & 0xFF]),
            bytes(contract_address),
            bytes([len(depositor) & 0xFF]),
            bytes(depositor),
            bytes(execution_data),
        )
    )


def construct_permissionless_generic_deposit_data(
    metadata: bytes,
    execution_function_sig: bytes,
    execute_contract_address: bytes,
    metadata_depositor: bytes,
    max_fee: int,
) -> bytes:
    """Build the calldata of a permissionless generic deposit."""
    return _pack_permissionless_generic(
        _uint_bytes(max_fee),
        execution_function_sig,
        execute_contract_address,
        metadata_depositor,
        metadata,
    )


def construct_erc20_deposit_data(recipient: bytes, amount: int) -> bytes:
    """Build the calldata of an ERC20 deposit: amount, recipient length, recipient."""
    return b"".join(
        (
            _uint_bytes(amount).rjust(32, b"\x00"),
            _uint_bytes(len(recipient)).rjust(32, b"\x00"),
            bytes(recipient),
        )
    )


def permissionless_generic_deposit_handler(
    source_id: int,
    dest_id: int,
    nonce: int,
    resource_id: bytes,
    calldata: bytes,
    handler_response: bytes,
) -> Message:
    """Convert permissionless generic deposit calldata into a message."""
    calldata = bytes(calldata)
    if len(calldata) < PERMISSIONLESS_GENERIC_MIN_LENGTH:
        raise ValueError("invalid calldata length: less than 76 bytes")

    max_fee = calldata[:32]
    sig_length = int.from_bytes(calldata[32:34], "big")
    function_sig = _take(calldata, 34, sig_length)
    offset = 34 + sig_length

    contract_length = _take(calldata, offset, 1)[0]
    contract_address = _take(calldata, offset + 1, contract_length)
    offset += 1 + contract_length

    depositor_length = _take(calldata, offset, 1)[0]
    depositor = _take(calldata, offset + 1, depositor_length)
    execution_data = calldata[offset + 1 + depositor_length :]

    metadata = Metadata(data={"gasLimit": int.from_bytes(max_fee, "big") & _UINT64_MASK})
    return Message(
        source=source_id,
        destination=dest_id,
        deposit_nonce=nonce,
        resource_id=resource_id,
        transfer_type=TransferType.PERMISSIONLESS_GENERIC,
        payload=[function_sig, contract_address, max_fee, depositor, execution_data],
        metadata=metadata,
    )


def erc20_deposit_handler(
    source_id: int,
    dest_id: int,
    nonce: int,
    resource_id: bytes,
    calldata: bytes,
    handler_response: bytes,
) -> Message:
    """Convert ERC20 deposit calldata into a message.

    A non-empty handler response holds the amount converted to 18 decimals and
    takes precedence over the amount in the calldata.
    """
    calldata = bytes(calldata)
    if len(calldata) < ERC20_MIN_LENGTH:
        raise ValueError("invalid calldata length: less than 84 bytes")

    amount = bytes(handler_response[:32]) if handler_response else calldata[:32]
    recipient_length = int.from_bytes(calldata[32:64], "big")
    recipient = _take(calldata, 64, recipient_length)

    return Message(
        source=source_id,
        destination=dest_id,
        deposit_nonce=nonce,
        resource_id=resource_id,
        transfer_type=TransferType.FUNGIBLE,
        payload=[amount, recipient],
        metadata=Metadata(),
    )