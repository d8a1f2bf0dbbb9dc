"""Substrate bridge pallet event names and decoding of their fields."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sygma_relay.chain_config import _lookup, _present

PARACHAIN_UPDATED_EVENT = "ParachainSystem.ValidationFunctionApplied"
EXTRINSIC_FAILED_EVENT = "System.ExtrinsicFailed"
EXTRINSIC_SUCCESS_EVENT = "System.ExtrinsicSuccess"
RETRY_EVENT = "SygmaBridge.Retry"
DEPOSIT_EVENT = "SygmaBridge.Deposit"
FAILED_HANDLER_EXECUTION_EVENT = "SygmaBridge.FailedHandlerExecution"


@dataclass
class Event:
    """A decoded chain event: its qualified name and its named fields."""

    name: str
    fields: dict[str, Any] = field(default_factory=dict)


def _require_fields(fields: Any) -> Mapping[str, Any]:
    if not isinstance(fields, Mapping):
        raise ValueError(f"event fields must be a mapping, got '{type(fields).__name__}'")
    return fields


def _int_field(fields: Mapping[str, Any], key: str, bits: int) -> int:
    value = _lookup(fields, key)
    if not _present(value):
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(
            f"'{key}' expected type 'uint{bits}', got unconvertible type '{type(value).__name__}'"
        )
    if value < 0 or value.bit_length() > bits:
        raise ValueError(f"cannot parse '{key}', {value} overflows uint{bits}")
    return value


def _bytes_field(fields: Mapping[str, Any], key: str, size: int | None = None) -> bytes:
    value = _lookup(fields, key)
    if not _present(value):
        return bytes(size or 0)
    if isinstance(value, str) or not isinstance(value, (bytes, bytearray, list, tuple)):
        raise ValueError(
            f"'{key}' expected a byte sequence, got unconvertible type '{type(value).__name__}'"
        )
    try:
        data = bytes(value)
    except (TypeError, ValueError) as err:
        raise ValueError(f"'{key}' holds values that are not bytes") from err
    if size is not None and len(data) != size:
        raise ValueError(f"'{key}' expected {size} bytes, got {len(data)}")
    return data


@dataclass
class DepositEvent:
    """Fields of a SygmaBridge.Deposit event."""

    dest_domain_id: int = 0
    resource_id: bytes = bytes(32)
    deposit_nonce: int = 0
    transfer_type: int = 0
    call_data: bytes = b""
    handler_response: bytes = bytes(1)

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any]) -> "DepositEvent":
        """Decode a deposit from event fields; missing fields keep their zero value."""
        fields = _require_fields(fields)
        return cls(
            dest_domain_id=_int_field(fields, "dest_domain_id", 8),
            resource_id=_bytes_field(fields, "resource_id", 32),
            deposit_nonce=_int_field(fields, "deposit_nonce", 64),
            transfer_type=_int_field(fields, "sygma_traits_TransferType", 8),
            call_data=_bytes_field(fields, "deposit_data"),
            handler_response=_bytes_field(fields, "handler_response", 1),
        )


@dataclass
class RetryEventData:
    """Fields of a SygmaBridge.Retry event."""

    deposit_on_block_height: int = 0
    dest_domain_id: int = 0

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any]) -> "RetryEventData":
        """Decode a retry request from event fields; missing fields keep their zero value."""
        fields = _require_fields(fields)
        return cls(
            deposit_on_block_height=_int_field(fields, "deposit_on_block_height", 128),
            dest_domain_id=_int_field(fields, "dest_domain_id", 8),
        )