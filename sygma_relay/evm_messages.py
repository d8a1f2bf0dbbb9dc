"""Conversion of messages into proposals executed by EVM bridges."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sygma_relay.evm_deposit import _pack_permissionless_generic
from sygma_relay.message import Message, Metadata

_PAYLOAD_ERRORS = (
    "wrong function signature format",
    "wrong contract address format",
    "wrong max fee format",
    "wrong depositor data format",
    "wrong execution data format",
)


@dataclass
class EVMProposal:
    """A proposal bound to the handler and bridge contracts that execute it."""

    source: int
    destination: int
    deposit_nonce: int
    resource_id: bytes
    data: bytes
    handler_address: Any
    bridge_address: Any
    metadata: Metadata = field(default_factory=Metadata)


def _payload_bytes(payload: list[Any]) -> list[bytes]:
    values = []
    for position, error in enumerate(_PAYLOAD_ERRORS):
        item = payload[position] if position < len(payload) else None
        if not isinstance(item, (bytes, bytearray)):
            raise ValueError(error)
        values.append(bytes(item))
    return values


def permissionless_generic_message_handler(
    msg: Message, handler_address: Any, bridge_address: Any
) -> EVMProposal:
    """Build the proposal data of a permissionless generic transfer."""
    function_sig, contract_address, max_fee, depositor, execution_data = _payload_bytes(
        msg.payload
    )
    data = _pack_permissionless_generic(
        max_fee, function_sig, contract_address, depositor, execution_data
    )
    return EVMProposal(
        source=msg.source,
        destination=msg.destination,
        deposit_nonce=msg.deposit_nonce,
        resource_id=msg.resource_id,
        data=data,
        handler_address=handler_address,
        bridge_address=bridge_address,
        metadata=msg.metadata,
    )