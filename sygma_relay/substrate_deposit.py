"""Decoding of Substrate deposit events into cross-chain messages."""

from __future__ import annotations

import logging
from typing import Callable

from sygma_relay.message import Message, Metadata, TransferType

logger = logging.getLogger(__name__)

FUNGIBLE_TRANSFER = 0
MIN_CALLDATA_LENGTH = 84

DepositHandlerFunc = Callable[[int, int, int, bytes, bytes], Message]

_NO_HANDLER = "no corresponding deposit handler for this transfer type exists"


class SubstrateDepositHandler:
    """Dispatches Substrate deposits to handlers registered per transfer type."""

    def __init__(self) -> None:
        self._handlers: dict[str, DepositHandlerFunc] = {}

    def handle_deposit(
        self,
        source_id: int,
        dest_id: int,
        deposit_nonce: int,
        resource_id: bytes,
        calldata: bytes,
        transfer_type: int,
    ) -> Message:
        """Convert a deposit into a message with the handler for its transfer type."""
        if transfer_type != FUNGIBLE_TRANSFER:
            raise LookupError(_NO_HANDLER)
        handler = self._handlers.get(TransferType.FUNGIBLE)
        if handler is None:
            raise LookupError(_NO_HANDLER)
        return handler(source_id, dest_id, deposit_nonce, resource_id, calldata)

    def register_deposit_handler(self, transfer_type: str, handler: DepositHandlerFunc) -> None:
        """Associate a handler function with a transfer type; empty types are ignored."""
        if not transfer_type:
            return
        logger.info("Registered deposit handler for transfer type %s", transfer_type)
        self._handlers[transfer_type] = handler


def fungible_transfer_handler(
    source_id: int, dest_id: int, nonce: int, resource_id: bytes, calldata: bytes
) -> Message:
    """Convert fungible transfer calldata into a message."""
    calldata = bytes(calldata)
    if len(calldata) < MIN_CALLDATA_LENGTH:
        raise ValueError("invalid calldata length: less than 84 bytes")

    amount = calldata[:32]
    recipient_length = int.from_bytes(calldata[32:64], "big", signed=True)
    end = 64 + recipient_length
    if recipient_length < 0 or end > len(calldata):
        raise ValueError(f"invalid recipient length: {recipient_length}")
    recipient = calldata[64:end]

    return Message(
        source=source_id,
        destination=dest_id,
        deposit_nonce=nonce,
        resource_id=bytes(resource_id),
        transfer_type=TransferType.FUNGIBLE,
        payload=[amount, recipient],
        metadata=Metadata(),
    )