"""Conversion of messages into proposals executed by the Substrate bridge pallet."""

from __future__ import annotations

import logging
from typing import Callable

from sygma_relay.message import Message
from sygma_relay.proposal import Proposal

logger = logging.getLogger(__name__)

MessageHandlerFunc = Callable[[Message], Proposal]


class SubstrateMessageHandler:
    """Dispatches messages to proposal builders registered per transfer type."""

    def __init__(self) -> None:
        self._handlers: dict[str, MessageHandlerFunc] = {}

    def handle_message(self, m: Message) -> Proposal:
        """Convert a message into a proposal with the handler for its transfer type."""
        handler = self._handlers.get(m.transfer_type)
        if handler is None:
            raise LookupError(
                f"no corresponding message handler for this transfer type {m.transfer_type} exists"
            )
        logger.info(
            "Handling new message type=%s src=%s dst=%s nonce=%s resourceID=%s",
            m.transfer_type,
            m.source,
            m.destination,
            m.deposit_nonce,
            bytes(m.resource_id).hex(),
        )
        return handler(m)

    def register_message_handler(self, transfer_type: str, handler: MessageHandlerFunc) -> None:
        """Associate a handler function with a transfer type; empty types are ignored."""
        if not transfer_type:
            return
        logger.info("Registered message handler for transfer type %s", transfer_type)
        self._handlers[transfer_type] = handler


def fungible_transfer_message_handler(m: Message) -> Proposal:
    """Build the proposal data of a fungible transfer: amount, recipient length, recipient."""
    if len(m.payload) != 2:
        raise ValueError("malformed payload. Len  of payload should be 2")
    amount, recipient = m.payload
    if not isinstance(amount, (bytes, bytearray)):
        raise ValueError("wrong payload amount format")
    if not isinstance(recipient, (bytes, bytearray)):
        raise ValueError("wrong payload recipient format")

    length = len(recipient)
    data = b"".join(
        (
            bytes(amount).rjust(32, b"\x00"),
            length.to_bytes((length.bit_length() + 7) // 8, "big").rjust(32, b"\x00"),
            bytes(recipient),
        )
    )
    return Proposal(
        origin_domain_id=m.source,
        destination=m.destination,
        deposit_nonce=m.deposit_nonce,
        resource_id=m.resource_id,
        data=data,
        metadata=m.metadata,
    )