"""Preparation of proposal batches for signing and execution on destination bridges."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol, Sequence

from sygma_relay.message import Message
from sygma_relay.proposal import Proposal

logger = logging.getLogger(__name__)

TRANSFER_GAS_COST = 200_000


class MessageHandler(Protocol):
    def handle_message(self, m: Message) -> Any: ...


class Bridge(Protocol):
    def is_proposal_executed(self, proposal: Proposal) -> bool: ...


@dataclass
class Batch:
    """Proposals executed together in one transaction and the gas they need."""

    proposals: list[Proposal] = field(default_factory=list)
    gas_limit: int = 0


def _as_proposal(handled: Any) -> Proposal:
    if isinstance(handled, Proposal):
        return handled
    return Proposal(
        origin_domain_id=handled.source,
        destination=handled.destination,
        deposit_nonce=handled.deposit_nonce,
        resource_id=handled.resource_id,
        data=handled.data,
        metadata=handled.metadata,
    )


def _gas_limit(proposal: Proposal) -> int:
    data = getattr(proposal.metadata, "data", None) or {}
    return int(data.get("gasLimit", TRANSFER_GAS_COST))


def proposal_batches(
    msgs: Iterable[Message],
    message_handler: MessageHandler,
    bridge: Bridge,
    transaction_max_gas: int,
) -> list[Batch]:
    """Split unexecuted proposals into batches whose gas stays under transaction_max_gas.

    The returned list always holds at least one batch, which may be empty.
    """
    current = Batch()
    batches = [current]
    for msg in msgs:
        proposal = _as_proposal(message_handler.handle_message(msg))
        if bridge.is_proposal_executed(proposal):
            logger.info("Proposal %s already executed", proposal)
            continue

        current.gas_limit += _gas_limit(proposal)
        if current.gas_limit >= transaction_max_gas:
            current = Batch()
            batches.append(current)
        current.proposals.append(proposal)
    return batches


def pending_proposals(
    msgs: Iterable[Message], message_handler: MessageHandler, bridge: Bridge
) -> list[Proposal]:
    """Convert messages into proposals, leaving out those already executed."""
    proposals = []
    for msg in msgs:
        proposal = _as_proposal(message_handler.handle_message(msg))
        if not bridge.is_proposal_executed(proposal):
            proposals.append(proposal)
    return proposals


def are_proposals_executed(bridge: Bridge, proposals: Sequence[Proposal]) -> bool:
    """True when the bridge reports every proposal executed; a failed query counts as not."""
    for proposal in proposals:
        try:
            if not bridge.is_proposal_executed(proposal):
                return False
        except Exception:
            return False
    return True


def _left_pad(value: bytes) -> bytes:
    return bytes(value).rjust(32, b"\x00")


def signature_bytes(r: bytes, s: bytes, recovery: bytes) -> bytes:
    """Pack r, s and the recovery id into a signature, with V moved from 0/1 to 27/28."""
    signature = bytearray(_left_pad(r) + _left_pad(s) + bytes(recovery))
    signature[-1] = (signature[-1] + 27) & 0xFF
    return bytes(signature)


def session_id(proposal_hash: bytes) -> str:
    """Name of the signing session for a batch hash."""
    return f"signing-{bytes(proposal_hash).hex()}"