"""Handlers turning Substrate block events into metadata updates and messages."""

from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

from sygma_relay.message import Message
from sygma_relay.substrate_events import (
    DEPOSIT_EVENT,
    PARACHAIN_UPDATED_EVENT,
    RETRY_EVENT,
    DepositEvent,
    Event,
    RetryEventData,
)

logger = logging.getLogger(__name__)

# Failures a deposit handler reports for a bad deposit; anything else is treated
# as a crash of that retry request, which is logged and abandoned.
_DEPOSIT_ERRORS = (ValueError, LookupError)


class ChainConnection(Protocol):
    """Access to a Substrate node; get_block returns an object with a `number`."""

    def update_metadata(self) -> None: ...

    def get_block_hash(self, block_number: int) -> Any: ...

    def get_block_events(self, block_hash: Any) -> Sequence[Event]: ...

    def get_finalized_head(self) -> Any: ...

    def get_block(self, block_hash: Any) -> Any: ...


class DepositHandler(Protocol):
    def handle_deposit(
        self,
        source_id: int,
        dest_id: int,
        nonce: int,
        resource_id: bytes,
        calldata: bytes,
        transfer_type: int,
    ) -> Message: ...


class MessageQueue(Protocol):
    def put(self, item: list[Message]) -> None: ...


class SystemUpdateEventHandler:
    """Refreshes chain metadata when the parachain runtime is upgraded."""

    def __init__(self, conn: ChainConnection) -> None:
        self._conn = conn

    def handle_events(self, evts: Sequence[Event], msg_queue: MessageQueue) -> None:
        """Update metadata for each runtime upgrade event; failures are raised."""
        for event in evts:
            if event.name != PARACHAIN_UPDATED_EVENT:
                continue
            logger.info("Updating substrate metadata")
            try:
                self._conn.update_metadata()
            except Exception:
                logger.exception("Unable to update Metadata")
                raise


class FungibleTransferEventHandler:
    """Resolves deposit events into messages, grouped by destination domain."""

    def __init__(
        self,
        domain_id: int,
        deposit_handler: DepositHandler,
        log: logging.Logger | None = None,
    ) -> None:
        self._domain_id = domain_id
        self._deposit_handler = deposit_handler
        self._log = log or logger

    def handle_events(self, evts: Sequence[Event], msg_queue: MessageQueue) -> None:
        """Put one list of messages per destination on msg_queue; bad deposits are skipped."""
        deposits: dict[int, list[Message]] = {}
        for event in evts:
            if event.name != DEPOSIT_EVENT:
                continue
            try:
                deposit = DepositEvent.from_fields(event.fields)
                msg = self._deposit_handler.handle_deposit(
                    self._domain_id,
                    deposit.dest_domain_id,
                    deposit.deposit_nonce,
                    deposit.resource_id,
                    deposit.call_data,
                    deposit.transfer_type,
                )
            except Exception:
                self._log.exception("Failed handling deposit event %s", event)
                continue
            self._log.info("Resolved deposit message %s", deposit)
            deposits.setdefault(msg.destination, []).append(msg)

        for messages in deposits.values():
            msg_queue.put(messages)


class RetryEventHandler:
    """Re-reads the deposits of a finalized block when a retry is requested."""

    def __init__(
        self,
        conn: ChainConnection,
        deposit_handler: DepositHandler,
        domain_id: int,
        log: logging.Logger | None = None,
    ) -> None:
        self._conn = conn
        self._deposit_handler = deposit_handler
        self._domain_id = domain_id
        self._log = log or logger

    def handle_events(self, evts: Sequence[Event], msg_queue: MessageQueue) -> None:
        """Put one list of retried messages per destination on msg_queue.

        Connection and decoding failures are raised; retries of blocks that are
        not yet finalized are skipped.
        """
        finalized = self._conn.get_block(self._conn.get_finalized_head()).number

        deposits: dict[int, list[Message]] = {}
        for event in evts:
            if event.name == RETRY_EVENT:
                self._handle_retry(event, finalized, deposits)

        for messages in deposits.values():
            msg_queue.put(messages)

    def _handle_retry(
        self, event: Event, finalized: int, deposits: dict[int, list[Message]]
    ) -> None:
        retry = RetryEventData.from_fields(event.fields)
        if finalized < retry.deposit_on_block_height:
            self._log.warning(
                "Retry event for block number %d has not enough confirmations",
                retry.deposit_on_block_height,
            )
            return

        block_hash = self._conn.get_block_hash(retry.deposit_on_block_height)
        for block_event in self._conn.get_block_events(block_hash):
            if block_event.name != DEPOSIT_EVENT:
                continue
            deposit = DepositEvent.from_fields(block_event.fields)
            try:
                msg = self._deposit_handler.handle_deposit(
                    self._domain_id,
                    deposit.dest_domain_id,
                    deposit.deposit_nonce,
                    deposit.resource_id,
                    deposit.call_data,
                    deposit.transfer_type,
                )
            except _DEPOSIT_ERRORS:
                raise
            except Exception:
                self._log.exception("Crash while handling retry event %s", event)
                return
            self._log.info("Resolved retry message %s", deposit)
            deposits.setdefault(msg.destination, []).append(msg)