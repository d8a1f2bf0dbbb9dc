"""Handling of bridge retry events on EVM domains."""

from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

from sygma_relay.evm_events import Deposit, RetryEvent
from sygma_relay.message import Message

logger = logging.getLogger(__name__)


class EventListener(Protocol):
    """Source of retry events and the deposits they refer to."""

    def fetch_retry_events(
        self, contract_address: Any, start_block: int, end_block: int
    ) -> Sequence[RetryEvent]: ...

    def fetch_deposit_event(
        self, event: RetryEvent, bridge_address: Any, block_confirmations: int
    ) -> Sequence[Deposit]: ...


class DepositHandler(Protocol):
    """Converts deposits into messages."""

    def handle_deposit(
        self,
        source_id: int,
        dest_id: int,
        nonce: int,
        resource_id: bytes,
        calldata: bytes,
        handler_response: bytes,
    ) -> Message: ...


class MessageQueue(Protocol):
    def put(self, item: list[Message]) -> None: ...


class RetryEventHandler:
    """Resolves retry events into messages, grouped by destination domain."""

    def __init__(
        self,
        event_listener: EventListener,
        deposit_handler: DepositHandler,
        bridge_address: Any,
        domain_id: int,
        block_confirmations: int,
        log: logging.Logger | None = None,
    ) -> None:
        self._event_listener = event_listener
        self._deposit_handler = deposit_handler
        self._bridge_address = bridge_address
        self._domain_id = domain_id
        self._block_confirmations = block_confirmations
        self._log = log or logger

    def handle_event(self, start_block: int, end_block: int, msg_queue: MessageQueue) -> None:
        """Put one list of retried messages per destination domain on msg_queue.

        A failure to fetch retry events is raised; failures on single events or
        deposits are logged and skipped.
        """
        try:
            retry_events = self._event_listener.fetch_retry_events(
                self._bridge_address, start_block, end_block
            )
        except Exception as err:
            raise RuntimeError(f"unable to fetch retry events because of: {err}") from err

        retries: dict[int, list[Message]] = {}
        for event in retry_events:
            for msg in self._resolve(event, start_block, end_block):
                retries.setdefault(msg.destination, []).append(msg)

        for messages in retries.values():
            msg_queue.put(messages)

    def _resolve(self, event: RetryEvent, start_block: int, end_block: int) -> list[Message]:
        try:
            deposits = self._event_listener.fetch_deposit_event(
                event, self._bridge_address, self._block_confirmations
            )
        except Exception:
            self._log.exception("Unable to fetch deposit events from event %s", event)
            return []

        messages = []
        for deposit in deposits:
            try:
                msg = self._deposit_handler.handle_deposit(
                    self._domain_id,
                    deposit.destination_domain_id,
                    deposit.deposit_nonce,
                    deposit.resource_id,
                    deposit.data,
                    deposit.handler_response,
                )
            except Exception:
                self._log.exception("Failed handling deposit %s", deposit)
                continue
            self._log.info(
                "Resolved retry message %s in block range: %s-%s", msg, start_block, end_block
            )
            messages.append(msg)
        return messages