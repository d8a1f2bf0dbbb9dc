"""Polling of finalized Substrate blocks and dispatch of their events to handlers."""

from __future__ import annotations

import logging
import threading
from typing import Any, Protocol, Sequence

from sygma_relay.message import Message
from sygma_relay.substrate_config import SubstrateConfig
from sygma_relay.substrate_events import Event

logger = logging.getLogger(__name__)


class ChainConnection(Protocol):
    """Access to a Substrate node; get_block returns an object with a `number`."""

    def get_finalized_head(self) -> Any: ...

    def get_block(self, block_hash: Any) -> Any: ...

    def get_block_hash(self, block_number: int) -> Any: ...

    def get_block_events(self, block_hash: Any) -> Sequence[Event]: ...


class EventHandler(Protocol):
    def handle_events(self, evts: Sequence[Event], msg_queue: Any) -> None: ...


class BlockStore(Protocol):
    def store_block(self, block: int, domain_id: int) -> None: ...


class SubstrateListener:
    """Reads events of finalized blocks in fixed-size ranges and hands them to handlers."""

    def __init__(
        self,
        conn: ChainConnection,
        event_handlers: Sequence[EventHandler],
        config: SubstrateConfig,
        log: logging.Logger | None = None,
    ) -> None:
        self._conn = conn
        self._event_handlers = list(event_handlers)
        self._block_interval = config.block_interval
        self._retry_seconds = config.block_retry_interval.total_seconds()
        self._domain_id = config.general_chain_config.domain_id
        self._log = log or logger

    def fetch_events(self, start_block: int, end_block: int) -> list[Event]:
        """Return the events of blocks start_block up to, not including, end_block."""
        self._log.debug("Fetching substrate events for block range %s-%s", start_block, end_block)
        events: list[Event] = []
        for number in range(start_block, end_block):
            events.extend(self._conn.get_block_events(self._conn.get_block_hash(number)))
        return events

    def listen_to_events(
        self,
        start_block: int | None,
        blockstore: BlockStore,
        msg_queue: Any,
        stop_event: threading.Event,
    ) -> threading.Thread:
        """Start polling in a background thread until stop_event is set.

        With no start block, polling starts at the current finalized head.
        """
        thread = threading.Thread(
            target=self._poll,
            args=(start_block, blockstore, msg_queue, stop_event),
            name=f"substrate-listener-{self._domain_id}",
            daemon=True,
        )
        thread.start()
        return thread

    def _poll(
        self,
        start_block: int | None,
        blockstore: BlockStore,
        msg_queue: Any,
        stop_event: threading.Event,
    ) -> None:
        while not stop_event.is_set():
            try:
                head = self._conn.get_block(self._conn.get_finalized_head()).number
            except Exception:
                self._log.warning("Failed to fetch finalized block", exc_info=True)
                stop_event.wait(self._retry_seconds)
                continue

            if start_block is None:
                start_block = head
            end_block = start_block + self._block_interval

            if head < end_block:
                stop_event.wait(self._retry_seconds)
                continue

            try:
                events = self.fetch_events(start_block, end_block)
            except Exception:
                self._log.warning(
                    "Failed fetching events for block range %s-%s",
                    start_block,
                    end_block,
                    exc_info=True,
                )
                stop_event.wait(self._retry_seconds)
                continue

            if not self._dispatch(events, msg_queue):
                continue

            try:
                blockstore.store_block(end_block, self._domain_id)
            except Exception:
                self._log.exception(
                    "Failed to write latest block %s to blockstore", start_block
                )
            start_block += self._block_interval

    def _dispatch(self, events: list[Event], msg_queue: Any) -> bool:
        for handler in self._event_handlers:
            try:
                handler.handle_events(events, msg_queue)
            except Exception:
                self._log.warning("Error handling substrate events", exc_info=True)
                return False
        return True