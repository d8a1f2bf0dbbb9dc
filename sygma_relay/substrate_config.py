"""Configuration of a Substrate domain."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from sygma_relay.chain_config import (
    GeneralChainConfig,
    _decode_int,
    _decode_uint,
    _require_mapping,
)

DEFAULT_BLOCK_INTERVAL = 5
DEFAULT_BLOCK_RETRY_INTERVAL = 5


@dataclass
class SubstrateConfig:
    """Decoded and validated settings of a Substrate domain."""

    general_chain_config: GeneralChainConfig
    chain_id: int = 0
    start_block: int = 0
    block_interval: int = DEFAULT_BLOCK_INTERVAL
    block_retry_interval: timedelta = timedelta(seconds=DEFAULT_BLOCK_RETRY_INTERVAL)
    substrate_network: int = 0
    tip: int = 0

    def __str__(self) -> str:
        general = self.general_chain_config
        return (
            f"Name: '{general.name}', Id: '{general.domain_id}', Type: '{general.chain_type}', "
            f"BlockstorePath: '{general.blockstore_path}', FreshStart: '{general.fresh_start}', "
            f"LatestBlock: '{general.latest_block}', StartBlock: '{self.start_block}', "
            f"BlockInterval: '{self.block_interval}', BlockRetryInterval: '{self.block_retry_interval}', "
            f"ChainID: '{self.chain_id}', Tip: '{self.tip}', "
            f"SubstrateNetworkPrefix: \"{self.substrate_network}\""
        )


def new_substrate_config(chain_config: Mapping[str, Any]) -> SubstrateConfig:
    """Decode, apply defaults to and validate a raw Substrate chain configuration."""
    raw = _require_mapping(chain_config)
    general = GeneralChainConfig.from_mapping(raw)
    chain_id = _decode_int(raw, "chainID")
    start_block = _decode_int(raw, "startBlock")
    block_interval = _decode_int(raw, "blockInterval", DEFAULT_BLOCK_INTERVAL)
    block_retry = _decode_uint(raw, "blockRetryInterval", DEFAULT_BLOCK_RETRY_INTERVAL)
    substrate_network = _decode_int(raw, "substrateNetwork")
    tip = _decode_uint(raw, "tip")

    general.validate()

    return SubstrateConfig(
        general_chain_config=general,
        chain_id=chain_id,
        start_block=start_block,
        block_interval=block_interval,
        block_retry_interval=timedelta(seconds=block_retry),
        substrate_network=substrate_network & 0xFF,
        tip=tip,
    )