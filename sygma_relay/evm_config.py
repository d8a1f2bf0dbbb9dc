"""Configuration of an EVM domain."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from sygma_relay.chain_config import (
    ConfigError,
    GeneralChainConfig,
    _decode_float,
    _decode_int,
    _decode_str,
    _decode_uint,
    _lookup,
    _present,
    _require_mapping,
)

DEFAULT_MAX_GAS_PRICE = 500_000_000_000
DEFAULT_GAS_MULTIPLIER = 1.0
DEFAULT_GAS_INCREASE_PERCENTAGE = 15
DEFAULT_GAS_LIMIT = 15_000_000
DEFAULT_BLOCK_CONFIRMATIONS = 10
DEFAULT_BLOCK_INTERVAL = 5
DEFAULT_BLOCK_RETRY_INTERVAL = 5


@dataclass
class HandlerConfig:
    """A deposit handler contract and the kind of transfers it processes."""

    address: str = ""
    handler_type: str = ""


@dataclass
class EVMConfig:
    """Decoded and validated settings of an EVM domain."""

    general_chain_config: GeneralChainConfig
    bridge: str
    handlers: list[HandlerConfig] = field(default_factory=list)
    max_gas_price: int = DEFAULT_MAX_GAS_PRICE
    gas_multiplier: float = DEFAULT_GAS_MULTIPLIER
    gas_limit: int = DEFAULT_GAS_LIMIT
    gas_increase_percentage: int = DEFAULT_GAS_INCREASE_PERCENTAGE
    start_block: int = 0
    block_confirmations: int = DEFAULT_BLOCK_CONFIRMATIONS
    block_interval: int = DEFAULT_BLOCK_INTERVAL
    block_retry_interval: timedelta = timedelta(seconds=DEFAULT_BLOCK_RETRY_INTERVAL)

    def __str__(self) -> str:
        general = self.general_chain_config
        return (
            f"Name: '{general.name}', Id: '{general.domain_id}', Type: '{general.chain_type}', "
            f"BlockstorePath: '{general.blockstore_path}', FreshStart: '{general.fresh_start}', "
            f"LatestBlock: '{general.latest_block}', Bridge: '{self.bridge}', "
            f"Handlers: {self.handlers}, MaxGasPrice: '{self.max_gas_price}', "
            f"GasMultiplier: '{self.gas_multiplier}', GasLimit: '{self.gas_limit}', "
            f"StartBlock: '{self.start_block}', BlockConfirmations: '{self.block_confirmations}', "
            f"BlockInterval: '{self.block_interval}', BlockRetryInterval: '{self.block_retry_interval}'"
        )


def _decode_handlers(raw: Mapping[str, Any]) -> list[HandlerConfig]:
    value = _lookup(raw, "handlers")
    if not _present(value):
        return []
    if isinstance(value, (str, bytes, Mapping)) or not hasattr(value, "__iter__"):
        raise ConfigError(f"'handlers' expected a list, got '{type(value).__name__}'")
    handlers = []
    for item in value:
        if isinstance(item, HandlerConfig):
            handlers.append(item)
        elif isinstance(item, Mapping):
            handlers.append(
                HandlerConfig(address=_decode_str(item, "address"), handler_type=_decode_str(item, "type"))
            )
        else:
            raise ConfigError(f"'handlers' item has unconvertible type '{type(item).__name__}'")
    return handlers


def new_evm_config(chain_config: Mapping[str, Any]) -> EVMConfig:
    """Decode, apply defaults to and validate a raw EVM chain configuration."""
    raw = _require_mapping(chain_config)
    general = GeneralChainConfig.from_mapping(raw)
    bridge = _decode_str(raw, "bridge")
    handlers = _decode_handlers(raw)
    max_gas_price = _decode_int(raw, "maxGasPrice", DEFAULT_MAX_GAS_PRICE)
    gas_multiplier = _decode_float(raw, "gasMultiplier", DEFAULT_GAS_MULTIPLIER)
    gas_increase = _decode_int(raw, "gasIncreasePercentage", DEFAULT_GAS_INCREASE_PERCENTAGE)
    gas_limit = _decode_int(raw, "gasLimit", DEFAULT_GAS_LIMIT)
    start_block = _decode_int(raw, "startBlock")
    block_confirmations = _decode_int(raw, "blockConfirmations", DEFAULT_BLOCK_CONFIRMATIONS)
    block_interval = _decode_int(raw, "blockInterval", DEFAULT_BLOCK_INTERVAL)
    block_retry = _decode_uint(raw, "blockRetryInterval", DEFAULT_BLOCK_RETRY_INTERVAL)

    general.validate()
    if not bridge:
        raise ConfigError(f"required field chain.Bridge empty for chain {general.domain_id}")
    if block_confirmations < 1:
        raise ConfigError("blockConfirmations has to be >=1")

    return EVMConfig(
        general_chain_config=general,
        bridge=bridge,
        handlers=handlers,
        max_gas_price=max_gas_price,
        gas_multiplier=gas_multiplier,
        gas_limit=gas_limit,
        gas_increase_percentage=gas_increase,
        start_block=start_block,
        block_confirmations=block_confirmations,
        block_interval=block_interval,
        block_retry_interval=timedelta(seconds=block_retry),
    )