"""Settings common to every chain and decoding of raw chain configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

_MISSING = object()


class ConfigError(ValueError):
    """Raised when a chain configuration cannot be decoded or is invalid."""


def _lookup(raw: Mapping[str, Any], key: str) -> Any:
    if key in raw:
        return raw[key]
    folded = key.casefold()
    return next(
        (value for name, value in raw.items() if isinstance(name, str) and name.casefold() == folded),
        _MISSING,
    )


def _present(value: Any) -> bool:
    return value is not _MISSING and value is not None


def _unconvertible(key: str, expected: str, value: Any) -> ConfigError:
    return ConfigError(
        f"'{key}' expected type '{expected}', got unconvertible type '{type(value).__name__}'"
    )


def _decode_int(raw: Mapping[str, Any], key: str, default: int = 0) -> int:
    value = _lookup(raw, key)
    if not _present(value):
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _unconvertible(key, "int64", value)
    return int(value) or default


def _decode_uint(raw: Mapping[str, Any], key: str, default: int = 0, bits: int = 64) -> int:
    value = _lookup(raw, key)
    if not _present(value):
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _unconvertible(key, f"uint{bits}", value)
    result = int(value)
    if result < 0 or result.bit_length() > bits:
        raise ConfigError(f"cannot parse '{key}', {value} overflows uint{bits}")
    return result or default


def _decode_float(raw: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    value = _lookup(raw, key)
    if not _present(value):
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _unconvertible(key, "float64", value)
    return float(value) or default


def _decode_str(raw: Mapping[str, Any], key: str) -> str:
    value = _lookup(raw, key)
    if not _present(value):
        return ""
    if not isinstance(value, str):
        raise _unconvertible(key, "string", value)
    return value


def _decode_bool(raw: Mapping[str, Any], key: str) -> bool:
    value = _lookup(raw, key)
    if not _present(value):
        return False
    if not isinstance(value, bool):
        raise _unconvertible(key, "bool", value)
    return value


def _require_mapping(raw: Any) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise ConfigError(f"chain configuration must be a mapping, got '{type(raw).__name__}'")
    return raw


@dataclass
class GeneralChainConfig:
    """Identity and storage settings shared by EVM and Substrate chains."""

    name: str = ""
    domain_id: int | None = None
    endpoint: str = ""
    chain_type: str = ""
    key: str = ""
    blockstore_path: str = ""
    fresh_start: bool = False
    latest_block: bool = False

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "GeneralChainConfig":
        """Decode the general fields from a raw chain configuration mapping."""
        raw = _require_mapping(raw)
        domain_id = (
            _decode_uint(raw, "id", bits=8) if _present(_lookup(raw, "id")) else None
        )
        return cls(
            name=_decode_str(raw, "name"),
            domain_id=domain_id,
            endpoint=_decode_str(raw, "endpoint"),
            chain_type=_decode_str(raw, "type"),
            key=_decode_str(raw, "key"),
            blockstore_path=_decode_str(raw, "blockstorePath"),
            fresh_start=_decode_bool(raw, "freshStart"),
            latest_block=_decode_bool(raw, "latestBlock"),
        )

    def validate(self) -> None:
        """Raise ConfigError if a required field is empty."""
        if self.domain_id is None:
            raise ConfigError("required field chain.Id empty for chain")
        if not self.endpoint:
            raise ConfigError(f"required field chain.Endpoint empty for chain {self.domain_id}")
        if not self.name:
            raise ConfigError(f"required field chain.Name empty for chain {self.domain_id}")