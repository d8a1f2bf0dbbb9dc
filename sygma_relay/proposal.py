"""Proposals sent to destination bridges and their EIP-712 batch hash."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from Crypto.Hash import keccak

from sygma_relay.message import Metadata

_DOMAIN_TYPE = "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
_PROPOSAL_TYPE = "Proposal(uint8 originDomainID,uint64 depositNonce,bytes32 resourceID,bytes data)"
_PROPOSALS_TYPE = "Proposals(Proposal[] proposals)" + _PROPOSAL_TYPE
_DOMAIN_NAME = "Bridge"
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


@dataclass
class Proposal:
    """A message converted into the form a destination bridge executes."""

    origin_domain_id: int
    destination: int
    deposit_nonce: int
    resource_id: bytes
    data: bytes
    metadata: Metadata = field(default_factory=Metadata)


def _keccak(*parts: bytes) -> bytes:
    digest = keccak.new(digest_bits=256)
    for part in parts:
        digest.update(part)
    return digest.digest()


def _as_int64(value: int) -> int:
    value &= (1 << 64) - 1
    return value - (1 << 64) if value >= 1 << 63 else value


def _uint(value: int, bits: int) -> bytes:
    type_name = f"uint{bits}"
    if value < 0:
        raise ValueError(f"invalid negative value for unsigned type {type_name}")
    if value.bit_length() > bits:
        raise ValueError(f"integer larger than '{type_name}'")
    return value.to_bytes(32, "big")


def _address(value: str) -> bytes:
    digits = value[2:] if value[:2] in ("0x", "0X") else value
    if len(digits) != 40 or not set(digits) <= _HEX_DIGITS:
        raise ValueError(f"provided data '{value}' is not a valid address")
    return bytes(12) + bytes.fromhex(digits)


def _bytes32(value: bytes) -> bytes:
    if len(value) > 32:
        raise ValueError("bytes32 value longer than 32 bytes")
    return bytes(value).ljust(32, b"\x00")


def _proposal_struct_hash(proposal: Proposal) -> bytes:
    return _keccak(
        _keccak(_PROPOSAL_TYPE.encode()),
        _uint(_as_int64(proposal.origin_domain_id), 8),
        _uint(_as_int64(proposal.deposit_nonce), 64),
        _bytes32(proposal.resource_id),
        _keccak(bytes(proposal.data)),
    )


def proposals_hash(
    proposals: Iterable[Proposal],
    chain_id: int,
    verifying_contract: str,
    bridge_version: str,
) -> bytes:
    """Return the EIP-712 digest that relayers sign to execute a batch of proposals."""
    domain_separator = _keccak(
        _keccak(_DOMAIN_TYPE.encode()),
        _keccak(_DOMAIN_NAME.encode()),
        _keccak(bridge_version.encode()),
        _uint(_as_int64(chain_id), 256),
        _address(verifying_contract),
    )
    array_hash = _keccak(*(_proposal_struct_hash(p) for p in proposals))
    message_hash = _keccak(_keccak(_PROPOSALS_TYPE.encode()), array_hash)
    return _keccak(b"\x19\x01", domain_separator, message_hash)