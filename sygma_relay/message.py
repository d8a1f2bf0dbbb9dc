"""Cross-chain messages produced from deposits and consumed by executors."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TransferType(str, Enum):
    """Kind of transfer a message carries."""

    FUNGIBLE = "FungibleTransfer"
    NON_FUNGIBLE = "NonFungibleTransfer"
    GENERIC = "GenericTransfer"
    PERMISSIONLESS_GENERIC = "PermissionlessGenericTransfer"

    def __str__(self) -> str:
        return self.value


@dataclass
class Metadata:
    """Free-form data attached to a message, such as a gas limit."""

    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class Message:
    """A deposit resolved on a source domain, addressed to a destination domain."""

    source: int = 0
    destination: int = 0
    deposit_nonce: int = 0
    resource_id: bytes = bytes(32)
    transfer_type: TransferType | str = ""
    payload: list[Any] = field(default_factory=list)
    metadata: Metadata = field(default_factory=Metadata)