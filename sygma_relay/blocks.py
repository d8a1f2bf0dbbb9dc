"""Block number arithmetic shared by chain listeners."""

from __future__ import annotations


def calculate_starting_block(start_block: int | None, block_confirmations: int | None) -> int:
    """Return the largest block not above start_block that is divisible by block_confirmations."""
    if start_block is None or block_confirmations is None:
        raise ValueError(
            "startBlock or blockConfirmations can not be nil when calculating the starting block"
        )
    return start_block - start_block % block_confirmations