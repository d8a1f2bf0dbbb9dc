"""Bridge relayer core for EVM and Substrate chains: deposits, proposals, events and batching."""

__version__ = "0.1.0"