"""Ingestion Layer - new liquidity pool capture from Solana log notifications."""

from .listener import SolanaLogsListener
from .dispatcher import LaunchEventDispatcher
from .parser import TransactionParser
from .rpc_client import SolanaRpcClient
from .events import TokenLaunchEvent, TokenLegInfo
from .errors import MonitorError, TransactionFetchError, RecordStoreError
from .retry import RetryPolicy
from .config import MonitorConfig

__all__ = [
    "SolanaLogsListener",
    "LaunchEventDispatcher",
    "TransactionParser",
    "SolanaRpcClient",
    "TokenLaunchEvent",
    "TokenLegInfo",
    "MonitorError",
    "TransactionFetchError",
    "RecordStoreError",
    "RetryPolicy",
    "MonitorConfig",
]
