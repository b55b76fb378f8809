"""Exception types for the Rug Monitor pipeline."""

from typing import Optional


class MonitorError(Exception):
    """Base class for pipeline errors."""


class TransactionFetchError(MonitorError):
    """Raised when a transaction cannot be fetched from the RPC node."""

    def __init__(self, signature: str, message: str, status: Optional[int] = None):
        self.signature = signature
        self.status = status
        super().__init__(f"getTransaction failed for {signature}: {message}")


class RecordStoreError(MonitorError):
    """Raised when the records document cannot be read or written."""
