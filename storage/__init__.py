"""Storage Layer - token launch records and error log."""

from .record_store import JsonRecordStore
from .error_sink import ErrorSink

__all__ = [
    "JsonRecordStore",
    "ErrorSink",
]
