"""Risk Module - throttled RugCheck token reports."""

from .rugcheck import RugCheckClient
from .throttle import Throttle

__all__ = [
    "RugCheckClient",
    "Throttle",
]
