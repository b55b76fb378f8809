"""Record types for captured token launches."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class TokenLegInfo:
    """One token leg of a liquidity pool, read from post-token-balances."""

    address: str = ""
    decimals: int = 0
    amount: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.address

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "decimals": self.decimals,
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TokenLegInfo":
        data = data or {}
        return cls(
            address=data.get("address", ""),
            decimals=int(data.get("decimals", 0)),
            amount=float(data.get("amount", 0.0)),
        )


@dataclass
class TokenLaunchEvent:
    """
    A new liquidity pool captured from a log notification.

    Keyed by the signature of the pool-creation transaction. The record
    is persisted twice: once when captured, then again if a RugCheck
    report becomes available.
    """

    signature: str
    logs: List[str] = field(default_factory=list)
    creator: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    base_info: TokenLegInfo = field(default_factory=TokenLegInfo)
    quote_info: TokenLegInfo = field(default_factory=TokenLegInfo)
    risk_assessment: Optional[Dict[str, Any]] = None

    @property
    def base_mint(self) -> str:
        return self.base_info.address

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted record layout."""
        return {
            "signature": self.signature,
            "creator": self.creator,
            "timestamp": self.timestamp.isoformat(),
            "baseInfo": self.base_info.to_dict(),
            "quoteInfo": self.quote_info.to_dict(),
            "logs": list(self.logs),
            "riskAssessment": self.risk_assessment,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenLaunchEvent":
        """Rebuild an event from a persisted record."""
        return cls(
            signature=data["signature"],
            logs=list(data.get("logs") or []),
            creator=data.get("creator", ""),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            base_info=TokenLegInfo.from_dict(data.get("baseInfo")),
            quote_info=TokenLegInfo.from_dict(data.get("quoteInfo")),
            risk_assessment=data.get("riskAssessment"),
        )
