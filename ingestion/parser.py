"""Transaction Parser - derives pool launch fields from a resolved transaction."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol

from .config import MonitorConfig, DEFAULT_CONFIG
from .events import TokenLaunchEvent, TokenLegInfo

logger = logging.getLogger(__name__)


class TransactionFetcher(Protocol):
    """Protocol for the transaction source."""
    async def get_transaction(
        self,
        signature: str,
        commitment: str = "confirmed",
        max_supported_transaction_version: int = 0,
    ) -> Optional[Dict[str, Any]]: ...


def extract_creator(transaction: Dict[str, Any]) -> str:
    """
    Return the pubkey at account index 0 (the fee payer).

    ``jsonParsed`` responses carry ``{"pubkey": ...}`` objects, plain
    ``json`` responses carry bare strings; both are accepted.
    """
    account_keys = (
        transaction.get("transaction", {})
        .get("message", {})
        .get("accountKeys", [])
    )
    if not account_keys:
        return ""

    first = account_keys[0]
    if isinstance(first, dict):
        return str(first.get("pubkey", ""))
    return str(first)


def find_leg(
    balances: Iterable[Dict[str, Any]],
    owner: str,
    mint: str,
    is_reference: bool,
) -> Optional[Dict[str, Any]]:
    """
    First balance entry owned by ``owner`` whose mint is (or is not) ``mint``.

    Only the first match in the node's ordering is returned; a transaction
    touching several pools under the same authority keeps its first leg.
    """
    for balance in balances:
        if balance.get("owner") != owner:
            continue
        if (balance.get("mint") == mint) == is_reference:
            return balance
    return None


def leg_from_balance(balance: Optional[Dict[str, Any]]) -> TokenLegInfo:
    """Build a TokenLegInfo from a postTokenBalances entry."""
    if balance is None:
        return TokenLegInfo()

    ui_amount = balance.get("uiTokenAmount") or {}
    return TokenLegInfo(
        address=balance.get("mint", ""),
        decimals=int(ui_amount.get("decimals") or 0),
        amount=float(ui_amount.get("uiAmount") or 0.0),
    )


class TransactionParser:
    """
    Turns a pool-creation signature into a TokenLaunchEvent.

    A missing transaction, or one that failed on-chain, still yields an
    event carrying only the signature and logs. Fetch failures propagate
    as ``TransactionFetchError`` for the dispatcher to handle.
    """

    def __init__(
        self,
        fetcher: TransactionFetcher,
        config: MonitorConfig = DEFAULT_CONFIG,
    ):
        """
        Initialize the parser.

        Args:
            fetcher: Source of resolved transactions (RPC client)
            config: Supplies pool authority, reference mint and commitment
        """
        self.fetcher = fetcher
        self.pool_authority = config.pool_authority
        self.reference_mint = config.reference_mint
        self.commitment = config.commitment

    async def parse(self, signature: str, logs: Optional[List[str]] = None) -> TokenLaunchEvent:
        """
        Fetch and parse a pool-creation transaction.

        Args:
            signature: Transaction signature from the log notification
            logs: Raw log lines delivered with the notification

        Returns:
            TokenLaunchEvent with whatever fields could be derived
        """
        event = TokenLaunchEvent(signature=signature, logs=list(logs or []))

        transaction = await self.fetcher.get_transaction(
            signature,
            commitment=self.commitment,
            max_supported_transaction_version=0,
        )

        if not transaction:
            logger.warning(f"Transaction not found: {signature[:16]}...")
            return event

        meta = transaction.get("meta") or {}
        if meta.get("err") is not None:
            logger.warning(f"Transaction {signature[:16]}... failed on-chain: {meta['err']}")
            return event

        logger.info(f"Successfully parsed transaction {signature[:16]}...")

        event.creator = extract_creator(transaction)
        logger.info(f"Creator: {event.creator}")

        balances = meta.get("postTokenBalances") or []
        event.base_info = leg_from_balance(
            find_leg(balances, self.pool_authority, self.reference_mint, is_reference=False)
        )
        event.quote_info = leg_from_balance(
            find_leg(balances, self.pool_authority, self.reference_mint, is_reference=True)
        )

        if event.base_info.is_empty:
            logger.info(f"No base leg owned by pool authority in {signature[:16]}...")

        return event
