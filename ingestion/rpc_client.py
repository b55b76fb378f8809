"""Solana JSON-RPC client for transaction lookups."""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from .config import MonitorConfig, DEFAULT_CONFIG
from .errors import TransactionFetchError
from .retry import RetryPolicy, NO_RETRY

logger = logging.getLogger(__name__)


class SolanaRpcClient:
    """
    Minimal async client for the Solana HTTP JSON-RPC API.

    Only ``getTransaction`` is needed by the monitor. Transport errors,
    non-200 responses and JSON-RPC error objects are all surfaced as
    ``TransactionFetchError``.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        config: MonitorConfig = DEFAULT_CONFIG,
        retry_policy: RetryPolicy = NO_RETRY,
    ):
        """
        Initialize the RPC client.

        Args:
            session: Shared aiohttp session
            config: Monitor configuration (RPC URL, timeout)
            retry_policy: Backoff applied to each getTransaction call
        """
        self._session = session
        self.config = config
        self.rpc_url = config.helius_rpc_url
        self._timeout = aiohttp.ClientTimeout(total=config.rpc_timeout_seconds)
        self._get_transaction = retry_policy.wrap(self._fetch_transaction)
        self._request_id = 0

    async def get_transaction(
        self,
        signature: str,
        commitment: str = "confirmed",
        max_supported_transaction_version: int = 0,
    ) -> Optional[Dict[str, Any]]:
        """
        Fetch a fully parsed transaction.

        Args:
            signature: Transaction signature (base58)
            commitment: Commitment level
            max_supported_transaction_version: Highest versioned tx format
                accepted; 0 covers both legacy and v0 transactions

        Returns:
            The ``result`` object, or None if the node has no such transaction

        Raises:
            TransactionFetchError: On transport, HTTP or RPC failure
        """
        return await self._get_transaction(
            signature, commitment, max_supported_transaction_version
        )

    async def _fetch_transaction(
        self,
        signature: str,
        commitment: str,
        max_supported_transaction_version: int,
    ) -> Optional[Dict[str, Any]]:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": "getTransaction",
            "params": [
                signature,
                {
                    "encoding": "jsonParsed",
                    "commitment": commitment,
                    "maxSupportedTransactionVersion": max_supported_transaction_version,
                },
            ],
        }

        try:
            async with self._session.post(
                self.rpc_url, json=payload, timeout=self._timeout
            ) as resp:
                if resp.status != 200:
                    error_text = await resp.text()
                    raise TransactionFetchError(
                        signature, f"HTTP {resp.status}: {error_text[:200]}", resp.status
                    )
                data = await resp.json()
        except TransactionFetchError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise TransactionFetchError(signature, f"{type(e).__name__}: {e}") from e

        if data.get("error"):
            error = data["error"]
            raise TransactionFetchError(
                signature, f"RPC error {error.get('code')}: {error.get('message')}"
            )

        logger.debug(f"Fetched transaction {signature[:16]}...")
        return data.get("result")
