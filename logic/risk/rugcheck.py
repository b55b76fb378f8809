"""RugCheck Client - throttled token risk reports."""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from ingestion.config import MonitorConfig, DEFAULT_CONFIG
from .throttle import Throttle

logger = logging.getLogger(__name__)


class RugCheckClient:
    """
    Client for the RugCheck token report API.

    Every lookup passes through a shared ``Throttle``. All failure modes
    (throttled, upstream error, transport error) return None, each with
    its own log line, so callers only ever see "report" or "no report".

    API: GET {base_url}/tokens/{mint}/report/summary
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        throttle: Optional[Throttle] = None,
        config: MonitorConfig = DEFAULT_CONFIG,
    ):
        """
        Initialize the RugCheck client.

        Args:
            session: Shared aiohttp session
            throttle: Process-wide throttle (created from config if omitted)
            config: Monitor configuration
        """
        self._session = session
        self.base_url = config.rugcheck_base_url.rstrip("/")
        self.throttle = throttle or Throttle(config.throttle_seconds)
        self._timeout = aiohttp.ClientTimeout(total=config.rugcheck_timeout_seconds)

    def report_url(self, mint: str) -> str:
        return f"{self.base_url}/tokens/{mint}/report/summary"

    async def assess(self, mint: str) -> Optional[Dict[str, Any]]:
        """
        Get the risk report summary for a token mint.

        Args:
            mint: Token mint address

        Returns:
            Report body on a 2xx response, otherwise None
        """
        if not await self.throttle.try_acquire():
            logger.info(f"Skipping RugCheck for {mint} due to throttling")
            return None

        return await self._fetch_report(mint)

    async def _fetch_report(self, mint: str) -> Optional[Dict[str, Any]]:
        logger.info(f"Checking rug risk for token with mint: {mint}")

        try:
            async with self._session.get(self.report_url(mint), timeout=self._timeout) as response:
                if not 200 <= response.status < 300:
                    error_text = await response.text()
                    logger.error(
                        f"Error checking token on RugCheck: {response.status} - {error_text[:500]}"
                    )
                    return None

                report = await response.json()

        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Error checking token on RugCheck: {type(e).__name__}: {e}")
            return None

        score = report.get("score") if isinstance(report, dict) else None
        logger.info(f"RugCheck result for {mint}: score={score}")
        return report
