"""Event Dispatcher - runs one log notification through the capture pipeline."""

import logging
from typing import Any, Dict, List, Optional, Protocol

from .events import TokenLaunchEvent

logger = logging.getLogger(__name__)


class EventParser(Protocol):
    """Protocol for the transaction parser."""
    async def parse(self, signature: str, logs: Optional[List[str]] = None) -> TokenLaunchEvent: ...


class RecordStore(Protocol):
    """Protocol for the record store."""
    async def upsert(self, event: TokenLaunchEvent) -> None: ...


class RiskAssessor(Protocol):
    """Protocol for the risk assessor."""
    async def assess(self, mint: str) -> Optional[Dict[str, Any]]: ...


class ErrorRecorder(Protocol):
    """Protocol for the error sink."""
    def record(self, context: str, error: BaseException) -> None: ...


CALLBACK_CONTEXT = "new Solana token log callback function"


class LaunchEventDispatcher:
    """
    Capture pipeline for a single pool-creation notification.

    parse -> store (capture) -> assess -> store (enrichment)

    Each call is independent: any exception raised downstream is
    handed to the error sink and swallowed, so one bad event never
    tears down the subscription. Events are not retried.
    """

    def __init__(
        self,
        parser: EventParser,
        store: RecordStore,
        assessor: RiskAssessor,
        error_sink: ErrorRecorder,
    ):
        self.parser = parser
        self.store = store
        self.assessor = assessor
        self.error_sink = error_sink
        self._handled = 0
        self._failed = 0

    async def handle_notification(
        self,
        logs: List[str],
        err: Optional[Any],
        signature: str,
    ) -> Optional[TokenLaunchEvent]:
        """
        Process one log notification.

        Args:
            logs: Log lines delivered with the notification
            err: On-chain error of the transaction, if any
            signature: Transaction signature

        Returns:
            The captured event, or None if it was discarded or failed
        """
        if err is not None:
            logger.warning(f"Skipping failed transaction {signature}: {err}")
            return None

        self._handled += 1
        logger.info(f"Found new token signature: {signature}")

        try:
            return await self._capture(signature, logs)
        except Exception as e:
            self._failed += 1
            self.error_sink.record(CALLBACK_CONTEXT, e)
            return None

    async def _capture(self, signature: str, logs: List[str]) -> TokenLaunchEvent:
        event = await self.parser.parse(signature, logs)
        await self.store.upsert(event)

        if event.base_info.is_empty:
            logger.info(f"No base mint for {signature[:16]}..., skipping RugCheck")
            return event

        report = await self.assessor.assess(event.base_mint)
        if report is None:
            logger.info(f"No RugCheck result for {event.base_mint}")
            return event

        event.risk_assessment = report
        await self.store.upsert(event)
        return event

    @property
    def handled_count(self) -> int:
        return self._handled

    @property
    def failed_count(self) -> int:
        return self._failed
