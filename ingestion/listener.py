"""Solana WebSocket Listener for new liquidity pool notifications."""

import asyncio
import json
import logging
from typing import Optional, Set

import backoff
from websockets import connect
from websockets.exceptions import ConnectionClosed

from .config import MonitorConfig, DEFAULT_CONFIG
from .dispatcher import LaunchEventDispatcher, ErrorRecorder

logger = logging.getLogger(__name__)


MONITOR_CONTEXT = "new Solana LP monitor"


class SolanaLogsListener:
    """
    WebSocket listener for pool-creation log notifications.

    Subscribes with ``logsSubscribe`` to every transaction mentioning the
    configured filter key (the Raydium fee account) and hands each
    ``logsNotification`` to the dispatcher as its own asyncio task, so a
    slow or hung event never blocks delivery of the next one.

    Connection failures are written to the error sink and retried with
    exponential backoff.
    """

    def __init__(
        self,
        dispatcher: LaunchEventDispatcher,
        error_sink: ErrorRecorder,
        config: MonitorConfig = DEFAULT_CONFIG,
    ):
        """
        Initialize the WebSocket listener.

        Args:
            dispatcher: Pipeline run for each notification
            error_sink: Records connection-level failures
            config: Monitor configuration
        """
        self.dispatcher = dispatcher
        self.error_sink = error_sink
        self.config = config

        self._ws = None
        self._running = False
        self._subscription_id: Optional[int] = None
        self._message_count = 0
        self._tasks: Set[asyncio.Task] = set()

    async def start(self) -> None:
        """
        Start the listener, reconnecting on failure.

        The ``reconnect_max_time_seconds`` budget covers consecutive failed
        attempts only and starts over after every successful subscribe.
        Once it is spent the last error propagates to the process
        supervisor.
        """
        self._running = True

        connect_with_retry = backoff.on_exception(
            backoff.expo,
            Exception,
            max_time=self.config.reconnect_max_time_seconds,
            factor=self.config.reconnect_backoff_factor,
            giveup=lambda e: not self._running,
            on_backoff=lambda details: logger.warning(
                f"WebSocket reconnecting... attempt {details['tries']}"
            ),
        )(self._connect_and_listen)

        while self._running:
            await connect_with_retry()

    async def stop(self) -> None:
        """Stop the listener and wait for in-flight events."""
        self._running = False
        if self._ws:
            await self._ws.close()
            logger.info("WebSocket connection closed")
        await self.drain()

    async def drain(self) -> None:
        """Wait for all dispatched events to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _connect_and_listen(self) -> None:
        """One connection: connect, subscribe, then read until it drops."""
        subscribed = False
        ws_url = self.config.helius_ws_url
        logger.info(f"Connecting to Solana WebSocket: {ws_url[:50]}...")

        try:
            async with connect(
                ws_url,
                ping_interval=self.config.ping_interval_seconds,
                ping_timeout=self.config.ping_timeout_seconds,
            ) as ws:
                self._ws = ws
                logger.info("WebSocket connected successfully")

                await self._subscribe()
                subscribed = True
                logger.info("Monitoring new Solana tokens...")

                await self._message_loop()
        except Exception as e:
            if self._running:
                self.error_sink.record(MONITOR_CONTEXT, e)
                if subscribed:
                    # Healthy session dropped: reconnect on a fresh budget
                    logger.warning("WebSocket dropped after subscribe, reconnecting")
                    return
            raise
        finally:
            self._ws = None

    async def _subscribe(self) -> None:
        """Subscribe to logs mentioning the filter key."""
        request = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "logsSubscribe",
            "params": [
                {"mentions": [self.config.filter_key]},
                {"commitment": self.config.commitment}
            ]
        }
        await self._ws.send(json.dumps(request))
        logger.info(f"Subscribed to logs for: {self.config.filter_key[:16]}...")

    async def _message_loop(self) -> None:
        """Main message processing loop."""
        try:
            async for message in self._ws:
                if not self._running:
                    break

                self._message_count += 1

                try:
                    data = json.loads(message)
                    self.process_message(data)
                except json.JSONDecodeError:
                    logger.warning(f"Invalid JSON received: {message[:100]}")
                except Exception as e:
                    logger.error(f"Error processing message: {e}")

            if self._running:
                raise ConnectionError("WebSocket stream ended")

        except ConnectionClosed as e:
            logger.warning(f"WebSocket connection closed: {e}")
            if self._running:
                raise  # Trigger reconnection via backoff

    def process_message(self, data: dict) -> Optional[asyncio.Task]:
        """
        Route a decoded WebSocket message.

        Returns:
            The dispatch task for a logs notification, else None
        """
        # Subscription confirmation
        if "result" in data and "id" in data:
            self._subscription_id = data["result"]
            logger.debug(f"Subscription confirmed: {data['result']}")
            return None

        if "error" in data:
            logger.error(f"Subscription error: {data['error']}")
            return None

        if data.get("method") != "logsNotification":
            return None

        value = data.get("params", {}).get("result", {}).get("value", {})
        signature = value.get("signature")
        if not signature:
            return None

        return self._spawn(value.get("logs") or [], value.get("err"), signature)

    def _spawn(self, logs: list, err, signature: str) -> asyncio.Task:
        task = asyncio.create_task(
            self.dispatcher.handle_notification(logs, err, signature),
            name=f"launch-{signature[:8]}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def is_connected(self) -> bool:
        return self._ws is not None

    @property
    def subscription_id(self) -> Optional[int]:
        return self._subscription_id

    @property
    def message_count(self) -> int:
        return self._message_count

    @property
    def in_flight(self) -> int:
        return len(self._tasks)
