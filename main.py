#!/usr/bin/env python3
"""
Solana Rug Monitor

Watches Raydium for new liquidity pools and records each launch:
- Ingestion: logsSubscribe on the Raydium fee account
- Parsing: creator and base/quote legs from the pool-creation transaction
- Risk: throttled RugCheck report for the base mint
- Storage: JSON records file plus an append-only error log

Usage:
    python main.py
"""

import asyncio
import logging
import os
import signal
from typing import Optional

import aiohttp
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Configure logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("rug-monitor")


class RugMonitorEngine:
    """
    Wires the capture pipeline together.

    One aiohttp session is shared by the RPC and RugCheck clients; one
    Throttle instance is shared by every RugCheck lookup in the process.
    """

    def __init__(self, config=None):
        from ingestion.config import MonitorConfig

        self.config = config or MonitorConfig()
        self.config.validate()

        self.http_session: Optional[aiohttp.ClientSession] = None
        self.error_sink = None
        self.store = None
        self.dispatcher = None
        self.listener = None

    async def setup(self) -> None:
        """Create the HTTP session and pipeline components."""
        from ingestion import (
            LaunchEventDispatcher,
            RetryPolicy,
            SolanaLogsListener,
            SolanaRpcClient,
            TransactionFetchError,
            TransactionParser,
        )
        from logic.risk import RugCheckClient, Throttle
        from storage import ErrorSink, JsonRecordStore

        self.http_session = aiohttp.ClientSession()

        self.error_sink = ErrorSink(self.config.error_log_path)
        self.store = JsonRecordStore(self.config.data_path)

        rpc = SolanaRpcClient(
            self.http_session,
            self.config,
            retry_policy=RetryPolicy(
                max_tries=self.config.fetch_max_tries,
                retry_on=(TransactionFetchError,),
            ),
        )
        parser = TransactionParser(rpc, self.config)

        throttle = Throttle(self.config.throttle_seconds)
        rugcheck = RugCheckClient(self.http_session, throttle, self.config)

        self.dispatcher = LaunchEventDispatcher(parser, self.store, rugcheck, self.error_sink)
        self.listener = SolanaLogsListener(self.dispatcher, self.error_sink, self.config)

        logger.info(f"Records file: {self.config.data_path}")
        logger.info(f"Error log: {self.config.error_log_path}")

    async def run(self) -> None:
        """Run until the listener gives up or the task is cancelled."""
        try:
            await self.listener.start()
        except asyncio.CancelledError:
            logger.info("Shutdown requested...")
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        """Graceful shutdown."""
        logger.info("Shutting down...")

        if self.listener:
            await self.listener.stop()
        if self.http_session:
            await self.http_session.close()

        if self.dispatcher:
            logger.info(
                f"Handled {self.dispatcher.handled_count} launches "
                f"({self.dispatcher.failed_count} failed)"
            )
        logger.info("Shutdown complete")


def main():
    """Main entry point."""
    engine = RugMonitorEngine()

    async def run():
        await engine.setup()

        task = asyncio.current_task()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, task.cancel)
            except NotImplementedError:
                pass

        await engine.run()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
