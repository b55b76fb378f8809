"""Tests for the Solana logs WebSocket listener."""

import asyncio
import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from ingestion.config import MonitorConfig, RAYDIUM_FEE_ACCOUNT
from ingestion.listener import SolanaLogsListener, MONITOR_CONTEXT


def notification(signature: str, err=None, logs=None) -> dict:
    return {
        "jsonrpc": "2.0",
        "method": "logsNotification",
        "params": {
            "result": {
                "context": {"slot": 5208469},
                "value": {
                    "signature": signature,
                    "err": err,
                    "logs": logs if logs is not None else ["Program log: initialize2"],
                },
            },
            "subscription": 24040,
        },
    }


class FakeWebSocket:
    """Async-iterable websocket yielding canned messages."""

    def __init__(self, messages, on_exhausted=None):
        self._messages = list(messages)
        self._on_exhausted = on_exhausted
        self.sent = []

    async def send(self, message: str) -> None:
        self.sent.append(json.loads(message))

    async def close(self) -> None:
        pass

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._messages:
            if self._on_exhausted is not None:
                await self._on_exhausted()
            raise StopAsyncIteration
        return self._messages.pop(0)


class FakeConnect:
    """Stand-in for the websockets connect() context manager."""

    def __init__(self, ws: FakeWebSocket):
        self.ws = ws

    async def __aenter__(self):
        return self.ws

    async def __aexit__(self, exc_type, exc, tb):
        return False


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def dispatcher():
    dispatcher = MagicMock()
    dispatcher.handle_notification = AsyncMock(return_value=None)
    return dispatcher


@pytest.fixture
def error_sink():
    return MagicMock()


@pytest.fixture
def config():
    return MonitorConfig(reconnect_max_time_seconds=0.0)


@pytest.fixture
def listener(dispatcher, error_sink, config):
    return SolanaLogsListener(dispatcher, error_sink, config)


# ============================================================================
# Unit Tests - message routing
# ============================================================================

class TestProcessMessage:
    """Tests for SolanaLogsListener.process_message."""

    @pytest.mark.asyncio
    async def test_notification_spawns_dispatch(self, listener, dispatcher):
        task = listener.process_message(notification("SIG1", logs=["a", "b"]))

        assert task is not None
        await task
        dispatcher.handle_notification.assert_awaited_once_with(["a", "b"], None, "SIG1")

    @pytest.mark.asyncio
    async def test_err_is_passed_through(self, listener, dispatcher):
        """Failed transactions are filtered by the dispatcher."""
        err = {"InstructionError": [0, "Custom"]}
        await listener.process_message(notification("SIG1", err=err))

        dispatcher.handle_notification.assert_awaited_once()
        assert dispatcher.handle_notification.call_args.args[1] == err

    @pytest.mark.asyncio
    async def test_subscription_confirmation(self, listener, dispatcher):
        task = listener.process_message({"jsonrpc": "2.0", "result": 24040, "id": 1})

        assert task is None
        assert listener.subscription_id == 24040
        dispatcher.handle_notification.assert_not_called()

    @pytest.mark.asyncio
    async def test_unrelated_messages_ignored(self, listener, dispatcher):
        assert listener.process_message({"method": "slotNotification", "params": {}}) is None
        assert listener.process_message({"error": {"code": -32602}, "id": 1}) is None
        assert listener.process_message(notification("")) is None

        dispatcher.handle_notification.assert_not_called()

    @pytest.mark.asyncio
    async def test_slow_event_does_not_block_next(self, listener, dispatcher):
        """Each notification runs in its own task."""
        release = asyncio.Event()
        finished = []

        async def handle(logs, err, signature):
            if signature == "SLOW":
                await release.wait()
            finished.append(signature)

        dispatcher.handle_notification.side_effect = handle

        listener.process_message(notification("SLOW"))
        fast = listener.process_message(notification("FAST"))
        await fast
        await asyncio.sleep(0)

        assert finished == ["FAST"]
        assert listener.in_flight == 1

        release.set()
        await listener.drain()
        assert finished == ["FAST", "SLOW"]
        assert listener.in_flight == 0


# ============================================================================
# Unit Tests - connection handling
# ============================================================================

class TestConnection:
    """Tests for subscription and message loop."""

    @pytest.mark.asyncio
    async def test_subscribe_request(self, listener):
        listener._ws = FakeWebSocket([])

        await listener._subscribe()

        request = listener._ws.sent[0]
        assert request["method"] == "logsSubscribe"
        assert request["params"] == [
            {"mentions": [RAYDIUM_FEE_ACCOUNT]},
            {"commitment": "confirmed"},
        ]

    @pytest.mark.asyncio
    async def test_message_loop_dispatches_and_survives_bad_json(self, listener, dispatcher):
        listener._ws = FakeWebSocket([
            json.dumps({"jsonrpc": "2.0", "result": 7, "id": 1}),
            "not json",
            json.dumps(notification("SIG1")),
            json.dumps(notification("SIG2")),
        ])
        listener._running = True

        with pytest.raises(ConnectionError):
            await listener._message_loop()
        await listener.drain()

        assert listener.message_count == 4
        assert dispatcher.handle_notification.await_count == 2

    @pytest.mark.asyncio
    async def test_connect_failure_recorded(self, listener, error_sink):
        with patch("ingestion.listener.connect", side_effect=OSError("connection refused")):
            with pytest.raises(OSError):
                await listener.start()

        error_sink.record.assert_called_once()
        assert error_sink.record.call_args.args[0] == MONITOR_CONTEXT

    @pytest.mark.asyncio
    async def test_stop_without_connection(self, listener):
        await listener.stop()

        assert listener.is_connected is False

    @pytest.mark.asyncio
    async def test_drop_after_long_uptime_keeps_reconnecting(self, dispatcher, error_sink):
        """Time spent connected does not count against the reconnect budget."""
        config = MonitorConfig(reconnect_max_time_seconds=0.2, reconnect_backoff_factor=0.001)
        listener = SolanaLogsListener(dispatcher, error_sink, config)

        async def stay_up():
            await asyncio.sleep(0.3)

        async def shut_down():
            listener._running = False

        attempts = [
            FakeConnect(FakeWebSocket([], on_exhausted=stay_up)),
            OSError("reconnect refused once"),
            FakeConnect(FakeWebSocket([json.dumps(notification("SIG1"))], on_exhausted=shut_down)),
        ]

        with patch("ingestion.listener.connect", side_effect=attempts) as connect:
            await listener.start()
        await listener.drain()

        assert connect.call_count == 3
        assert error_sink.record.call_count == 2
        assert isinstance(error_sink.record.call_args_list[0].args[1], ConnectionError)
        assert isinstance(error_sink.record.call_args_list[1].args[1], OSError)
        dispatcher.handle_notification.assert_awaited_once_with(
            ["Program log: initialize2"], None, "SIG1"
        )
