"""
Unit tests for core.relay module.
Tests connection registration/replacement, delivery, broadcast and the heartbeat sweep.
"""
import json

import pytest

from skillswap.core.relay import NotificationRelay, build_notification


class MockWebSocket:
    """Mock WebSocket for testing."""

    def __init__(self, fail: bool = False):
        self.sent_texts = []
        self.closed = None
        self.fail = fail

    async def send_text(self, text: str):
        """Mock send_text method."""
        if self.fail:
            raise Exception("Connection closed")
        self.sent_texts.append(text)

    async def close(self, code: int = 1000, reason: str = ""):
        self.closed = (code, reason)

    def messages(self):
        return [json.loads(t) for t in self.sent_texts]


pytestmark = pytest.mark.asyncio


class TestRegistration:
    """Tests for registering and unregistering sockets."""

    async def test_register_tracks_user(self):
        relay = NotificationRelay()
        ws = MockWebSocket()
        await relay.register(1, ws)
        assert relay.is_connected(1)
        assert len(relay) == 1

    async def test_new_connection_replaces_and_closes_old(self):
        """One socket per user: the older one is closed with 1000."""
        relay = NotificationRelay()
        old, new = MockWebSocket(), MockWebSocket()
        await relay.register(1, old)
        await relay.register(1, new)

        assert len(relay) == 1
        assert old.closed == (1000, "New connection established")
        assert new.closed is None

        await relay.send_to(1, {"type": "x"})
        assert new.sent_texts and not old.sent_texts

    async def test_unregister_ignores_stale_socket(self):
        """A replaced socket disconnecting must not drop the newer one."""
        relay = NotificationRelay()
        old, new = MockWebSocket(), MockWebSocket()
        await relay.register(1, old)
        await relay.register(1, new)

        await relay.unregister(1, old)
        assert relay.is_connected(1)

        await relay.unregister(1, new)
        assert not relay.is_connected(1)

    async def test_disconnect_closes_with_code(self):
        relay = NotificationRelay()
        ws = MockWebSocket()
        await relay.register(5, ws)

        assert await relay.disconnect(5, 1008, "Account banned") is True
        assert ws.closed == (1008, "Account banned")
        assert not relay.is_connected(5)
        assert await relay.disconnect(5) is False


class TestDelivery:
    """Tests for targeted sends and broadcast."""

    async def test_send_to_unknown_user_is_noop(self):
        relay = NotificationRelay()
        assert await relay.send_to(99, {"type": "x"}) is False

    async def test_notify_builds_notification_event(self):
        relay = NotificationRelay()
        ws = MockWebSocket()
        await relay.register(2, ws)

        assert await relay.notify(2, "success", "Done", "It worked", details={"swapId": 3})
        assert ws.messages() == [{
            "type": "notification",
            "notificationType": "success",
            "title": "Done",
            "message": "It worked",
            "details": {"swapId": 3},
        }]

    async def test_send_failure_evicts_connection(self):
        """A broken socket is dropped silently instead of raising."""
        relay = NotificationRelay()
        await relay.register(3, MockWebSocket(fail=True))

        assert await relay.send_to(3, {"type": "x"}) is False
        assert not relay.is_connected(3)

    async def test_broadcast_counts_successful_deliveries(self):
        relay = NotificationRelay()
        good1, good2, bad = MockWebSocket(), MockWebSocket(), MockWebSocket(fail=True)
        await relay.register(1, good1)
        await relay.register(2, good2)
        await relay.register(3, bad)

        delivered = await relay.broadcast({"type": "notification", "title": "Hi"})
        assert delivered == 2
        assert len(good1.sent_texts) == 1
        assert len(good2.sent_texts) == 1
        assert len(relay) == 2

    async def test_broadcast_without_connections(self):
        assert await NotificationRelay().broadcast({"type": "x"}) == 0


class TestHeartbeat:
    """Tests for the sweep cycle."""

    async def test_sweep_pings_live_connections(self):
        relay = NotificationRelay()
        ws = MockWebSocket()
        await relay.register(1, ws)

        assert await relay.sweep() == 0
        msgs = ws.messages()
        assert msgs[-1]["type"] == "ping"
        assert isinstance(msgs[-1]["timestamp"], int)
        assert relay.is_connected(1)

    async def test_silent_connection_evicted_on_next_sweep(self):
        relay = NotificationRelay()
        ws = MockWebSocket()
        await relay.register(1, ws)

        await relay.sweep()  # marks it pending
        assert await relay.sweep() == 1  # no frame since: evicted
        assert ws.closed == (1001, "Heartbeat timeout")
        assert not relay.is_connected(1)

    async def test_mark_alive_keeps_connection(self):
        relay = NotificationRelay()
        ws = MockWebSocket()
        await relay.register(1, ws)

        await relay.sweep()
        relay.mark_alive(1, ws)
        assert await relay.sweep() == 0
        assert relay.is_connected(1)

    async def test_mark_alive_ignores_replaced_socket(self):
        relay = NotificationRelay()
        old, new = MockWebSocket(), MockWebSocket()
        await relay.register(1, old)
        await relay.register(1, new)

        await relay.sweep()
        relay.mark_alive(1, old)
        assert await relay.sweep() == 1
        assert new.closed == (1001, "Heartbeat timeout")

    async def test_close_all(self):
        relay = NotificationRelay()
        a, b = MockWebSocket(), MockWebSocket()
        await relay.register(1, a)
        await relay.register(2, b)

        await relay.close_all()
        assert len(relay) == 0
        assert a.closed[0] == 1001 and b.closed[0] == 1001


async def test_unknown_notification_type_falls_back_to_info():
    event = build_notification("celebrate", "T", "M")
    assert event["notificationType"] == "info"
    assert "details" not in event
