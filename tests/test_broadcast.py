# =============================================================================
# tests/test_broadcast.py - Channel Broadcasting Tests
# =============================================================================
# This module contains tests for:
# - TestAdapter in-memory pub/sub
# - TestPrintAdapter stdout logging
# - The /cable WebSocket endpoint
# =============================================================================

import threading

import pytest

from app.exceptions import ConfigurationError
from app.websocket import TestAdapter, TestPrintAdapter, build_subscription_adapter


# =============================================================================
# TestAdapter Tests
# =============================================================================

class TestInMemoryAdapter:
    """Test the in-memory subscription adapter."""

    def test_delivers_to_subscribers(self):
        adapter = TestAdapter()
        received = []
        adapter.subscribe("chat", received.append)

        adapter.broadcast("chat", {"body": "hi"})

        assert received == [{"body": "hi"}]

    def test_only_delivers_to_channel(self):
        adapter = TestAdapter()
        received = []
        adapter.subscribe("chat", received.append)

        adapter.broadcast("other", "ignored")

        assert received == []

    def test_records_broadcasts(self):
        adapter = TestAdapter()

        adapter.broadcast("chat", "one")
        adapter.broadcast("chat", "two")

        assert adapter.broadcasts("chat") == ["one", "two"]
        assert adapter.broadcasts("other") == []

    def test_clear_messages(self):
        adapter = TestAdapter()
        adapter.broadcast("chat", "one")
        adapter.broadcast("news", "two")

        adapter.clear_messages("chat")

        assert adapter.broadcasts("chat") == []
        assert adapter.broadcasts("news") == ["two"]

    def test_unsubscribe(self):
        adapter = TestAdapter()
        received = []
        adapter.subscribe("chat", received.append)

        adapter.unsubscribe("chat", received.append)
        adapter.broadcast("chat", "hi")

        assert received == []
        assert adapter.subscriber_count("chat") == 0

    def test_success_callback(self):
        adapter = TestAdapter()
        confirmed = []

        adapter.subscribe("chat", lambda payload: None, success_callback=lambda: confirmed.append(True))

        assert confirmed == [True]

    def test_shutdown_drops_subscribers(self):
        adapter = TestAdapter()
        received = []
        adapter.subscribe("chat", received.append)

        adapter.shutdown()
        adapter.broadcast("chat", "hi")

        assert received == []


# =============================================================================
# TestPrintAdapter Tests
# =============================================================================

class TestPrintingAdapter:
    """Test the adapter that prints broadcasts."""

    def test_prints_channel_and_payload(self, capsys):
        adapter = TestPrintAdapter()

        adapter.broadcast("chat:1", {"body": "hi"})

        out = capsys.readouterr().out
        assert out == "[CABLE BROADCAST] channel=chat:1 data={'body': 'hi'}\n"

    def test_prints_before_delivery(self, capsys):
        """Subscribers already see the log line when they receive the payload."""
        adapter = TestPrintAdapter()
        seen_output = []
        adapter.subscribe("chat", lambda payload: seen_output.append(capsys.readouterr().out))

        adapter.broadcast("chat", "hello")

        assert seen_output == ["[CABLE BROADCAST] channel=chat data='hello'\n"]

    def test_keeps_test_adapter_semantics(self):
        adapter = TestPrintAdapter()
        received = []
        adapter.subscribe("chat", received.append)

        adapter.broadcast("chat", "hello")

        assert received == ["hello"]
        assert adapter.broadcasts("chat") == ["hello"]


class TestBuildSubscriptionAdapter:
    """Test build_subscription_adapter lookup."""

    def test_builds_named_adapters(self):
        assert type(build_subscription_adapter("test")) is TestAdapter
        assert type(build_subscription_adapter("test_print")) is TestPrintAdapter

    def test_unknown_adapter(self):
        with pytest.raises(ConfigurationError):
            build_subscription_adapter("redis")


# =============================================================================
# /cable Endpoint Tests
# =============================================================================

class TestCableEndpoint:
    """Test WebSocket subscriptions end to end."""

    def test_subscribe_and_receive(self, client, harness):
        with client.websocket_connect("/cable") as ws:
            assert ws.receive_json() == {"type": "welcome"}

            ws.send_json({"command": "subscribe", "channel": "chat"})
            assert ws.receive_json() == {"type": "confirm_subscription", "channel": "chat"}

            harness.cable.broadcast("chat", {"body": "hi"})

            assert ws.receive_json() == {"channel": "chat", "message": {"body": "hi"}}

    def test_broadcast_from_another_thread(self, client, harness):
        with client.websocket_connect("/cable") as ws:
            ws.receive_json()
            ws.send_json({"command": "subscribe", "channel": "jobs"})
            ws.receive_json()

            worker = threading.Thread(target=harness.cable.broadcast, args=("jobs", "from job"))
            worker.start()
            worker.join()

            assert ws.receive_json() == {"channel": "jobs", "message": "from job"}

    def test_unknown_command(self, client):
        with client.websocket_connect("/cable") as ws:
            ws.receive_json()
            ws.send_text("not json")

            assert ws.receive_json() == {"type": "error", "error": "Invalid JSON"}

    def test_disconnect_unsubscribes(self, client, harness):
        with client.websocket_connect("/cable") as ws:
            ws.receive_json()
            ws.send_json({"command": "subscribe", "channel": "chat"})
            ws.receive_json()
            assert harness.cable.subscriber_count("chat") == 1

        assert harness.cable.subscriber_count("chat") == 0

    def test_status(self, client):
        response = client.get("/cable/status")

        assert response.status_code == 200
        assert response.json()["adapter"] == "TestPrintAdapter"
