"""Tests for the WebSocket connection registry and the fake notifier."""

import asyncio

import pytest
from ordering.api.websocket import handle_client_message
from ordering.notify.fake import FakeNotifier
from ordering.notify.websocket import (
    ADMIN_ROOM,
    ClientConnection,
    ConnectionRegistry,
    WebSocketNotifier,
    user_room,
)


@pytest.fixture()
def loop():
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture()
def registry():
    return ConnectionRegistry()


def _flush(loop):
    loop.run_until_complete(asyncio.sleep(0))


class TestConnectionRegistry:
    def test_join_and_leave(self, loop, registry):
        connection = ClientConnection(websocket=None, loop=loop)
        registry.add(connection)

        registry.join(connection, user_room("cust-001"))
        assert registry.is_user_online("cust-001")

        registry.leave(connection, user_room("cust-001"))
        assert not registry.is_user_online("cust-001")
        assert connection.rooms == set()

    def test_remove_drops_memberships(self, loop, registry):
        connection = ClientConnection(websocket=None, loop=loop)
        registry.add(connection)
        registry.join(connection, ADMIN_ROOM)

        registry.remove(connection)

        assert registry.members(ADMIN_ROOM) == []
        assert registry.connection_count == 0

    def test_publish_only_reaches_room_members(self, loop, registry):
        admin = ClientConnection(websocket=None, loop=loop)
        customer = ClientConnection(websocket=None, loop=loop)
        for connection in (admin, customer):
            registry.add(connection)
        registry.join(admin, ADMIN_ROOM)
        registry.join(customer, user_room("cust-001"))

        delivered = registry.publish(ADMIN_ROOM, "new_order_notification", {"order_id": "ord-1"})
        _flush(loop)

        assert delivered == 1
        message = admin.outbox.get_nowait()
        assert message["event"] == "new_order_notification"
        assert message["data"]["order_id"] == "ord-1"
        assert "timestamp" in message["data"]
        assert customer.outbox.empty()

    def test_publish_to_empty_room(self, registry):
        assert registry.publish(user_room("nobody"), "order_status_update", {}) == 0

    def test_close_signals_every_connection(self, loop, registry):
        connection = ClientConnection(websocket=None, loop=loop)
        registry.add(connection)

        registry.close()
        _flush(loop)

        assert connection.outbox.get_nowait() is None
        assert registry.connection_count == 0


class TestWebSocketNotifier:
    def test_send_to_user_reports_delivery_count(self, loop, registry):
        connection = ClientConnection(websocket=None, loop=loop)
        registry.add(connection)
        registry.join(connection, user_room("cust-001"))

        result = WebSocketNotifier(registry).send_to_user("cust-001", "order_status_update", {"status": "shipped"})

        assert result == {"status": "sent", "delivered": 1}

    def test_send_to_admins_without_listeners(self, registry):
        result = WebSocketNotifier(registry).send_to_admins("new_order_notification", {})
        assert result == {"status": "sent", "delivered": 0}


class TestFakeNotifier:
    def test_records_notifications(self):
        notifier = FakeNotifier()
        notifier.send_to_user("cust-001", "order_status_update", {"status": "confirmed"})
        notifier.send_to_admins("new_order_notification", {"order_id": "ord-1"})

        assert len(notifier.events_for_user("cust-001")) == 1
        assert notifier.events_for_admins()[0]["event"] == "new_order_notification"

    def test_configured_failure(self):
        notifier = FakeNotifier()
        notifier.configure(should_succeed=False, failure_reason="socket closed")

        result = notifier.send_to_admins("new_order_notification", {})

        assert result["status"] == "failed"
        assert result["error"] == "socket closed"


class TestClientMessages:
    def test_unknown_event_gets_error_reply(self, loop, registry):
        connection = ClientConnection(websocket=None, loop=loop)
        registry.add(connection)

        handle_client_message(registry, connection, {"event": "subscribe_everything"})
        _flush(loop)

        reply = connection.outbox.get_nowait()
        assert reply["event"] == "error"
        assert reply["data"]["message"] == "Unknown event: subscribe_everything"

    def test_join_admin_room(self, loop, registry):
        connection = ClientConnection(websocket=None, loop=loop)
        registry.add(connection)

        handle_client_message(registry, connection, {"event": "join_admin_room"})
        _flush(loop)

        assert connection.outbox.get_nowait()["event"] == "admin_room_joined"
        assert registry.members(ADMIN_ROOM) == [connection]
