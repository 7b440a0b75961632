"""WebSocket notification sink — connection registry, rooms and the notifier.

Each connected client is a ClientConnection with its own outbox queue. The
WebSocket endpoint owns a single task per connection that drains the outbox
onto the socket, so pushes from any thread only ever enqueue messages and
never write to the socket directly.

Rooms:
    ``user:<user_id>``  private notifications for one customer
    ``admin``           notifications for every admin dashboard
"""

import asyncio
import threading
from datetime import UTC, datetime
from uuid import uuid4

import structlog

from ordering.notify.port import NotificationPort

logger = structlog.get_logger(__name__)

ADMIN_ROOM = "admin"


def user_room(user_id) -> str:
    return f"user:{user_id}"


class ClientConnection:
    """One connected WebSocket client."""

    def __init__(self, websocket, loop: asyncio.AbstractEventLoop | None = None):
        self.id = uuid4().hex
        self.websocket = websocket
        self.rooms: set[str] = set()
        self.outbox: asyncio.Queue = asyncio.Queue()
        self._loop = loop or asyncio.get_running_loop()

    def push(self, message: dict | None) -> bool:
        """Enqueue ``message`` for delivery. Safe to call from any thread."""
        try:
            self._loop.call_soon_threadsafe(self.outbox.put_nowait, message)
        except RuntimeError:
            # Event loop already closed; the client is gone
            return False
        return True

    async def drain(self):
        """Send queued messages until the connection is closed."""
        while True:
            message = await self.outbox.get()
            if message is None:
                return
            await self.websocket.send_json(message)

    def close(self):
        self.push(None)


class ConnectionRegistry:
    """Tracks live connections and their room memberships."""

    def __init__(self):
        self._lock = threading.Lock()
        self._connections: dict[str, ClientConnection] = {}
        self._rooms: dict[str, set[str]] = {}

    def add(self, connection: ClientConnection) -> None:
        with self._lock:
            self._connections[connection.id] = connection
        logger.info("Client connected", connection_id=connection.id)

    def remove(self, connection: ClientConnection) -> None:
        with self._lock:
            self._connections.pop(connection.id, None)
            for room in connection.rooms:
                members = self._rooms.get(room)
                if members is not None:
                    members.discard(connection.id)
                    if not members:
                        del self._rooms[room]
            connection.rooms.clear()
        logger.info("Client disconnected", connection_id=connection.id)

    def join(self, connection: ClientConnection, room: str) -> None:
        with self._lock:
            self._rooms.setdefault(room, set()).add(connection.id)
            connection.rooms.add(room)
        logger.info("Client joined room", connection_id=connection.id, room=room)

    def leave(self, connection: ClientConnection, room: str) -> None:
        with self._lock:
            members = self._rooms.get(room)
            if members is not None:
                members.discard(connection.id)
                if not members:
                    del self._rooms[room]
            connection.rooms.discard(room)
        logger.info("Client left room", connection_id=connection.id, room=room)

    def members(self, room: str) -> list[ClientConnection]:
        with self._lock:
            return [self._connections[cid] for cid in self._rooms.get(room, ()) if cid in self._connections]

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def is_user_online(self, user_id) -> bool:
        return bool(self.members(user_room(user_id)))

    def publish(self, room: str, event: str, data: dict) -> int:
        """Push ``{"event", "data"}`` to every member of ``room``.

        A ``timestamp`` is added to the data. Returns the number of
        connections the message was queued for.
        """
        message = {"event": event, "data": {**data, "timestamp": datetime.now(UTC).isoformat()}}
        return sum(1 for connection in self.members(room) if connection.push(message))

    def close(self) -> None:
        with self._lock:
            connections = list(self._connections.values())
            self._connections.clear()
            self._rooms.clear()
        for connection in connections:
            connection.close()


class WebSocketNotifier(NotificationPort):
    """Delivers notifications to clients connected through the registry."""

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    def send_to_user(self, user_id: str, event: str, payload: dict) -> dict:
        delivered = self.registry.publish(user_room(user_id), event, payload)
        logger.info("Sent notification to user", user_id=str(user_id), event_name=event, delivered=delivered)
        return {"status": "sent", "delivered": delivered}

    def send_to_admins(self, event: str, payload: dict) -> dict:
        delivered = self.registry.publish(ADMIN_ROOM, event, payload)
        logger.info("Sent notification to admins", event_name=event, delivered=delivered)
        return {"status": "sent", "delivered": delivered}
