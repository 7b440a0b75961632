"""WebSocket gateway — clients join rooms here and receive order notifications.

Client messages:
    {"event": "join_user_room", "user_id": "<id>"}
    {"event": "join_admin_room"}
    {"event": "leave_room", "room": "<room>"}

Every push has the shape ``{"event": <name>, "data": {...}}``.
"""

import asyncio
import json

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ordering.notify.websocket import ADMIN_ROOM, ClientConnection, ConnectionRegistry, user_room

logger = structlog.get_logger(__name__)

ws_router = APIRouter(tags=["notifications"])


def _reply(connection: ClientConnection, event: str, **data) -> None:
    connection.push({"event": event, "data": data})


def handle_client_message(registry: ConnectionRegistry, connection: ClientConnection, message: dict) -> None:
    event = message.get("event") if isinstance(message, dict) else None

    if event == "join_user_room":
        user_id = message.get("user_id")
        if not user_id:
            _reply(connection, "room_joined", success=False, message="user_id is required")
            return
        room = user_room(user_id)
        registry.join(connection, room)
        _reply(connection, "room_joined", success=True, room=room, message="Successfully joined user room")

    elif event == "join_admin_room":
        registry.join(connection, ADMIN_ROOM)
        _reply(connection, "admin_room_joined", success=True, room=ADMIN_ROOM, message="Successfully joined admin room")

    elif event == "leave_room":
        room = message.get("room")
        if not room:
            _reply(connection, "room_left", success=False, message="room is required")
            return
        registry.leave(connection, room)
        _reply(connection, "room_left", success=True, room=room, message=f"Left room: {room}")

    else:
        logger.warning("Unknown WebSocket event", connection_id=connection.id, event_name=event)
        _reply(connection, "error", message=f"Unknown event: {event}")


@ws_router.websocket("/ws")
async def notifications_socket(websocket: WebSocket):
    registry: ConnectionRegistry = websocket.app.state.connections
    await websocket.accept()

    connection = ClientConnection(websocket)
    registry.add(connection)
    sender = asyncio.create_task(connection.drain())

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                _reply(connection, "error", message="Messages must be JSON objects")
                continue
            handle_client_message(registry, connection, message)
    except WebSocketDisconnect:
        pass
    finally:
        registry.remove(connection)
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass
        except Exception as exc:
            logger.warning("WebSocket sender failed", connection_id=connection.id, error=str(exc))
