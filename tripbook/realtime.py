"""
Best-effort realtime notifications over WebSockets.

Clients join named rooms (``user:<id>``, ``contact:<id>``, ``booking:<id>``)
and receive ``{"event": ..., "data": ...}`` frames. Delivery is not durable:
a socket that fails to receive is dropped and the failure is only logged.
"""
import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


def user_room(user_id) -> str:
    return f"user:{user_id}"


def contact_room(contact_id) -> str:
    return f"contact:{contact_id}"


def booking_room(booking_id) -> str:
    return f"booking:{booking_id}"


class ConnectionManager:
    """Keeps track of connected sockets per room"""

    def __init__(self):
        self.rooms: Dict[str, Set[WebSocket]] = defaultdict(set)

    def join(self, room: str, websocket: WebSocket) -> None:
        self.rooms[room].add(websocket)
        logger.info(f"✅ Socket joined room {room}")

    def leave(self, room: str, websocket: WebSocket) -> None:
        members = self.rooms.get(room)
        if not members:
            return
        members.discard(websocket)
        if not members:
            del self.rooms[room]

    def disconnect(self, websocket: WebSocket) -> None:
        for room in list(self.rooms):
            self.leave(room, websocket)

    async def notify(self, room: str, event: str, payload: Dict[str, Any]) -> int:
        return await self.notify_many([room], event, payload)

    async def notify_many(self, rooms: Iterable[str], event: str, payload: Dict[str, Any]) -> int:
        """Send one event to every socket in any of the rooms, once per socket."""
        targets: Set[WebSocket] = set()
        for room in rooms:
            targets.update(self.rooms.get(room, ()))

        delivered = 0
        for websocket in targets:
            try:
                await websocket.send_json({"event": event, "data": payload})
                delivered += 1
            except Exception as e:
                logger.error(f"❌ Failed to push {event}: {e}")
                self.disconnect(websocket)

        logger.info(f"📤 {event} delivered to {delivered} socket(s)")
        return delivered


# Global instance
notifier = ConnectionManager()
