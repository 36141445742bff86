from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from ..auth import CurrentUser, decode_token
from ..database import SessionLocal
from ..models import Booking, Contact
from ..realtime import notifier, user_room

router = APIRouter(tags=["Realtime"])


def can_join(db: Session, user: CurrentUser, room: str) -> bool:
    """Users may join their own room and rooms of threads or bookings they take part in"""
    kind, _, raw_id = (room or "").partition(":")
    if not raw_id.isdigit():
        return False
    entity_id = int(raw_id)

    if kind == "user":
        return entity_id == user.id
    if kind == "contact":
        contact = db.get(Contact, entity_id)
        return contact is not None and contact.is_participant(user.id)
    if kind == "booking":
        booking = db.get(Booking, entity_id)
        return booking is not None and user.id in (booking.user_id, booking.admin_id)
    return False


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, token: str = Query(...)):
    """Realtime events; send {"action": "join"|"leave", "room": "..."}"""
    user = decode_token(token)
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    notifier.join(user_room(user.id), websocket)
    try:
        while True:
            data = await websocket.receive_json()
            action = data.get("action") if isinstance(data, dict) else None
            room = data.get("room") if isinstance(data, dict) else None

            if action == "join":
                # One short session per check; the socket holds no connection
                with SessionLocal() as db:
                    allowed = can_join(db, user, room)
                if allowed:
                    notifier.join(room, websocket)
                    await websocket.send_json({"event": "joined", "data": {"room": room}})
                else:
                    await websocket.send_json({"event": "error", "data": {"room": room, "message": "Not authorized"}})
            elif action == "leave":
                notifier.leave(room, websocket)
                await websocket.send_json({"event": "left", "data": {"room": room}})
            else:
                await websocket.send_json({"event": "error", "data": {"message": "Unknown action"}})
    except WebSocketDisconnect:
        pass
    finally:
        notifier.disconnect(websocket)
