import json
import logging

from fastapi import WebSocket

logger = logging.getLogger("familyhub.realtime")

EVENT_MESSAGE = "message"


class FamilyConnectionManager:
    """Live websocket sessions grouped into one room per family."""

    def __init__(self):
        self.rooms: dict[int, set[WebSocket]] = {}

    async def connect(self, family_id: int, websocket: WebSocket) -> None:
        await websocket.accept()
        self.rooms.setdefault(family_id, set()).add(websocket)
        logger.info("socket joined family_id=%s sessions=%s", family_id, self.room_size(family_id))

    async def disconnect(self, family_id: int, websocket: WebSocket) -> None:
        room = self.rooms.get(family_id)
        if room is None:
            return
        room.discard(websocket)
        if not room:
            self.rooms.pop(family_id, None)
        logger.info("socket left family_id=%s", family_id)

    def room_size(self, family_id: int) -> int:
        return len(self.rooms.get(family_id, ()))

    async def send_personal_message(self, message: dict, websocket: WebSocket) -> None:
        await websocket.send_text(json.dumps(message, default=str))

    async def broadcast(self, family_id: int, event: str, data: dict) -> int:
        connections = list(self.rooms.get(family_id, ()))
        if not connections:
            return 0

        message = json.dumps({"event": event, "data": data}, default=str)
        delivered = 0
        for connection in connections:
            try:
                await connection.send_text(message)
                delivered += 1
            except Exception:
                logger.warning("dropping broken socket family_id=%s", family_id, exc_info=True)
                await self.disconnect(family_id, connection)
        return delivered


connection_manager = FamilyConnectionManager()


async def PublishChatMessage(family_id: int, message: dict) -> None:
    delivered = await connection_manager.broadcast(family_id, EVENT_MESSAGE, message)
    logger.debug("chat message published family_id=%s delivered=%s", family_id, delivered)
