import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from familyhub.core.config import GetSettings, Settings
from familyhub.core.errors import AuthenticationError
from familyhub.db import GetDb
from familyhub.modules.auth.deps import (
    TOKEN_TYPE_ACCESS,
    DecodeToken,
    ExtractBearerToken,
    RequireMember,
    UserContext,
)
from familyhub.modules.chat.realtime import PublishChatMessage, connection_manager
from familyhub.modules.chat.schemas import ChatMessageCreate, ChatMessageOut
from familyhub.modules.chat.service import BuildChatMessageOut, ListRecentMessages, SendMessage

router = APIRouter(prefix="/api/chat", tags=["chat"])
realtime_router = APIRouter(tags=["realtime"])
logger = logging.getLogger("familyhub.realtime")


@router.get("", response_model=list[ChatMessageOut])
def GetMessages(
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireMember()),
    settings: Settings = Depends(GetSettings),
) -> list[ChatMessageOut]:
    messages = ListRecentMessages(db, user, limit=settings.ChatHistoryLimit)
    return [BuildChatMessageOut(message) for message in messages]


@router.post("", response_model=ChatMessageOut, status_code=status.HTTP_201_CREATED)
def PostMessage(
    payload: ChatMessageCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireMember()),
) -> ChatMessageOut:
    message = SendMessage(db, user, payload.content, payload.type, payload.attachments)
    result = BuildChatMessageOut(message)
    background_tasks.add_task(PublishChatMessage, message.FamilyId, result.model_dump(mode="json"))
    return result


def _SocketIdentity(websocket: WebSocket, settings: Settings) -> UserContext:
    token = websocket.query_params.get("token")
    if not token:
        token = ExtractBearerToken(websocket.headers.get("Authorization"))
    return DecodeToken(token, settings.JwtSecret, TOKEN_TYPE_ACCESS)


@realtime_router.websocket("/ws")
async def FamilySocket(websocket: WebSocket, settings: Settings = Depends(GetSettings)) -> None:
    try:
        identity = _SocketIdentity(websocket, settings)
    except AuthenticationError as exc:
        logger.warning("socket rejected: %s", exc.message)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    family_id = identity.FamilyId
    await connection_manager.connect(family_id, websocket)
    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                continue
            if isinstance(message, dict) and message.get("type") == "ping":
                await connection_manager.send_personal_message({"type": "pong"}, websocket)
    except WebSocketDisconnect:
        pass
    finally:
        await connection_manager.disconnect(family_id, websocket)
