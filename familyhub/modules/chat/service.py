import logging

from sqlalchemy.orm import Session, selectinload

from familyhub.core.errors import ValidationError
from familyhub.modules.auth.deps import EnsureMember, UserContext
from familyhub.modules.chat.models import MESSAGE_TYPES, ChatMessage
from familyhub.modules.chat.schemas import ChatAuthorOut, ChatMessageOut

logger = logging.getLogger("familyhub.chat")


def ListRecentMessages(db: Session, user: UserContext, limit: int = 50) -> list[ChatMessage]:
    """Newest ``limit`` messages of the family, returned oldest first."""
    rows = (
        db.query(ChatMessage)
        .options(selectinload(ChatMessage.User))
        .filter(ChatMessage.FamilyId == user.FamilyId)
        .order_by(ChatMessage.CreatedAt.desc(), ChatMessage.Id.desc())
        .limit(limit)
        .all()
    )
    rows.reverse()
    return rows


def SendMessage(
    db: Session,
    user: UserContext,
    content: str | None,
    message_type: str | None = None,
    attachments: list[str] | None = None,
) -> ChatMessage:
    user_id = EnsureMember(user)
    content = (content or "").strip()
    attachments = [item for item in (attachments or []) if item]
    if not content and not attachments:
        raise ValidationError("Message content required")
    message_type = (message_type or "text").strip().lower()
    if message_type not in MESSAGE_TYPES:
        raise ValidationError("Unknown message type")

    message = ChatMessage(
        FamilyId=user.FamilyId,
        UserId=user_id,
        Content=content,
        Type=message_type,
        Attachments=attachments,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    logger.info("chat message sent family_id=%s message_id=%s", user.FamilyId, message.Id)
    return message


def BuildChatMessageOut(message: ChatMessage) -> ChatMessageOut:
    author = message.User
    attachments = message.Attachments
    return ChatMessageOut(
        id=message.Id,
        familyId=message.FamilyId,
        userId=message.UserId,
        content=message.Content or "",
        type=message.Type,
        attachments=attachments if attachments is not None else [],
        createdAt=message.CreatedAt,
        user=ChatAuthorOut(
            id=author.Id,
            name=author.Name,
            role=author.Role,
            avatar=author.Avatar,
        )
        if author
        else None,
    )
