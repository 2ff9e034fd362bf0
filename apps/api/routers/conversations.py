"""
Conversations API Router

Coach/athlete messaging. Clients either re-fetch the message list themselves
or hold open the SSE stream, which re-sends the full list on a fixed timer.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID

from core.auth import Viewer, get_viewer, require_verified_coach
from core.config import settings
from core.database import get_db, get_db_sync
from schemas import ConversationSummary, MessageResponse
from services import messaging_service
from services.message_poller import poll_messages

router = APIRouter(prefix="/v1/conversations", tags=["Messages"])


class ConversationCreate(BaseModel):
    athlete_id: UUID
    message: Optional[str] = Field(default=None, max_length=5000)


class ConversationCreated(BaseModel):
    id: UUID
    created: bool


class MessageCreate(BaseModel):
    body: str = Field(min_length=1, max_length=5000)


@router.get("", response_model=List[ConversationSummary])
def list_conversations(viewer: Viewer = Depends(get_viewer), db: Session = Depends(get_db)):
    """Open conversations, most recently active first."""
    return messaging_service.list_conversations(db, viewer)


@router.post("", response_model=ConversationCreated)
def start_conversation(
    request: ConversationCreate,
    viewer: Viewer = Depends(require_verified_coach),
    db: Session = Depends(get_db),
):
    """Returns the existing conversation for the pair if there is one."""
    conversation, created = messaging_service.start_conversation(db, viewer, request.athlete_id, request.message)
    db.commit()
    return ConversationCreated(id=conversation.id, created=created)


@router.get("/{conversation_id}/messages", response_model=List[MessageResponse])
def get_messages(
    conversation_id: UUID,
    viewer: Viewer = Depends(get_viewer),
    db: Session = Depends(get_db),
):
    """Messages oldest first; the other party's unread messages become read."""
    conversation = messaging_service.get_conversation_for(db, viewer, conversation_id)
    messaging_service.mark_messages_read(db, conversation, viewer)
    db.commit()
    return messaging_service.list_messages(db, conversation.id)


@router.post("/{conversation_id}/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def post_message(
    conversation_id: UUID,
    request: MessageCreate,
    viewer: Viewer = Depends(get_viewer),
    db: Session = Depends(get_db),
):
    conversation = messaging_service.get_conversation_for(db, viewer, conversation_id)
    message = messaging_service.send_message(db, viewer, conversation, request.body)
    db.commit()
    return message


@router.get("/{conversation_id}/stream")
async def stream_messages(
    conversation_id: UUID,
    request: Request,
    viewer: Viewer = Depends(get_viewer),
    db: Session = Depends(get_db),
):
    """
    SSE feed of the conversation's messages.

    Each tick is a fresh session: the request's session is closed once the
    response starts streaming.
    """
    conversation = await run_in_threadpool(messaging_service.get_conversation_for, db, viewer, conversation_id)
    conversation_id = conversation.id

    def load() -> List[dict]:
        session = get_db_sync()
        try:
            messages = messaging_service.list_messages(session, conversation_id)
            return [MessageResponse.model_validate(m).model_dump(mode="json") for m in messages]
        finally:
            session.close()

    return StreamingResponse(
        poll_messages(load, request.is_disconnected, settings.MESSAGE_POLL_INTERVAL_S),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
