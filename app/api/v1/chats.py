from fastapi import APIRouter, Depends, status, Query
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field
from app.api.deps import get_current_user, get_chat_service
from app.config import settings
from app.core.permissions import Role
from app.models.user import User
from app.services.chat_service import ChatService

router = APIRouter()


class MessageCreate(BaseModel):
    message: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    id: int
    ticket_id: UUID
    sender_id: UUID
    sender_name: str
    sender_role: Role
    message: str
    edited: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChatThreadResponse(BaseModel):
    ticket_id: UUID
    messages: List[MessageResponse]
    poll_interval_seconds: int


@router.get("/ticket/{ticket_id}", response_model=ChatThreadResponse)
async def get_messages(
    ticket_id: UUID,
    after_id: Optional[int] = Query(None, ge=0, description="Only messages newer than this id"),
    current_user: User = Depends(get_current_user),
    chats: ChatService = Depends(get_chat_service),
):
    """Get a ticket's chat thread, oldest first. Clients poll this endpoint."""
    messages = await chats.list(ticket_id, current_user, after_id=after_id)
    return ChatThreadResponse(
        ticket_id=ticket_id,
        messages=[MessageResponse.model_validate(m) for m in messages],
        poll_interval_seconds=settings.CHAT_POLL_INTERVAL_SECONDS,
    )


@router.post("/ticket/{ticket_id}/message", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    ticket_id: UUID,
    message_data: MessageCreate,
    current_user: User = Depends(get_current_user),
    chats: ChatService = Depends(get_chat_service),
):
    return await chats.append(ticket_id, current_user, message_data.message)


@router.put("/ticket/{ticket_id}/message/{message_id}", response_model=MessageResponse)
async def edit_message(
    ticket_id: UUID,
    message_id: int,
    message_data: MessageCreate,
    current_user: User = Depends(get_current_user),
    chats: ChatService = Depends(get_chat_service),
):
    """Edit your own message"""
    return await chats.edit(ticket_id, message_id, current_user, message_data.message)


@router.delete("/ticket/{ticket_id}/message/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    ticket_id: UUID,
    message_id: int,
    current_user: User = Depends(get_current_user),
    chats: ChatService = Depends(get_chat_service),
):
    """Delete your own message"""
    await chats.delete(ticket_id, message_id, current_user)
