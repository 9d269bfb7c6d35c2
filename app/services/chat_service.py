from typing import List, Optional
from uuid import UUID

from app.core import lifecycle
from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.models.message import Message
from app.models.ticket import Ticket
from app.models.user import User
from app.repositories.base import Repositories
from app.utils.helpers import normalize_text, utcnow
from app.utils.logger import logger


class ChatService:
    def __init__(self, repos: Repositories):
        self.repos = repos

    async def _visible_ticket(self, ticket_id: UUID, actor: User) -> Ticket:
        ticket = await self.repos.tickets.get(ticket_id)
        if not ticket:
            raise NotFoundException("Ticket", str(ticket_id))
        if not lifecycle.can_view_ticket(ticket, actor):
            raise ForbiddenException("Access denied")
        return ticket

    async def _owned_message(self, ticket_id: UUID, message_id: int, actor: User) -> Message:
        message = await self.repos.messages.get(message_id)
        if not message or message.ticket_id != ticket_id:
            raise NotFoundException("Message", str(message_id))
        if not lifecycle.can_edit_or_delete_message(message, actor):
            logger.warning(f"Message {message_id} change refused for {actor.id}")
            raise ForbiddenException("You can only change your own messages")
        return message

    async def list(self, ticket_id: UUID, actor: User, after_id: Optional[int] = None) -> List[Message]:
        """Messages in ascending time order, ties broken by insertion order."""
        await self._visible_ticket(ticket_id, actor)
        return await self.repos.messages.list_for_ticket(ticket_id, after_id=after_id)

    async def append(self, ticket_id: UUID, actor: User, text: str) -> Message:
        await self._visible_ticket(ticket_id, actor)
        text = normalize_text(text)
        if not text:
            raise ValidationException("Message cannot be empty")

        now = utcnow()
        # Timestamps never run backwards within a thread, even if the clock does
        latest = await self.repos.messages.latest_for_ticket(ticket_id)
        if latest and latest.created_at > now:
            now = latest.created_at

        message = Message(
            ticket_id=ticket_id,
            sender_id=actor.id,
            sender_name=actor.fullname,
            sender_role=actor.role,
            message=text,
            edited=False,
            created_at=now,
        )
        message = await self.repos.messages.add(message)
        logger.info(f"Message {message.id} posted on ticket {ticket_id} by {actor.id}")
        return message

    async def edit(self, ticket_id: UUID, message_id: int, actor: User, text: str) -> Message:
        message = await self._owned_message(ticket_id, message_id, actor)
        text = normalize_text(text)
        if not text:
            raise ValidationException("Message cannot be empty")

        message.message = text
        message.edited = True
        message.updated_at = utcnow()
        message = await self.repos.messages.save(message)
        logger.info(f"Message {message_id} edited by {actor.id}")
        return message

    async def delete(self, ticket_id: UUID, message_id: int, actor: User) -> None:
        await self._owned_message(ticket_id, message_id, actor)
        await self.repos.messages.delete(message_id)
        logger.info(f"Message {message_id} deleted by {actor.id}")
