"""
Storage interfaces the services are written against.

Two backings satisfy them: ``app.repositories.memory`` (process-local, used by
tests and the ``memory`` storage backend) and ``app.repositories.sql``
(SQLAlchemy async sessions). Writes are last-write-wins; nothing here detects
concurrent modification.
"""
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple
from uuid import UUID

from app.core.permissions import Role
from app.models.blog import BlogPost
from app.models.message import Message
from app.models.review import Review
from app.models.ticket import Ticket, TicketPriority, TicketStatus
from app.models.user import User


class UserRepository(Protocol):
    async def add(self, user: User) -> User: ...

    async def get(self, user_id: UUID) -> Optional[User]: ...

    async def get_by_email(self, email: str) -> Optional[User]: ...

    async def list(self, role: Optional[Role] = None, search: Optional[str] = None) -> List[User]: ...

    async def save(self, user: User) -> User: ...


class TicketRepository(Protocol):
    async def add(self, ticket: Ticket) -> Ticket: ...

    async def get(self, ticket_id: UUID) -> Optional[Ticket]: ...

    async def list(
        self,
        customer_id: Optional[UUID] = None,
        assigned_agent_id: Optional[UUID] = None,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        search: Optional[str] = None,
    ) -> List[Ticket]: ...

    async def save(self, ticket: Ticket) -> Ticket: ...

    async def delete(self, ticket_id: UUID) -> Tuple[int, int]:
        """Remove the ticket with its messages and reviews as one write. Returns (messages, reviews) removed."""


class ReviewRepository(Protocol):
    async def upsert(self, review: Review) -> Tuple[Review, bool]:
        """Insert ``review``, or copy its rating and comment onto the stored review for the same
        (ticket, customer). Returns the stored review and whether it was inserted."""

    async def get(self, review_id: UUID) -> Optional[Review]: ...

    async def get_for(self, ticket_id: UUID, customer_id: UUID) -> Optional[Review]: ...

    async def list(self, ticket_id: Optional[UUID] = None, customer_id: Optional[UUID] = None) -> List[Review]: ...

    async def save(self, review: Review) -> Review: ...

    async def delete(self, review_id: UUID) -> None: ...


class ChatRepository(Protocol):
    async def add(self, message: Message) -> Message: ...

    async def get(self, message_id: int) -> Optional[Message]: ...

    async def list_for_ticket(self, ticket_id: UUID, after_id: Optional[int] = None) -> List[Message]: ...

    async def latest_for_ticket(self, ticket_id: UUID) -> Optional[Message]: ...

    async def save(self, message: Message) -> Message: ...

    async def delete(self, message_id: int) -> None: ...


class BlogRepository(Protocol):
    async def add(self, post: BlogPost) -> BlogPost: ...

    async def get(self, post_id: UUID) -> Optional[BlogPost]: ...

    async def list(self, search: Optional[str] = None, category: Optional[str] = None) -> List[BlogPost]: ...

    async def save(self, post: BlogPost) -> BlogPost: ...

    async def delete(self, post_id: UUID) -> None: ...


@dataclass
class Repositories:
    users: UserRepository
    tickets: TicketRepository
    reviews: ReviewRepository
    messages: ChatRepository
    posts: BlogRepository
