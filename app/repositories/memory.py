import itertools
import uuid
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from app.core.permissions import Role
from app.models.blog import BlogPost
from app.models.message import Message
from app.models.review import Review
from app.models.ticket import Ticket, TicketPriority, TicketStatus
from app.models.user import User
from app.repositories.base import Repositories
from app.utils.helpers import matches_search


class _MemoryTable:
    def __init__(self):
        self.rows: Dict = {}

    def _put(self, row):
        if row.id is None:
            row.id = uuid.uuid4()
        self.rows[row.id] = row
        return row

    def _pop(self, key) -> None:
        self.rows.pop(key, None)

    def _pop_where(self, predicate) -> int:
        doomed = [key for key, row in self.rows.items() if predicate(row)]
        for key in doomed:
            self._pop(key)
        return len(doomed)


class MemoryUserRepository(_MemoryTable):
    async def add(self, user: User) -> User:
        return self._put(user)

    async def get(self, user_id: UUID) -> Optional[User]:
        return self.rows.get(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        email = email.lower()
        return next((u for u in self.rows.values() if u.email.lower() == email), None)

    async def list(self, role: Optional[Role] = None, search: Optional[str] = None) -> List[User]:
        users = [
            u for u in self.rows.values()
            if (role is None or u.role == role) and matches_search(search, u.email, u.fullname)
        ]
        return sorted(users, key=lambda u: u.created_at, reverse=True)

    async def save(self, user: User) -> User:
        return self._put(user)


class MemoryTicketRepository(_MemoryTable):
    def __init__(self, messages: "MemoryChatRepository", reviews: "MemoryReviewRepository"):
        super().__init__()
        self.messages = messages
        self.reviews = reviews

    async def add(self, ticket: Ticket) -> Ticket:
        return self._put(ticket)

    async def get(self, ticket_id: UUID) -> Optional[Ticket]:
        return self.rows.get(ticket_id)

    async def list(
        self,
        customer_id: Optional[UUID] = None,
        assigned_agent_id: Optional[UUID] = None,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        search: Optional[str] = None,
    ) -> List[Ticket]:
        tickets = [
            t for t in self.rows.values()
            if (customer_id is None or t.customer_id == customer_id)
            and (assigned_agent_id is None or t.assigned_agent_id == assigned_agent_id)
            and (status is None or t.status == status)
            and (priority is None or t.priority == priority)
            and matches_search(search, t.title, t.description)
        ]
        return sorted(tickets, key=lambda t: t.created_at, reverse=True)

    async def save(self, ticket: Ticket) -> Ticket:
        return self._put(ticket)

    async def delete(self, ticket_id: UUID) -> Tuple[int, int]:
        removed_messages = self.messages._pop_where(lambda m: m.ticket_id == ticket_id)
        removed_reviews = self.reviews._pop_where(lambda r: r.ticket_id == ticket_id)
        self._pop(ticket_id)
        return removed_messages, removed_reviews


class MemoryReviewRepository(_MemoryTable):
    async def upsert(self, review: Review) -> Tuple[Review, bool]:
        existing = await self.get_for(review.ticket_id, review.customer_id)
        if existing is None:
            return self._put(review), True
        existing.rating = review.rating
        existing.comment = review.comment
        existing.updated_at = review.updated_at
        return existing, False

    async def get(self, review_id: UUID) -> Optional[Review]:
        return self.rows.get(review_id)

    async def get_for(self, ticket_id: UUID, customer_id: UUID) -> Optional[Review]:
        return next(
            (r for r in self.rows.values() if r.ticket_id == ticket_id and r.customer_id == customer_id),
            None,
        )

    async def list(self, ticket_id: Optional[UUID] = None, customer_id: Optional[UUID] = None) -> List[Review]:
        reviews = [
            r for r in self.rows.values()
            if (ticket_id is None or r.ticket_id == ticket_id)
            and (customer_id is None or r.customer_id == customer_id)
        ]
        return sorted(reviews, key=lambda r: r.created_at, reverse=True)

    async def save(self, review: Review) -> Review:
        return self._put(review)

    async def delete(self, review_id: UUID) -> None:
        self._pop(review_id)


class MemoryChatRepository(_MemoryTable):
    def __init__(self):
        super().__init__()
        self._ids = itertools.count(1)

    async def add(self, message: Message) -> Message:
        message.id = next(self._ids)
        self.rows[message.id] = message
        return message

    async def get(self, message_id: int) -> Optional[Message]:
        return self.rows.get(message_id)

    async def list_for_ticket(self, ticket_id: UUID, after_id: Optional[int] = None) -> List[Message]:
        messages = [
            m for m in self.rows.values()
            if m.ticket_id == ticket_id and (after_id is None or m.id > after_id)
        ]
        return sorted(messages, key=lambda m: (m.created_at, m.id))

    async def latest_for_ticket(self, ticket_id: UUID) -> Optional[Message]:
        messages = await self.list_for_ticket(ticket_id)
        return messages[-1] if messages else None

    async def save(self, message: Message) -> Message:
        self.rows[message.id] = message
        return message

    async def delete(self, message_id: int) -> None:
        self._pop(message_id)


class MemoryBlogRepository(_MemoryTable):
    async def add(self, post: BlogPost) -> BlogPost:
        return self._put(post)

    async def get(self, post_id: UUID) -> Optional[BlogPost]:
        return self.rows.get(post_id)

    async def list(self, search: Optional[str] = None, category: Optional[str] = None) -> List[BlogPost]:
        posts = [
            p for p in self.rows.values()
            if (category is None or p.category == category) and matches_search(search, p.title, p.content)
        ]
        return sorted(posts, key=lambda p: p.created_at, reverse=True)

    async def save(self, post: BlogPost) -> BlogPost:
        return self._put(post)

    async def delete(self, post_id: UUID) -> None:
        self._pop(post_id)


def memory_repositories() -> Repositories:
    messages = MemoryChatRepository()
    reviews = MemoryReviewRepository()
    return Repositories(
        users=MemoryUserRepository(),
        tickets=MemoryTicketRepository(messages, reviews),
        reviews=reviews,
        messages=messages,
        posts=MemoryBlogRepository(),
    )
