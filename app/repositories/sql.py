import asyncio
import functools
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import Role
from app.models.blog import BlogPost
from app.models.message import Message
from app.models.review import Review
from app.models.ticket import Ticket, TicketPriority, TicketStatus
from app.models.user import User
from app.repositories.base import Repositories


def _serialized(method):
    """One statement at a time per session; AsyncSession is not safe for concurrent use."""
    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        async with self.lock:
            return await method(self, *args, **kwargs)
    return wrapper


class _SqlRepository:
    def __init__(self, db: AsyncSession, lock: Optional[asyncio.Lock] = None):
        self.db = db
        self.lock = lock or asyncio.Lock()

    async def _persist(self, row):
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return row

    async def _remove(self, row) -> None:
        if row is not None:
            await self.db.delete(row)
            await self.db.commit()


class SqlUserRepository(_SqlRepository):
    @_serialized
    async def add(self, user: User) -> User:
        return await self._persist(user)

    @_serialized
    async def get(self, user_id: UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    @_serialized
    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(func.lower(User.email) == email.lower()))
        return result.scalar_one_or_none()

    @_serialized
    async def list(self, role: Optional[Role] = None, search: Optional[str] = None) -> List[User]:
        query = select(User)
        if role:
            query = query.where(User.role == role)
        if search:
            query = query.where(
                func.lower(User.email).contains(search.lower()) |
                func.lower(User.fullname).contains(search.lower())
            )
        result = await self.db.execute(query.order_by(User.created_at.desc()))
        return list(result.scalars().all())

    @_serialized
    async def save(self, user: User) -> User:
        return await self._persist(user)


class SqlTicketRepository(_SqlRepository):
    @_serialized
    async def add(self, ticket: Ticket) -> Ticket:
        return await self._persist(ticket)

    @_serialized
    async def get(self, ticket_id: UUID) -> Optional[Ticket]:
        return await self.db.get(Ticket, ticket_id)

    @_serialized
    async def list(
        self,
        customer_id: Optional[UUID] = None,
        assigned_agent_id: Optional[UUID] = None,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        search: Optional[str] = None,
    ) -> List[Ticket]:
        query = select(Ticket)
        if customer_id:
            query = query.where(Ticket.customer_id == customer_id)
        if assigned_agent_id:
            query = query.where(Ticket.assigned_agent_id == assigned_agent_id)
        if status:
            query = query.where(Ticket.status == status)
        if priority:
            query = query.where(Ticket.priority == priority)
        if search:
            query = query.where(
                func.lower(Ticket.title).contains(search.lower()) |
                func.lower(Ticket.description).contains(search.lower())
            )
        result = await self.db.execute(query.order_by(Ticket.created_at.desc()))
        return list(result.scalars().all())

    @_serialized
    async def save(self, ticket: Ticket) -> Ticket:
        return await self._persist(ticket)

    @_serialized
    async def delete(self, ticket_id: UUID) -> Tuple[int, int]:
        try:
            messages = await self.db.execute(delete(Message).where(Message.ticket_id == ticket_id))
            reviews = await self.db.execute(delete(Review).where(Review.ticket_id == ticket_id))
            await self.db.execute(delete(Ticket).where(Ticket.id == ticket_id))
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return messages.rowcount or 0, reviews.rowcount or 0


class SqlReviewRepository(_SqlRepository):
    async def _find(self, ticket_id: UUID, customer_id: UUID) -> Optional[Review]:
        result = await self.db.execute(
            select(Review).where(Review.ticket_id == ticket_id, Review.customer_id == customer_id)
        )
        return result.scalar_one_or_none()

    @_serialized
    async def upsert(self, review: Review) -> Tuple[Review, bool]:
        existing = await self._find(review.ticket_id, review.customer_id)
        if existing is None:
            try:
                return await self._persist(review), True
            except IntegrityError:
                # A concurrent request inserted the same (ticket, customer) first
                await self.db.rollback()
                existing = await self._find(review.ticket_id, review.customer_id)
                if existing is None:
                    raise

        existing.rating = review.rating
        existing.comment = review.comment
        existing.updated_at = review.updated_at
        return await self._persist(existing), False

    @_serialized
    async def get(self, review_id: UUID) -> Optional[Review]:
        return await self.db.get(Review, review_id)

    @_serialized
    async def get_for(self, ticket_id: UUID, customer_id: UUID) -> Optional[Review]:
        return await self._find(ticket_id, customer_id)

    @_serialized
    async def list(self, ticket_id: Optional[UUID] = None, customer_id: Optional[UUID] = None) -> List[Review]:
        query = select(Review)
        if ticket_id:
            query = query.where(Review.ticket_id == ticket_id)
        if customer_id:
            query = query.where(Review.customer_id == customer_id)
        result = await self.db.execute(query.order_by(Review.created_at.desc()))
        return list(result.scalars().all())

    @_serialized
    async def save(self, review: Review) -> Review:
        return await self._persist(review)

    @_serialized
    async def delete(self, review_id: UUID) -> None:
        await self._remove(await self.db.get(Review, review_id))


class SqlChatRepository(_SqlRepository):
    @_serialized
    async def add(self, message: Message) -> Message:
        return await self._persist(message)

    @_serialized
    async def get(self, message_id: int) -> Optional[Message]:
        return await self.db.get(Message, message_id)

    @_serialized
    async def list_for_ticket(self, ticket_id: UUID, after_id: Optional[int] = None) -> List[Message]:
        query = select(Message).where(Message.ticket_id == ticket_id)
        if after_id is not None:
            query = query.where(Message.id > after_id)
        result = await self.db.execute(query.order_by(Message.created_at.asc(), Message.id.asc()))
        return list(result.scalars().all())

    @_serialized
    async def latest_for_ticket(self, ticket_id: UUID) -> Optional[Message]:
        result = await self.db.execute(
            select(Message)
            .where(Message.ticket_id == ticket_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @_serialized
    async def save(self, message: Message) -> Message:
        return await self._persist(message)

    @_serialized
    async def delete(self, message_id: int) -> None:
        await self._remove(await self.db.get(Message, message_id))


class SqlBlogRepository(_SqlRepository):
    @_serialized
    async def add(self, post: BlogPost) -> BlogPost:
        return await self._persist(post)

    @_serialized
    async def get(self, post_id: UUID) -> Optional[BlogPost]:
        return await self.db.get(BlogPost, post_id)

    @_serialized
    async def list(self, search: Optional[str] = None, category: Optional[str] = None) -> List[BlogPost]:
        query = select(BlogPost)
        if category:
            query = query.where(BlogPost.category == category)
        if search:
            query = query.where(
                func.lower(BlogPost.title).contains(search.lower()) |
                func.lower(BlogPost.content).contains(search.lower())
            )
        result = await self.db.execute(query.order_by(BlogPost.created_at.desc()))
        return list(result.scalars().all())

    @_serialized
    async def save(self, post: BlogPost) -> BlogPost:
        return await self._persist(post)

    @_serialized
    async def delete(self, post_id: UUID) -> None:
        await self._remove(await self.db.get(BlogPost, post_id))


def sql_repositories(db: AsyncSession) -> Repositories:
    lock = asyncio.Lock()
    return Repositories(
        users=SqlUserRepository(db, lock),
        tickets=SqlTicketRepository(db, lock),
        reviews=SqlReviewRepository(db, lock),
        messages=SqlChatRepository(db, lock),
        posts=SqlBlogRepository(db, lock),
    )
