from typing import List, Optional
from uuid import UUID

from app.core import lifecycle
from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.core.permissions import Role, Permission, has_permission
from app.models.ticket import Ticket, TicketPriority, TicketStatus
from app.models.user import User
from app.repositories.base import Repositories
from app.utils.helpers import normalize_text, utcnow
from app.utils.logger import logger

_UNSET = object()


class TicketService:
    def __init__(self, repos: Repositories):
        self.repos = repos

    async def create(
        self,
        actor: User,
        title: str,
        description: str,
        priority: TicketPriority = TicketPriority.MEDIUM,
    ) -> Ticket:
        """Open a ticket owned by ``actor``. Status always starts at ``open``."""
        if not has_permission(actor.role, Permission.CREATE_TICKETS):
            raise ForbiddenException("Only customers can open tickets")

        title = normalize_text(title)
        description = normalize_text(description)
        if not title:
            raise ValidationException("Title is required")
        if not description:
            raise ValidationException("Description is required")
        try:
            priority = TicketPriority(priority)
        except ValueError:
            raise ValidationException(f"Invalid priority {priority!r}")

        now = utcnow()
        ticket = Ticket(
            title=title,
            description=description,
            status=TicketStatus.OPEN,
            priority=priority,
            customer_id=actor.id,
            customer_name=actor.fullname,
            customer_email=actor.email,
            created_at=now,
            updated_at=now,
        )
        ticket = await self.repos.tickets.add(ticket)

        logger.info(f"Ticket created: {ticket.id} by {actor.id}")
        return ticket

    async def list(
        self,
        actor: User,
        customer_id: Optional[UUID] = None,
        assigned_agent_id: Optional[UUID] = None,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        search: Optional[str] = None,
    ) -> List[Ticket]:
        # Customers only ever see their own tickets
        if actor.role == Role.CUSTOMER:
            customer_id = actor.id
            assigned_agent_id = None
        return await self.repos.tickets.list(
            customer_id=customer_id,
            assigned_agent_id=assigned_agent_id,
            status=status,
            priority=priority,
            search=search,
        )

    async def get(self, ticket_id: UUID, actor: User) -> Ticket:
        ticket = await self.repos.tickets.get(ticket_id)
        if not ticket:
            raise NotFoundException("Ticket", str(ticket_id))
        if not lifecycle.can_view_ticket(ticket, actor):
            raise ForbiddenException("Access denied")
        return ticket

    async def update(
        self,
        ticket_id: UUID,
        actor: User,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        assigned_agent_id=_UNSET,
    ) -> Ticket:
        """
        Apply a partial update. ``assigned_agent_id=None`` unassigns; leaving
        it out keeps the current assignee. Every check runs before any field
        is touched, and a request that changes nothing writes nothing.
        """
        ticket = await self.get(ticket_id, actor)

        changing_assignment = assigned_agent_id is not _UNSET
        if status is None and priority is None and not changing_assignment:
            return ticket
        if (priority is not None or changing_assignment) and not lifecycle.can_assign_ticket(actor):
            raise ForbiddenException("Only agents and admins can change priority or assignment")

        assignee = None
        if changing_assignment and assigned_agent_id is not None:
            assignee = await self.repos.users.get(assigned_agent_id)
            if not assignee or not assignee.is_active or assignee.role not in (Role.AGENT, Role.ADMIN):
                raise ValidationException(f"User {assigned_agent_id} cannot be assigned tickets")

        if priority is not None:
            try:
                priority = TicketPriority(priority)
            except ValueError:
                raise ValidationException(f"Invalid priority {priority!r}")

        now = utcnow()
        if status is not None:
            lifecycle.change_status(ticket, status, actor, now=now)
        if priority is not None:
            ticket.priority = priority
        if changing_assignment:
            ticket.assigned_agent_id = assignee.id if assignee else None
            ticket.assigned_agent_name = assignee.fullname if assignee else None
        ticket.updated_at = now

        ticket = await self.repos.tickets.save(ticket)
        logger.info(f"Ticket updated: {ticket_id} by {actor.id}")
        return ticket

    async def delete(self, ticket_id: UUID, actor: User) -> None:
        ticket = await self.repos.tickets.get(ticket_id)
        if not ticket:
            raise NotFoundException("Ticket", str(ticket_id))
        if not lifecycle.can_delete_ticket(ticket, actor):
            logger.warning(f"Ticket delete refused: {ticket_id} for {actor.id}")
            raise ForbiddenException("You cannot delete this ticket")

        # Chat history and reviews share the ticket's lifetime
        removed_messages, removed_reviews = await self.repos.tickets.delete(ticket_id)

        logger.info(
            f"Ticket deleted: {ticket_id} by {actor.id} "
            f"({removed_messages} messages, {removed_reviews} reviews)"
        )
