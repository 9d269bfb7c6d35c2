"""
Ticket lifecycle rules.

Every authorization decision about tickets, reviews and chat messages lives
here as a small predicate, so routes and services never branch on roles
themselves. ``change_status`` is the only function that mutates anything.
"""
from datetime import datetime
from typing import Optional, Union

from app.core.exceptions import ForbiddenException, ValidationException
from app.core.permissions import Role, Permission, has_permission
from app.models.ticket import Ticket, TicketStatus, REVIEWABLE_STATUSES
from app.models.message import Message
from app.models.review import Review
from app.models.user import User
from app.utils.helpers import utcnow
from app.utils.logger import logger


def parse_status(value: Union[str, TicketStatus, None]) -> TicketStatus:
    try:
        return TicketStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in TicketStatus)
        raise ValidationException(f"Invalid status {value!r}; expected one of: {allowed}")


def can_change_status(actor: User) -> bool:
    return has_permission(actor.role, Permission.MANAGE_TICKETS)


def can_assign_ticket(actor: User) -> bool:
    return has_permission(actor.role, Permission.MANAGE_TICKETS)


def can_view_ticket(ticket: Ticket, actor: User) -> bool:
    if has_permission(actor.role, Permission.MANAGE_TICKETS):
        return True
    return ticket.customer_id == actor.id


def change_status(
    ticket: Ticket,
    new_status: Union[str, TicketStatus],
    actor: User,
    now: Optional[datetime] = None,
) -> Ticket:
    """
    Move a ticket to ``new_status`` on behalf of ``actor``.

    Any of the four statuses may follow any other. Entering ``resolved``
    stamps ``resolved_at``; leaving it keeps the previous stamp.
    """
    if not can_change_status(actor):
        logger.warning(f"Status change on ticket {ticket.id} refused for {actor.role.value} {actor.id}")
        raise ForbiddenException("Only agents and admins can change ticket status")
    target = parse_status(new_status)

    now = now or utcnow()
    if target == TicketStatus.RESOLVED and ticket.status != TicketStatus.RESOLVED:
        ticket.resolved_at = now
    ticket.status = target
    ticket.updated_at = now
    return ticket


def can_review(ticket: Ticket, actor: User) -> bool:
    return has_permission(actor.role, Permission.WRITE_REVIEWS) and ticket.status in REVIEWABLE_STATUSES


def can_delete_ticket(ticket: Ticket, actor: User) -> bool:
    if actor.role == Role.ADMIN:
        return True
    if actor.role == Role.CUSTOMER:
        return actor.id == ticket.customer_id
    if actor.role == Role.AGENT:
        return ticket.assigned_agent_id is not None and actor.id == ticket.assigned_agent_id
    return False


def can_edit_or_delete_message(message: Message, actor: User) -> bool:
    # A sender whose role changed since posting loses edit rights
    return actor.id == message.sender_id and actor.role == message.sender_role


def can_reply_to_review(actor: User) -> bool:
    return has_permission(actor.role, Permission.REPLY_REVIEWS)


def can_delete_review(review: Review, actor: User) -> bool:
    if has_permission(actor.role, Permission.MODERATE_REVIEWS):
        return True
    return actor.role == Role.CUSTOMER and actor.id == review.customer_id


def can_manage_blog(actor: User) -> bool:
    return has_permission(actor.role, Permission.MANAGE_BLOG)


def can_change_role(target: User, actor: User) -> bool:
    return has_permission(actor.role, Permission.MANAGE_USERS) and target.id != actor.id
