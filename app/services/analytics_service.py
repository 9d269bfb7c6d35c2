import asyncio
from collections import Counter
from typing import Awaitable, List

from app.core.exceptions import ForbiddenException
from app.core.permissions import Role, Permission, has_permission
from app.models.ticket import TicketPriority, TicketStatus
from app.models.user import User
from app.repositories.base import Repositories
from app.services.review_service import summarize_reviews


async def gather_or_fail(*aws: Awaitable) -> List:
    """
    Run awaitables concurrently and return their results in order.

    The first failure cancels everything still running and is re-raised, so
    callers never see a partially filled aggregate.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        for task in tasks:
            if task in done and task.exception() is not None:
                raise task.exception()
        return [task.result() for task in tasks]
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


class AnalyticsService:
    def __init__(self, repos: Repositories):
        self.repos = repos

    async def dashboard(self, actor: User) -> dict:
        """Ticket counts scoped to what the actor works on."""
        if actor.role == Role.CUSTOMER:
            tickets = await self.repos.tickets.list(customer_id=actor.id)
        elif actor.role == Role.AGENT:
            tickets = await self.repos.tickets.list(assigned_agent_id=actor.id)
        else:
            tickets = await self.repos.tickets.list()

        by_status = Counter(t.status for t in tickets)
        return {
            "role": actor.role.value,
            "total": len(tickets),
            "open": by_status.get(TicketStatus.OPEN, 0),
            "inprogress": by_status.get(TicketStatus.IN_PROGRESS, 0),
            "resolved": by_status.get(TicketStatus.RESOLVED, 0),
            "closed": by_status.get(TicketStatus.CLOSED, 0),
            "urgent": sum(1 for t in tickets if t.priority == TicketPriority.URGENT),
        }

    async def overview(self, actor: User) -> dict:
        if not has_permission(actor.role, Permission.VIEW_ANALYTICS):
            raise ForbiddenException("Insufficient permissions")

        tickets, reviews, users = await gather_or_fail(
            self.repos.tickets.list(),
            self.repos.reviews.list(),
            self.repos.users.list(),
        )

        by_status = Counter(t.status for t in tickets)
        by_priority = Counter(t.priority for t in tickets)
        by_role = Counter(u.role for u in users if u.is_active)
        return {
            "total_tickets": len(tickets),
            "by_status": {s.value: by_status.get(s, 0) for s in TicketStatus},
            "by_priority": {p.value: by_priority.get(p, 0) for p in TicketPriority},
            "reviews": summarize_reviews(reviews),
            "total_customers": by_role.get(Role.CUSTOMER, 0),
            "total_agents": by_role.get(Role.AGENT, 0),
        }
