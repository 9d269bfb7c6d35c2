import asyncio

import pytest

from app.core.exceptions import ForbiddenException
from app.core.permissions import Role
from app.models.ticket import TicketPriority, TicketStatus
from app.services.analytics_service import AnalyticsService, gather_or_fail
from app.services.review_service import ReviewService
from conftest import make_ticket, make_user


@pytest.mark.anyio
async def test_gather_or_fail_keeps_order():
    async def value(v, delay):
        await asyncio.sleep(delay)
        return v

    assert await gather_or_fail(value(1, 0.02), value(2, 0), value(3, 0.01)) == [1, 2, 3]


@pytest.mark.anyio
async def test_gather_or_fail_cancels_siblings_on_first_error():
    cancelled = asyncio.Event()

    async def slow():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    async def broken():
        await asyncio.sleep(0)
        raise RuntimeError("store unavailable")

    with pytest.raises(RuntimeError, match="store unavailable"):
        await gather_or_fail(slow(), broken())
    assert cancelled.is_set()


@pytest.fixture
async def populated(repos):
    customer = make_user(Role.CUSTOMER)
    other = make_user(Role.CUSTOMER)
    agent = make_user(Role.AGENT)
    retired = make_user(Role.AGENT, is_active=False)
    admin = make_user(Role.ADMIN)
    for user in (customer, other, agent, retired, admin):
        await repos.users.add(user)

    mine = make_ticket(customer, status=TicketStatus.RESOLVED, agent=agent)
    urgent = make_ticket(customer, status=TicketStatus.IN_PROGRESS, agent=agent)
    urgent.priority = TicketPriority.URGENT
    theirs = make_ticket(other)
    for ticket in (mine, urgent, theirs):
        await repos.tickets.add(ticket)
    await ReviewService(repos).upsert(mine.id, customer, 5, "Quick fix")
    return {"customer": customer, "other": other, "agent": agent, "admin": admin}


@pytest.mark.anyio
async def test_dashboard_is_scoped_by_role(repos, populated):
    service = AnalyticsService(repos)

    customer = await service.dashboard(populated["customer"])
    assert customer["total"] == 2
    assert customer["resolved"] == 1
    assert customer["urgent"] == 1

    agent = await service.dashboard(populated["agent"])
    assert agent["total"] == 2
    assert agent["inprogress"] == 1

    admin = await service.dashboard(populated["admin"])
    assert admin["total"] == 3
    assert admin["open"] == 1


@pytest.mark.anyio
async def test_overview(repos, populated):
    service = AnalyticsService(repos)
    with pytest.raises(ForbiddenException):
        await service.overview(populated["customer"])

    overview = await service.overview(populated["admin"])
    assert overview["total_tickets"] == 3
    assert overview["by_status"] == {"open": 1, "inprogress": 1, "resolved": 1, "closed": 0}
    assert overview["by_priority"]["urgent"] == 1
    assert overview["reviews"]["average_rating"] == 5.0
    assert overview["total_customers"] == 2
    assert overview["total_agents"] == 1
