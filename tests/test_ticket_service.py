import uuid

import pytest

from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.core.permissions import Role
from app.models.message import Message
from app.models.ticket import TicketPriority, TicketStatus
from app.services.review_service import ReviewService
from app.services.ticket_service import TicketService
from app.utils.helpers import utcnow
from conftest import make_user


@pytest.fixture
async def people(repos):
    users = {
        "customer": make_user(Role.CUSTOMER, fullname="Carol Customer"),
        "other": make_user(Role.CUSTOMER),
        "agent": make_user(Role.AGENT, fullname="Alan Agent"),
        "agent2": make_user(Role.AGENT),
        "admin": make_user(Role.ADMIN),
    }
    for user in users.values():
        await repos.users.add(user)
    return users


@pytest.mark.anyio
async def test_customer_opens_ticket_with_snapshots(repos, people):
    service = TicketService(repos)
    ticket = await service.create(people["customer"], "  VPN down ", "Cannot connect since 9am", TicketPriority.HIGH)

    assert ticket.status == TicketStatus.OPEN
    assert ticket.title == "VPN down"
    assert ticket.customer_name == "Carol Customer"
    assert ticket.customer_email == people["customer"].email
    assert ticket.assigned_agent_id is None
    assert ticket.created_at == ticket.updated_at
    assert await repos.tickets.get(ticket.id) is ticket


@pytest.mark.anyio
async def test_only_customers_open_tickets(repos, people):
    service = TicketService(repos)
    with pytest.raises(ForbiddenException):
        await service.create(people["agent"], "title", "description")


@pytest.mark.anyio
async def test_blank_title_rejected(repos, people):
    service = TicketService(repos)
    with pytest.raises(ValidationException):
        await service.create(people["customer"], "   ", "description")
    assert await repos.tickets.list() == []


@pytest.mark.anyio
async def test_customer_list_is_scoped_to_own_tickets(repos, people):
    service = TicketService(repos)
    mine = await service.create(people["customer"], "Mine", "mine")
    await service.create(people["other"], "Theirs", "theirs")

    listed = await service.list(people["customer"], customer_id=people["other"].id)
    assert [t.id for t in listed] == [mine.id]
    assert len(await service.list(people["agent"])) == 2


@pytest.mark.anyio
async def test_other_customer_cannot_read_ticket(repos, people):
    service = TicketService(repos)
    ticket = await service.create(people["customer"], "Mine", "mine")
    with pytest.raises(ForbiddenException):
        await service.get(ticket.id, people["other"])
    with pytest.raises(NotFoundException):
        await service.get(uuid.uuid4(), people["agent"])


@pytest.mark.anyio
async def test_customer_status_change_leaves_ticket_untouched(repos, people):
    service = TicketService(repos)
    ticket = await service.create(people["customer"], "Mine", "mine")
    before = ticket.updated_at

    with pytest.raises(ForbiddenException):
        await service.update(ticket.id, people["customer"], status=TicketStatus.CLOSED)

    stored = await repos.tickets.get(ticket.id)
    assert stored.status == TicketStatus.OPEN
    assert stored.updated_at == before


@pytest.mark.anyio
async def test_assign_and_unassign(repos, people):
    service = TicketService(repos)
    ticket = await service.create(people["customer"], "Mine", "mine")

    ticket = await service.update(ticket.id, people["admin"], assigned_agent_id=people["agent"].id)
    assert ticket.assigned_agent_id == people["agent"].id
    assert ticket.assigned_agent_name == "Alan Agent"

    ticket = await service.update(ticket.id, people["agent"], status=TicketStatus.IN_PROGRESS)
    assert ticket.assigned_agent_id == people["agent"].id

    ticket = await service.update(ticket.id, people["agent"], assigned_agent_id=None)
    assert ticket.assigned_agent_id is None
    assert ticket.assigned_agent_name is None


@pytest.mark.anyio
async def test_cannot_assign_to_customer(repos, people):
    service = TicketService(repos)
    ticket = await service.create(people["customer"], "Mine", "mine")

    with pytest.raises(ValidationException):
        await service.update(
            ticket.id, people["agent"], status=TicketStatus.RESOLVED, assigned_agent_id=people["other"].id
        )

    stored = await repos.tickets.get(ticket.id)
    assert stored.assigned_agent_id is None
    assert stored.status == TicketStatus.OPEN
    assert stored.resolved_at is None


@pytest.mark.anyio
async def test_resolve_through_service_stamps_resolved_at(repos, people):
    service = TicketService(repos)
    ticket = await service.create(people["customer"], "Mine", "mine")
    ticket = await service.update(ticket.id, people["agent"], status=TicketStatus.RESOLVED)
    assert ticket.resolved_at is not None
    assert ticket.updated_at == ticket.resolved_at


@pytest.mark.anyio
async def test_delete_removes_messages_and_reviews(repos, people):
    service = TicketService(repos)
    ticket = await service.create(people["customer"], "Mine", "mine")
    other_ticket = await service.create(people["other"], "Theirs", "theirs")
    await service.update(ticket.id, people["agent"], status=TicketStatus.CLOSED)
    await ReviewService(repos).upsert(ticket.id, people["customer"], 4, "Fine")

    for target in (ticket, other_ticket):
        await repos.messages.add(Message(
            ticket_id=target.id,
            sender_id=people["agent"].id,
            sender_name="Alan Agent",
            sender_role=Role.AGENT,
            message="Looking into it",
            edited=False,
            created_at=utcnow(),
        ))

    await service.delete(ticket.id, people["customer"])

    assert await repos.tickets.get(ticket.id) is None
    assert await repos.messages.list_for_ticket(ticket.id) == []
    assert await repos.reviews.list(ticket_id=ticket.id) == []
    assert len(await repos.messages.list_for_ticket(other_ticket.id)) == 1


@pytest.mark.anyio
async def test_unassigned_agent_cannot_delete(repos, people):
    service = TicketService(repos)
    ticket = await service.create(people["customer"], "Mine", "mine")
    await service.update(ticket.id, people["admin"], assigned_agent_id=people["agent"].id)

    with pytest.raises(ForbiddenException):
        await service.delete(ticket.id, people["agent2"])
    with pytest.raises(ForbiddenException):
        await service.delete(ticket.id, people["other"])

    await service.delete(ticket.id, people["agent"])
    assert await repos.tickets.get(ticket.id) is None


@pytest.mark.anyio
async def test_empty_update_writes_nothing(repos, people, monkeypatch):
    service = TicketService(repos)
    ticket = await service.create(people["customer"], "Mine", "mine")
    before = ticket.updated_at

    async def no_save(ticket):
        raise AssertionError("an empty update must not be saved")

    monkeypatch.setattr(repos.tickets, "save", no_save)
    unchanged = await service.update(ticket.id, people["customer"])

    assert unchanged is ticket
    assert unchanged.updated_at == before
    assert unchanged.status == TicketStatus.OPEN


@pytest.mark.anyio
async def test_delete_returns_cleanly_for_ticket_without_history(repos, people):
    service = TicketService(repos)
    ticket = await service.create(people["customer"], "Mine", "mine")
    await service.delete(ticket.id, people["admin"])
    assert await repos.tickets.list() == []
