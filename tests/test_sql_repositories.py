"""The SQL backing runs the same service code against an in-memory sqlite database."""
import pytest

from app.core.permissions import Role
from app.database import build_engine, build_sessionmaker, create_tables
from app.models.ticket import TicketStatus
from app.repositories.sql import sql_repositories
from app.services.analytics_service import AnalyticsService
from app.services.chat_service import ChatService
from app.services.review_service import ReviewService
from app.services.ticket_service import TicketService
from conftest import make_user


@pytest.fixture
async def sql_repos():
    engine = build_engine("sqlite+aiosqlite://")
    await create_tables(bind=engine)
    async with build_sessionmaker(engine)() as session:
        yield sql_repositories(session)
    await engine.dispose()


@pytest.fixture
async def people(sql_repos):
    customer = await sql_repos.users.add(make_user(Role.CUSTOMER, email="Carol@Example.com"))
    agent = await sql_repos.users.add(make_user(Role.AGENT))
    return {"customer": customer, "agent": agent}


@pytest.mark.anyio
async def test_email_lookup_ignores_case(sql_repos, people):
    found = await sql_repos.users.get_by_email("carol@example.com")
    assert found.id == people["customer"].id


@pytest.mark.anyio
async def test_review_upsert_keeps_one_row(sql_repos, people):
    tickets = TicketService(sql_repos)
    reviews = ReviewService(sql_repos)
    ticket = await tickets.create(people["customer"], "Broken mouse", "Left click sticks")
    await tickets.update(ticket.id, people["agent"], status=TicketStatus.CLOSED)

    first, created = await reviews.upsert(ticket.id, people["customer"], 5, "Great")
    second, updated_created = await reviews.upsert(ticket.id, people["customer"], 2, "Broke again")

    assert created and not updated_created
    assert first.id == second.id
    stored = await sql_repos.reviews.list(ticket_id=ticket.id)
    assert [(r.rating, r.comment) for r in stored] == [(2, "Broke again")]


@pytest.mark.anyio
async def test_chat_order_and_cascade(sql_repos, people):
    tickets = TicketService(sql_repos)
    chat = ChatService(sql_repos)
    ticket = await tickets.create(people["customer"], "Broken mouse", "Left click sticks")

    posted = [
        await chat.append(ticket.id, people["customer"], "one"),
        await chat.append(ticket.id, people["agent"], "two"),
        await chat.append(ticket.id, people["customer"], "three"),
    ]
    listed = await chat.list(ticket.id, people["agent"])
    assert [m.id for m in listed] == [m.id for m in posted]
    assert [m.id for m in await chat.list(ticket.id, people["agent"], after_id=posted[0].id)] == [
        m.id for m in posted[1:]
    ]

    await tickets.delete(ticket.id, people["customer"])
    assert await sql_repos.tickets.get(ticket.id) is None
    assert await sql_repos.messages.list_for_ticket(ticket.id) == []


@pytest.mark.anyio
async def test_overview_reads_concurrently_on_one_session(sql_repos, people):
    tickets = TicketService(sql_repos)
    await tickets.create(people["customer"], "Broken mouse", "Left click sticks")
    await tickets.create(people["customer"], "Broken keyboard", "Q key missing")

    overview = await AnalyticsService(sql_repos).overview(people["agent"])
    assert overview["total_tickets"] == 2
    assert overview["by_status"]["open"] == 2
    assert overview["total_customers"] == 1
    assert overview["total_agents"] == 1


@pytest.mark.anyio
async def test_failed_ticket_delete_keeps_chat_history(sql_repos, people, monkeypatch):
    tickets = TicketService(sql_repos)
    ticket = await tickets.create(people["customer"], "Broken mouse", "Left click sticks")
    ticket_id = ticket.id
    await ChatService(sql_repos).append(ticket_id, people["customer"], "Still broken")

    async def failing_commit():
        raise RuntimeError("database went away")

    monkeypatch.setattr(sql_repos.tickets.db, "commit", failing_commit)
    with pytest.raises(RuntimeError):
        await tickets.delete(ticket_id, people["customer"])
    monkeypatch.undo()

    assert await sql_repos.tickets.get(ticket_id) is not None
    assert len(await sql_repos.messages.list_for_ticket(ticket_id)) == 1


@pytest.mark.anyio
async def test_concurrent_first_reviews_end_as_one_update(sql_repos, people, monkeypatch):
    tickets = TicketService(sql_repos)
    reviews = ReviewService(sql_repos)
    ticket = await tickets.create(people["customer"], "Broken mouse", "Left click sticks")
    ticket_id = ticket.id
    await tickets.update(ticket_id, people["agent"], status=TicketStatus.RESOLVED)

    first, _ = await reviews.upsert(ticket_id, people["customer"], 5, "Great")
    first_id = first.id

    # The second request looked before the first one committed, so it tries to insert
    real_find = sql_repos.reviews._find
    calls = []

    async def stale_then_real(ticket_id, customer_id):
        calls.append(ticket_id)
        if len(calls) == 1:
            return None
        return await real_find(ticket_id, customer_id)

    monkeypatch.setattr(sql_repos.reviews, "_find", stale_then_real)
    review, created = await reviews.upsert(ticket_id, people["customer"], 4, "Good")

    assert not created
    assert review.id == first_id
    assert review.rating == 4
    stored = await sql_repos.reviews.list(ticket_id=ticket_id)
    assert [(r.rating, r.comment) for r in stored] == [(4, "Good")]
