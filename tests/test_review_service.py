import pytest

from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.core.permissions import Role
from app.models.review import Review
from app.models.ticket import TicketStatus
from app.services.review_service import ReviewService, summarize_reviews, validate_rating
from conftest import make_ticket, make_user


@pytest.fixture
async def setup(repos):
    customer = make_user(Role.CUSTOMER, fullname="Carol Customer")
    agent = make_user(Role.AGENT, fullname="Alan Agent")
    admin = make_user(Role.ADMIN)
    for user in (customer, agent, admin):
        await repos.users.add(user)
    ticket = await repos.tickets.add(make_ticket(customer, status=TicketStatus.RESOLVED, agent=agent))
    return {"customer": customer, "agent": agent, "admin": admin, "ticket": ticket}


@pytest.mark.anyio
async def test_second_submission_updates_the_same_review(repos, setup):
    service = ReviewService(repos)
    customer, ticket = setup["customer"], setup["ticket"]

    first, created = await service.upsert(ticket.id, customer, 5, "Great")
    assert created
    assert first.ticket_title == ticket.title
    assert first.customer_name == "Carol Customer"

    second, created = await service.upsert(ticket.id, customer, 4, "Good")
    assert not created
    assert second.id == first.id
    assert (second.rating, second.comment) == (4, "Good")
    assert len(await repos.reviews.list(ticket_id=ticket.id)) == 1


@pytest.mark.anyio
@pytest.mark.parametrize("rating", [0, 6, -1, True, 4.5, "5"])
async def test_out_of_range_rating_rejected(repos, setup, rating):
    service = ReviewService(repos)
    with pytest.raises(ValidationException):
        await service.upsert(setup["ticket"].id, setup["customer"], rating, "Hmm")
    assert await repos.reviews.list() == []


@pytest.mark.anyio
async def test_blank_comment_rejected(repos, setup):
    with pytest.raises(ValidationException):
        await ReviewService(repos).upsert(setup["ticket"].id, setup["customer"], 3, "   ")


@pytest.mark.anyio
@pytest.mark.parametrize("status", [TicketStatus.OPEN, TicketStatus.IN_PROGRESS])
async def test_unfinished_ticket_cannot_be_reviewed(repos, setup, status):
    setup["ticket"].status = status
    with pytest.raises(ValidationException):
        await ReviewService(repos).upsert(setup["ticket"].id, setup["customer"], 5, "Great")


@pytest.mark.anyio
async def test_only_the_ticket_owner_reviews(repos, setup):
    service = ReviewService(repos)
    stranger = make_user()
    with pytest.raises(ForbiddenException):
        await service.upsert(setup["ticket"].id, stranger, 5, "Great")
    with pytest.raises(ForbiddenException):
        await service.upsert(setup["ticket"].id, setup["agent"], 5, "Great")


@pytest.mark.anyio
async def test_update_after_reopen_is_rejected_but_review_survives(repos, setup):
    service = ReviewService(repos)
    review, _ = await service.upsert(setup["ticket"].id, setup["customer"], 5, "Great")
    setup["ticket"].status = TicketStatus.OPEN

    with pytest.raises(ValidationException):
        await service.update(review.id, setup["customer"], rating=1)
    assert (await repos.reviews.get(review.id)).rating == 5


@pytest.mark.anyio
async def test_agent_reply_last_write_wins(repos, setup):
    service = ReviewService(repos)
    review, _ = await service.upsert(setup["ticket"].id, setup["customer"], 3, "Slow")

    await service.reply(review.id, setup["agent"], "Sorry about that")
    review = await service.reply(review.id, setup["admin"], "We added staff")

    assert review.agent_reply == "We added staff"
    assert review.agent_id == setup["admin"].id
    assert review.replied_at is not None

    with pytest.raises(ForbiddenException):
        await service.reply(review.id, setup["customer"], "Me too")


@pytest.mark.anyio
async def test_delete_rules(repos, setup):
    service = ReviewService(repos)
    review, _ = await service.upsert(setup["ticket"].id, setup["customer"], 3, "Slow")

    with pytest.raises(ForbiddenException):
        await service.delete(review.id, setup["agent"])
    await service.delete(review.id, setup["admin"])
    with pytest.raises(NotFoundException):
        await service.get(review.id)


@pytest.mark.anyio
async def test_stats_need_analytics_permission(repos, setup):
    service = ReviewService(repos)
    await service.upsert(setup["ticket"].id, setup["customer"], 4, "Good")

    with pytest.raises(ForbiddenException):
        await service.stats(setup["customer"])
    stats = await service.stats(setup["agent"])
    assert stats["total_reviews"] == 1
    assert stats["average_rating"] == 4.0


def test_validate_rating_accepts_bounds():
    assert validate_rating(1) == 1
    assert validate_rating(5) == 5


def test_summarize_reviews():
    reviews = [
        Review(rating=5, agent_reply="Thanks"),
        Review(rating=4),
        Review(rating=4),
    ]
    summary = summarize_reviews(reviews)
    assert summary["total_reviews"] == 3
    assert summary["average_rating"] == 4.3
    assert summary["distribution"] == {"5": 1, "4": 2, "3": 0, "2": 0, "1": 0}
    assert list(summary["distribution"]) == ["5", "4", "3", "2", "1"]
    assert summary["replied"] == 1


def test_summarize_no_reviews():
    summary = summarize_reviews([])
    assert summary["average_rating"] is None
    assert summary["total_reviews"] == 0
