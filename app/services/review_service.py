from collections import Counter
from typing import List, Optional, Tuple
from uuid import UUID

from app.core import lifecycle
from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.core.permissions import Role, Permission, has_permission
from app.models.review import Review
from app.models.ticket import Ticket
from app.models.user import User
from app.repositories.base import Repositories
from app.utils.helpers import normalize_text, utcnow
from app.utils.logger import logger

MIN_RATING = 1
MAX_RATING = 5


def validate_rating(rating) -> int:
    # bool is an int subclass; True must not pass as a 1-star rating
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationException("Rating must be a whole number")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationException(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return rating


def validate_comment(comment: Optional[str]) -> str:
    comment = normalize_text(comment)
    if not comment:
        raise ValidationException("Comment is required")
    return comment


class ReviewService:
    def __init__(self, repos: Repositories):
        self.repos = repos

    async def _reviewable_ticket(self, ticket_id: UUID, actor: User) -> Ticket:
        ticket = await self.repos.tickets.get(ticket_id)
        if not ticket:
            raise NotFoundException("Ticket", str(ticket_id))
        if actor.role != Role.CUSTOMER or ticket.customer_id != actor.id:
            logger.warning(f"Review on ticket {ticket_id} refused for {actor.id}")
            raise ForbiddenException("Only the customer who opened the ticket can review it")
        if not lifecycle.can_review(ticket, actor):
            raise ValidationException("Tickets can only be reviewed once resolved or closed")
        return ticket

    async def upsert(self, ticket_id: UUID, actor: User, rating: int, comment: str) -> Tuple[Review, bool]:
        """
        Create the actor's review of a ticket, or update it if one exists.

        Returns the review and whether it was newly created. A (ticket,
        customer) pair never has more than one review.
        """
        ticket = await self._reviewable_ticket(ticket_id, actor)
        rating = validate_rating(rating)
        comment = validate_comment(comment)

        now = utcnow()
        candidate = Review(
            ticket_id=ticket.id,
            ticket_title=ticket.title,
            customer_id=actor.id,
            customer_name=actor.fullname,
            rating=rating,
            comment=comment,
            created_at=now,
            updated_at=now,
        )
        review, created = await self.repos.reviews.upsert(candidate)
        logger.info(f"Review {'created' if created else 'updated'}: {review.id} for ticket {ticket_id}")
        return review, created

    async def get(self, review_id: UUID) -> Review:
        review = await self.repos.reviews.get(review_id)
        if not review:
            raise NotFoundException("Review", str(review_id))
        return review

    async def update(
        self,
        review_id: UUID,
        actor: User,
        rating: Optional[int] = None,
        comment: Optional[str] = None,
    ) -> Review:
        review = await self.get(review_id)
        if actor.id != review.customer_id:
            raise ForbiddenException("Only the author can edit a review")
        await self._reviewable_ticket(review.ticket_id, actor)

        if rating is not None:
            rating = validate_rating(rating)
        if comment is not None:
            comment = validate_comment(comment)

        if rating is not None:
            review.rating = rating
        if comment is not None:
            review.comment = comment
        review.updated_at = utcnow()

        review = await self.repos.reviews.save(review)
        logger.info(f"Review updated: {review.id}")
        return review

    async def reply(self, review_id: UUID, actor: User, text: str) -> Review:
        if not lifecycle.can_reply_to_review(actor):
            raise ForbiddenException("Only agents and admins can reply to reviews")
        review = await self.get(review_id)
        text = normalize_text(text)
        if not text:
            raise ValidationException("Reply text is required")

        review.agent_reply = text
        review.agent_id = actor.id
        review.agent_name = actor.fullname
        review.replied_at = utcnow()

        review = await self.repos.reviews.save(review)
        logger.info(f"Review {review.id} replied to by {actor.id}")
        return review

    async def delete(self, review_id: UUID, actor: User) -> None:
        review = await self.get(review_id)
        if not lifecycle.can_delete_review(review, actor):
            raise ForbiddenException("You cannot delete this review")
        await self.repos.reviews.delete(review_id)
        logger.info(f"Review deleted: {review_id} by {actor.id}")

    async def list(self, actor: User, ticket_id: Optional[UUID] = None) -> List[Review]:
        if actor.role == Role.CUSTOMER:
            return await self.repos.reviews.list(ticket_id=ticket_id, customer_id=actor.id)
        return await self.repos.reviews.list(ticket_id=ticket_id)

    async def for_ticket(self, ticket_id: UUID, actor: User) -> List[Review]:
        ticket = await self.repos.tickets.get(ticket_id)
        if not ticket:
            raise NotFoundException("Ticket", str(ticket_id))
        if not lifecycle.can_view_ticket(ticket, actor):
            raise ForbiddenException("Access denied")
        return await self.list(actor, ticket_id=ticket_id)

    async def stats(self, actor: User) -> dict:
        if not has_permission(actor.role, Permission.VIEW_ANALYTICS):
            raise ForbiddenException("Insufficient permissions")
        return summarize_reviews(await self.repos.reviews.list())


def summarize_reviews(reviews: List[Review]) -> dict:
    counts = Counter(r.rating for r in reviews)
    total = len(reviews)
    average = round(sum(r.rating for r in reviews) / total, 1) if total else None
    return {
        "total_reviews": total,
        "average_rating": average,
        "distribution": {str(rating): counts.get(rating, 0) for rating in range(MAX_RATING, MIN_RATING - 1, -1)},
        "replied": sum(1 for r in reviews if r.agent_reply),
    }
