from fastapi import APIRouter, Depends, Response, status, Query
from typing import List, Optional
from uuid import UUID
from app.api.deps import get_current_user, get_review_service
from app.models.user import User
from app.schemas.review import ReviewCreate, ReviewUpdate, ReviewReply, ReviewResponse, ReviewStats
from app.services.review_service import ReviewService

router = APIRouter()


@router.get("", response_model=List[ReviewResponse])
async def list_reviews(
    ticket_id: Optional[UUID] = Query(None),
    current_user: User = Depends(get_current_user),
    reviews: ReviewService = Depends(get_review_service),
):
    return await reviews.list(current_user, ticket_id=ticket_id)


@router.get("/stats", response_model=ReviewStats)
async def get_review_stats(
    current_user: User = Depends(get_current_user),
    reviews: ReviewService = Depends(get_review_service),
):
    """Average rating and distribution (agents and admins)"""
    return await reviews.stats(current_user)


@router.get("/ticket/{ticket_id}", response_model=List[ReviewResponse])
async def get_ticket_reviews(
    ticket_id: UUID,
    current_user: User = Depends(get_current_user),
    reviews: ReviewService = Depends(get_review_service),
):
    return await reviews.for_ticket(ticket_id, current_user)


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def submit_review(
    review_data: ReviewCreate,
    response: Response,
    current_user: User = Depends(get_current_user),
    reviews: ReviewService = Depends(get_review_service),
):
    """
    Review a resolved or closed ticket.
    - A second submission for the same ticket updates the existing review (200)
    """
    review, created = await reviews.upsert(
        review_data.ticket_id, current_user, review_data.rating, review_data.comment
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return review


@router.put("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: UUID,
    review_data: ReviewUpdate,
    current_user: User = Depends(get_current_user),
    reviews: ReviewService = Depends(get_review_service),
):
    return await reviews.update(
        review_id, current_user, rating=review_data.rating, comment=review_data.comment
    )


@router.put("/{review_id}/reply", response_model=ReviewResponse)
async def reply_to_review(
    review_id: UUID,
    reply_data: ReviewReply,
    current_user: User = Depends(get_current_user),
    reviews: ReviewService = Depends(get_review_service),
):
    """Agent/admin reply; replaces any earlier reply"""
    return await reviews.reply(review_id, current_user, reply_data.reply)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    review_id: UUID,
    current_user: User = Depends(get_current_user),
    reviews: ReviewService = Depends(get_review_service),
):
    await reviews.delete(review_id, current_user)
