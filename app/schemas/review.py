from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime
from uuid import UUID


class ReviewCreate(BaseModel):
    ticket_id: UUID
    rating: int = Field(..., ge=1, le=5, strict=True)
    comment: str = Field(..., min_length=1)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5, strict=True)
    comment: Optional[str] = Field(None, min_length=1)


class ReviewReply(BaseModel):
    reply: str = Field(..., min_length=1)


class ReviewResponse(BaseModel):
    id: UUID
    ticket_id: UUID
    ticket_title: str
    customer_id: UUID
    customer_name: str
    rating: int
    comment: str
    agent_reply: Optional[str] = None
    agent_id: Optional[UUID] = None
    agent_name: Optional[str] = None
    replied_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReviewStats(BaseModel):
    total_reviews: int
    average_rating: Optional[float] = None
    distribution: Dict[str, int]
    replied: int
