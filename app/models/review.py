from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Uuid, UniqueConstraint, CheckConstraint
from app.database import Base
import uuid


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("ticket_id", "customer_id", name="uq_reviews_ticket_customer"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    ticket_id = Column(Uuid, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True)
    ticket_title = Column(String(255), nullable=False)
    customer_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    customer_name = Column(String(200), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)

    # Agent reply: last write wins, no history
    agent_reply = Column(Text)
    agent_id = Column(Uuid, ForeignKey("users.id"))
    agent_name = Column(String(200))
    replied_at = Column(DateTime)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
